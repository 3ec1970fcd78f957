"""Machine-readable formats: JSON, YAML and CSV."""

from __future__ import annotations

import csv
import io
import json
from typing import Any

import click
import yaml

from ..results import ChangeResult, FormatsResult, MessageResult
from .base import Renderer, error_kind

CSV_FIELDS = ("uid", "parent_uid", "position", "text", "status", "modified_at")


def error_document(error: Exception) -> dict[str, Any]:
    return {"error": str(error), "kind": error_kind(error)}


class JsonRenderer(Renderer):
    name = "json"
    description = "JSON document"

    def _emit(self, data: dict[str, Any], err: bool = False) -> None:
        click.echo(json.dumps(data, indent=2, ensure_ascii=False), err=err)

    def render_change(self, result: ChangeResult) -> None:
        self._emit(result.to_dict())

    def render_error(self, error: Exception) -> None:
        self._emit(error_document(error), err=True)

    def render_formats(self, result: FormatsResult) -> None:
        self._emit(result.to_dict())

    def render_message(self, result: MessageResult) -> None:
        self._emit(result.to_dict())


class YamlRenderer(JsonRenderer):
    name = "yaml"
    description = "YAML document"

    def _emit(self, data: dict[str, Any], err: bool = False) -> None:
        click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip("\n"), err=err)


class CsvRenderer(Renderer):
    name = "csv"
    description = "CSV rows, one per displayed todo"

    def _write(self, header: tuple[str, ...], rows: list[tuple[Any, ...]], err: bool = False) -> None:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(header)
        writer.writerows(rows)
        click.echo(buffer.getvalue().rstrip("\n"), err=err)

    def render_change(self, result: ChangeResult) -> None:
        rows = [
            (
                view.todo.uid,
                view.todo.parent_uid,
                view.position,
                view.todo.text,
                view.todo.completion,
                view.todo.modified_at.isoformat(),
            )
            for view in result.todos
        ]
        self._write(CSV_FIELDS, rows)

    def render_error(self, error: Exception) -> None:
        self._write(("error", "kind"), [(str(error), error_kind(error))], err=True)

    def render_formats(self, result: FormatsResult) -> None:
        self._write(("name", "description"), list(result.formats))

    def render_message(self, result: MessageResult) -> None:
        self._write(("message", "level", "path"), [(result.message, result.level, str(result.path or ""))])
