"""Unstyled text formats: plain lines and markdown checklists."""

from __future__ import annotations

import click

from ..results import ChangeResult, FormatsResult, MessageResult, TodoView
from .base import Renderer, summary_line, text_lines

INDENT = "  "


class PlainRenderer(Renderer):
    """The terminal layout without colour, for pipes and logs."""

    name = "plain"
    description = "Plain text tree without colours"

    def _row(self, view: TodoView, nested: bool = True) -> str:
        indent = INDENT * view.depth if nested else ""
        mark = "[x]" if view.todo.is_done else "[ ]"
        lines = text_lines(view)
        head = f"{indent}{view.position} {mark} "
        rest = [" " * len(head) + line for line in lines[1:]]
        return "\n".join([head + lines[0], *rest])

    def _tree(self, result: ChangeResult, nested: bool = True) -> None:
        if not result.todos:
            click.echo("No todos")
            return
        for view in result.todos:
            click.echo(self._row(view, nested))

    def render_change(self, result: ChangeResult) -> None:
        if result.message:
            click.echo(result.message)
        self._tree(result)
        click.echo(summary_line(result))

    def render_list(self, result: ChangeResult) -> None:
        self._tree(result)
        click.echo(summary_line(result))

    def render_search(self, result: ChangeResult) -> None:
        if result.message:
            click.echo(result.message)
        for view in result.todos:
            click.echo(self._row(view, nested=False))

    def render_error(self, error: Exception) -> None:
        click.echo(f"Error: {error}", err=True)

    def render_formats(self, result: FormatsResult) -> None:
        for name, description in result.formats:
            click.echo(f"{name}\t{description}")

    def render_message(self, result: MessageResult) -> None:
        click.echo(result.message)


class MarkdownRenderer(Renderer):
    """Nested ``- [ ]`` checklists that paste cleanly into notes and issues."""

    name = "markdown"
    description = "Markdown checklist"

    def _item(self, view: TodoView) -> str:
        indent = INDENT * view.depth
        box = "[x]" if view.todo.is_done else "[ ]"
        lines = text_lines(view)
        continuation = [f"{indent}      {line}" for line in lines[1:]]
        return "\n".join([f"{indent}- {box} {lines[0]}", *continuation])

    def render_change(self, result: ChangeResult) -> None:
        if result.message:
            click.echo(f"**{result.message}**\n")
        for view in result.todos:
            click.echo(self._item(view))
        click.echo(f"\n_{summary_line(result)}_")

    def render_list(self, result: ChangeResult) -> None:
        for view in result.todos:
            click.echo(self._item(view))
        click.echo(f"\n_{summary_line(result)}_")

    def render_error(self, error: Exception) -> None:
        click.echo(f"> **Error:** {error}", err=True)

    def render_formats(self, result: FormatsResult) -> None:
        click.echo("| Format | Description |")
        click.echo("|---|---|")
        for name, description in result.formats:
            click.echo(f"| `{name}` | {description} |")

    def render_message(self, result: MessageResult) -> None:
        click.echo(result.message)
