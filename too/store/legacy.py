"""Recognize older store layouts and flatten them into current records.

Recognized, in order:

- current: ``{"schema_version": 2, "todos": [...]}``
- flat v1: ``{"items": [{"uid", "parentId", "text", "statuses", "modified"}]}``
- nested v1: ``{"todos": [{"id", "parentId", "text", "statuses"|"status", "modified", "items": [...]}]}``
- nested v0: a bare array of nested v1 records, ids possibly numeric
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..models import COMPLETION, PENDING, ROOT, new_uid

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2

FORMAT_CURRENT = "current"
FORMAT_EMPTY = "empty"
FORMAT_FLAT_V1 = "flat-v1"
FORMAT_NESTED_V1 = "nested-v1"
FORMAT_NESTED_V0 = "nested-v0"


class UnknownFormat(ValueError):
    """The document matches none of the known layouts."""


@dataclass
class Decoded:
    """Records in the current on-disk shape plus the layout they came from."""

    format: str
    records: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_legacy(self) -> bool:
        return self.format not in (FORMAT_CURRENT, FORMAT_EMPTY)


def decode_document(document: Any) -> Decoded:
    """Classify a decoded JSON document and return current-format records.

    Raises:
        UnknownFormat: if the document is not any known layout
    """
    if document is None:
        return Decoded(FORMAT_EMPTY)

    if isinstance(document, list):
        return Decoded(FORMAT_NESTED_V0, _flatten_nested(document, FORMAT_NESTED_V0))

    if not isinstance(document, dict):
        raise UnknownFormat(f"expected a JSON object or array, got {type(document).__name__}")

    if "schema_version" in document:
        version = document["schema_version"]
        if not isinstance(version, int) or isinstance(version, bool):
            raise UnknownFormat(f"schema_version must be an integer, got {version!r}")
        if version > CURRENT_SCHEMA_VERSION:
            raise UnknownFormat(
                f"schema_version {version} is newer than supported version {CURRENT_SCHEMA_VERSION}"
            )
        if version == CURRENT_SCHEMA_VERSION:
            todos = document.get("todos", [])
            if not isinstance(todos, list):
                raise UnknownFormat("'todos' must be an array")
            return Decoded(FORMAT_CURRENT, todos)

    if isinstance(document.get("items"), list):
        return Decoded(FORMAT_FLAT_V1, [_from_flat_v1(item) for item in document["items"]])

    if isinstance(document.get("todos"), list):
        return Decoded(FORMAT_NESTED_V1, _flatten_nested(document["todos"], FORMAT_NESTED_V1))

    if not document:
        return Decoded(FORMAT_EMPTY)

    raise UnknownFormat("no 'todos' or 'items' array found")


def encode_document(records: list[dict[str, Any]]) -> dict[str, Any]:
    return {"schema_version": CURRENT_SCHEMA_VERSION, "todos": records}


def _statuses(record: dict[str, Any]) -> dict[str, str]:
    statuses = record.get("statuses")
    if isinstance(statuses, dict) and statuses:
        return {str(k): str(v) for k, v in statuses.items()}
    status = record.get("status")
    if isinstance(status, str) and status:
        return {COMPLETION: status}
    return {COMPLETION: PENDING}


def _legacy_uid(raw: Any) -> str:
    if isinstance(raw, str) and raw:
        return raw
    # Numeric ids (and missing ones) carry no identity worth keeping.
    return new_uid()


def _from_flat_v1(item: Any) -> dict[str, Any]:
    if not isinstance(item, dict):
        raise UnknownFormat("'items' entries must be objects")
    return {
        "uid": _legacy_uid(item.get("uid")),
        "parent_uid": item.get("parentId") or ROOT,
        "text": item.get("text", ""),
        "statuses": _statuses(item),
        "modified_at": item.get("modified"),
    }


def _flatten_nested(todos: list[Any], layout: str) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []

    def walk(items: list[Any], parent_uid: str | None) -> None:
        for item in items:
            if not isinstance(item, dict):
                raise UnknownFormat(f"{layout} entries must be objects")
            uid = _legacy_uid(item.get("id"))
            records.append(
                {
                    "uid": uid,
                    # Nesting wins over whatever parentId the record carried.
                    "parent_uid": parent_uid if parent_uid is not None else (item.get("parentId") or ROOT),
                    "text": item.get("text", ""),
                    "statuses": _statuses(item),
                    "modified_at": item.get("modified"),
                }
            )
            children = item.get("items") or []
            if not isinstance(children, list):
                raise UnknownFormat(f"{layout} 'items' must be an array")
            walk(children, uid)

    walk(todos, None)
    logger.debug("flattened %d %s records", len(records), layout)
    return records
