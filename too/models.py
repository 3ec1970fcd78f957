"""Data model for todos."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

# Parent sentinel for top-level todos
ROOT = ""

# The only status dimension the core interprets
COMPLETION = "completion"
PENDING = "pending"
DONE = "done"

CompletionState = Literal["pending", "done"]
COMPLETION_STATES: tuple[str, ...] = (PENDING, DONE)

SHORT_ID_LENGTH = 7

_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def new_uid() -> str:
    """Generate a fresh, globally unique todo identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC-normalized datetime.

    Accepts a trailing ``Z`` and fractional seconds of any precision
    (older files were written with nanoseconds).
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


@dataclass
class Todo:
    """A single todo.

    Identity is the ``uid``; the parent edge is stored as ``parent_uid``
    (``ROOT`` for top-level todos). Positions are never stored.
    """

    text: str
    parent_uid: str = ROOT
    uid: str = field(default_factory=new_uid)
    statuses: dict[str, str] = field(default_factory=lambda: {COMPLETION: PENDING})
    modified_at: datetime = field(default_factory=utcnow)

    @property
    def completion(self) -> str:
        return self.statuses.get(COMPLETION, PENDING)

    @property
    def is_done(self) -> bool:
        return self.completion == DONE

    @property
    def is_pending(self) -> bool:
        return self.completion == PENDING

    @property
    def short_id(self) -> str:
        return self.uid[:SHORT_ID_LENGTH]

    def touch(self, now: datetime | None = None) -> None:
        """Refresh ``modified_at``; never moves it backwards."""
        now = now or utcnow()
        if now <= self.modified_at:
            now = self.modified_at + timedelta(microseconds=1)
        self.modified_at = now

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk record."""
        return {
            "uid": self.uid,
            "parent_uid": self.parent_uid,
            "text": self.text,
            "statuses": dict(self.statuses),
            "modified_at": format_timestamp(self.modified_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Todo:
        """Build a todo from an on-disk record.

        Raises:
            ValueError: if a field is missing or has the wrong shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"todo record must be an object, got {type(data).__name__}")

        uid = data.get("uid")
        if not isinstance(uid, str) or not uid:
            raise ValueError("todo record has no uid")

        parent_uid = data.get("parent_uid") or ROOT
        if not isinstance(parent_uid, str):
            raise ValueError(f"todo {uid}: parent_uid must be a string")

        text = data.get("text", "")
        if not isinstance(text, str):
            raise ValueError(f"todo {uid}: text must be a string")

        statuses = data.get("statuses") or {}
        if not isinstance(statuses, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in statuses.items()
        ):
            raise ValueError(f"todo {uid}: statuses must map strings to strings")
        statuses = dict(statuses)
        statuses.setdefault(COMPLETION, PENDING)
        if statuses[COMPLETION] not in COMPLETION_STATES:
            raise ValueError(f"todo {uid}: unknown completion state {statuses[COMPLETION]!r}")

        raw_modified = data.get("modified_at")
        if raw_modified is None:
            modified_at = utcnow()
        elif isinstance(raw_modified, str):
            modified_at = parse_timestamp(raw_modified)
        else:
            raise ValueError(f"todo {uid}: modified_at must be a timestamp string")

        return cls(
            text=text,
            parent_uid=parent_uid,
            uid=uid,
            statuses=statuses,
            modified_at=modified_at,
        )
