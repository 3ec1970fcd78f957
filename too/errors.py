"""Errors raised by the todo core.

Every error the core can surface derives from ``TooError``. The CLI turns
any of them into a single failure exit.
"""

from __future__ import annotations

from pathlib import Path


class TooError(Exception):
    """Base class for all user-facing failures."""


class RefNotFound(TooError):
    """No todo matches a reference."""

    def __init__(self, ref: str, detail: str | None = None):
        self.ref = ref
        message = f"No todo found for reference '{ref}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class AmbiguousShortID(TooError):
    """A short id prefix matches more than one uid."""

    def __init__(self, ref: str, candidates: list[str]):
        self.ref = ref
        self.candidates = list(candidates)
        listed = ", ".join(self.candidates)
        super().__init__(f"Short id '{ref}' is ambiguous; it matches {listed}")


class AmbiguousText(TooError):
    """A text fragment matches more than one todo."""

    def __init__(self, ref: str, candidates: list[tuple[str, str]]):
        self.ref = ref
        self.candidates = list(candidates)
        listed = "\n".join(f"  {position}: {text}" for position, text in self.candidates)
        super().__init__(f"'{ref}' matches {len(self.candidates)} todos, be more specific:\n{listed}")


class MalformedPath(TooError):
    """A position path violates the grammar."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed position path '{path}': {reason}")


class CycleWouldResult(TooError):
    """A move would make a todo its own ancestor."""

    def __init__(self, source_uid: str, target_uid: str):
        self.source_uid = source_uid
        self.target_uid = target_uid
        super().__init__("Cannot move a todo under itself or one of its descendants")


class CorruptStore(TooError):
    """The store file cannot be decoded or violates the schema."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Corrupt todo store {self.path}: {reason}")


class StoreIOError(TooError):
    """Filesystem failure while reading or writing the store."""

    def __init__(self, path: Path | str, error: OSError):
        self.path = Path(path)
        self.error = error
        super().__init__(f"Cannot access {self.path}: {error.strerror or error}")


class ValidationError(TooError):
    """Missing or invalid command input."""


class EditorError(ValidationError):
    """The external editor failed or returned no content."""
