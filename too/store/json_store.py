"""
Single-file JSON store.

The whole collection lives in one JSON document. Writes go to a sibling
temporary file which is fsynced and then renamed over the target, so a
reader never sees a half-written store. There is no cross-process lock:
concurrent writers race and the last rename wins.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from ..collection import Collection
from ..errors import CorruptStore, StoreIOError
from ..models import Todo
from .legacy import FORMAT_EMPTY, Decoded, UnknownFormat, decode_document, encode_document

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


@dataclass
class LoadResult:
    """A loaded collection plus what the loader had to do to get it."""

    collection: Collection
    format: str = FORMAT_EMPTY
    orphans: list[Todo] = field(default_factory=list)

    @property
    def is_legacy(self) -> bool:
        return Decoded(self.format).is_legacy


class JsonStore:
    """
    Persist a ``Collection`` to a single JSON file.

    Missing and empty files load as an empty collection. Older layouts are
    flattened on load; the next save writes the current layout.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Collection:
        return self.load_with_details().collection

    def load_with_details(self) -> LoadResult:
        """
        Read and decode the store.

        Returns:
            LoadResult with the collection, the detected layout and any
            todos re-attached to the root because their parent was missing

        Raises:
            CorruptStore: undecodable JSON, unknown layout or bad records
            StoreIOError: the file exists but cannot be read
        """
        if not self.path.exists():
            logger.debug("store %s does not exist; starting empty", self.path)
            return LoadResult(Collection())

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreIOError(self.path, exc) from exc

        if not raw.strip():
            return LoadResult(Collection())

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptStore(self.path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc

        try:
            decoded = decode_document(document)
            todos = [Todo.from_dict(record) for record in decoded.records]
            collection, orphans = Collection.from_todos(todos)
        except (UnknownFormat, ValueError) as exc:
            raise CorruptStore(self.path, str(exc)) from exc

        if decoded.is_legacy:
            logger.info("read legacy %s store %s; it will be rewritten on save", decoded.format, self.path)
        logger.debug("loaded %d todos from %s", len(collection), self.path)
        return LoadResult(collection, decoded.format, orphans)

    def save(self, collection: Collection) -> None:
        """
        Write the collection atomically.

        Raises:
            StoreIOError: on any filesystem failure; the target is left untouched
        """
        records = [todo.to_dict() for todo in collection.iterate_all()]
        payload = json.dumps(encode_document(records), indent=2, ensure_ascii=False) + "\n"

        directory = self.path.parent
        temp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self.path)
            temp_name = None
        except OSError as exc:
            raise StoreIOError(self.path, exc) from exc
        finally:
            if temp_name is not None:
                Path(temp_name).unlink(missing_ok=True)

        logger.debug("saved %d todos to %s", len(records), self.path)

    def backup(self) -> Path:
        """Copy the current file to ``<path>.backup`` and return the copy's path."""
        target = self.path.with_name(self.path.name + BACKUP_SUFFIX)
        try:
            shutil.copy2(self.path, target)
        except OSError as exc:
            raise StoreIOError(target, exc) from exc
        return target
