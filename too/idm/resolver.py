"""Turn user references into uids.

A reference is tried, in order, as a position path, a short uid prefix and
finally a text fragment. Path-shaped input never falls back to text.
"""

from __future__ import annotations

import logging

from ..collection import Collection
from ..errors import AmbiguousShortID, AmbiguousText, MalformedPath, RefNotFound, ValidationError
from ..models import ROOT
from .paths import generate_positions, is_path, looks_like_path, parse_path, path_sort_key, resolve_path

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Resolve references against one collection.

    Positions are computed in the full view and cached until the collection
    changes.
    """

    def __init__(self, collection: Collection):
        self.collection = collection
        self._positions: dict[str, str] = {}
        self._revision: int | None = None

    @property
    def positions(self) -> dict[str, str]:
        if self._revision != self.collection.revision:
            self._positions = generate_positions(self.collection)
            self._revision = self.collection.revision
        return self._positions

    def resolve(self, ref: str) -> str:
        """Return the uid named by ``ref``.

        Raises:
            ValidationError: for an empty reference
            MalformedPath: for path-shaped input that breaks the grammar
            RefNotFound: when nothing matches
            AmbiguousShortID: when a uid prefix matches several todos
            AmbiguousText: when a text fragment matches several todos
        """
        ref = ref.strip()
        if not ref:
            raise ValidationError("A todo reference is required")

        if is_path(ref):
            try:
                uid = resolve_path(self.collection, ref)
            except (RefNotFound, MalformedPath) as exc:
                uid = self._match_short_id(ref)
                if uid is None:
                    raise exc
                logger.debug("ref %r -> %s (short id)", ref, uid)
                return uid
            logger.debug("ref %r -> %s (position)", ref, uid)
            return uid

        if looks_like_path(ref):
            parse_path(ref)

        uid = self._match_short_id(ref)
        if uid is not None:
            logger.debug("ref %r -> %s (short id)", ref, uid)
            return uid

        uid = self._match_text(ref)
        logger.debug("ref %r -> %s (text)", ref, uid)
        return uid

    def resolve_many(self, refs: list[str]) -> list[str]:
        """Resolve every ref against the current snapshot, dropping repeats."""
        uids: list[str] = []
        for ref in refs:
            uid = self.resolve(ref)
            if uid not in uids:
                uids.append(uid)
        return uids

    def resolve_parent(self, ref: str | None) -> str:
        """Like ``resolve`` but ``None``/empty means the root."""
        if ref is None or not ref.strip():
            return ROOT
        return self.resolve(ref)

    def _match_short_id(self, ref: str) -> str | None:
        matches = [uid for uid in self.collection.uids if uid.startswith(ref)]
        if len(matches) > 1:
            raise AmbiguousShortID(ref, sorted(matches))
        return matches[0] if matches else None

    def _match_text(self, ref: str) -> str:
        needle = ref.lower()
        matches = [todo for todo in self.collection.iterate_all() if needle in todo.text.lower()]
        if not matches:
            raise RefNotFound(ref)
        if len(matches) == 1:
            return matches[0].uid

        exact = [todo for todo in matches if todo.text.lower() == needle]
        if len(exact) == 1:
            return exact[0].uid

        positions = self.positions
        candidates = sorted(
            ((positions[todo.uid], todo.text) for todo in matches),
            key=lambda pair: path_sort_key(pair[0]),
        )
        raise AmbiguousText(ref, candidates)
