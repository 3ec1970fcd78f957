"""Position paths: grammar, generation and resolution.

A position path such as ``1.2`` or ``2.c1`` is a derived coordinate. Each
parent numbers its pending children ``1, 2, ...`` and its done children
``c1, c2, ...``, both in stored sibling order. Paths are never persisted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..collection import Collection
from ..errors import MalformedPath, RefNotFound
from ..models import ROOT

COMPLETED_PREFIX = "c"
SEPARATOR = "."

_SEGMENT = r"c?\d+"
PATH_PATTERN = re.compile(rf"^{_SEGMENT}(?:\.{_SEGMENT})*$")
# Only digits, "c" and dots with at least one dot: meant as a path even if malformed.
PATH_SHAPED_PATTERN = re.compile(r"^[\dc.]*\.[\dc.]*$")
SEGMENT_PATTERN = re.compile(r"^(c?)(\d+)$")


@dataclass(frozen=True)
class Segment:
    ordinal: int
    completed: bool = False

    def __str__(self) -> str:
        return f"{COMPLETED_PREFIX}{self.ordinal}" if self.completed else str(self.ordinal)


def is_path(text: str) -> bool:
    """True if ``text`` matches the position-path grammar."""
    return bool(PATH_PATTERN.match(text))


def looks_like_path(text: str) -> bool:
    return bool(PATH_SHAPED_PATTERN.match(text))


def parse_path(path: str) -> list[Segment]:
    """Split a path into segments.

    Raises:
        MalformedPath: on empty segments, stray characters or zero ordinals
    """
    if not path:
        raise MalformedPath(path, "path is empty")
    if path.startswith(SEPARATOR):
        raise MalformedPath(path, "leading '.'")
    if path.endswith(SEPARATOR):
        raise MalformedPath(path, "trailing '.'")

    segments: list[Segment] = []
    for raw in path.split(SEPARATOR):
        if not raw:
            raise MalformedPath(path, "empty segment")
        match = SEGMENT_PATTERN.match(raw)
        if match is None:
            raise MalformedPath(path, f"segment '{raw}' is not a number or c<number>")
        ordinal = int(match.group(2))
        if ordinal < 1:
            raise MalformedPath(path, f"segment '{raw}' must start at 1")
        segments.append(Segment(ordinal=ordinal, completed=bool(match.group(1))))
    return segments


def join_path(prefix: str, segment: Segment | str) -> str:
    return f"{prefix}{SEPARATOR}{segment}" if prefix else str(segment)


def generate_positions(
    collection: Collection,
    *,
    include_done: bool = True,
    scope: str = ROOT,
) -> dict[str, str]:
    """Map uid -> position path for every todo reachable from ``scope``.

    With ``include_done=False`` (active-only view) done todos and their
    subtrees are skipped entirely; active numbering is unaffected.
    """
    positions: dict[str, str] = {}
    stack: list[tuple[str, str]] = [(scope, "")]
    while stack:
        parent_uid, prefix = stack.pop()
        active = done = 0
        numbered: list[tuple[str, str]] = []
        for child in collection.iterate_children(parent_uid):
            if child.is_done:
                done += 1
                if not include_done:
                    continue
                segment = Segment(done, completed=True)
            else:
                active += 1
                segment = Segment(active)
            path = join_path(prefix, segment)
            positions[child.uid] = path
            numbered.append((child.uid, path))
        stack.extend(reversed(numbered))
    return positions


def resolve_path(collection: Collection, path: str, scope: str = ROOT) -> str:
    """Walk ``path`` from ``scope`` and return the uid it names.

    Raises:
        MalformedPath: if ``path`` violates the grammar
        RefNotFound: if a segment has no matching child
    """
    current = scope
    for segment in parse_path(path):
        namespace = [child for child in collection.iterate_children(current) if child.is_done == segment.completed]
        if segment.ordinal > len(namespace):
            raise RefNotFound(path)
        current = namespace[segment.ordinal - 1].uid
    return current


def path_sort_key(path: str) -> tuple[tuple[int, int], ...]:
    """Sort key: numeric per segment, active before completed at each level."""
    key: list[tuple[int, int]] = []
    for raw in path.split(SEPARATOR):
        match = SEGMENT_PATTERN.match(raw)
        if match is None:
            key.append((2, 0))
            continue
        key.append((1 if match.group(1) else 0, int(match.group(2))))
    return tuple(key)


def depth_of(path: str) -> int:
    return path.count(SEPARATOR)
