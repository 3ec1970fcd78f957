"""Identity and position model: uids, position paths and reference resolution."""

from .paths import Segment, generate_positions, is_path, parse_path, path_sort_key, resolve_path
from .resolver import ReferenceResolver

__all__ = [
    "ReferenceResolver",
    "Segment",
    "generate_positions",
    "is_path",
    "parse_path",
    "path_sort_key",
    "resolve_path",
]
