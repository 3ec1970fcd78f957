"""Persistence for the todo collection."""

from .json_store import JsonStore, LoadResult
from .legacy import CURRENT_SCHEMA_VERSION

__all__ = ["CURRENT_SCHEMA_VERSION", "JsonStore", "LoadResult"]
