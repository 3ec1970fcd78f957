"""Result structures handed from the dispatcher to renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from .collection import Collection
from .idm.paths import depth_of, generate_positions
from .models import Todo

Level = Literal["success", "info", "warning", "error"]
LEVELS: tuple[str, ...] = ("success", "info", "warning", "error")


@dataclass(frozen=True)
class TodoView:
    """A todo together with the position it is displayed at."""

    todo: Todo
    position: str

    @property
    def depth(self) -> int:
        return depth_of(self.position)

    def to_dict(self) -> dict[str, Any]:
        data = self.todo.to_dict()
        data["position"] = self.position
        return data


@dataclass
class ChangeResult:
    command: str
    message: str | None = None
    level: Level = "success"
    affected: list[TodoView] = field(default_factory=list)
    todos: list[TodoView] = field(default_factory=list)
    total_count: int = 0
    done_count: int = 0

    @property
    def affected_uids(self) -> set[str]:
        return {view.todo.uid for view in self.affected}

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "message": self.message,
            "level": self.level,
            "affected": [view.to_dict() for view in self.affected],
            "todos": [view.to_dict() for view in self.todos],
            "total_count": self.total_count,
            "done_count": self.done_count,
        }


@dataclass
class MessageResult:
    command: str
    message: str
    level: Level = "info"
    path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "message": self.message,
            "level": self.level,
            "path": str(self.path) if self.path is not None else None,
        }


@dataclass
class FormatsResult:
    formats: list[tuple[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"formats": [{"name": name, "description": description} for name, description in self.formats]}


def build_views(collection: Collection, todos: list[Todo], *, include_done: bool = True) -> list[TodoView]:
    """Pair todos with their positions in the chosen view.

    Todos absent from the view (done todos in the active-only view) fall back
    to their full-view position; todos no longer in the collection (removed by
    ``clean``) get an empty position.
    """
    positions = generate_positions(collection, include_done=include_done)
    full = positions if include_done else generate_positions(collection)
    return [TodoView(todo, positions.get(todo.uid) or full.get(todo.uid, "")) for todo in todos]
