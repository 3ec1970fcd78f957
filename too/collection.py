"""In-memory todo collection.

Todos are kept flat and keyed by uid; the tree lives in a separately
maintained ``parent_uid -> [child uid, ...]`` index whose list order is the
sibling order. Nothing here knows about position paths.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime

from .models import ROOT, Todo

logger = logging.getLogger(__name__)


class Collection:
    """Flat todo arena plus parent/children index."""

    def __init__(self) -> None:
        self._by_uid: dict[str, Todo] = {}
        self._children: dict[str, list[str]] = {ROOT: []}
        # Bumped on every structural or state change; lets callers cache derived views.
        self.revision = 0

    @classmethod
    def from_todos(cls, todos: Iterable[Todo]) -> tuple[Collection, list[Todo]]:
        """Build a collection from records in stored order.

        Records whose parent is missing are re-attached to the root.

        Returns:
            The collection and the list of re-attached (orphaned) todos.

        Raises:
            ValueError: on duplicate uids or a parent cycle
        """
        todos = list(todos)
        collection = cls()
        for todo in todos:
            if todo.uid == ROOT:
                raise ValueError("todo uid must not be empty")
            if todo.uid in collection._by_uid:
                raise ValueError(f"duplicate uid {todo.uid}")
            collection._by_uid[todo.uid] = todo

        orphans: list[Todo] = []
        for todo in todos:
            if todo.parent_uid != ROOT and todo.parent_uid not in collection._by_uid:
                logger.warning("todo %s points at missing parent %s; attaching to root", todo.short_id, todo.parent_uid)
                todo.parent_uid = ROOT
                orphans.append(todo)
            collection._children.setdefault(todo.parent_uid, []).append(todo.uid)
            collection._children.setdefault(todo.uid, [])

        reachable = sum(1 for _ in collection.iterate_all())
        if reachable != len(collection._by_uid):
            stuck = sorted(set(collection._by_uid) - {t.uid for t in collection.iterate_all()})
            raise ValueError(f"parent cycle involving {', '.join(stuck)}")
        return collection, orphans

    # Lookups

    def __len__(self) -> int:
        return len(self._by_uid)

    def __contains__(self, uid: object) -> bool:
        return uid in self._by_uid

    def __getitem__(self, uid: str) -> Todo:
        return self._by_uid[uid]

    def get(self, uid: str) -> Todo | None:
        return self._by_uid.get(uid)

    @property
    def uids(self) -> list[str]:
        return list(self._by_uid)

    def iterate_children(self, parent_uid: str = ROOT) -> list[Todo]:
        return [self._by_uid[uid] for uid in self._children.get(parent_uid, ())]

    def iterate_all(self) -> Iterator[Todo]:
        """Yield every todo depth-first, parents before children, in sibling order."""
        stack = list(reversed(self._children[ROOT]))
        while stack:
            uid = stack.pop()
            yield self._by_uid[uid]
            stack.extend(reversed(self._children.get(uid, ())))

    def descendants(self, uid: str) -> list[Todo]:
        result: list[Todo] = []
        stack = list(reversed(self._children.get(uid, ())))
        while stack:
            child = stack.pop()
            result.append(self._by_uid[child])
            stack.extend(reversed(self._children.get(child, ())))
        return result

    def ancestors(self, uid: str) -> list[Todo]:
        """Parent chain from the direct parent up to (excluding) the root."""
        chain: list[Todo] = []
        current = self._by_uid[uid].parent_uid
        while current != ROOT:
            todo = self._by_uid[current]
            chain.append(todo)
            current = todo.parent_uid
        return chain

    def is_descendant(self, uid: str, of: str) -> bool:
        return any(todo.uid == of for todo in self.ancestors(uid))

    def done_count(self) -> int:
        return sum(1 for todo in self._by_uid.values() if todo.is_done)

    # Mutations

    def insert(self, todo: Todo, parent_uid: str = ROOT, at_end: bool = True) -> Todo:
        if todo.uid in self._by_uid:
            raise ValueError(f"duplicate uid {todo.uid}")
        if parent_uid != ROOT and parent_uid not in self._by_uid:
            raise KeyError(parent_uid)
        todo.parent_uid = parent_uid
        self._by_uid[todo.uid] = todo
        self._children[todo.uid] = []
        siblings = self._children.setdefault(parent_uid, [])
        if at_end:
            siblings.append(todo.uid)
        else:
            siblings.insert(0, todo.uid)
        self.revision += 1
        return todo

    def remove(self, uid: str) -> list[Todo]:
        """Remove a todo and its whole subtree; returns what was removed."""
        todo = self._by_uid[uid]
        removed = [todo, *self.descendants(uid)]
        self._children[todo.parent_uid].remove(uid)
        for gone in removed:
            del self._by_uid[gone.uid]
            self._children.pop(gone.uid, None)
        self.revision += 1
        return removed

    def reparent(self, uid: str, new_parent_uid: str, now: datetime | None = None) -> Todo:
        todo = self._by_uid[uid]
        if new_parent_uid != ROOT:
            if new_parent_uid not in self._by_uid:
                raise KeyError(new_parent_uid)
            if new_parent_uid == uid or self.is_descendant(new_parent_uid, uid):
                raise ValueError(f"moving {uid} under {new_parent_uid} would create a cycle")
        self._children[todo.parent_uid].remove(uid)
        self._children.setdefault(new_parent_uid, []).append(uid)
        todo.parent_uid = new_parent_uid
        todo.touch(now)
        self.revision += 1
        return todo

    def move_to_end(self, uid: str) -> None:
        """Move a todo to the end of its parent's children."""
        siblings = self._children[self._by_uid[uid].parent_uid]
        siblings.remove(uid)
        siblings.append(uid)
        self.revision += 1

    def mutate_text(self, uid: str, text: str, now: datetime | None = None) -> Todo:
        todo = self._by_uid[uid]
        todo.text = text
        todo.touch(now)
        self.revision += 1
        return todo

    def mutate_status(self, uid: str, dimension: str, state: str, now: datetime | None = None) -> bool:
        """Set one status dimension. Returns False when it already had that state."""
        todo = self._by_uid[uid]
        if todo.statuses.get(dimension) == state:
            return False
        todo.statuses[dimension] = state
        todo.touch(now)
        self.revision += 1
        logger.debug("%s: %s=%s", todo.short_id, dimension, state)
        return True
