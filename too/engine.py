"""Mutation engine: attribute changes plus completion propagation.

Every change goes through ``set_attribute``. Completing a todo completes
its pending descendants; any completion change then rolls up through the
ancestors until one of them is left unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from .collection import Collection
from .errors import CycleWouldResult, ValidationError
from .idm.resolver import ReferenceResolver
from .models import COMPLETION, COMPLETION_STATES, DONE, PENDING, ROOT, Todo, utcnow
from .parser import Node

logger = logging.getLogger(__name__)

ATTR_COMPLETION = "completion"
ATTR_TEXT = "text"
ATTR_PARENT = "parent"
ATTRIBUTES = (ATTR_COMPLETION, ATTR_TEXT, ATTR_PARENT)


class Engine:
    """Apply mutations to a collection.

    The engine never saves; callers persist the collection once every
    change of a command has succeeded.
    """

    def __init__(self, collection: Collection, clock: Callable[[], datetime] = utcnow):
        self.collection = collection
        self.resolver = ReferenceResolver(collection)
        self._clock = clock

    # Creation

    def add(self, text: str, parent_ref: str | None = None) -> Todo:
        parent_uid = self.resolver.resolve_parent(parent_ref)
        return self._add_under(parent_uid, text)

    def add_tree(self, nodes: list[Node], parent_ref: str | None = None) -> list[Todo]:
        """Create a parsed bullet forest under ``parent_ref``; returns todos in document order."""
        parent_uid = self.resolver.resolve_parent(parent_ref)
        if not nodes:
            raise ValidationError("Nothing to add")
        created: list[Todo] = []

        def create(node: Node, under: str) -> None:
            todo = self._add_under(under, node.text)
            created.append(todo)
            for child in node.children:
                create(child, todo.uid)

        for node in nodes:
            create(node, parent_uid)
        return created

    def _add_under(self, parent_uid: str, text: str) -> Todo:
        text = _clean_text(text)
        now = self._clock()
        todo = Todo(text=text, modified_at=now)
        self.collection.insert(todo, parent_uid)
        logger.debug("added %s under %s", todo.short_id, parent_uid or "root")
        self._rollup(parent_uid, now)
        return todo

    # Attribute mutation

    def set_attribute(self, ref: str, attribute: str, value: str) -> Todo:
        """Resolve ``ref`` and set one attribute on it.

        Args:
            ref: any todo reference
            attribute: one of ``completion``, ``text`` or ``parent``
            value: new state, text or parent reference ("" for the root)

        Raises:
            ValidationError: unknown attribute or invalid value
            CycleWouldResult: a parent change would create a cycle
        """
        if attribute not in ATTRIBUTES:
            raise ValidationError(f"Unknown attribute '{attribute}'")
        uid = self.resolver.resolve(ref)
        if attribute == ATTR_PARENT:
            parent_uid = self.resolver.resolve_parent(value)
            return self._set_parent(uid, parent_uid)
        return self._apply(uid, attribute, value)

    def set_attribute_many(self, refs: list[str], attribute: str, value: str) -> list[Todo]:
        """Like ``set_attribute`` for several refs resolved against one snapshot.

        A parent value is resolved once, before any todo moves.
        """
        if attribute not in ATTRIBUTES:
            raise ValidationError(f"Unknown attribute '{attribute}'")
        if not refs:
            raise ValidationError("At least one todo reference is required")
        uids = self.resolver.resolve_many(refs)
        if attribute == ATTR_PARENT:
            value = self.resolver.resolve_parent(value)
        return [self._apply(uid, attribute, value) for uid in uids]

    def complete(self, refs: list[str]) -> list[Todo]:
        return self.set_attribute_many(refs, ATTR_COMPLETION, DONE)

    def reopen(self, refs: list[str]) -> list[Todo]:
        return self.set_attribute_many(refs, ATTR_COMPLETION, PENDING)

    def edit(self, ref: str, text: str) -> Todo:
        return self.set_attribute(ref, ATTR_TEXT, text)

    def move(self, ref: str, parent_ref: str | None) -> Todo:
        return self.set_attribute(ref, ATTR_PARENT, parent_ref or ROOT)

    def _apply(self, uid: str, attribute: str, value: str) -> Todo:
        if attribute == ATTR_COMPLETION:
            return self._set_completion(uid, value)
        if attribute == ATTR_TEXT:
            return self.collection.mutate_text(uid, _clean_text(value), self._clock())
        if attribute == ATTR_PARENT:
            return self._set_parent(uid, value)
        raise ValidationError(f"Unknown attribute '{attribute}'")

    def _set_completion(self, uid: str, state: str) -> Todo:
        if state not in COMPLETION_STATES:
            raise ValidationError(f"Unknown completion state '{state}'")
        todo = self.collection[uid]
        now = self._clock()
        if not self.collection.mutate_status(uid, COMPLETION, state, now):
            logger.debug("%s already %s", todo.short_id, state)
            return todo

        if state == DONE:
            for descendant in self.collection.descendants(uid):
                if descendant.is_pending:
                    self.collection.mutate_status(descendant.uid, COMPLETION, DONE, now)
        else:
            self.collection.move_to_end(uid)

        self._rollup(todo.parent_uid, now)
        return todo

    def _set_parent(self, uid: str, parent_uid: str) -> Todo:
        if parent_uid != ROOT and (parent_uid == uid or self.collection.is_descendant(parent_uid, uid)):
            raise CycleWouldResult(uid, parent_uid)
        todo = self.collection[uid]
        old_parent = todo.parent_uid
        now = self._clock()
        self.collection.reparent(uid, parent_uid, now)
        self._rollup(old_parent, now)
        self._rollup(parent_uid, now)
        return todo

    def _rollup(self, uid: str, now: datetime) -> None:
        """Propagate completion from children to ``uid`` and upwards."""
        current = uid
        while current != ROOT:
            parent = self.collection[current]
            children = self.collection.iterate_children(current)
            if not children:
                return
            if all(child.is_done for child in children):
                target = DONE
            elif parent.is_done:
                target = PENDING
            else:
                return
            if not self.collection.mutate_status(current, COMPLETION, target, now):
                return
            logger.info("rolled %s up to %s", parent.short_id, target)
            current = parent.parent_uid

    # Removal

    def clean(self) -> list[Todo]:
        """Remove every done todo together with its subtree."""
        removed: list[Todo] = []
        for todo in list(self.collection.iterate_all()):
            if todo.uid not in self.collection or not todo.is_done:
                continue
            removed.extend(self.collection.remove(todo.uid))
        if removed:
            logger.info("cleaned %d todos", len(removed))
        return removed


def _clean_text(text: str) -> str:
    text = text.strip()
    if not text:
        raise ValidationError("Todo text cannot be empty")
    return text
