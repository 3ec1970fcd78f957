"""Execute commands described by the command table.

The dispatcher owns the load -> mutate -> save cycle. A command either
succeeds completely and the store is saved once, or raises before anything
is written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..collection import Collection
from ..config import Settings
from ..editor import edit_text
from ..engine import Engine
from ..errors import MalformedPath, RefNotFound, ValidationError
from ..idm.paths import generate_positions, is_path, path_sort_key, resolve_path
from ..models import Todo, utcnow
from ..parser import has_bullets, parse_bullets
from ..results import ChangeResult, FormatsResult, MessageResult, TodoView, build_views
from ..scope import Scope
from ..store import JsonStore
from .options import (
    AddOptions,
    CommandOptions,
    EditOptions,
    InitOptions,
    ListOptions,
    MoveOptions,
    RefsOptions,
    SearchOptions,
)
from .registry import CommandDef, CommandTable, list_filter

logger = logging.getLogger(__name__)

Result = ChangeResult | MessageResult | FormatsResult
EditorFunc = Callable[[str, Settings], str]


class Dispatcher:
    """Run commands against the store selected by ``scope``."""

    def __init__(
        self,
        table: CommandTable,
        settings: Settings,
        scope: Scope,
        *,
        formats: list[tuple[str, str]] | None = None,
        clock: Callable[[], datetime] = utcnow,
        editor: EditorFunc = edit_text,
    ):
        self.table = table
        self.settings = settings
        self.scope = scope
        self.formats = list(formats or [])
        self._clock = clock
        self._editor = editor

    @property
    def store(self) -> JsonStore:
        return JsonStore(self.scope.path)

    def run(self, name: str, options: CommandOptions) -> Result:
        command = self.table.get(name)
        self._validate(command, options)
        handler = getattr(self, f"_run_{command.kind}")
        logger.debug("running %s with %r against %s", command.name, options, self.scope.path)
        return handler(command, options)

    # Validation

    def _validate(self, command: CommandDef, options: CommandOptions) -> None:
        if command.requires_ref:
            refs = getattr(options, "refs", None)
            if refs is None:
                ref = getattr(options, "ref", "")
                refs = [ref] if ref.strip() else []
            if not refs:
                raise ValidationError(f"{command.name} needs a todo reference")
            if len(refs) > 1 and not command.accepts_multiple:
                raise ValidationError(f"{command.name} takes a single todo reference")

        if command.requires_text and not getattr(options, "use_editor", False):
            text = getattr(options, "text", None)
            if text is None:
                text = getattr(options, "query", "")
            if not text.strip():
                raise ValidationError(f"{command.name} needs some text")

        if command.validate is not None:
            command.validate(options)

    # Helpers

    def _engine(self) -> tuple[JsonStore, Engine]:
        store = self.store
        collection = store.load()
        return store, Engine(collection, clock=self._clock)

    def _change(self, command: CommandDef, collection: Collection, affected: list[Todo]) -> ChangeResult:
        view = list_filter(ListOptions())
        shown = [todo for todo in collection.iterate_all() if view.predicate(todo)]
        affected_views = build_views(collection, affected, include_done=view.include_done)
        return ChangeResult(
            command=command.name,
            message=command.message(affected_views) if command.message else None,
            level="success",
            affected=affected_views,
            todos=build_views(collection, shown, include_done=view.include_done),
            total_count=len(collection),
            done_count=collection.done_count(),
        )

    # Mutating commands

    def _run_add(self, command: CommandDef, options: AddOptions) -> ChangeResult:
        store, engine = self._engine()
        parent = options.parent
        words = list(options.words)

        if parent is None and len(words) >= 2 and is_path(words[0]):
            try:
                resolve_path(engine.collection, words[0])
            except (RefNotFound, MalformedPath):
                pass
            else:
                parent, words = words[0], words[1:]

        text = " ".join(words)
        if options.use_editor:
            text = self._editor(text, self.settings)
        if not text.strip():
            raise ValidationError("Todo text cannot be empty")

        if has_bullets(text):
            created = engine.add_tree(parse_bullets(text), parent)
        else:
            created = [engine.add(text, parent)]

        store.save(engine.collection)
        return self._change(command, engine.collection, created)

    def _run_attribute(self, command: CommandDef, options: RefsOptions) -> ChangeResult:
        store, engine = self._engine()
        changed = engine.set_attribute_many(options.refs, command.attribute, command.fixed_value)
        store.save(engine.collection)
        return self._change(command, engine.collection, changed)

    def _run_edit(self, command: CommandDef, options: EditOptions) -> ChangeResult:
        store, engine = self._engine()
        text = options.text
        if options.use_editor:
            uid = engine.resolver.resolve(options.ref)
            text = self._editor(text or engine.collection[uid].text, self.settings)
        todo = engine.edit(options.ref, text)
        store.save(engine.collection)
        return self._change(command, engine.collection, [todo])

    def _run_move(self, command: CommandDef, options: MoveOptions) -> ChangeResult:
        store, engine = self._engine()
        todo = engine.move(options.ref, options.parent)
        store.save(engine.collection)
        return self._change(command, engine.collection, [todo])

    def _run_clean(self, command: CommandDef, options: object) -> ChangeResult:
        store, engine = self._engine()
        removed = engine.clean()
        if removed:
            store.save(engine.collection)
        return self._change(command, engine.collection, removed)

    # Queries

    def _run_list(self, command: CommandDef, options: ListOptions) -> ChangeResult:
        collection = self.store.load()
        view = command.filter(options) if command.filter else list_filter(options)
        shown = [todo for todo in collection.iterate_all() if view.predicate(todo)]
        return ChangeResult(
            command=command.name,
            level="info",
            todos=build_views(collection, shown, include_done=view.include_done),
            total_count=len(collection),
            done_count=collection.done_count(),
        )

    def _run_search(self, command: CommandDef, options: SearchOptions) -> ChangeResult:
        collection = self.store.load()
        query = options.query if options.case_sensitive else options.query.lower()

        def matches(todo: Todo) -> bool:
            text = todo.text if options.case_sensitive else todo.text.lower()
            return query in text

        positions = generate_positions(collection)
        found = sorted(
            (todo for todo in collection.iterate_all() if matches(todo)),
            key=lambda todo: path_sort_key(positions[todo.uid]),
        )
        views = [TodoView(todo, positions[todo.uid]) for todo in found]
        if views:
            message = f"Found {len(views)} {'match' if len(views) == 1 else 'matches'} for '{options.query}'"
        else:
            message = f"No todos match '{options.query}'"
        return ChangeResult(
            command=command.name,
            message=message,
            level="info",
            todos=views,
            total_count=len(collection),
            done_count=collection.done_count(),
        )

    # Store management

    def _run_init(self, command: CommandDef, options: InitOptions) -> MessageResult:
        path = self.settings.home_store if options.home else self.scope.path
        store = JsonStore(path)
        if store.exists():
            store.load()
            return MessageResult(command.name, f"Reinitialized existing todo store in {path}", "info", path)
        store.save(Collection())
        return MessageResult(command.name, f"Initialized empty todo store in {path}", "success", path)

    def _run_datapath(self, command: CommandDef, options: object) -> MessageResult:
        path = self.scope.path
        return MessageResult(command.name, f"{path} ({self.scope.label} scope)", "info", path)

    def _run_formats(self, command: CommandDef, options: object) -> FormatsResult:
        return FormatsResult(list(self.formats))

    def _run_migrate(self, command: CommandDef, options: object) -> MessageResult:
        store = self.store
        path = store.path
        if not store.exists():
            return MessageResult(command.name, f"No todo store at {path}", "warning", path)

        loaded = store.load_with_details()
        if not loaded.is_legacy:
            return MessageResult(command.name, f"{path} is already in the current format", "info", path)

        backup = store.backup()
        store.save(loaded.collection)
        logger.info("migrated %s store %s (backup %s)", loaded.format, path, backup)
        return MessageResult(
            command.name,
            f"Migrated {len(loaded.collection)} todos from the {loaded.format} format; backup saved to {backup}",
            "success",
            path,
        )
