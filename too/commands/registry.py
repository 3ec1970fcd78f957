"""Declarative command table.

Each command is a ``CommandDef``: its names, what input it needs, which
attribute it mutates (if any) and how its filter and message are built.
The table is built explicitly by ``build_command_table`` and handed to the
dispatcher and the CLI; there is no module-level registry.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from ..engine import ATTR_COMPLETION
from ..errors import ValidationError
from ..models import DONE, PENDING, Todo
from ..results import TodoView
from .options import ListOptions, MoveOptions

# Execution strategies understood by the dispatcher
KIND_ADD = "add"
KIND_ATTRIBUTE = "attribute"
KIND_EDIT = "edit"
KIND_MOVE = "move"
KIND_CLEAN = "clean"
KIND_LIST = "list"
KIND_SEARCH = "search"
KIND_INIT = "init"
KIND_DATAPATH = "datapath"
KIND_FORMATS = "formats"
KIND_MIGRATE = "migrate"


@dataclass(frozen=True)
class ViewFilter:
    """Which todos a listing shows and in which view their positions are computed."""

    predicate: Callable[[Todo], bool]
    include_done: bool


MessageBuilder = Callable[[list[TodoView]], str]


@dataclass(frozen=True)
class CommandDef:
    name: str
    kind: str
    help: str = ""
    aliases: tuple[str, ...] = ()
    requires_ref: bool = False
    accepts_multiple: bool = False
    requires_text: bool = False
    attribute: str | None = None
    fixed_value: str | None = None
    validate: Callable[[Any], None] | None = None
    filter: Callable[[Any], ViewFilter] | None = None
    message: MessageBuilder | None = None

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


class CommandTable:
    """Name and alias lookup over a fixed set of command definitions."""

    def __init__(self, commands: list[CommandDef]):
        self._commands: dict[str, CommandDef] = {}
        self._lookup: dict[str, CommandDef] = {}
        for command in commands:
            self._commands[command.name] = command
            for name in command.names:
                if name in self._lookup:
                    raise ValueError(f"command name '{name}' is registered twice")
                self._lookup[name] = command

    def __iter__(self) -> Iterator[CommandDef]:
        return iter(self._commands.values())

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def __len__(self) -> int:
        return len(self._commands)

    def lookup(self, name: str) -> CommandDef | None:
        return self._lookup.get(name)

    def get(self, name: str) -> CommandDef:
        command = self._lookup.get(name)
        if command is None:
            raise ValidationError(f"Unknown command '{name}'")
        return command

    def canonical(self, name: str) -> str | None:
        command = self._lookup.get(name)
        return command.name if command else None


def _plural(views: list[TodoView]) -> str:
    return "todo" if len(views) == 1 else "todos"


def _positions(views: list[TodoView]) -> str:
    return ", ".join(view.position for view in views)


def _verb_message(verb: str, empty: str = "") -> MessageBuilder:
    def build(views: list[TodoView]) -> str:
        if not views:
            return empty
        return f"{verb} {_plural(views)}: {_positions(views)}"

    return build


def _clean_message(views: list[TodoView]) -> str:
    if not views:
        return "No finished todos to clean"
    return f"Cleaned {_plural(views)}: {', '.join(view.todo.short_id for view in views)}"


def list_filter(options: ListOptions) -> ViewFilter:
    if options.show_all:
        return ViewFilter(lambda todo: True, include_done=True)
    if options.show_done:
        return ViewFilter(lambda todo: todo.is_done, include_done=True)
    return ViewFilter(lambda todo: todo.is_pending, include_done=False)


def _validate_move(options: MoveOptions) -> None:
    if not options.ref.strip():
        raise ValidationError("move needs the todo to move and its new parent")


def build_command_table() -> CommandTable:
    return CommandTable(
        [
            CommandDef(
                name="add",
                kind=KIND_ADD,
                help="Add a new todo (or a bullet list of todos)",
                aliases=("a", "new", "create"),
                requires_text=True,
                message=_verb_message("Added"),
            ),
            CommandDef(
                name="complete",
                kind=KIND_ATTRIBUTE,
                help="Mark todos as complete",
                aliases=("c",),
                requires_ref=True,
                accepts_multiple=True,
                attribute=ATTR_COMPLETION,
                fixed_value=DONE,
                message=_verb_message("Completed", "No todos completed"),
            ),
            CommandDef(
                name="reopen",
                kind=KIND_ATTRIBUTE,
                help="Mark todos as pending",
                aliases=("o",),
                requires_ref=True,
                accepts_multiple=True,
                attribute=ATTR_COMPLETION,
                fixed_value=PENDING,
                message=_verb_message("Reopened", "No todos reopened"),
            ),
            CommandDef(
                name="edit",
                kind=KIND_EDIT,
                help="Replace the text of a todo",
                aliases=("modify", "e"),
                requires_ref=True,
                requires_text=True,
                message=_verb_message("Modified"),
            ),
            CommandDef(
                name="move",
                kind=KIND_MOVE,
                help="Move a todo under another parent (\"\" for the top level)",
                aliases=("m",),
                requires_ref=True,
                validate=_validate_move,
                message=_verb_message("Moved"),
            ),
            CommandDef(
                name="clean",
                kind=KIND_CLEAN,
                help="Remove finished todos",
                message=_clean_message,
            ),
            CommandDef(
                name="list",
                kind=KIND_LIST,
                help="List todos",
                aliases=("ls",),
                filter=list_filter,
            ),
            CommandDef(
                name="search",
                kind=KIND_SEARCH,
                help="Search todo text",
                aliases=("s",),
                requires_text=True,
            ),
            CommandDef(
                name="init",
                kind=KIND_INIT,
                help="Create the todo store",
                aliases=("i",),
            ),
            CommandDef(
                name="datapath",
                kind=KIND_DATAPATH,
                help="Show where todos are stored",
                aliases=("path",),
            ),
            CommandDef(
                name="formats",
                kind=KIND_FORMATS,
                help="List available output formats",
            ),
            CommandDef(
                name="migrate",
                kind=KIND_MIGRATE,
                help="Rewrite an old-format store in the current format",
            ),
        ]
    )
