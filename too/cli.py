"""CLI entrypoint for too."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console

from . import __version__
from .commands import CommandTable, Dispatcher, build_command_table
from .commands.options import (
    AddOptions,
    CommandOptions,
    EditOptions,
    InitOptions,
    ListOptions,
    MoveOptions,
    NoOptions,
    RefsOptions,
    SearchOptions,
)
from .config import DEFAULT_FORMAT, FORMAT_ENV, Settings
from .editor import edit_text
from .errors import TooError
from .logs import setup_logging
from .models import utcnow
from .output import FORMAT_NAMES, Renderer, build_renderers, describe_formats
from .scope import resolve_scope

logger = logging.getLogger(__name__)

# Group options that consume the following word as their value
GLOBAL_VALUE_OPTIONS = ("--data-path", "-p", "--format", "-f")
GLOBAL_FLAGS = ("--global", "-g", "--verbose", "--help", "-h", "--version")
# Flags that belong to whichever command they follow
COMMAND_LOCAL_FLAGS = ("--help", "-h")


@dataclass
class AppContext:
    """Everything a command needs, built once per run and passed as ``ctx.obj``."""

    commands: CommandTable = field(default_factory=build_command_table)
    renderers: dict[str, Renderer] | None = None
    settings: Settings | None = None
    cwd: Path | None = None
    output_format: str = DEFAULT_FORMAT
    data_path: str | None = None
    force_global: bool = False
    clock: Callable[[], datetime] = utcnow
    editor: Callable[[str, Settings], str] = edit_text

    @property
    def renderer(self) -> Renderer:
        if self.renderers is None:
            self.renderers = build_renderers(Console())
        return self.renderers[self.output_format]

    def dispatcher(self) -> Dispatcher:
        settings = self.settings or Settings.from_env()
        scope = resolve_scope(
            settings,
            self.cwd or Path.cwd(),
            data_path=self.data_path,
            force_global=self.force_global,
        )
        if self.renderers is None:
            self.renderers = build_renderers(Console())
        return Dispatcher(
            self.commands,
            settings,
            scope,
            formats=describe_formats(self.renderers),
            clock=self.clock,
            editor=self.editor,
        )

    def execute(self, name: str, options: CommandOptions) -> None:
        result = self.dispatcher().run(name, options)
        self.renderer.render(result)


def _is_group_option(arg: str) -> bool:
    if arg in GLOBAL_FLAGS:
        return True
    if arg.startswith("-") and not arg.startswith("--") and set(arg[1:]) == {"v"}:
        return True
    for opt in GLOBAL_VALUE_OPTIONS:
        if opt.startswith("--"):
            if arg.startswith(opt + "="):
                return True
        elif arg.startswith(opt) and len(arg) > len(opt):
            # -pPATH / -fjson
            return True
    return False


def _command_index(args: list[str]) -> int:
    """Index of the first word that is neither a group option nor its value."""
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in GLOBAL_VALUE_OPTIONS:
            i += 2
            continue
        if _is_group_option(arg):
            i += 1
            continue
        break
    return min(i, len(args))


def inject_default_command(args: list[str], command_names: CommandTable | set[str]) -> list[str]:
    """Insert the implicit command.

    No words at all means ``list``; words that do not start with a command
    name are text for ``add``.
    """
    args = list(args)
    i = _command_index(args)
    if i >= len(args):
        return args + ["list"]
    if args[i] in command_names:
        return args
    return args[:i] + ["add"] + args[i:]


def hoist_group_options(args: list[str]) -> list[str]:
    """Move group options written after the command name in front of it.

    ``list --all -f json`` becomes ``-f json list --all``. Help flags
    stay with the command, and nothing after ``--`` is touched.
    """
    args = list(args)
    i = _command_index(args)
    if i >= len(args):
        return args

    hoisted: list[str] = []
    rest: list[str] = []
    j = i + 1
    while j < len(args):
        arg = args[j]
        if arg == "--":
            rest.extend(args[j:])
            break
        if arg in GLOBAL_VALUE_OPTIONS and j + 1 < len(args):
            hoisted.extend(args[j : j + 2])
            j += 2
            continue
        if arg not in COMMAND_LOCAL_FLAGS and _is_group_option(arg):
            hoisted.append(arg)
        else:
            rest.append(arg)
        j += 1
    return args[:i] + hoisted + [args[i]] + rest


def _is_bullet_text(arg: str) -> bool:
    return len(arg) > 1 and arg[0] == "-" and arg[1].isspace()


class TextCommand(click.Command):
    """Command whose text words may start with a ``- `` bullet.

    click would read such a word as an unknown option, so when one is present
    the command's own options are moved first and the words follow ``--``.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if "--" not in args and any(_is_bullet_text(arg) for arg in args):
            args = self._options_first(ctx, args)
        return super().parse_args(ctx, args)

    def _options_first(self, ctx: click.Context, args: list[str]) -> list[str]:
        # number of values each option name consumes
        arity: dict[str, int] = {}
        for param in self.get_params(ctx):
            if isinstance(param, click.Option):
                for opt in (*param.opts, *param.secondary_opts):
                    arity[opt] = 0 if param.is_flag or param.count else 1

        options: list[str] = []
        words: list[str] = []
        i = 0
        while i < len(args):
            arg = args[i]
            name = arg.split("=", 1)[0]
            if name in arity and not _is_bullet_text(arg):
                step = 1 if "=" in arg else 1 + arity[name]
                options.extend(args[i : i + step])
                i += step
            else:
                words.append(arg)
                i += 1
        return options + ["--", *words]


class TooGroup(click.Group):
    """Click group that knows command aliases, the implicit command and error rendering."""

    @staticmethod
    def _app(ctx: click.Context) -> AppContext:
        return ctx.ensure_object(AppContext)

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        args = hoist_group_options(inject_default_command(args, self._app(ctx).commands))
        return super().parse_args(ctx, args)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        canonical = self._app(ctx).commands.canonical(cmd_name)
        return super().get_command(ctx, canonical or cmd_name)

    def list_commands(self, ctx: click.Context) -> list[str]:
        return [command.name for command in self._app(ctx).commands if command.name in self.commands]

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except TooError as exc:
            logger.debug("command failed", exc_info=True)
            self._app(ctx).renderer.render_error(exc)
            ctx.exit(1)


@click.group(cls=TooGroup, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="too")
@click.option(
    "--data-path",
    "-p",
    type=str,
    default=None,
    help="Use this todo file instead of the detected one",
)
@click.option(
    "--global",
    "-g",
    "force_global",
    is_flag=True,
    help="Use the global todo file even inside a project",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(FORMAT_NAMES),
    default=DEFAULT_FORMAT,
    envvar=FORMAT_ENV,
    show_default=True,
    help="Output format",
)
@click.option("--verbose", "-v", count=True, help="More diagnostics on stderr (repeatable)")
@click.pass_context
def cli(
    ctx: click.Context,
    data_path: str | None,
    force_global: bool,
    output_format: str,
    verbose: int,
) -> None:
    """too - a hierarchical todo list.

    Text without a command adds a todo; no arguments lists pending todos.
    """
    setup_logging(verbose)
    app = ctx.ensure_object(AppContext)
    app.data_path = data_path
    app.force_global = force_global
    app.output_format = output_format
    if app.settings is None:
        app.settings = Settings.from_env()


@cli.command(cls=TextCommand)
@click.argument("words", nargs=-1)
@click.option("--to", "parent", default=None, metavar="REF", help="Add under this todo")
@click.option("-e", "--edit", "use_editor", is_flag=True, help="Write the text in $EDITOR")
@click.pass_obj
def add(app: AppContext, words: tuple[str, ...], parent: str | None, use_editor: bool) -> None:
    """Add a todo, or a '- item' bullet list of todos."""
    app.execute("add", AddOptions(list(words), parent, use_editor))


@cli.command()
@click.argument("refs", nargs=-1)
@click.pass_obj
def complete(app: AppContext, refs: tuple[str, ...]) -> None:
    """Mark todos as done."""
    app.execute("complete", RefsOptions(list(refs)))


@cli.command()
@click.argument("refs", nargs=-1)
@click.pass_obj
def reopen(app: AppContext, refs: tuple[str, ...]) -> None:
    """Mark todos as pending again."""
    app.execute("reopen", RefsOptions(list(refs)))


@cli.command(cls=TextCommand)
@click.argument("ref", required=False, default="")
@click.argument("words", nargs=-1)
@click.option("-e", "--edit", "use_editor", is_flag=True, help="Edit the current text in $EDITOR")
@click.pass_obj
def edit(app: AppContext, ref: str, words: tuple[str, ...], use_editor: bool) -> None:
    """Replace the text of a todo."""
    app.execute("edit", EditOptions(ref, list(words), use_editor))


@cli.command()
@click.argument("ref", required=False, default="")
@click.argument("parent", required=False, default="")
@click.pass_obj
def move(app: AppContext, ref: str, parent: str) -> None:
    """Move a todo under PARENT ("" for the top level)."""
    app.execute("move", MoveOptions(ref, parent))


@cli.command()
@click.pass_obj
def clean(app: AppContext) -> None:
    """Remove finished todos."""
    app.execute("clean", NoOptions())


@cli.command(name="list")
@click.option("-d", "--done", "show_done", is_flag=True, help="Show only finished todos")
@click.option("-a", "--all", "show_all", is_flag=True, help="Show finished and pending todos")
@click.pass_obj
def list_cmd(app: AppContext, show_done: bool, show_all: bool) -> None:
    """List todos (pending only by default)."""
    app.execute("list", ListOptions(show_done=show_done, show_all=show_all))


@cli.command()
@click.argument("words", nargs=-1)
@click.option("-s", "--case-sensitive", is_flag=True, help="Match case exactly")
@click.pass_obj
def search(app: AppContext, words: tuple[str, ...], case_sensitive: bool) -> None:
    """Find todos whose text contains the query."""
    app.execute("search", SearchOptions(list(words), case_sensitive))


@cli.command()
@click.option("--home", is_flag=True, help="Create ~/.todos.json instead")
@click.pass_obj
def init(app: AppContext, home: bool) -> None:
    """Create the todo store."""
    app.execute("init", InitOptions(home=home))


@cli.command()
@click.pass_obj
def datapath(app: AppContext) -> None:
    """Show which todo file is in use."""
    app.execute("datapath", NoOptions())


@cli.command()
@click.pass_obj
def formats(app: AppContext) -> None:
    """List output formats."""
    app.execute("formats", NoOptions())


@cli.command()
@click.pass_obj
def migrate(app: AppContext) -> None:
    """Rewrite an old-format todo file in the current format (keeps a .backup)."""
    app.execute("migrate", NoOptions())


def main(argv: list[str] | None = None) -> None:
    console = Console()
    app = AppContext(commands=build_command_table(), renderers=build_renderers(console))
    try:
        code = cli.main(args=argv, prog_name="too", obj=app, standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        sys.exit(1)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    if isinstance(code, int) and code != 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
