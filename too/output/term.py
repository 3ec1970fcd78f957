"""Styled terminal output using rich."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from ..results import ChangeResult, FormatsResult, MessageResult, TodoView
from .base import Renderer, summary_line, text_lines

INDENT = "  "
PENDING_MARK = "○"
DONE_MARK = "✓"

LEVEL_STYLES = {
    "success": "green",
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
}


class TermRenderer(Renderer):
    name = "term"
    description = "Coloured tree for interactive terminals (default)"

    def __init__(self, console: Console | None = None, err_console: Console | None = None):
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def _row(self, view: TodoView, highlighted: bool, nested: bool = True) -> Text:
        indent = INDENT * view.depth if nested else ""
        done = view.todo.is_done
        mark = DONE_MARK if done else PENDING_MARK
        text_style = "dim" if done else ""
        if highlighted:
            text_style = "bold"

        lines = text_lines(view)
        row = Text(indent)
        row.append(view.position, style="bold blue" if not done else "dim blue")
        row.append(" ")
        row.append(mark, style="green" if done else "yellow")
        row.append(" ")
        row.append(lines[0], style=text_style)
        # Continuation lines line up under the first line's text.
        hanging = " " * (len(indent) + len(view.position) + len(mark) + 2)
        for line in lines[1:]:
            row.append("\n" + hanging)
            row.append(line, style=text_style)
        return row

    def _tree(self, result: ChangeResult) -> None:
        if not result.todos:
            self.console.print("No todos", style="dim")
            return
        affected = result.affected_uids
        for view in result.todos:
            self.console.print(self._row(view, view.todo.uid in affected), highlight=False)

    def _message(self, message: str | None, level: str) -> None:
        if message:
            self.console.print(Text(message, style=LEVEL_STYLES.get(level, "")), highlight=False)

    def render_change(self, result: ChangeResult) -> None:
        self._message(result.message, result.level)
        self._tree(result)
        self.console.print(summary_line(result), style="dim", highlight=False)

    def render_list(self, result: ChangeResult) -> None:
        self._tree(result)
        self.console.print(summary_line(result), style="dim", highlight=False)

    def render_search(self, result: ChangeResult) -> None:
        self._message(result.message, result.level)
        for view in result.todos:
            self.console.print(self._row(view, False, nested=False), highlight=False)

    def render_error(self, error: Exception) -> None:
        self.err_console.print(Text(f"Error: {error}", style=LEVEL_STYLES["error"]), highlight=False)

    def render_formats(self, result: FormatsResult) -> None:
        width = max((len(name) for name, _ in result.formats), default=0)
        for name, description in result.formats:
            line = Text(name.ljust(width), style="bold")
            line.append(f"  {description}")
            self.console.print(line, highlight=False)

    def render_message(self, result: MessageResult) -> None:
        self._message(result.message, result.level)
