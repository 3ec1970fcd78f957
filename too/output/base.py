"""Renderer interface shared by every output format."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..results import ChangeResult, FormatsResult, MessageResult, TodoView

Result = ChangeResult | MessageResult | FormatsResult


class Renderer(ABC):
    """
    Turns result structures into output.

    Results go to stdout; errors go to stderr. ``render_list`` and
    ``render_search`` default to ``render_change`` for formats that do not
    distinguish them.
    """

    name: str = ""
    description: str = ""

    def render(self, result: Result) -> None:
        """Route a result to the matching capability."""
        if isinstance(result, FormatsResult):
            self.render_formats(result)
        elif isinstance(result, MessageResult):
            self.render_message(result)
        elif result.command == "list":
            self.render_list(result)
        elif result.command == "search":
            self.render_search(result)
        else:
            self.render_change(result)

    @abstractmethod
    def render_change(self, result: ChangeResult) -> None:
        ...

    def render_list(self, result: ChangeResult) -> None:
        self.render_change(result)

    def render_search(self, result: ChangeResult) -> None:
        self.render_change(result)

    @abstractmethod
    def render_error(self, error: Exception) -> None:
        ...

    @abstractmethod
    def render_formats(self, result: FormatsResult) -> None:
        ...

    @abstractmethod
    def render_message(self, result: MessageResult) -> None:
        ...


def summary_line(result: ChangeResult) -> str:
    noun = "todo" if result.total_count == 1 else "todos"
    return f"{result.total_count} {noun}, {result.done_count} done"


def text_lines(view: TodoView) -> list[str]:
    return view.todo.text.splitlines() or [""]


def error_kind(error: Exception) -> str:
    return type(error).__name__
