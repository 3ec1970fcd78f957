"""Output formats.

``build_renderers`` creates one instance of every format; the CLI builds the
registry once per run and looks renderers up by name.
"""

from __future__ import annotations

from rich.console import Console

from .base import Renderer
from .structured import CsvRenderer, JsonRenderer, YamlRenderer
from .term import TermRenderer
from .text import MarkdownRenderer, PlainRenderer

FORMAT_NAMES: tuple[str, ...] = ("term", "plain", "json", "yaml", "csv", "markdown")


def build_renderers(console: Console | None = None, err_console: Console | None = None) -> dict[str, Renderer]:
    renderers: list[Renderer] = [
        TermRenderer(console, err_console),
        PlainRenderer(),
        JsonRenderer(),
        YamlRenderer(),
        CsvRenderer(),
        MarkdownRenderer(),
    ]
    return {renderer.name: renderer for renderer in renderers}


def describe_formats(renderers: dict[str, Renderer]) -> list[tuple[str, str]]:
    return [(name, renderer.description) for name, renderer in renderers.items()]


__all__ = ["FORMAT_NAMES", "Renderer", "build_renderers", "describe_formats"]
