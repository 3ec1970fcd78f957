"""Collect todo text from the user's editor."""

from __future__ import annotations

import logging

import click

from .config import Settings
from .errors import EditorError

logger = logging.getLogger(__name__)


def trim_blank_lines(text: str) -> str:
    """Drop blank lines at both ends, keeping inner lines and indentation."""
    lines = text.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(line.rstrip() for line in lines)


def edit_text(initial: str = "", settings: Settings | None = None) -> str:
    """Open ``initial`` in an editor and return what the user saved.

    ``EDITOR`` wins over ``VISUAL``; without either, click's own lookup
    picks a default editor. The temporary file is always removed.

    Raises:
        EditorError: if the editor fails or leaves nothing behind
    """
    editor = settings.editor if settings is not None else None
    logger.debug("opening editor %s", editor or "(default)")
    try:
        result = click.edit(initial, editor=editor, extension=".md", require_save=False)
    except click.ClickException as exc:
        raise EditorError(f"Editor failed: {exc.format_message()}") from exc

    text = trim_blank_lines(result or "")
    if not text:
        raise EditorError("Editor returned no content")
    return text
