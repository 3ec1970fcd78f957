"""Typed option records, one per command."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AddOptions:
    words: list[str] = field(default_factory=list)
    parent: str | None = None
    use_editor: bool = False

    @property
    def text(self) -> str:
        return " ".join(self.words)


@dataclass
class RefsOptions:
    """complete / reopen"""

    refs: list[str] = field(default_factory=list)


@dataclass
class EditOptions:
    ref: str = ""
    words: list[str] = field(default_factory=list)
    use_editor: bool = False

    @property
    def text(self) -> str:
        return " ".join(self.words)


@dataclass
class MoveOptions:
    ref: str = ""
    parent: str = ""


@dataclass
class ListOptions:
    show_done: bool = False
    show_all: bool = False


@dataclass
class SearchOptions:
    words: list[str] = field(default_factory=list)
    case_sensitive: bool = False

    @property
    def query(self) -> str:
        return " ".join(self.words)


@dataclass
class InitOptions:
    home: bool = False


@dataclass
class NoOptions:
    """clean, datapath, formats, migrate"""


CommandOptions = AddOptions | RefsOptions | EditOptions | MoveOptions | ListOptions | SearchOptions | InitOptions | NoOptions
