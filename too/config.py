"""Environment-derived settings.

Read once per invocation; everything downstream takes a ``Settings``
instead of touching ``os.environ``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DB_PATH_ENV = "TODO_DB_PATH"
FORMAT_ENV = "TOO_FORMAT"

DEFAULT_FORMAT = "term"
STORE_FILENAME = ".todos.json"
GLOBAL_STORE_FILENAME = "todos.json"
APP_DIRNAME = "too"


@dataclass(frozen=True)
class Settings:
    db_path: Path | None = None
    xdg_data_home: Path | None = None
    editor: str | None = None
    home: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        def _path(name: str) -> Path | None:
            value = (env.get(name) or "").strip()
            return Path(value).expanduser() if value else None

        editor = (env.get("EDITOR") or "").strip() or (env.get("VISUAL") or "").strip() or None
        return cls(
            db_path=_path(DB_PATH_ENV),
            xdg_data_home=_path("XDG_DATA_HOME"),
            editor=editor,
            home=_path("HOME"),
        )

    @property
    def home_dir(self) -> Path:
        return self.home if self.home is not None else Path.home()

    @property
    def home_store(self) -> Path:
        """``~/.todos.json``."""
        return self.home_dir / STORE_FILENAME

    @property
    def global_store(self) -> Path:
        """XDG data location used by ``--global`` when nothing else applies."""
        base = self.xdg_data_home or (self.home_dir / ".local" / "share")
        return base / APP_DIRNAME / GLOBAL_STORE_FILENAME
