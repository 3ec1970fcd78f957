"""Pick the store file for an invocation.

Inside a git checkout the store is ``<repo root>/.todos.json`` (kept out of
version control through ``.gitignore``); elsewhere it falls back to the
environment override, the home store, or the working directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import STORE_FILENAME, Settings

logger = logging.getLogger(__name__)

PROJECT_MARKER = ".git"
GITIGNORE = ".gitignore"
_IGNORE_ENTRIES = (STORE_FILENAME, "/" + STORE_FILENAME)


@dataclass(frozen=True)
class Scope:
    path: Path
    is_global: bool
    project_root: Path | None = None

    @property
    def label(self) -> str:
        return "global" if self.is_global else "project"


def find_project_root(start: Path) -> Path | None:
    """Find the nearest ancestor of ``start`` holding a ``.git`` directory."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / PROJECT_MARKER).is_dir():
            return p
    return None


def ensure_gitignore(root: Path) -> bool:
    """Make sure ``.todos.json`` is ignored at ``root``.

    Returns:
        True if ``.gitignore`` was written, False if it already had the entry.
    """
    gitignore = root / GITIGNORE
    content = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
    if any(line.strip() in _IGNORE_ENTRIES for line in content.splitlines()):
        return False
    if content and not content.endswith("\n"):
        content += "\n"
    gitignore.write_text(content + STORE_FILENAME + "\n", encoding="utf-8")
    logger.info("added %s to %s", STORE_FILENAME, gitignore)
    return True


def resolve_scope(
    settings: Settings,
    cwd: Path | None = None,
    *,
    data_path: str | Path | None = None,
    force_global: bool = False,
    manage_gitignore: bool = True,
) -> Scope:
    """Decide which store file this invocation uses.

    Order: explicit path, project root (unless ``force_global``), the
    ``TODO_DB_PATH`` override, an existing ``~/.todos.json``, then
    ``./.todos.json``; ``force_global`` ends at the XDG data location
    instead of the working directory.
    """
    cwd = cwd or Path.cwd()

    if data_path:
        path = Path(data_path).expanduser()
        logger.debug("scope: explicit path %s", path)
        return Scope(path=path, is_global=False)

    if not force_global:
        root = find_project_root(cwd)
        if root is not None:
            if manage_gitignore:
                try:
                    ensure_gitignore(root)
                except OSError as exc:
                    logger.warning("could not update %s: %s", root / GITIGNORE, exc)
            logger.debug("scope: project %s", root)
            return Scope(path=root / STORE_FILENAME, is_global=False, project_root=root)

    if settings.db_path is not None:
        logger.debug("scope: TODO_DB_PATH %s", settings.db_path)
        return Scope(path=settings.db_path, is_global=True)

    if settings.home_store.exists():
        logger.debug("scope: home store %s", settings.home_store)
        return Scope(path=settings.home_store, is_global=True)

    if force_global:
        logger.debug("scope: global store %s", settings.global_store)
        return Scope(path=settings.global_store, is_global=True)

    logger.debug("scope: working directory")
    return Scope(path=cwd / STORE_FILENAME, is_global=False)
