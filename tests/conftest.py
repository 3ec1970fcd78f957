"""Pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from too.cli import AppContext, cli
from too.collection import Collection
from too.config import Settings
from too.engine import Engine
from too.store import JsonStore


@pytest.fixture
def collection() -> Collection:
    """A fresh, empty collection."""
    return Collection()


@pytest.fixture
def engine(collection: Collection) -> Engine:
    return Engine(collection)


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "todos.json"


@pytest.fixture
def store(store_path: Path) -> JsonStore:
    return JsonStore(store_path)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the real environment and home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return Settings.from_env({"HOME": str(home), "XDG_DATA_HOME": str(tmp_path / "xdg")})


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(runner: CliRunner, store_path: Path, settings: Settings, tmp_path: Path) -> Callable[..., Result]:
    """Run the CLI against ``store_path`` with isolated settings."""

    def _invoke(*args: str, editor: Callable[[str, Settings], str] | None = None) -> Result:
        app = AppContext(settings=settings, cwd=tmp_path)
        if editor is not None:
            app.editor = editor
        return runner.invoke(cli, ["--data-path", str(store_path), *args], obj=app)

    return _invoke
