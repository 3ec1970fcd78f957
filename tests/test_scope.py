from __future__ import annotations

from pathlib import Path

import pytest

from too.config import Settings
from too.scope import ensure_gitignore, find_project_root, resolve_scope


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    (root / "src" / "pkg").mkdir(parents=True)
    return root


@pytest.fixture
def outside(tmp_path: Path) -> Path:
    path = tmp_path / "elsewhere"
    path.mkdir()
    return path


def test_settings_from_env(tmp_path):
    settings = Settings.from_env(
        {
            "TODO_DB_PATH": str(tmp_path / "db.json"),
            "XDG_DATA_HOME": str(tmp_path / "xdg"),
            "VISUAL": "code -w",
            "HOME": str(tmp_path),
        }
    )
    assert settings.db_path == tmp_path / "db.json"
    assert settings.editor == "code -w"
    assert settings.home_store == tmp_path / ".todos.json"
    assert settings.global_store == tmp_path / "xdg" / "too" / "todos.json"


def test_editor_prefers_editor_over_visual():
    assert Settings.from_env({"EDITOR": "vim", "VISUAL": "code"}).editor == "vim"
    assert Settings.from_env({"EDITOR": "  "}).editor is None


def test_global_store_defaults_under_home(tmp_path):
    settings = Settings.from_env({"HOME": str(tmp_path)})
    assert settings.global_store == tmp_path / ".local" / "share" / "too" / "todos.json"


def test_explicit_path_wins(settings, repo, monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    scope = resolve_scope(settings, repo, data_path="~/mine.json")
    assert scope.path == tmp_path / "mine.json"
    assert not (repo / ".gitignore").exists()


def test_project_scope_from_subdirectory(settings, repo):
    scope = resolve_scope(settings, repo / "src" / "pkg")
    assert scope.path == repo.resolve() / ".todos.json"
    assert scope.project_root == repo.resolve()
    assert not scope.is_global
    assert scope.label == "project"
    assert (repo / ".gitignore").read_text(encoding="utf-8") == ".todos.json\n"


def test_find_project_root_walks_up(repo):
    assert find_project_root(repo / "src" / "pkg") == repo.resolve()


def test_gitignore_appends_with_newline(repo):
    (repo / ".gitignore").write_text("node_modules", encoding="utf-8")
    assert ensure_gitignore(repo)
    assert (repo / ".gitignore").read_text(encoding="utf-8") == "node_modules\n.todos.json\n"


def test_gitignore_never_duplicates(repo):
    ensure_gitignore(repo)
    assert not ensure_gitignore(repo)
    assert (repo / ".gitignore").read_text(encoding="utf-8").count(".todos.json") == 1


def test_gitignore_accepts_rooted_entry(repo):
    (repo / ".gitignore").write_text("/.todos.json\n", encoding="utf-8")
    assert not ensure_gitignore(repo)
    assert (repo / ".gitignore").read_text(encoding="utf-8") == "/.todos.json\n"


def test_env_override_outside_project(tmp_path, outside):
    settings = Settings.from_env({"HOME": str(tmp_path), "TODO_DB_PATH": str(tmp_path / "env.json")})
    scope = resolve_scope(settings, outside)
    assert scope.path == tmp_path / "env.json"


def test_home_store_when_present(settings, outside):
    settings.home_store.write_text("", encoding="utf-8")
    assert resolve_scope(settings, outside).path == settings.home_store


def test_working_directory_fallback(settings, outside):
    scope = resolve_scope(settings, outside)
    assert scope.path == outside / ".todos.json"


def test_global_skips_project(settings, repo):
    scope = resolve_scope(settings, repo, force_global=True)
    assert scope.is_global
    assert scope.path == settings.global_store
    assert not (repo / ".gitignore").exists()


def test_global_uses_env_override(tmp_path, repo):
    settings = Settings.from_env({"HOME": str(tmp_path), "TODO_DB_PATH": str(tmp_path / "env.json")})
    assert resolve_scope(settings, repo, force_global=True).path == tmp_path / "env.json"
