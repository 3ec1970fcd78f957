"""End-to-end tests through the click entrypoint."""

from __future__ import annotations

import json

import pytest

from too import __version__
from too.cli import hoist_group_options, inject_default_command, main
from too.commands import build_command_table


def positions(invoke, *flags: str) -> list[tuple[str, str]]:
    result = invoke("-f", "json", "list", *flags)
    assert result.exit_code == 0, result.output
    return [(t["position"], t["text"]) for t in json.loads(result.output)["todos"]]


def ok(result):
    assert result.exit_code == 0, result.output
    return result


class TestDefaultCommand:
    names = build_command_table()

    def test_nothing_means_list(self):
        assert inject_default_command([], self.names) == ["list"]
        assert inject_default_command(["-g", "-vv"], self.names) == ["-g", "-vv", "list"]
        assert inject_default_command(["-fjson"], self.names) == ["-fjson", "list"]

    def test_text_means_add(self):
        assert inject_default_command(["Buy", "milk"], self.names) == ["add", "Buy", "milk"]
        assert inject_default_command(["--format=json", "Buy"], self.names) == ["--format=json", "add", "Buy"]
        assert inject_default_command(["-p", "x.json", "Buy"], self.names) == ["-p", "x.json", "add", "Buy"]

    def test_commands_and_aliases_pass_through(self):
        assert inject_default_command(["-p", "x.json", "ls"], self.names) == ["-p", "x.json", "ls"]
        assert inject_default_command(["c", "1"], self.names) == ["c", "1"]

    def test_group_options_after_command_move_forward(self):
        assert hoist_group_options(["list", "--all", "-f", "json"]) == ["-f", "json", "list", "--all"]
        assert hoist_group_options(["-p", "x.json", "add", "Milk", "-p", "y.json", "-vv", "-g"]) == [
            "-p",
            "x.json",
            "-p",
            "y.json",
            "-vv",
            "-g",
            "add",
            "Milk",
        ]
        assert hoist_group_options(["add", "Milk", "--format=json"]) == ["--format=json", "add", "Milk"]

    def test_hoisting_leaves_help_and_escaped_words(self):
        assert hoist_group_options(["add", "--help"]) == ["add", "--help"]
        assert hoist_group_options(["add", "--", "-f", "json"]) == ["add", "--", "-f", "json"]
        assert hoist_group_options(["-g"]) == ["-g"]
        assert hoist_group_options(["add", "- A\n- B"]) == ["add", "- A\n- B"]


def test_empty_store_lists_nothing(invoke):
    result = ok(invoke("-f", "plain"))
    assert result.output.splitlines() == ["No todos", "0 todos, 0 done"]


def test_text_without_command_adds(invoke):
    result = ok(invoke("-f", "plain", "Buy", "milk"))
    assert result.output.splitlines()[0] == "Added todo: 1"
    assert positions(invoke) == [("1", "Buy milk")]


def test_term_output(invoke):
    result = ok(invoke("add", "Groceries"))
    assert "Added todo: 1" in result.output
    assert "Groceries" in result.output


def test_nested_paths(invoke):
    ok(invoke("add", "Groceries"))
    ok(invoke("add", "Milk", "--to", "1"))
    ok(invoke("add", "Bread", "--to", "1"))
    assert positions(invoke) == [("1", "Groceries"), ("1.1", "Milk"), ("1.2", "Bread")]


def test_complete_and_reopen_renumber(invoke):
    ok(invoke("add", "Groceries"))
    ok(invoke("add", "Milk", "--to", "1"))
    ok(invoke("add", "Bread", "--to", "1"))

    ok(invoke("complete", "1.2"))
    assert positions(invoke, "--all") == [("1", "Groceries"), ("1.1", "Milk"), ("1.c1", "Bread")]

    ok(invoke("reopen", "1.c1"))
    assert positions(invoke) == [("1", "Groceries"), ("1.1", "Milk"), ("1.2", "Bread")]


def test_roots_stay_independent(invoke):
    for text in ("A", "B", "C"):
        ok(invoke("add", text))
    ok(invoke("complete", "1", "2"))
    assert positions(invoke) == [("1", "C")]
    assert positions(invoke, "--all") == [("c1", "A"), ("c2", "B"), ("1", "C")]


def test_parent_completes_with_children(invoke):
    ok(invoke("add", "P"))
    ok(invoke("add", "X", "--to", "1"))
    ok(invoke("add", "Y", "--to", "1"))
    ok(invoke("complete", "1.1", "1.2"))
    assert positions(invoke) == []
    assert positions(invoke, "--done") == [("c1", "P"), ("c1.c1", "X"), ("c1.c2", "Y")]


def test_positions_shift_between_invocations(invoke):
    ok(invoke("add", "P"))
    ok(invoke("add", "X", "--to", "1"))
    ok(invoke("add", "Y", "--to", "1"))
    ok(invoke("complete", "1.1"))
    # Y is now 1.1; there is no 1.2 left to complete.
    result = invoke("-f", "json", "complete", "1.2")
    assert result.exit_code == 1
    assert '"kind": "RefNotFound"' in result.output
    assert positions(invoke) == [("1", "P"), ("1.1", "Y")]


def test_cycle_is_rejected(invoke, store_path):
    ok(invoke("add", "A"))
    ok(invoke("add", "B", "--to", "1"))
    before = store_path.read_bytes()

    result = invoke("-f", "plain", "move", "1", "1.1")
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert store_path.read_bytes() == before


def test_ambiguous_text_is_rejected(invoke, store_path):
    ok(invoke("add", "Write tests"))
    ok(invoke("add", "Write docs"))
    before = store_path.read_bytes()

    result = invoke("-f", "plain", "complete", "Write")
    assert result.exit_code == 1
    assert "Write tests" in result.output and "Write docs" in result.output
    assert store_path.read_bytes() == before

    ok(invoke("complete", "Write tests"))
    assert positions(invoke, "--all") == [("c1", "Write tests"), ("1", "Write docs")]


def test_bullet_list_add(invoke):
    ok(invoke("add", "- A\n  - A1\n  - A2\n- B"))
    assert positions(invoke) == [("1", "A"), ("1.1", "A1"), ("1.2", "A2"), ("2", "B")]


def test_bullet_list_without_command(invoke):
    ok(invoke("- A\n  - A1\n- B"))
    assert positions(invoke) == [("1", "A"), ("1.1", "A1"), ("2", "B")]


def test_bullet_list_under_parent(invoke):
    ok(invoke("add", "Groceries"))
    ok(invoke("add", "- Milk\n- Bread", "--to", "1"))
    ok(invoke("add", "-e", "--to=1", "- ignored", editor=lambda initial, settings: "- Eggs"))
    assert positions(invoke) == [("1", "Groceries"), ("1.1", "Milk"), ("1.2", "Bread"), ("1.3", "Eggs")]


def test_edit_text_starting_with_a_dash(invoke):
    ok(invoke("add", "Milk"))
    ok(invoke("edit", "1", "- oat milk"))
    assert positions(invoke) == [("1", "- oat milk")]


def test_group_options_after_command(invoke, store_path, tmp_path):
    ok(invoke("add", "Milk"))
    result = ok(invoke("list", "--all", "-f", "json"))
    assert [t["text"] for t in json.loads(result.output)["todos"]] == ["Milk"]

    other = tmp_path / "other.json"
    ok(invoke("add", "Bread", "-p", str(other), "-f", "plain"))
    assert [t["text"] for t in json.loads(other.read_text(encoding="utf-8"))["todos"]] == ["Bread"]
    assert positions(invoke) == [("1", "Milk")]


def test_command_help(invoke):
    assert "--to" in ok(invoke("add", "--help")).output


def test_aliases(invoke):
    ok(invoke("a", "Milk"))
    ok(invoke("e", "1", "Oat", "milk"))
    ok(invoke("c", "1"))
    assert positions(invoke, "--done") == [("c1", "Oat milk")]
    ok(invoke("o", "c1"))
    ok(invoke("-f", "plain", "clean"))
    assert positions(invoke) == [("1", "Oat milk")]


def test_move_to_top_level(invoke):
    ok(invoke("add", "A"))
    ok(invoke("add", "B", "--to", "1"))
    ok(invoke("move", "1.1"))
    assert positions(invoke) == [("1", "A"), ("2", "B")]


def test_search(invoke):
    ok(invoke("add", "Write tests"))
    ok(invoke("add", "Read docs"))
    result = ok(invoke("-f", "plain", "search", "WRITE"))
    assert result.output.splitlines() == ["Found 1 match for 'WRITE'", "1 [ ] Write tests"]
    result = ok(invoke("-f", "plain", "search", "-s", "WRITE"))
    assert result.output.splitlines() == ["No todos match 'WRITE'"]


def test_add_with_editor(invoke):
    ok(invoke("add", "-e", editor=lambda initial, settings: "From the editor"))
    assert positions(invoke) == [("1", "From the editor")]


def test_missing_text_is_an_error(invoke):
    result = invoke("-f", "plain", "edit", "1")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_json_error_document(invoke):
    result = invoke("-f", "json", "complete", "7.7")
    assert result.exit_code == 1
    assert '"kind": "RefNotFound"' in result.output


def test_datapath_and_init(invoke, store_path):
    result = ok(invoke("-f", "plain", "datapath"))
    assert result.output.strip() == f"{store_path} (project scope)"
    result = ok(invoke("-f", "plain", "init"))
    assert result.output.strip() == f"Initialized empty todo store in {store_path}"
    assert store_path.exists()


def test_formats(invoke):
    result = ok(invoke("-f", "plain", "formats"))
    names = [line.split("\t")[0] for line in result.output.splitlines()]
    assert names == ["term", "plain", "json", "yaml", "csv", "markdown"]


def test_migrate(invoke, store_path):
    store_path.write_text(json.dumps([{"id": 1, "text": "old", "status": "pending"}]), encoding="utf-8")
    result = ok(invoke("-f", "plain", "migrate"))
    assert "Migrated 1 todos" in result.output
    assert positions(invoke) == [("1", "old")]


def test_verbose_flags(invoke):
    ok(invoke("-vvv", "-f", "plain", "list"))


def test_version_and_help(invoke):
    assert __version__ in ok(invoke("--version")).output
    assert "complete" in ok(invoke("--help")).output


def test_main_usage_error_exits_1(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--format", "bogus", "list"])
    assert excinfo.value.code == 1


def test_main_command_error_exits_1(store_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--data-path", str(store_path), "-f", "plain", "complete", "7.7"])
    assert excinfo.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_main_success(store_path, capsys):
    main(["--data-path", str(store_path), "-f", "json", "add", "Milk"])
    assert json.loads(capsys.readouterr().out)["message"] == "Added todo: 1"
    assert store_path.exists()
