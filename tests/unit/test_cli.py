"""Unit tests for the todo-tree command line interface."""
from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from todotree.cli.main import cli

MakeTree = Callable[[dict[str, "str | bytes"]], Path]

_SOURCES: dict[str, str | bytes] = {
    "src/main.rs": "fn main() {\n    // TODO: wire up args\n    // FIXME(ana): crashes on empty input\n}\n",
    "src/util.py": "# NOTE: keep in sync with main.rs\nx = 1\n",
    "README.md": "Nothing to see here.\n",
}


def _make_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def project(make_tree: MakeTree) -> Path:
    return make_tree(dict(_SOURCES))


# ===========================================================================
# scan
# ===========================================================================


class TestScanCommand:
    def setup_method(self) -> None:
        self.runner = _make_runner()

    def test_tree_output(self, project: Path) -> None:
        result = self.runner.invoke(cli, ["scan", str(project)])
        assert result.exit_code == 0
        assert "main.rs" in result.output
        assert "wire up args" in result.output
        assert "FIXME(ana)" in result.output
        assert "3 annotation(s)" in result.output

    def test_json_output(self, project: Path) -> None:
        result = self.runner.invoke(cli, ["scan", str(project), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["summary"]["total_count"] == 3
        assert [f["path"] for f in data["files"]] == ["README.md", "src/main.rs", "src/util.py"]
        fixme = data["files"][1]["items"][1]
        assert fixme["tag"] == "FIXME"
        assert fixme["author"] == "ana"
        assert fixme["priority"] == "critical"

    def test_json_output_is_stable(self, project: Path) -> None:
        first = self.runner.invoke(cli, ["scan", str(project), "--json", "-j", "4"])
        second = self.runner.invoke(cli, ["scan", str(project), "--json", "-j", "1"])
        assert first.output == second.output

    def test_flat_output(self, project: Path) -> None:
        result = self.runner.invoke(cli, ["scan", str(project), "--flat", "--no-color"])
        assert result.exit_code == 0
        assert "src/util.py:1:3" in result.output
        assert "src/main.rs:2:8" in result.output

    def test_tags_filter(self, project: Path) -> None:
        result = self.runner.invoke(cli, ["scan", str(project), "--json", "--tags", "NOTE"])
        data = json.loads(result.output)
        assert data["summary"]["by_tag"] == {"NOTE": 1}

    def test_comma_separated_tags(self, project: Path) -> None:
        result = self.runner.invoke(cli, ["scan", str(project), "--json", "-t", "TODO,NOTE"])
        data = json.loads(result.output)
        assert data["summary"]["by_tag"] == {"NOTE": 1, "TODO": 1}

    def test_min_priority(self, project: Path) -> None:
        result = self.runner.invoke(
            cli, ["scan", str(project), "--json", "--min-priority", "high"]
        )
        data = json.loads(result.output)
        assert data["summary"]["by_tag"] == {"FIXME": 1}

    def test_ignore_case(self, make_tree: MakeTree) -> None:
        root = make_tree({"a.py": "# todo: lower\n"})
        strict = json.loads(self.runner.invoke(cli, ["scan", str(root), "--json"]).output)
        loose = json.loads(
            self.runner.invoke(cli, ["scan", str(root), "--json", "--ignore-case"]).output
        )
        assert strict["summary"]["total_count"] == 0
        assert loose["summary"]["total_count"] == 1
        assert loose["files"][0]["items"][0]["tag"] == "TODO"

    def test_no_require_colon(self, make_tree: MakeTree) -> None:
        root = make_tree({"a.py": "# TODO later\n"})
        result = self.runner.invoke(cli, ["scan", str(root), "--json", "--no-require-colon"])
        assert json.loads(result.output)["summary"]["total_count"] == 1

    def test_exclude(self, project: Path) -> None:
        result = self.runner.invoke(cli, ["scan", str(project), "--json", "-e", "*.py"])
        data = json.loads(result.output)
        assert "src/util.py" not in [f["path"] for f in data["files"]]

    def test_config_file_is_used(self, project: Path) -> None:
        (project / ".todorc.json").write_text(json.dumps({"tags": ["FIXME"]}))
        result = self.runner.invoke(cli, ["scan", str(project), "--json"])
        assert json.loads(result.output)["summary"]["by_tag"] == {"FIXME": 1}

    def test_invalid_config_exits_1(self, project: Path) -> None:
        (project / ".todorc.json").write_text(
            json.dumps({"tags": [{"name": "TODO", "priority": "someday"}]})
        )
        result = self.runner.invoke(cli, ["scan", str(project)])
        assert result.exit_code == 1
        assert "Config error" in result.output

    def test_unsafe_alias_exits_1(self, project: Path) -> None:
        (project / ".todorc.yaml").write_text("tags:\n  - name: TODO\n    aliases: ['TO DO']\n")
        result = self.runner.invoke(cli, ["scan", str(project)])
        assert result.exit_code == 1

    def test_missing_path_exits_1(self, tmp_path: Path) -> None:
        result = self.runner.invoke(cli, ["scan", str(tmp_path / "missing")])
        assert result.exit_code == 1

    def test_empty_directory(self, tmp_path: Path) -> None:
        result = self.runner.invoke(cli, ["scan", str(tmp_path)])
        assert result.exit_code == 0
        assert "No annotations found" in result.output

    def test_help(self) -> None:
        result = self.runner.invoke(cli, ["scan", "--help"])
        assert result.exit_code == 0
        assert "--json" in result.output


# ===========================================================================
# stats / tags / init / version
# ===========================================================================


class TestOtherCommands:
    def setup_method(self) -> None:
        self.runner = _make_runner()

    def test_stats(self, project: Path) -> None:
        result = self.runner.invoke(cli, ["stats", str(project)])
        assert result.exit_code == 0
        assert "FIXME" in result.output
        assert "critical" in result.output
        assert "Total:" in result.output

    def test_tags(self, tmp_path: Path) -> None:
        result = self.runner.invoke(cli, ["tags", str(tmp_path)])
        assert result.exit_code == 0
        for name in ("TODO", "FIXME", "BUG", "NOTE", "HACK"):
            assert name in result.output

    def test_tags_lists_configured_tag(self, tmp_path: Path) -> None:
        (tmp_path / ".todorc.json").write_text(
            json.dumps({"tags": [{"name": "SECURITY", "priority": "critical"}]})
        )
        result = self.runner.invoke(cli, ["tags", str(tmp_path)])
        assert result.exit_code == 0
        assert "SECURITY" in result.output

    def test_init_json(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = self.runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        data = json.loads((tmp_path / ".todorc.json").read_text())
        assert "TODO" in data["tags"]

    def test_init_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = self.runner.invoke(cli, ["init", "--format", "yaml"])
        assert result.exit_code == 0
        assert (tmp_path / ".todorc.yaml").is_file()

    def test_init_refuses_overwrite(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".todorc.json").write_text("{}")
        result = self.runner.invoke(cli, ["init"])
        assert result.exit_code == 1
        assert (tmp_path / ".todorc.json").read_text() == "{}"
        assert self.runner.invoke(cli, ["init", "--force"]).exit_code == 0

    def test_version(self, expected_version: str) -> None:
        result = self.runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert expected_version in result.output

    def test_tags_prints_bracketed_text_literally(self, tmp_path: Path) -> None:
        (tmp_path / ".todorc.yaml").write_text(
            "tags:\n"
            "  - name: TODO\n"
            "    description: '[/b] closes nothing'\n"
            "  - name: REVIEW\n"
            "    description: '[bold]not markup'\n"
        )
        result = self.runner.invoke(cli, ["tags", str(tmp_path)])
        assert result.exit_code == 0
        assert "[/b] closes nothing" in result.output
        assert "[bold]not markup" in result.output

    def test_config_error_with_brackets_exits_1(self, tmp_path: Path) -> None:
        (tmp_path / ".todorc.yaml").write_text("tags:\n  - name: TODO\n    aliases: ['[/b]']\n")
        result = self.runner.invoke(cli, ["scan", str(tmp_path)])
        assert result.exit_code == 1
        assert "Config error" in result.output
        assert "[/b]" in result.output

    def test_invalid_workers_in_config_exits_1(self, tmp_path: Path) -> None:
        (tmp_path / ".todorc.yaml").write_text("workers: many\n")
        result = self.runner.invoke(cli, ["scan", str(tmp_path)])
        assert result.exit_code == 1
        assert "workers" in result.output
