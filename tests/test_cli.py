"""Tests for importcost CLI entrypoints."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import importcost.main as main


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main, "setup_logging", lambda *a, **k: None)


def _project(tmp_path: Path) -> Path:
    installed = tmp_path / "node_modules" / "left-pad"
    installed.mkdir(parents=True)
    (installed / "package.json").write_text('{"name": "left-pad"}', encoding="utf-8")
    (installed / "index.js").write_text("module.exports = pad;\n", encoding="utf-8")
    (tmp_path / "util.js").write_text("module.exports = {};\n", encoding="utf-8")
    source = tmp_path / "index.js"
    source.write_text(
        "const pad = require('left-pad');\n"
        "const util = require('./util');\n"
        "import { b, a } from 'pkg';\n",
        encoding="utf-8",
    )
    return source


def test_main_without_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    """Verify that running without a subcommand shows usage and fails."""

    assert main.main([]) == 1
    assert "usage: importcost" in capsys.readouterr().out


def test_main_dispatches_extract_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Verify that `main` parses args and dispatches extract_command."""

    captured: dict[str, object] = {}

    def fake_extract_command(args) -> int:
        captured["args"] = args
        return 0

    monkeypatch.setattr(main, "extract_command", fake_extract_command)

    exit_code = main.main(["extract", str(tmp_path / "a.js"), "--json"])

    assert exit_code == 0
    parsed = captured["args"]
    assert parsed.files == [str(tmp_path / "a.js")]
    assert parsed.json is True


@pytest.mark.parametrize(
    "argv",
    [
        ["-v", "extract", "a.js"],
        ["extract", "-v", "a.js"],
        ["extract", "a.js", "--verbose"],
    ],
)
def test_verbose_flag_is_accepted_around_subcommand(
    monkeypatch: pytest.MonkeyPatch, argv: list[str]
) -> None:
    """Verify -v enables verbose logging before or after the subcommand."""

    levels: list[bool] = []
    monkeypatch.setattr(main, "setup_logging", lambda verbose=False, *a, **k: levels.append(verbose))
    monkeypatch.setattr(main, "extract_command", lambda args: 0)

    assert main.main(argv) == 0
    assert levels == [True]


def test_verbose_defaults_off(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify logging stays quiet without -v."""

    levels: list[bool] = []
    monkeypatch.setattr(main, "setup_logging", lambda verbose=False, *a, **k: levels.append(verbose))
    monkeypatch.setattr(main, "extract_command", lambda args: 0)

    assert main.main(["extract", "a.js"]) == 0
    assert levels == [False]


def test_extract_json_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure extract --json reports packages and rejected local specifiers."""

    source = _project(tmp_path)

    exit_code = main.main(["extract", str(source), "--json"])

    assert exit_code == 0
    reports = json.loads(capsys.readouterr().out)
    assert len(reports) == 1
    packages = reports[0]["packages"]
    assert [(p["name"], p["line"], p["kind"]) for p in packages] == [
        ("left-pad", 1, "require"),
        ("pkg", 3, "import"),
    ]
    assert packages[1]["snippet"] == "import {a, b} from 'pkg';\nconsole.log({a, b});"
    assert packages[0]["loc"] == {
        "start_line": 1,
        "start_column": 20,
        "end_line": 1,
        "end_column": 30,
    }
    assert reports[0]["rejected"] == [
        {"name": "./util", "line": 2, "reason": "local", "pattern": None}
    ]


def test_extract_applies_inline_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure ignore patterns from --config filter specifiers."""

    source = _project(tmp_path)

    exit_code = main.main(
        ["extract", str(source), "--json", "--config", '{"importCost": {"ignorePaths": ["^pkg$"]}}']
    )

    assert exit_code == 0
    reports = json.loads(capsys.readouterr().out)
    assert [p["name"] for p in reports[0]["packages"]] == ["left-pad"]
    assert reports[0]["rejected"][-1]["pattern"] == "^pkg$"


def test_extract_table_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure the default output renders a table of packages."""

    source = _project(tmp_path)

    assert main.main(["extract", str(source)]) == 0
    out = capsys.readouterr().out
    assert "left-pad" in out
    assert "skipped ./util" in out


def test_extract_reports_parse_errors(tmp_path: Path) -> None:
    """Ensure unparsable files produce a failing exit code."""

    broken = tmp_path / "broken.js"
    broken.write_text("import { from 'x'\n", encoding="utf-8")

    assert main.main(["extract", str(broken), "--json"]) == 1


def test_extract_rejects_unknown_file_types(tmp_path: Path) -> None:
    """Ensure files of no recognized dialect are skipped with a failure."""

    notes = tmp_path / "notes.txt"
    notes.write_text("import x from 'y';\n", encoding="utf-8")

    assert main.main(["extract", str(notes)]) == 1


def test_invalid_config_fails_cleanly(tmp_path: Path) -> None:
    """Ensure a bad configuration is reported instead of raising."""

    source = _project(tmp_path)

    assert main.main(["extract", str(source), "--config", '{"ignorePaths": ["("]}']) == 1


def test_watch_once_prints_costs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure watch --once processes the file and prints the package costs."""

    source = _project(tmp_path)

    assert main.main(["watch", str(source), "--once"]) == 0
    out = capsys.readouterr().out
    assert "left-pad:" in out
    assert "package is not installed" in out
    assert "done" in out


def test_watch_missing_file(tmp_path: Path) -> None:
    """Ensure watch fails for a file that does not exist."""

    assert main.main(["watch", str(tmp_path / "missing.js"), "--once"]) == 1
