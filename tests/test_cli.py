from __future__ import annotations

import json
from pathlib import Path

import pytest
from pytest import MonkeyPatch

from scopelens import cli
from scopelens.api import ExtractOptions, extract_file
from scopelens.history import HistoryStore

GRID = [
    ["Milestone", "Title", "Hours", "Price"],
    ["M1", "Design", "10", "$500"],
    ["M2", "Build", "20", "1,200"],
]


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("SCOPELENS_CONFIG", "SCOPELENS_AI_ENABLED", "SCOPELENS_HISTORY_FILE", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)


def test_extract_json_and_history(xlsx_factory, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = xlsx_factory("plan.xlsx", GRID)
    history_file = tmp_path / "history.json"

    exit_code = cli.main(
        ["--history-file", str(history_file), "extract", str(path), "--json", "--save", "--sort", "price"]
    )

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["fileName"] == "plan.xlsx"
    assert [m["milestone"] for m in payload["milestones"]] == ["M2", "M1"]
    assert payload["totalBallpark"] == {"hours": 30.0, "price": 1700.0}

    (entry,) = HistoryStore(history_file).list()
    assert cli.main(["--history-file", str(history_file), "history", "list"]) == 0
    assert entry.id in capsys.readouterr().out

    assert cli.main(["--history-file", str(history_file), "history", "delete", entry.id]) == 0
    assert HistoryStore(history_file).list() == []


def test_extract_summary_with_search(xlsx_factory, capsys: pytest.CaptureFixture[str]) -> None:
    path = xlsx_factory("plan.xlsx", GRID)

    assert cli.main(["extract", str(path), "--search", "build"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("plan.xlsx: 2 milestone(s), 30.0 hours, $1,700.00.")
    assert "Build" in out


def test_unsupported_and_missing_files(tmp_path: Path) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("hello", encoding="utf-8")

    assert cli.main(["extract", str(notes)]) == 1
    assert cli.main(["extract", str(tmp_path / "absent.pdf")]) == 1


def test_history_show_unknown_entry(tmp_path: Path) -> None:
    history_file = tmp_path / "history.json"

    assert cli.main(["--history-file", str(history_file), "history", "show", "project-0-missing"]) == 1
    assert cli.main(["--history-file", str(history_file), "history", "show"]) == 2


def test_extract_file_saves_when_requested(xlsx_factory, scope_config) -> None:
    path = xlsx_factory("plan.xlsx", GRID)

    project = extract_file(path, ExtractOptions(save_to_history=True, config=scope_config))

    (entry,) = HistoryStore(scope_config.history.path).list()
    assert entry.project == project
    assert scope_config.ai.enabled is False
