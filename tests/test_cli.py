from __future__ import annotations

import json
from pathlib import Path

import openpyxl
import pytest

from sheet_differ.cli import main


def test_cli_json_output_to_file(excel_pair, tmp_path: Path) -> None:
    baseline, updated = excel_pair
    out = tmp_path / "diff.json"

    assert main([baseline, updated, "--format", "json", "--output", str(out)]) == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["total_changes"] == 13
    assert payload["counts"] == {"added": 5, "deleted": 5, "modified": 3}


def test_cli_plain_output_and_highlight(
    excel_pair, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    baseline, updated = excel_pair
    highlighted = tmp_path / "hl.xlsx"

    assert main([baseline, updated, "--highlight", str(highlighted)]) == 0

    out = capsys.readouterr().out
    assert out.startswith("13 changes — 5 added • 5 deleted • 3 modified")
    assert "[Revenue]" in out
    assert openpyxl.load_workbook(highlighted)["Revenue"]["C2"].fill.fill_type == "solid"


def test_cli_options_reach_the_engine(csv_pair, capsys: pytest.CaptureFixture[str]) -> None:
    baseline, updated = csv_pair
    assert main([baseline, updated, "--trim", "--ignore-case", "-f", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [c["address"] for c in payload["changes"]] == ["A4"]


def test_cli_alignment_limit(csv_pair, capsys: pytest.CaptureFixture[str]) -> None:
    baseline, updated = csv_pair
    assert main([baseline, updated, "--max-cells", "2"]) == 2
    assert "above the limit" in capsys.readouterr().err


def test_cli_unsupported_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(tmp_path / "a.ods"), str(tmp_path / "b.ods")]) == 2
    assert "Unsupported file type" in capsys.readouterr().err


def test_cli_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(tmp_path / "missing.xlsx"), str(tmp_path / "other.xlsx")]) == 2
    assert capsys.readouterr().err.startswith("error:")
