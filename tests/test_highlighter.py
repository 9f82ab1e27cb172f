from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest

from sheet_differ.differ import compare_workbooks
from sheet_differ.extractors import extract
from sheet_differ.highlighter import clear_highlights, write_highlighted


def _rgb(ws, address: str) -> str:
    return ws[address].fill.fgColor.rgb


def test_write_highlighted_fills_by_change_type(excel_pair, tmp_path: Path) -> None:
    baseline, updated = excel_pair
    records = compare_workbooks(extract(baseline), extract(updated))
    out = tmp_path / "highlighted.xlsx"

    painted = write_highlighted(baseline, records, str(out))

    # everything except the sheet that only exists in the updated workbook
    assert painted == len(records) - 1
    wb = openpyxl.load_workbook(out)
    assert "Forecast" not in wb.sheetnames
    revenue = wb["Revenue"]
    assert _rgb(revenue, "C2").endswith("FFF3CD")
    assert _rgb(revenue, "A3").endswith("D4EDDA")
    assert _rgb(revenue, "D4").endswith("F8D7DA")
    assert revenue["A1"].fill.fill_type is None
    assert _rgb(wb["Archive"], "A1").endswith("F8D7DA")
    assert _rgb(wb["Notes"], "C3").endswith("FFF3CD")


def test_clear_highlights_removes_fills(excel_pair, tmp_path: Path) -> None:
    baseline, updated = excel_pair
    records = compare_workbooks(extract(baseline), extract(updated))
    painted = tmp_path / "painted.xlsx"
    cleared = tmp_path / "cleared.xlsx"
    write_highlighted(baseline, records, str(painted))

    clear_highlights(str(painted), str(cleared))

    wb = openpyxl.load_workbook(cleared)
    assert wb["Revenue"]["C2"].fill.fill_type is None
    assert wb["Notes"]["C3"].fill.fill_type is None


def test_highlight_requires_excel_baseline(csv_pair, tmp_path: Path) -> None:
    baseline, _ = csv_pair
    with pytest.raises(ValueError, match="Cannot highlight a '.csv' file"):
        write_highlighted(baseline, [], str(tmp_path / "out.xlsx"))
