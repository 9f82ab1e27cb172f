from __future__ import annotations

import json

from sheet_differ.differ import ChangeRecord, ChangeType
from sheet_differ.summariser import count_by_type, headline, summarise


def _rec(address: str, row: int, col: int, old, new, change: ChangeType, sheet: str = "S") -> ChangeRecord:
    return ChangeRecord(sheet=sheet, address=address, row=row, col=col, old_val=old, new_val=new, type=change)


RECORDS = [
    _rec("A1", 0, 0, "", "x", ChangeType.ADDED),
    _rec("B2", 1, 1, "old", "", ChangeType.DELETED),
    _rec("C3", 2, 2, 1, 2, ChangeType.MODIFIED, sheet="T"),
]


def test_counts_and_headline() -> None:
    assert count_by_type(RECORDS) == {"added": 1, "deleted": 1, "modified": 1}
    assert headline(RECORDS) == "3 changes — 1 added • 1 deleted • 1 modified"
    assert headline(RECORDS[:1]) == "1 change — 1 added • 0 deleted • 0 modified"


def test_plain_summary_groups_by_sheet() -> None:
    text = summarise(RECORDS)
    assert text.splitlines()[0] == headline(RECORDS)
    assert "[S]" in text and "[T]" in text
    assert "+ ADDED    A1: x" in text
    assert "- DELETED  B2: old" in text
    assert "was: 1" in text and "now: 2" in text


def test_plain_summary_without_changes() -> None:
    assert summarise([]) == "No differences detected between the two workbooks."


def test_json_summary() -> None:
    payload = json.loads(summarise(RECORDS, fmt="json"))
    assert payload["total_changes"] == 3
    assert payload["counts"]["modified"] == 1
    assert payload["changes"][2] == {
        "sheet": "T",
        "address": "C3",
        "row": 2,
        "col": 2,
        "old_val": 1,
        "new_val": 2,
        "type": "modified",
    }


def test_long_values_are_capped() -> None:
    text = summarise([_rec("A1", 0, 0, "", "y" * 500, ChangeType.ADDED)])
    assert "y" * 120 + "…" in text
    assert "y" * 121 not in text
