"""
Sheet diff engine.

Compares a baseline `SheetGrid` with the updated rows of the same sheet and
produces one `ChangeRecord` per differing cell.  The comparison is purely
mechanical:

* **Rows** are reduced to signatures and aligned with an LCS, so inserting or
  deleting a row does not turn every row below it into a modification.
* **Gaps** between aligned rows are paired positionally; each pair is
  compared cell by cell, surplus rows become whole-row additions or deletions.
* **Cells** are compared on their normalised text.  A baseline formula is
  compared as its formula text, never as its cached result.

No state survives a call; sheets can be diffed independently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .address import encode_cell
from .aligner import MATCH, DELETE, Edit, align, edit_script
from .grid import Row, SheetGrid, WorkbookData, check_grid, check_rows
from .normalizer import CompareOptions, normalize_cell, row_signature

logger = logging.getLogger(__name__)


class ChangeType(Enum):
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"


# Fill colours the highlighter applies per change type.
COLORS: Dict[ChangeType, str] = {
    ChangeType.ADDED: "#d4edda",
    ChangeType.DELETED: "#f8d7da",
    ChangeType.MODIFIED: "#fff3cd",
}


@dataclass(frozen=True)
class ChangeRecord:
    sheet: str
    address: str
    row: int
    col: int
    old_val: Any
    new_val: Any
    type: ChangeType

    def to_dict(self) -> dict:
        return {
            "sheet": self.sheet,
            "address": self.address,
            "row": self.row,
            "col": self.col,
            "old_val": self.old_val,
            "new_val": self.new_val,
            "type": self.type.value,
        }


@dataclass
class SheetSetDiff:
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Cell and row classification
# ---------------------------------------------------------------------------

@dataclass
class _SheetContext:
    sheet: str
    baseline: SheetGrid
    updated: List[Row]
    options: CompareOptions
    col_count: int
    records: List[ChangeRecord] = field(default_factory=list)

    def emit(self, row: int, col: int, old: Any, new: Any, change: ChangeType) -> None:
        abs_row = row + self.baseline.base_row_offset
        abs_col = col + self.baseline.base_col_offset
        self.records.append(ChangeRecord(
            sheet=self.sheet,
            address=encode_cell(abs_row, abs_col),
            row=abs_row,
            col=abs_col,
            old_val=old,
            new_val=new,
            type=change,
        ))


def _updated_row(ctx: _SheetContext, index: int) -> Row:
    return list(ctx.updated[index] or [])


def _updated_cell(row: Row, col: int) -> Any:
    if col < len(row) and row[col] is not None:
        return row[col]
    return ""


def _classify(old_norm: str, new_norm: str) -> ChangeType:
    if old_norm == "":
        return ChangeType.ADDED
    if new_norm == "":
        return ChangeType.DELETED
    return ChangeType.MODIFIED


def _compare_rows(ctx: _SheetContext, a_index: int, b_index: int) -> None:
    new_row = _updated_row(ctx, b_index)
    for col in range(max(ctx.col_count, len(new_row))):
        old = ctx.baseline.cell(a_index, col)
        new = _updated_cell(new_row, col)
        old_norm = normalize_cell(old, ctx.options)
        new_norm = normalize_cell(new, ctx.options)
        if old_norm != new_norm:
            ctx.emit(a_index, col, old, new, _classify(old_norm, new_norm))


def _row_deleted(ctx: _SheetContext, a_index: int) -> None:
    for col in range(ctx.col_count):
        old = ctx.baseline.cell(a_index, col)
        if normalize_cell(old, ctx.options) != "":
            ctx.emit(a_index, col, old, "", ChangeType.DELETED)


def _row_added(ctx: _SheetContext, at_row: int, b_index: int) -> None:
    new_row = _updated_row(ctx, b_index)
    for col, new in enumerate(new_row):
        if normalize_cell(new, ctx.options) != "":
            ctx.emit(at_row, col, "", new, ChangeType.ADDED)


def _walk(ctx: _SheetContext, edits: Sequence[Edit]) -> None:
    # next baseline row not yet consumed; inserted rows are addressed from here
    p1 = 0
    idx = 0
    while idx < len(edits):
        edit = edits[idx]
        if edit.op == MATCH:
            _compare_rows(ctx, edit.a_index, edit.b_index)
            p1 = edit.a_index + 1
            idx += 1
            continue

        deleted: List[int] = []
        inserted: List[int] = []
        while idx < len(edits) and edits[idx].op != MATCH:
            if edits[idx].op == DELETE:
                deleted.append(edits[idx].a_index)
            else:
                inserted.append(edits[idx].b_index)
            idx += 1

        for a_index, b_index in zip(deleted, inserted):
            _compare_rows(ctx, a_index, b_index)
        for a_index in deleted[len(inserted):]:
            _row_deleted(ctx, a_index)
        if deleted:
            p1 = deleted[-1] + 1
        # Surplus inserts shift down over the rows that follow.  When they
        # outnumber the matched rows before the next reported row, an address
        # can be shared with that row's record.
        for shift, b_index in enumerate(inserted[len(deleted):]):
            _row_added(ctx, p1 + shift, b_index)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def diff_sheet(
    sheet_name: str,
    baseline: SheetGrid,
    updated: List[Row],
    options: Optional[CompareOptions] = None,
) -> List[ChangeRecord]:
    """Return the cell-level differences between *baseline* and *updated*."""
    if not isinstance(sheet_name, str):
        raise TypeError(f"sheet_name must be a str, got {type(sheet_name).__name__}")
    check_grid(baseline)
    check_rows(updated, "updated")
    options = options or CompareOptions()

    ctx = _SheetContext(
        sheet=sheet_name,
        baseline=baseline,
        updated=list(updated),
        options=options,
        col_count=baseline.col_count,
    )

    base_sigs = [
        row_signature(baseline.resolved_row(r), options)
        for r in range(baseline.row_count)
    ]
    new_sigs = [row_signature(row or [], options) for row in ctx.updated]

    pairs = align(base_sigs, new_sigs, max_cells=options.max_alignment_cells)
    _walk(ctx, edit_script(len(base_sigs), len(new_sigs), pairs))

    logger.debug(
        "sheet %r: %d baseline rows, %d updated rows, %d change(s)",
        sheet_name, len(base_sigs), len(new_sigs), len(ctx.records),
    )
    return ctx.records


def diff_sheet_sets(
    baseline_names: Iterable[str],
    updated_names: Iterable[str],
) -> SheetSetDiff:
    """Sheets present on only one side, each list in its source's order."""
    baseline_names = list(baseline_names)
    updated_names = list(updated_names)
    base_set, new_set = set(baseline_names), set(updated_names)
    return SheetSetDiff(
        added=[n for n in updated_names if n not in base_set],
        removed=[n for n in baseline_names if n not in new_set],
    )


def compare_workbooks(
    baseline: WorkbookData,
    updated: WorkbookData,
    options: Optional[CompareOptions] = None,
) -> List[ChangeRecord]:
    """
    Diff every sheet of two workbooks.

    Added and removed sheets come first as one record each, anchored at A1.
    Sheets present on both sides follow, in the updated workbook's order.
    """
    options = options or CompareOptions()
    sheets = diff_sheet_sets(baseline.sheet_names, updated.sheet_names)
    records: List[ChangeRecord] = []

    for name in sheets.added:
        records.append(ChangeRecord(
            sheet=name, address="A1", row=0, col=0,
            old_val="", new_val=f'Sheet "{name}" added', type=ChangeType.ADDED,
        ))
    for name in sheets.removed:
        records.append(ChangeRecord(
            sheet=name, address="A1", row=0, col=0,
            old_val=f'Sheet "{name}" removed', new_val="", type=ChangeType.DELETED,
        ))

    baseline_set = set(baseline.sheet_names)
    common = [n for n in updated.sheet_names if n in baseline_set]
    logger.info(
        "comparing %d common sheet(s); %d added, %d removed",
        len(common), len(sheets.added), len(sheets.removed),
    )
    for name in common:
        old_grid = baseline.sheets.get(name) or SheetGrid()
        new_grid = updated.sheets.get(name) or SheetGrid()
        row_origin = min(old_grid.base_row_offset, new_grid.base_row_offset)
        col_origin = min(old_grid.base_col_offset, new_grid.base_col_offset)
        records.extend(diff_sheet(
            name,
            old_grid.rebased(row_origin, col_origin),
            new_grid.rebased(row_origin, col_origin).resolved_rows(),
            options,
        ))

    return records
