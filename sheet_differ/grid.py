"""
In-memory sheet grids.

A `SheetGrid` is a rectangle of cell values cut out of a larger sheet.  The
offsets say where its top-left cell sits, so change records can carry
absolute coordinates.  ``formulas`` mirrors ``values``; where a formula cell
holds text starting with ``=`` that text is compared instead of the cached
value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .normalizer import is_formula

Row = List[Any]


class GridContractError(TypeError):
    """Raised when a grid handed to the engine is not a list of row lists."""


@dataclass
class SheetGrid:
    base_row_offset: int = 0
    base_col_offset: int = 0
    values: List[Row] = field(default_factory=list)
    formulas: List[Row] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.values)

    @property
    def col_count(self) -> int:
        widths = [len(r or ()) for r in self.values] + [len(r or ()) for r in self.formulas]
        return max(widths, default=0)

    def cell(self, row: int, col: int) -> Any:
        """Formula text if the cell holds one, otherwise its value, else ``""``."""
        formula = _at(self.formulas, row, col)
        if is_formula(formula):
            return formula
        value = _at(self.values, row, col)
        return "" if value is None else value

    def resolved_row(self, row: int) -> Row:
        return [self.cell(row, c) for c in range(self.col_count)]

    def resolved_rows(self) -> List[Row]:
        return [self.resolved_row(r) for r in range(self.row_count)]

    def rebased(self, row_offset: int, col_offset: int) -> "SheetGrid":
        """
        Return the same cells re-anchored at (*row_offset*, *col_offset*),
        padding with empty rows and columns in front.
        """
        if row_offset > self.base_row_offset or col_offset > self.base_col_offset:
            raise ValueError("Can only rebase a grid towards the sheet origin")
        pad_rows = self.base_row_offset - row_offset
        pad_cols = self.base_col_offset - col_offset

        def _pad(rows: List[Row]) -> List[Row]:
            return [[] for _ in range(pad_rows)] + [[None] * pad_cols + list(r or ()) for r in rows]

        return SheetGrid(
            base_row_offset=row_offset,
            base_col_offset=col_offset,
            values=_pad(self.values),
            formulas=_pad(self.formulas),
        )


@dataclass
class WorkbookData:
    filename: str
    sheet_names: List[str] = field(default_factory=list)
    sheets: Dict[str, SheetGrid] = field(default_factory=dict)


def _at(rows: Sequence[Row], row: int, col: int) -> Any:
    if row < len(rows):
        cells = rows[row]
        if cells is not None and col < len(cells):
            return cells[col]
    return None


def check_rows(rows: Any, what: str) -> None:
    """Fail fast unless *rows* is a list of lists (``None`` rows allowed)."""
    if not isinstance(rows, (list, tuple)):
        raise GridContractError(f"{what} must be a list of rows, got {type(rows).__name__}")
    for idx, row in enumerate(rows):
        if row is not None and not isinstance(row, (list, tuple)):
            raise GridContractError(
                f"{what}[{idx}] must be a list of cells, got {type(row).__name__}"
            )


def check_grid(grid: Any) -> None:
    if not isinstance(grid, SheetGrid):
        raise GridContractError(f"baseline must be a SheetGrid, got {type(grid).__name__}")
    for name in ("base_row_offset", "base_col_offset"):
        offset = getattr(grid, name)
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise GridContractError(f"{name} must be an int, got {type(offset).__name__}")
        if offset < 0:
            raise ValueError(f"{name} must be non-negative, got {offset}")
    check_rows(grid.values, "values")
    check_rows(grid.formulas, "formulas")
