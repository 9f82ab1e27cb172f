"""
Cell normalisation and row signatures.

Every comparison in the engine happens on normalised strings, so a cell read
as ``None`` from one file and as ``""`` from another compare equal, and the
same for ``1`` versus ``1.0``.  Raw values are kept only for reporting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

# Joins normalised cells into one row token; must not occur in cell text.
SEPARATOR = "\x01"

DEFAULT_MAX_ALIGNMENT_CELLS = 25_000_000


@dataclass(frozen=True)
class CompareOptions:
    trim: bool = False
    ignore_case: bool = False
    # Upper bound on baseline_rows * updated_rows; None disables the check.
    max_alignment_cells: Optional[int] = DEFAULT_MAX_ALIGNMENT_CELLS


def is_formula(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("=")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_cell(value: Any, options: Optional[CompareOptions] = None) -> str:
    """Canonical comparable text for a single cell value."""
    if value is None or value == "":
        return ""
    text = _stringify(value)
    if options is not None:
        if options.trim:
            text = text.strip()
        if options.ignore_case:
            text = text.lower()
    return text


def row_signature(row: Sequence[Any], options: Optional[CompareOptions] = None) -> str:
    """
    Reduce *row* to a single token.

    Trailing empty cells are dropped first, so a ragged row and the same row
    padded with blanks share a signature.
    """
    cells = [normalize_cell(c, options) for c in row]
    while cells and cells[-1] == "":
        cells.pop()
    return SEPARATOR.join(cells)
