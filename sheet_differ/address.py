"""
A1-style cell addressing.

Rows and columns are zero-based everywhere inside the engine; only the
rendered address is one-based, the way a spreadsheet shows it.
"""

from __future__ import annotations


def column_label(zero_col: int) -> str:
    """Bijective base-26 label for a zero-based column (0 -> A, 26 -> AA)."""
    if zero_col < 0:
        raise ValueError(f"Column index must be non-negative, got {zero_col}")
    letters = ""
    col = zero_col
    while col >= 0:
        letters = chr(65 + col % 26) + letters
        col = col // 26 - 1
    return letters


def encode_cell(zero_row: int, zero_col: int) -> str:
    """Return the A1 address of a zero-based (row, col) pair."""
    if zero_row < 0:
        raise ValueError(f"Row index must be non-negative, got {zero_row}")
    return f"{column_label(zero_col)}{zero_row + 1}"
