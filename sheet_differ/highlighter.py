"""
Write a copy of the baseline workbook with changed cells filled in.

Colours come from `differ.COLORS`.  Records for sheets that only exist in the
updated workbook have nowhere to go and are skipped.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, List

import openpyxl
from openpyxl.styles import PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from .differ import COLORS, ChangeRecord, ChangeType

logger = logging.getLogger(__name__)

_EXCEL_EXTENSIONS = (".xlsx", ".xlsm")


def _fill(change: ChangeType) -> PatternFill:
    rgb = COLORS[change].lstrip("#").upper()
    return PatternFill(start_color=rgb, end_color=rgb, fill_type="solid")


def _open(path: str) -> openpyxl.Workbook:
    ext = os.path.splitext(path)[1].lower()
    if ext not in _EXCEL_EXTENSIONS:
        raise ValueError(
            f"Cannot highlight a '{ext}' file. "
            f"Supported: {', '.join(_EXCEL_EXTENSIONS)}"
        )
    return openpyxl.load_workbook(path, keep_vba=ext == ".xlsm")


def write_highlighted(
    baseline_path: str,
    records: Iterable[ChangeRecord],
    out_path: str,
) -> int:
    """
    Fill every changed cell of *baseline_path* and save the result to
    *out_path*.  Returns the number of cells filled.
    """
    wb = _open(baseline_path)
    by_sheet: Dict[str, List[ChangeRecord]] = {}
    for rec in records:
        by_sheet.setdefault(rec.sheet, []).append(rec)

    fills = {change: _fill(change) for change in ChangeType}
    painted = 0
    for sheet_name, sheet_records in by_sheet.items():
        if sheet_name not in wb.sheetnames or not isinstance(wb[sheet_name], Worksheet):
            logger.debug("skipping %d record(s) for sheet %r", len(sheet_records), sheet_name)
            continue
        ws = wb[sheet_name]
        for rec in sheet_records:
            ws.cell(row=rec.row + 1, column=rec.col + 1).fill = fills[rec.type]
            painted += 1

    wb.save(out_path)
    logger.info("highlighted %d cell(s) into %s", painted, out_path)
    return painted


def clear_highlights(path: str, out_path: str) -> None:
    """Remove solid fills from every used cell of every worksheet."""
    wb = _open(path)
    for ws in wb.worksheets:
        for row in ws.iter_rows():
            for cell in row:
                if cell.fill is not None and cell.fill.fill_type == "solid":
                    cell.fill = PatternFill(fill_type=None)
    wb.save(out_path)
