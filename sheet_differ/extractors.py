"""
Workbook readers for Excel (.xlsx / .xlsm) and CSV files.

Each reader returns a `WorkbookData` holding one `SheetGrid` per worksheet,
trimmed to the sheet's used range, so the rest of the pipeline never touches
openpyxl objects.
"""

from __future__ import annotations

import csv
import logging
import os
from typing import List, Optional

import openpyxl
from openpyxl.worksheet.formula import ArrayFormula, DataTableFormula
from openpyxl.worksheet.worksheet import Worksheet

from .grid import Row, SheetGrid, WorkbookData

logger = logging.getLogger(__name__)


def _is_blank(value) -> bool:
    return value is None or value == ""


def _formula_text(value):
    """Plain formula text for array and data-table formula cells."""
    if isinstance(value, ArrayFormula):
        return value.text
    if isinstance(value, DataTableFormula):
        return f"=TABLE({value.r1 or ''},{value.r2 or ''})"
    return value


# ---------------------------------------------------------------------------
# Excel (.xlsx / .xlsm)
# ---------------------------------------------------------------------------

def _used_rows(ws: Worksheet) -> List[Row]:
    return [
        list(row)
        for row in ws.iter_rows(
            min_row=ws.min_row,
            max_row=ws.max_row,
            min_col=ws.min_column,
            max_col=ws.max_column,
            values_only=True,
        )
    ]


def _sheet_grid(ws_values: Worksheet, ws_formulas: Optional[Worksheet]) -> SheetGrid:
    values = _used_rows(ws_values)
    if all(_is_blank(c) for row in values for c in row):
        return SheetGrid()

    formulas: List[Row] = []
    if ws_formulas is not None:
        formulas = [[_formula_text(c) for c in row] for row in _used_rows(ws_formulas)]
    return SheetGrid(
        base_row_offset=ws_values.min_row - 1,
        base_col_offset=ws_values.min_column - 1,
        values=values,
        formulas=formulas,
    )


def extract_excel(path: str) -> WorkbookData:
    """
    Read every worksheet of an Excel workbook.

    The file is opened twice: once for cached values and once for formula
    text, so a formula cell carries both.
    """
    data = WorkbookData(filename=os.path.basename(path))
    wb_values = openpyxl.load_workbook(path, data_only=True)
    wb_formulas = openpyxl.load_workbook(path, data_only=False)
    try:
        for sheet_name in wb_values.sheetnames:
            ws = wb_values[sheet_name]
            if not isinstance(ws, Worksheet):
                # chartsheets have no cells
                continue
            data.sheet_names.append(sheet_name)
            data.sheets[sheet_name] = _sheet_grid(ws, wb_formulas[sheet_name])
            logger.debug(
                "%s!%s: %d row(s) from offset (%d, %d)",
                data.filename, sheet_name,
                data.sheets[sheet_name].row_count,
                data.sheets[sheet_name].base_row_offset,
                data.sheets[sheet_name].base_col_offset,
            )
    finally:
        wb_values.close()
        wb_formulas.close()
    return data


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def extract_csv(path: str) -> WorkbookData:
    """A CSV file is a workbook with one sheet named after the file."""
    sheet_name = os.path.splitext(os.path.basename(path))[0]
    with open(path, newline="", encoding="utf-8-sig") as fh:
        rows: List[Row] = [list(r) for r in csv.reader(fh)]

    grid = SheetGrid() if all(_is_blank(c) for r in rows for c in r) else SheetGrid(values=rows)
    return WorkbookData(
        filename=os.path.basename(path),
        sheet_names=[sheet_name],
        sheets={sheet_name: grid},
    )


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

SUPPORTED_EXTENSIONS = {
    ".xlsx": extract_excel,
    ".xlsm": extract_excel,
    ".csv": extract_csv,
}


def extract(path: str) -> WorkbookData:
    ext = os.path.splitext(path)[1].lower()
    extractor = SUPPORTED_EXTENSIONS.get(ext)
    if extractor is None:
        raise ValueError(
            f"Unsupported file type '{ext}'. "
            f"Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    logger.info("reading %s", path)
    return extractor(path)

