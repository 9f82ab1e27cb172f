"""
CLI entry-point for sheet-differ.

Usage
-----
    python -m sheet_differ.cli baseline.xlsx updated.xlsx
    python -m sheet_differ.cli baseline.xlsx updated.csv --format json --trim
    python -m sheet_differ.cli v1.xlsx v2.xlsx --highlight v1_highlighted.xlsx
    python -m sheet_differ.cli v1.xlsx v2.xlsx --llm openai
"""

from __future__ import annotations

import argparse
import logging
import sys
import zipfile

from openpyxl.utils.exceptions import InvalidFileException

from .differ import compare_workbooks
from .extractors import extract
from .highlighter import write_highlighted
from .normalizer import DEFAULT_MAX_ALIGNMENT_CELLS, CompareOptions
from .summariser import headline, summarise

logger = logging.getLogger(__name__)

_READ_ERRORS = (OSError, ValueError, InvalidFileException, zipfile.BadZipFile)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _max_cells(value: str) -> int | None:
    cells = int(value)
    if cells < 0:
        raise argparse.ArgumentTypeError("must be >= 0 (0 disables the limit)")
    return cells or None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheet-differ",
        description=(
            "Compare two versions of a workbook and list every changed cell, "
            "tolerating inserted and deleted rows."
        ),
    )
    parser.add_argument("baseline", help="Path to the original workbook (.xlsx, .xlsm, .csv)")
    parser.add_argument("updated", help="Path to the modified workbook (.xlsx, .xlsm, .csv)")
    parser.add_argument(
        "--trim",
        action="store_true",
        default=False,
        help="Ignore leading and trailing whitespace in cells",
    )
    parser.add_argument(
        "--ignore-case",
        action="store_true",
        default=False,
        help="Compare cell text case-insensitively",
    )
    parser.add_argument(
        "--format", "-f",
        choices=["plain", "json"],
        default="plain",
        help="Output format (default: plain)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the summary to a file instead of stdout",
    )
    parser.add_argument(
        "--highlight",
        default=None,
        metavar="PATH",
        help="Save a copy of the baseline with changed cells filled in",
    )
    parser.add_argument(
        "--max-cells",
        type=_max_cells,
        default=DEFAULT_MAX_ALIGNMENT_CELLS,
        help=(
            "Refuse to align sheets whose baseline_rows * updated_rows exceeds "
            f"this (default: {DEFAULT_MAX_ALIGNMENT_CELLS}, 0 for no limit)"
        ),
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity on stderr (default: WARNING)",
    )

    llm_group = parser.add_argument_group("LLM-narrated summary")
    llm_group.add_argument(
        "--llm",
        choices=["openai", "anthropic"],
        default=None,
        help="Send the change list to an LLM for a narrated summary",
    )
    llm_group.add_argument(
        "--llm-model",
        default=None,
        help="Override the default model for the chosen provider",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    options = CompareOptions(
        trim=args.trim,
        ignore_case=args.ignore_case,
        max_alignment_cells=args.max_cells,
    )

    try:
        baseline = extract(args.baseline)
        updated = extract(args.updated)
        records = compare_workbooks(baseline, updated, options)
        if args.highlight:
            write_highlighted(args.baseline, records, args.highlight)
    except _READ_ERRORS as exc:
        logger.debug("comparison failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logger.info(headline(records))

    if args.llm:
        from .llm_analyser import analyse_with_llm
        summary = analyse_with_llm(records, provider=args.llm, model=args.llm_model)
    else:
        summary = summarise(records, fmt=args.format)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(summary)
        print(f"Summary written to {args.output}", file=sys.stderr)
    else:
        print(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
