from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.dirname(__file__))

from create_fixtures import make_csv, make_excel  # noqa: E402


@pytest.fixture
def excel_pair(tmp_path: Path) -> tuple[str, str]:
    """Baseline and updated .xlsx files with known edits."""
    return make_excel(str(tmp_path))


@pytest.fixture
def csv_pair(tmp_path: Path) -> tuple[str, str]:
    """Two single-sheet CSV files sharing the sheet name ``people``."""
    return make_csv(str(tmp_path))
