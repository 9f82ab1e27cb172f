"""
Row alignment.

``align`` finds a longest common subsequence between two token sequences
and returns the matched index pairs.  ``edit_script`` turns those pairs into
a total script that visits every index of both sequences exactly once, which
is what the sheet walker consumes.

Tie-break: when skipping either side keeps the LCS length, the baseline side
is skipped first.  A changed row therefore always shows up as a delete
followed by an insert, never the other way round.

Cost is O(n*m) time and memory.  Callers bound it with ``max_cells``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

MATCH = "match"
DELETE = "delete"
INSERT = "insert"


class AlignmentTooLargeError(ValueError):
    """The LCS table for the two sequences would exceed the configured size."""


@dataclass(frozen=True)
class Edit:
    op: str
    a_index: Optional[int] = None
    b_index: Optional[int] = None


def _lcs_table(a: Sequence[str], b: Sequence[str]) -> List[List[int]]:
    n, m = len(a), len(b)
    dp = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = dp[i], dp[i + 1]
        ai = a[i]
        for j in range(m - 1, -1, -1):
            if ai == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = below[j] if below[j] >= row[j + 1] else row[j + 1]
    return dp


def align(
    a: Sequence[str],
    b: Sequence[str],
    max_cells: Optional[int] = None,
) -> List[Tuple[int, int]]:
    """Return LCS index pairs ``(i, j)``, strictly increasing on both sides."""
    n, m = len(a), len(b)
    if max_cells is not None and n * m > max_cells:
        raise AlignmentTooLargeError(
            f"Aligning {n} x {m} rows needs {n * m} table cells, "
            f"above the limit of {max_cells}"
        )

    dp = _lcs_table(a, b)
    pairs: List[Tuple[int, int]] = []
    i = j = 0
    while i < n and j < m:
        if a[i] == b[j]:
            pairs.append((i, j))
            i += 1
            j += 1
        elif dp[i + 1][j] >= dp[i][j + 1]:
            i += 1
        else:
            j += 1

    logger.debug("aligned %d x %d rows, %d matched", n, m, len(pairs))
    return pairs


def edit_script(n: int, m: int, pairs: Sequence[Tuple[int, int]]) -> List[Edit]:
    """
    Expand matched *pairs* over sequences of length *n* and *m* into a
    complete list of match/delete/insert edits.

    Between two matches, all deletes come before all inserts.
    """
    edits: List[Edit] = []
    i = j = 0

    def _gap(stop_i: int, stop_j: int) -> None:
        nonlocal i, j
        while i < stop_i:
            edits.append(Edit(DELETE, a_index=i))
            i += 1
        while j < stop_j:
            edits.append(Edit(INSERT, b_index=j))
            j += 1

    for pi, pj in pairs:
        if not (i <= pi < n and j <= pj < m):
            raise ValueError(
                f"Matched pair {(pi, pj)} is out of order or out of bounds"
            )
        _gap(pi, pj)
        edits.append(Edit(MATCH, a_index=pi, b_index=pj))
        i, j = pi + 1, pj + 1

    _gap(n, m)
    return edits
