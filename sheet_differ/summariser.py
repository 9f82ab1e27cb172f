"""
Summary generator.

Produces a concise, neutral summary from a list of `ChangeRecord` values,
either as plain text grouped by sheet or as JSON.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .differ import ChangeRecord, ChangeType


def _cap(value: Any, limit: int = 120) -> str:
    if value is None or value == "":
        return "(empty)"
    text = str(value)
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


def count_by_type(records: List[ChangeRecord]) -> Dict[str, int]:
    counts = {change.value: 0 for change in ChangeType}
    for rec in records:
        counts[rec.type.value] += 1
    return counts


def headline(records: List[ChangeRecord]) -> str:
    counts = count_by_type(records)
    total = len(records)
    return (
        f"{total} change{'' if total == 1 else 's'} — "
        f"{counts['added']} added • {counts['deleted']} deleted • "
        f"{counts['modified']} modified"
    )


def summarise_plain(records: List[ChangeRecord]) -> str:
    if not records:
        return "No differences detected between the two workbooks."

    sections: Dict[str, List[str]] = {}
    for rec in records:
        bucket = sections.setdefault(rec.sheet, [])
        if rec.type == ChangeType.ADDED:
            bucket.append(f"  + ADDED    {rec.address}: {_cap(rec.new_val)}")
        elif rec.type == ChangeType.DELETED:
            bucket.append(f"  - DELETED  {rec.address}: {_cap(rec.old_val)}")
        else:
            bucket.append(
                f"  ~ MODIFIED {rec.address}:\n"
                f"      was: {_cap(rec.old_val)}\n"
                f"      now: {_cap(rec.new_val)}"
            )

    lines = [headline(records), "=" * 56]
    for sheet, items in sections.items():
        lines.append(f"\n[{sheet}]")
        lines.extend(items)
    return "\n".join(lines)


def summarise_json(records: List[ChangeRecord]) -> str:
    return json.dumps(
        {
            "total_changes": len(records),
            "counts": count_by_type(records),
            "changes": [rec.to_dict() for rec in records],
        },
        indent=2,
        default=str,
    )


def summarise(records: List[ChangeRecord], fmt: str = "plain") -> str:
    if fmt == "json":
        return summarise_json(records)
    return summarise_plain(records)
