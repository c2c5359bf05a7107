# src/viewer_core/search.py
"""Case-insensitive search over flattened tag rows."""
from __future__ import annotations

from typing import List, Sequence

from .tags import DisplayRow


def row_matches(row: DisplayRow, needle: str) -> bool:
    """True if the lower-cased needle occurs in the row's name or value."""
    needle = needle.lower()
    return needle in str(row.name or '').lower() or needle in str(row.value or '').lower()


def filter_rows(rows: Sequence[DisplayRow], needle: str) -> List[DisplayRow]:
    """
    Keep rows whose name or value contains `needle`, ignoring case.

    An empty needle keeps every row, in order. The input is not modified.
    """
    if not needle:
        return list(rows)
    return [row for row in rows if row_matches(row, needle)]
