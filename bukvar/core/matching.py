"""Detect a target syllable or word spelled out inside a single grid row."""

from __future__ import annotations

from bukvar.core.grid import GridState

BOUNDARY_MARKER = "-"
BLANK = " "


def normalize_target(text: str) -> str:
    """Drop syllable boundary markers and lowercase: ``"А-м"`` -> ``"ам"``."""
    return text.replace(BOUNDARY_MARKER, "").lower()


def row_text(grid: GridState, row: int) -> str:
    """Render one row left to right, blanks standing in for empty cells."""
    return "".join(tile.char.lower() if tile else BLANK for tile in grid.row(row))


def matches(grid: GridState, target_text: str) -> bool:
    """Return True if some row holds the normalized target as a contiguous run.

    Rows are scanned independently, so a word never continues from the end
    of one row onto the start of the next.
    """
    target = normalize_target(target_text)
    if not target:
        return False
    return any(target in row_text(grid, row) for row in range(grid.rows))
