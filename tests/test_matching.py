"""Tests for bukvar.core.matching – contiguous target detection per row."""

from __future__ import annotations

import pytest

from bukvar.core.grid import GridState, Tile
from bukvar.core.matching import matches, normalize_target, row_text


def _grid(rows: list[str], cols: int = 5) -> GridState:
    """Build a grid from row strings; '_' marks an empty cell."""
    grid = GridState(cols, len(rows))
    next_id = 1
    for r, row in enumerate(rows):
        for c, char in enumerate(row):
            if char != "_":
                grid.set(r * cols + c, Tile(next_id, char))
                next_id += 1
    return grid


# ---------------------------------------------------------------------------
# normalize_target
# ---------------------------------------------------------------------------

class TestNormalizeTarget:
    def test_removes_boundary_marker(self):
        assert normalize_target("а-м") == "ам"

    def test_lowercases(self):
        assert normalize_target("МАМА") == "мама"

    def test_both(self):
        assert normalize_target("Съ-Е") == "съе"


# ---------------------------------------------------------------------------
# row_text
# ---------------------------------------------------------------------------

class TestRowText:
    def test_blanks_for_empty_cells(self):
        assert row_text(_grid(["с_к__"]), 0) == "с к  "

    def test_lowercases_tiles(self):
        assert row_text(_grid(["СОК__"]), 0) == "сок  "


# ---------------------------------------------------------------------------
# matches
# ---------------------------------------------------------------------------

class TestMatches:
    @pytest.mark.parametrize("target, expected", [("сок", True), ("ок", True), ("кос", False)])
    def test_row_with_trailing_blanks(self, target, expected):
        assert matches(_grid(["сок__"]), target) is expected

    def test_match_anywhere_in_row(self):
        assert matches(_grid(["__мак"]), "мак")

    def test_gap_breaks_match(self):
        assert not matches(_grid(["ма_к_"]), "мак")

    def test_uppercase_tiles_match(self):
        assert matches(_grid(["МАМА_"]), "мама")

    def test_boundary_marker_in_target(self):
        assert matches(_grid(["_ам__"]), "а-м")

    def test_second_row(self):
        assert matches(_grid(["_____", "__сом"]), "сом")

    def test_never_spans_rows(self):
        # "ма" ends row 0, "ма" starts row 1
        assert not matches(_grid(["___ма", "ма___"]), "мама")

    def test_empty_grid(self):
        assert not matches(_grid(["_____", "_____"]), "а")

    def test_empty_target_never_matches(self):
        assert not matches(_grid(["сок__"]), "")

    def test_target_longer_than_row(self):
        assert not matches(_grid(["сок__"]), "объявление")
