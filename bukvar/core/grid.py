"""Placement grid: tiles, drag payloads and the cell-to-tile store."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

GRID_COLS = 12
GRID_ROWS = 4

# Drop target identifier for the keyboard panel. Cell targets are plain ints.
KEYBOARD_AREA = "keyboard-area"

DropTarget = Union[int, str, None]


@dataclass(frozen=True)
class Tile:
    """A placed letter. ``id`` tells apart two tiles carrying the same char."""

    id: int
    char: str


class Origin(Enum):
    GRID = "grid"
    KEYBOARD = "keyboard"


@dataclass(frozen=True)
class DragPayload:
    """What is being dragged, alive only between the begin and end of a gesture."""

    origin: Origin
    char: str
    tile_id: Optional[int] = None
    source_index: Optional[int] = None


class TileIdAllocator:
    """Monotonic per-session id source for tiles taken from the keyboard."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        return next(self._counter)


class GridState:
    """Mapping of cell index to tile. A missing key means the cell is empty."""

    def __init__(self, cols: int = GRID_COLS, rows: int = GRID_ROWS) -> None:
        if cols <= 0 or rows <= 0:
            raise ValueError(f"grid must have positive size, got {cols}x{rows}")
        self._cols = cols
        self._rows = rows
        self._cells: Dict[int, Tile] = {}

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def size(self) -> int:
        return self._cols * self._rows

    def contains_index(self, index: object) -> bool:
        return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < self.size

    def get(self, index: int) -> Optional[Tile]:
        return self._cells.get(index)

    def set(self, index: int, tile: Optional[Tile]) -> None:
        self.apply({index: tile})

    def apply(self, changes: Mapping[int, Optional[Tile]]) -> None:
        """Apply a batch of cell updates at once, or none of them.

        Raises ``ValueError`` for an index outside the grid or when the
        result would hold the same tile id in two cells.
        """
        for index in changes:
            if not self.contains_index(index):
                raise ValueError(f"cell index out of range: {index!r}")
        updated = dict(self._cells)
        for index, tile in changes.items():
            if tile is None:
                updated.pop(index, None)
            else:
                updated[index] = tile
        seen: set[int] = set()
        for tile in updated.values():
            if tile.id in seen:
                raise ValueError(f"tile id {tile.id} would occupy two cells")
            seen.add(tile.id)
        self._cells = updated

    def clear(self) -> None:
        self._cells = {}

    def snapshot(self) -> Dict[int, Tile]:
        return dict(self._cells)

    def row(self, row: int) -> List[Optional[Tile]]:
        """Tiles of one row, left to right, with ``None`` for empty cells."""
        start = row * self._cols
        return [self._cells.get(i) for i in range(start, start + self._cols)]
