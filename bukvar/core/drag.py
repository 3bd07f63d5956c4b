"""Turn finished drag gestures into grid changes."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

from bukvar.audio.effects import Effect, SoundPlayer
from bukvar.core.grid import KEYBOARD_AREA, DragPayload, DropTarget, Origin, Tile
from bukvar.core.matching import matches

if TYPE_CHECKING:
    from bukvar.audio.speech import SpeechEngine
    from bukvar.core.session import Session


class MoveOutcome(Enum):
    REJECTED = "rejected"
    UNCHANGED = "unchanged"
    MOVED = "moved"
    MATCHED = "matched"


class DragResolver:
    """Placement rules for one session.

    Tiles dragged from the keyboard are new tiles and replace whatever sits
    in the target cell. Tiles dragged inside the grid keep their id; dropping
    on an occupied cell swaps the two tiles. Dropping a grid tile on the
    keyboard removes it.
    """

    def __init__(self, session: "Session", sounds: SoundPlayer, speech: "SpeechEngine") -> None:
        self._session = session
        self._sounds = sounds
        self._speech = speech

    def begin_move(self, payload: DragPayload) -> bool:
        if not self._session.accepts_input:
            return False
        self._speech.cancel()
        self._sounds.play(Effect.RUSTLE if payload.origin is Origin.GRID else Effect.GRAB)
        return True

    def end_move(self, payload: DragPayload, target: DropTarget) -> MoveOutcome:
        session = self._session
        if not session.accepts_input:
            return MoveOutcome.REJECTED
        changes = self.resolve(payload, target)
        if not changes:
            return MoveOutcome.UNCHANGED

        session.grid.apply(changes)
        self._sounds.play(Effect.DROP)
        session.move_count += 1
        if matches(session.grid, session.current_task.text):
            return MoveOutcome.MATCHED
        self._speech.speak(payload.char)
        return MoveOutcome.MOVED

    def resolve(self, payload: DragPayload, target: DropTarget) -> Dict[int, Optional[Tile]]:
        """Cell changes the gesture asks for; empty when it changes nothing."""
        grid = self._session.grid
        source = payload.source_index
        moving = self._grid_tile(payload)

        if target is None:
            return {}
        if target == KEYBOARD_AREA:
            if moving is not None:
                return {source: None}
            return {}
        if not grid.contains_index(target):
            return {}

        if payload.origin is Origin.KEYBOARD:
            return {target: Tile(self._session.tile_ids.next_id(), payload.char)}
        if moving is None or source == target:
            return {}
        return {target: moving, source: grid.get(target)}

    def _grid_tile(self, payload: DragPayload) -> Optional[Tile]:
        """The dragged grid tile, if its cell still holds the tile the drag started with."""
        if payload.origin is not Origin.GRID:
            return None
        grid = self._session.grid
        if not grid.contains_index(payload.source_index):
            return None
        tile = grid.get(payload.source_index)
        if tile is None or tile.id != payload.tile_id:
            return None
        return tile
