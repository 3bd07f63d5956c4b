"""Tests for bukvar.core.drag – placement, swap and removal rules."""

from __future__ import annotations

import pytest

from bukvar.audio.effects import Effect
from bukvar.core.content import Task, TaskKind
from bukvar.core.drag import DragResolver, MoveOutcome
from bukvar.core.grid import KEYBOARD_AREA, DragPayload, GridState, Origin, Tile
from bukvar.core.session import Phase, Session


@pytest.fixture()
def session() -> Session:
    return Session(
        letter="А",
        tasks=[Task("мак", TaskKind.WORD)],
        grid=GridState(5, 2),
        phase=Phase.AWAITING_INPUT,
    )


@pytest.fixture()
def resolver(session, sounds, speech) -> DragResolver:
    return DragResolver(session, sounds, speech)


def _key(char: str) -> DragPayload:
    return DragPayload(Origin.KEYBOARD, char)


def _from_cell(session: Session, index: int) -> DragPayload:
    tile = session.grid.get(index)
    return DragPayload(Origin.GRID, tile.char, tile.id, index)


# ---------------------------------------------------------------------------
# begin_move
# ---------------------------------------------------------------------------

class TestBeginMove:
    def test_grab_sound_from_keyboard(self, resolver, sounds):
        assert resolver.begin_move(_key("м"))
        assert sounds.played == [Effect.GRAB]

    def test_rustle_sound_from_grid(self, resolver, session, sounds):
        session.grid.set(0, Tile(1, "м"))
        assert resolver.begin_move(_from_cell(session, 0))
        assert sounds.played == [Effect.RUSTLE]

    def test_cancels_speech(self, resolver, speech_backend):
        resolver.begin_move(_key("м"))
        assert speech_backend.cancel_count == 1

    def test_rejected_when_locked(self, resolver, session, sounds):
        session.locked = True
        assert not resolver.begin_move(_key("м"))
        assert sounds.played == []

    def test_rejected_when_finished(self, resolver, session, sounds):
        session.phase = Phase.FINISHED
        assert not resolver.begin_move(_key("м"))
        assert sounds.played == []


# ---------------------------------------------------------------------------
# end_move – keyboard origin
# ---------------------------------------------------------------------------

class TestKeyboardDrop:
    def test_places_new_tile(self, resolver, session):
        assert resolver.end_move(_key("м"), 3) is MoveOutcome.MOVED
        assert session.grid.get(3).char == "м"
        assert session.move_count == 1

    def test_each_placement_gets_fresh_id(self, resolver, session):
        resolver.end_move(_key("а"), 0)
        resolver.end_move(_key("а"), 1)
        assert session.grid.get(0).id != session.grid.get(1).id

    def test_replaces_existing_tile(self, resolver, session):
        resolver.end_move(_key("а"), 0)
        old_id = session.grid.get(0).id
        resolver.end_move(_key("о"), 0)
        tile = session.grid.get(0)
        assert tile.char == "о"
        assert tile.id != old_id
        assert list(session.grid.snapshot()) == [0]

    def test_dropped_back_on_keyboard_is_noop(self, resolver, session, sounds):
        assert resolver.end_move(_key("а"), KEYBOARD_AREA) is MoveOutcome.UNCHANGED
        assert session.move_count == 0
        assert sounds.played == []

    def test_drop_and_feedback_on_change(self, resolver, sounds, speech_backend):
        resolver.end_move(_key("К"), 2)
        assert sounds.played == [Effect.DROP]
        assert speech_backend.texts == ["к"]


# ---------------------------------------------------------------------------
# end_move – grid origin
# ---------------------------------------------------------------------------

class TestGridDrop:
    def test_move_to_empty_cell_keeps_id(self, resolver, session):
        session.grid.set(0, Tile(7, "м"))
        assert resolver.end_move(_from_cell(session, 0), 4) is MoveOutcome.MOVED
        assert session.grid.get(0) is None
        assert session.grid.get(4) == Tile(7, "м")

    def test_swap_with_occupied_cell(self, resolver, session):
        a, b, c = Tile(1, "а"), Tile(2, "б"), Tile(3, "в")
        session.grid.apply({0: a, 6: b, 9: c})
        resolver.end_move(_from_cell(session, 0), 6)
        assert session.grid.snapshot() == {0: b, 6: a, 9: c}
        assert session.move_count == 1

    def test_same_cell_is_noop(self, resolver, session, sounds):
        session.grid.set(2, Tile(1, "а"))
        assert resolver.end_move(_from_cell(session, 2), 2) is MoveOutcome.UNCHANGED
        assert session.move_count == 0
        assert sounds.played == []

    def test_drop_on_keyboard_removes(self, resolver, session):
        session.grid.set(2, Tile(1, "а"))
        assert resolver.end_move(_from_cell(session, 2), KEYBOARD_AREA) is MoveOutcome.MOVED
        assert session.grid.snapshot() == {}
        assert session.move_count == 1

    def test_cancelled_gesture(self, resolver, session):
        session.grid.set(2, Tile(1, "а"))
        assert resolver.end_move(_from_cell(session, 2), None) is MoveOutcome.UNCHANGED
        assert session.grid.get(2) == Tile(1, "а")

    def test_stale_source_is_noop(self, resolver, session):
        payload = DragPayload(Origin.GRID, "а", 1, 3)
        assert resolver.end_move(payload, 4) is MoveOutcome.UNCHANGED

    def test_replaced_source_tile_is_noop(self, resolver, session):
        session.grid.set(3, Tile(1, "а"))
        payload = _from_cell(session, 3)
        session.grid.apply({3: Tile(2, "о")})
        assert resolver.end_move(payload, 4) is MoveOutcome.UNCHANGED
        assert resolver.end_move(payload, KEYBOARD_AREA) is MoveOutcome.UNCHANGED
        assert session.grid.snapshot() == {3: Tile(2, "о")}
        assert session.move_count == 0

    def test_missing_source_index_is_noop(self, resolver, session):
        payload = DragPayload(Origin.GRID, "а", 1, None)
        assert resolver.end_move(payload, KEYBOARD_AREA) is MoveOutcome.UNCHANGED

    def test_unknown_target_is_noop(self, resolver, session):
        assert resolver.end_move(_key("а"), 99) is MoveOutcome.UNCHANGED
        assert resolver.end_move(_key("а"), "elsewhere") is MoveOutcome.UNCHANGED


# ---------------------------------------------------------------------------
# end_move – locking and matching
# ---------------------------------------------------------------------------

class TestEndMoveOutcome:
    def test_rejected_while_locked(self, resolver, session):
        session.locked = True
        assert resolver.end_move(_key("м"), 0) is MoveOutcome.REJECTED
        assert session.grid.snapshot() == {}
        assert session.move_count == 0

    def test_match_reported_without_letter_feedback(self, resolver, session, speech_backend):
        resolver.end_move(_key("м"), 5)
        resolver.end_move(_key("а"), 6)
        assert resolver.end_move(_key("к"), 7) is MoveOutcome.MATCHED
        assert speech_backend.texts == ["м", "а"]
        assert session.move_count == 3
