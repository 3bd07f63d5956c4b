"""Game session state and the controller that drives it through its tasks.

The controller works like a single-threaded actor: gestures, button
presses and timer callbacks all become messages on one queue, and only the
queue's drain loop touches the session. Timed steps of the success
sequence carry the generation they were scheduled in, so steps left over
from a session that was exited or replaced are dropped instead of acting on
the new one.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, List, Optional, Protocol

from bukvar.audio.effects import Effect, SoundPlayer
from bukvar.audio.speech import SpeechEngine
from bukvar.core.content import ContentRepository, Task, draw_tasks
from bukvar.core.drag import DragResolver, MoveOutcome
from bukvar.core.grid import GRID_COLS, GRID_ROWS, DragPayload, DropTarget, GridState, TileIdAllocator
from bukvar.core.matching import normalize_target
from bukvar.core.progress import ProgressStore
from bukvar.core.scoring import star_rating

logger = logging.getLogger(__name__)

ANNOUNCE_DELAY_MS = 800
SPEECH_PAUSE_MS = 1000
SOUND_PAUSE_MS = 2000
ALLOWED_EXTRA_MOVES = 3


class Phase(Enum):
    IDLE = "idle"
    ANNOUNCING = "announcing"
    AWAITING_INPUT = "awaiting_input"
    PROCESSING_SUCCESS = "processing_success"
    FINISHED = "finished"
    ERROR = "error"


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None: ...


def is_failed_step(move_count: int, target_text: str) -> bool:
    """A step fails when it took more than three moves beyond the target's length."""
    return move_count > len(normalize_target(target_text)) + ALLOWED_EXTRA_MOVES


@dataclass
class Session:
    letter: str
    tasks: List[Task]
    grid: GridState = field(default_factory=GridState)
    tile_ids: TileIdAllocator = field(default_factory=TileIdAllocator)
    current_index: int = 0
    move_count: int = 0
    failed_steps_count: int = 0
    completed_flags: List[bool] = field(default_factory=list)
    locked: bool = False
    phase: Phase = Phase.IDLE
    stars: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.completed_flags:
            self.completed_flags = [False] * len(self.tasks)

    @property
    def current_task(self) -> Optional[Task]:
        if 0 <= self.current_index < len(self.tasks):
            return self.tasks[self.current_index]
        return None

    @property
    def accepts_input(self) -> bool:
        return not self.locked and self.phase in (Phase.ANNOUNCING, Phase.AWAITING_INPUT)

    @property
    def is_finished(self) -> bool:
        return self.phase is Phase.FINISHED


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Message:
    generation: int


@dataclass(frozen=True)
class Start(Message):
    letter: str


@dataclass(frozen=True)
class BeginMove(Message):
    payload: DragPayload


@dataclass(frozen=True)
class EndMove(Message):
    payload: DragPayload
    target: DropTarget


@dataclass(frozen=True)
class Reannounce(Message):
    pass


@dataclass(frozen=True)
class Announce(Message):
    task_index: int


@dataclass(frozen=True)
class CelebrateStep(Message):
    task_index: int


@dataclass(frozen=True)
class Advance(Message):
    task_index: int


@dataclass(frozen=True)
class Exit(Message):
    pass


class GameController:
    """Runs one letter's session at a time.

    Public methods only enqueue messages; handlers run in order on the
    caller's thread, and messages posted while a handler runs are handled
    right after it.
    """

    def __init__(
        self,
        content: ContentRepository,
        progress: ProgressStore,
        sounds: SoundPlayer,
        speech: SpeechEngine,
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
        grid_cols: int = GRID_COLS,
        grid_rows: int = GRID_ROWS,
    ) -> None:
        self._content = content
        self._progress = progress
        self._sounds = sounds
        self._speech = speech
        self._scheduler = scheduler
        self._rng = rng or random.Random()
        self._grid_cols = grid_cols
        self._grid_rows = grid_rows

        self._session: Optional[Session] = None
        self._resolver: Optional[DragResolver] = None
        self._generation = 0
        self._queue: Deque[Message] = deque()
        self._draining = False
        self._listeners: List[Callable[[Optional[Session]], None]] = []

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def generation(self) -> int:
        return self._generation

    def add_listener(self, callback: Callable[[Optional[Session]], None]) -> None:
        """Call ``callback`` with the current session after every handled message."""
        self._listeners.append(callback)

    # -- public API ---------------------------------------------------------

    def start(self, letter: str) -> None:
        self._generation += 1
        self._post(Start(self._generation, letter))

    def begin_move(self, payload: DragPayload) -> None:
        self._post(BeginMove(self._generation, payload))

    def end_move(self, payload: DragPayload, target: DropTarget) -> None:
        self._post(EndMove(self._generation, payload, target))

    def reannounce(self) -> None:
        self._post(Reannounce(self._generation))

    def exit(self) -> None:
        """Drop the session. Nothing is saved for an unfinished session."""
        self._generation += 1
        self._post(Exit(self._generation))

    # -- queue --------------------------------------------------------------

    def _post(self, message: Message) -> None:
        self._queue.append(message)
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                self._dispatch(self._queue.popleft())
        finally:
            self._draining = False

    def _schedule(self, delay_ms: int, message: Message) -> None:
        self._scheduler.call_later(delay_ms, lambda: self._post(message))

    def _dispatch(self, message: Message) -> None:
        if message.generation != self._generation:
            logger.debug("Dropping stale %s from generation %d", type(message).__name__, message.generation)
            return
        handler = self._handlers.get(type(message))
        if handler is None:
            return
        handler(self, message)
        for listener in list(self._listeners):
            listener(self._session)

    # -- handlers -----------------------------------------------------------

    def _on_start(self, message: Start) -> None:
        self._session = None
        self._resolver = None
        try:
            content = self._content.get(message.letter)
        except KeyError:
            logger.error("No content for letter %r", message.letter)
            self._session = Session(
                letter=message.letter,
                tasks=[],
                grid=GridState(self._grid_cols, self._grid_rows),
                phase=Phase.ERROR,
            )
            return

        session = Session(
            letter=message.letter,
            tasks=draw_tasks(content, self._rng),
            grid=GridState(self._grid_cols, self._grid_rows),
        )
        self._session = session
        self._resolver = DragResolver(session, self._sounds, self._speech)
        self._set_phase(Phase.ANNOUNCING)
        logger.info("Started session for %r: %s", session.letter, [t.text for t in session.tasks])
        self._schedule(ANNOUNCE_DELAY_MS, Announce(self._generation, 0))

    def _on_begin_move(self, message: BeginMove) -> None:
        if self._resolver is not None:
            self._resolver.begin_move(message.payload)

    def _on_end_move(self, message: EndMove) -> None:
        if self._resolver is None:
            return
        outcome = self._resolver.end_move(message.payload, message.target)
        if outcome is MoveOutcome.MATCHED:
            self._task_matched()

    def _on_reannounce(self, message: Reannounce) -> None:
        session = self._session
        if session is None or session.phase is not Phase.AWAITING_INPUT:
            return
        self._speech.announce_task(session.current_task)

    def _on_announce(self, message: Announce) -> None:
        session = self._session
        if session is None or session.phase is not Phase.ANNOUNCING:
            return
        if session.current_index != message.task_index:
            return
        self._announce_current()

    def _on_celebrate_step(self, message: CelebrateStep) -> None:
        session = self._session
        if session is None or session.phase is not Phase.PROCESSING_SUCCESS:
            return
        self._sounds.play(Effect.SUCCESS)
        session.completed_flags[message.task_index] = True
        self._schedule(SOUND_PAUSE_MS, Advance(self._generation, message.task_index))

    def _on_advance(self, message: Advance) -> None:
        session = self._session
        if session is None or session.phase is not Phase.PROCESSING_SUCCESS:
            return
        next_index = message.task_index + 1
        if next_index >= len(session.tasks):
            self._finalize()
            return
        session.grid.clear()
        session.move_count = 0
        session.current_index = next_index
        session.locked = False
        self._announce_current()

    def _on_exit(self, message: Exit) -> None:
        if self._session is not None:
            logger.info("Left session for %r without finishing", self._session.letter)
        self._speech.cancel()
        self._session = None
        self._resolver = None

    _handlers = {
        Start: _on_start,
        BeginMove: _on_begin_move,
        EndMove: _on_end_move,
        Reannounce: _on_reannounce,
        Announce: _on_announce,
        CelebrateStep: _on_celebrate_step,
        Advance: _on_advance,
        Exit: _on_exit,
    }

    # -- steps --------------------------------------------------------------

    def _announce_current(self) -> None:
        session = self._session
        self._set_phase(Phase.ANNOUNCING)
        self._speech.announce_task(session.current_task)
        self._set_phase(Phase.AWAITING_INPUT)

    def _task_matched(self) -> None:
        session = self._session
        task = session.current_task
        session.locked = True
        self._set_phase(Phase.PROCESSING_SUCCESS)
        if is_failed_step(session.move_count, task.text):
            session.failed_steps_count += 1
        logger.debug(
            "Task %d (%r) solved in %d moves, %d failed so far",
            session.current_index, task.text, session.move_count, session.failed_steps_count,
        )
        self._speech.speak(normalize_target(task.text))
        self._schedule(SPEECH_PAUSE_MS, CelebrateStep(self._generation, session.current_index))

    def _finalize(self) -> None:
        session = self._session
        session.stars = star_rating(session.failed_steps_count)
        self._progress.save_letter_score(session.letter, session.stars)
        self._sounds.play(Effect.FANFARE)
        self._set_phase(Phase.FINISHED)
        logger.info(
            "Finished %r with %d stars (%d failed steps)",
            session.letter, session.stars, session.failed_steps_count,
        )

    def _set_phase(self, phase: Phase) -> None:
        session = self._session
        if session.phase is not phase:
            logger.debug("Phase %s -> %s", session.phase.value, phase.value)
            session.phase = phase
