"""Shared fakes and fixtures: a manual clock, a recording sound player, a scripted speech backend."""

from __future__ import annotations

import heapq
import random
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from bukvar.audio.effects import Effect
from bukvar.audio.speech import SpeechEngine, Utterance, Voice
from bukvar.core.content import ContentRepository
from bukvar.core.progress import ProgressStore
from bukvar.core.session import GameController


class ManualScheduler:
    """Scheduler driven by the test: callbacks run only when time is advanced."""

    def __init__(self) -> None:
        self.now = 0
        self._seq = 0
        self._pending: List[Tuple[int, int, Callable[[], None]]] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._seq += 1
        heapq.heappush(self._pending, (self.now + delay_ms, self._seq, callback))

    @property
    def pending(self) -> int:
        return len(self._pending)

    def advance(self, ms: int) -> None:
        until = self.now + ms
        while self._pending and self._pending[0][0] <= until:
            due, _, callback = heapq.heappop(self._pending)
            self.now = due
            callback()
        self.now = until

    def run_all(self) -> None:
        while self._pending:
            self.advance(self._pending[0][0] - self.now)


class RecordingSoundPlayer:
    def __init__(self) -> None:
        self.played: List[Effect] = []

    def play(self, effect: Effect) -> None:
        self.played.append(effect)


class FakeSpeechBackend:
    def __init__(self, voices: Optional[List[Voice]] = None) -> None:
        self._voices = list(voices or [])
        self.spoken: List[Utterance] = []
        self.cancel_count = 0
        self.voices_changed: List[Callable[[], None]] = []
        self.pending: List[Tuple[Utterance, Callable[[], None], Callable[[str], None]]] = []

    def voices(self) -> List[Voice]:
        return list(self._voices)

    def set_voices(self, voices: List[Voice]) -> None:
        self._voices = list(voices)
        for callback in self.voices_changed:
            callback()

    def cancel(self) -> None:
        self.cancel_count += 1

    def speak(self, utterance: Utterance, on_end: Callable[[], None], on_error: Callable[[str], None]) -> None:
        self.spoken.append(utterance)
        self.pending.append((utterance, on_end, on_error))

    def on_voices_changed(self, callback: Callable[[], None]) -> None:
        self.voices_changed.append(callback)

    @property
    def texts(self) -> List[str]:
        return [u.text for u in self.spoken]


CONTENT_YAML = textwrap.dedent(
    """\
    letters:
      А:
        syllables: [а-м, ма, ау, уа]
        words: [мама, сам, сама, мак]
      М:
        syllables: [ма, мо, му]
        words: [дом, мох, сом]
    """
)


@pytest.fixture()
def content_file(tmp_path: Path) -> Path:
    path = tmp_path / "letters.yaml"
    path.write_text(CONTENT_YAML, encoding="utf-8")
    return path


@pytest.fixture()
def content(content_file: Path) -> ContentRepository:
    return ContentRepository(content_file)


@pytest.fixture()
def progress(tmp_path: Path) -> ProgressStore:
    return ProgressStore(tmp_path / "home")


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def sounds() -> RecordingSoundPlayer:
    return RecordingSoundPlayer()


@pytest.fixture()
def make_backend():
    return FakeSpeechBackend


@pytest.fixture()
def speech_backend() -> FakeSpeechBackend:
    return FakeSpeechBackend([Voice("Milena", "ru-RU")])


@pytest.fixture()
def speech(speech_backend: FakeSpeechBackend) -> SpeechEngine:
    return SpeechEngine(speech_backend, "ru-RU")


@dataclass
class Game:
    controller: GameController
    scheduler: ManualScheduler
    sounds: RecordingSoundPlayer
    speech_backend: FakeSpeechBackend
    progress: ProgressStore


@pytest.fixture()
def game(content, progress, scheduler, sounds, speech, speech_backend) -> Game:
    controller = GameController(
        content=content,
        progress=progress,
        sounds=sounds,
        speech=speech,
        scheduler=scheduler,
        rng=random.Random(7),
    )
    return Game(controller, scheduler, sounds, speech_backend, progress)
