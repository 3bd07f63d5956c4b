"""Spoken prompts with at most one utterance in flight."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from bukvar.core.content import Task, TaskKind
from bukvar.core.matching import normalize_target

logger = logging.getLogger(__name__)

SPEECH_RATE = 0.9
SPEECH_VOLUME = 1.0

PROMPTS = {
    TaskKind.SYLLABLE: "Напиши слог {text}",
    TaskKind.WORD: "Напиши слово {text}",
}


@dataclass(frozen=True)
class Voice:
    name: str
    locale: str


@dataclass(frozen=True)
class Utterance:
    text: str
    locale: str
    voice: Optional[Voice]
    rate: float = SPEECH_RATE
    volume: float = SPEECH_VOLUME


class SpeechBackend(Protocol):
    def voices(self) -> List[Voice]: ...

    def cancel(self) -> None: ...

    def speak(
        self,
        utterance: Utterance,
        on_end: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None: ...

    def on_voices_changed(self, callback: Callable[[], None]) -> None: ...


class NullSpeechBackend:
    """Backend used when no speech engine exists; every utterance ends at once."""

    def voices(self) -> List[Voice]:
        return []

    def cancel(self) -> None:
        pass

    def speak(self, utterance: Utterance, on_end: Callable[[], None], on_error: Callable[[str], None]) -> None:
        on_end()

    def on_voices_changed(self, callback: Callable[[], None]) -> None:
        pass


def _locale_key(locale: str) -> str:
    return locale.replace("_", "-").lower()


class SpeechEngine:
    """Process-wide speech service.

    Holds the cached voice list and the one utterance currently being
    spoken. The utterance reference is kept until the backend reports the
    end or an error, since some engines stop speaking when it is dropped.
    """

    def __init__(self, backend: SpeechBackend, locale: str = "ru-RU") -> None:
        self._backend = backend
        self._locale = locale
        self._voices: List[Voice] = []
        self._current: Optional[Utterance] = None
        self.refresh_voices()
        # some engines only list voices after an async init
        self._backend.on_voices_changed(self.refresh_voices)

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def voices(self) -> List[Voice]:
        return list(self._voices)

    @property
    def current_utterance(self) -> Optional[Utterance]:
        return self._current

    def refresh_voices(self) -> None:
        try:
            voices = list(self._backend.voices())
        except Exception as e:
            logger.warning("Could not list speech voices: %s", e)
            return
        if voices:
            self._voices = voices

    def select_voice(self) -> Optional[Voice]:
        """Exact locale match first, then same language, else the engine default (None)."""
        if not self._voices:
            self.refresh_voices()
        wanted = _locale_key(self._locale)
        for voice in self._voices:
            if _locale_key(voice.locale) == wanted:
                return voice
        language = wanted.split("-")[0]
        for voice in self._voices:
            if _locale_key(voice.locale).split("-")[0] == language:
                return voice
        return None

    def speak(self, text: str) -> None:
        self.cancel()
        utterance = Utterance(text=text.lower(), locale=self._locale, voice=self.select_voice())
        self._current = utterance

        def on_end() -> None:
            self._release(utterance)

        def on_error(message: str) -> None:
            logger.warning("Speech synthesis error: %s", message)
            self._release(utterance)

        try:
            self._backend.speak(utterance, on_end, on_error)
        except Exception as e:
            logger.warning("Speech backend failed to speak %r: %s", utterance.text, e)
            self._release(utterance)

    def cancel(self) -> None:
        try:
            self._backend.cancel()
        except Exception as e:
            logger.debug("Speech cancel failed: %s", e)
        self._current = None

    def announce_task(self, task: Optional[Task]) -> None:
        if task is None:
            return
        self.speak(PROMPTS[task.kind].format(text=normalize_target(task.text)))

    def warm_up(self) -> None:
        """Speak a blank utterance so engines that need a first user gesture get unlocked."""
        self.speak(" ")

    def _release(self, utterance: Utterance) -> None:
        # a late callback of a cancelled utterance must not drop its successor
        if self._current is utterance:
            self._current = None
