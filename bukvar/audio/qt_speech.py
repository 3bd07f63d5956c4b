"""QtTextToSpeech implementation of the speech backend."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from PySide6.QtCore import QLocale
from PySide6.QtTextToSpeech import QTextToSpeech, QVoice

from bukvar.audio.speech import Utterance, Voice

logger = logging.getLogger(__name__)


class QtSpeechBackend:
    def __init__(self) -> None:
        self._tts = QTextToSpeech()
        self._qvoices: Dict[Voice, QVoice] = {}
        self._voices_changed: List[Callable[[], None]] = []
        self._pending: Optional[Tuple[Callable[[], None], Callable[[str], None]]] = None
        self._ready_seen = False
        self._tts.stateChanged.connect(self._on_state_changed)

    def voices(self) -> List[Voice]:
        if self._tts.state() not in (QTextToSpeech.State.Ready, QTextToSpeech.State.Speaking):
            return []
        original = self._tts.locale()
        qvoices: Dict[Voice, QVoice] = {}
        for locale in self._tts.availableLocales():
            self._tts.setLocale(locale)
            for qvoice in self._tts.availableVoices():
                qvoices[Voice(name=qvoice.name(), locale=locale.name())] = qvoice
        self._tts.setLocale(original)
        self._qvoices = qvoices
        return list(qvoices)

    def cancel(self) -> None:
        self._pending = None
        self._tts.stop()

    def speak(self, utterance: Utterance, on_end: Callable[[], None], on_error: Callable[[str], None]) -> None:
        self._tts.setLocale(QLocale(utterance.locale.replace("-", "_")))
        qvoice = self._qvoices.get(utterance.voice) if utterance.voice else None
        if qvoice is not None:
            self._tts.setVoice(qvoice)
        # Qt rates run from -1.0 to 1.0 around a normal speed of 0.0
        self._tts.setRate(max(-1.0, min(1.0, utterance.rate - 1.0)))
        self._tts.setVolume(utterance.volume)
        self._pending = (on_end, on_error)
        self._tts.say(utterance.text)

    def on_voices_changed(self, callback: Callable[[], None]) -> None:
        self._voices_changed.append(callback)

    def _on_state_changed(self, state: QTextToSpeech.State) -> None:
        if state == QTextToSpeech.State.Ready:
            if not self._ready_seen:
                self._ready_seen = True
                logger.info("Speech engine ready")
                for callback in list(self._voices_changed):
                    callback()
            self._finish(None)
        elif state == QTextToSpeech.State.Error:
            self._finish("speech engine reported an error")

    def _finish(self, error: Optional[str]) -> None:
        pending, self._pending = self._pending, None
        if pending is None:
            return
        on_end, on_error = pending
        if error is None:
            on_end()
        else:
            on_error(error)
