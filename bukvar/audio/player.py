"""Fire-and-forget playback of rendered effects through QtMultimedia."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from PySide6.QtCore import QBuffer, QByteArray, QIODevice
from PySide6.QtMultimedia import QAudio, QAudioFormat, QAudioSink, QMediaDevices

from bukvar.audio.effects import SAMPLE_RATE, Effect, EffectBank

logger = logging.getLogger(__name__)


class QtSoundPlayer:
    """Starts one short-lived audio sink per effect and forgets about it.

    Any failure of the audio stack turns the player silent; the game keeps
    running without sound.
    """

    def __init__(self, bank: Optional[EffectBank] = None, sample_rate: int = SAMPLE_RATE) -> None:
        # every fixed effect is rendered before the first play
        self._bank = bank or EffectBank(sample_rate)
        self._format = QAudioFormat()
        self._format.setSampleRate(sample_rate)
        self._format.setChannelCount(1)
        self._format.setSampleFormat(QAudioFormat.SampleFormat.Int16)
        self._enabled = True
        # sinks and their buffers must outlive play() until playback ends
        self._active: List[Tuple[QAudioSink, QBuffer]] = []

    def play(self, effect: Effect) -> None:
        if not self._enabled:
            return
        try:
            device = QMediaDevices.defaultAudioOutput()
            if device.isNull():
                self._disable("no audio output device")
                return
            sink = QAudioSink(device, self._format)
            buffer = QBuffer()
            buffer.setData(QByteArray(self._bank.pcm(effect)))
            buffer.open(QIODevice.OpenModeFlag.ReadOnly)
            entry = (sink, buffer)
            self._active.append(entry)
            sink.stateChanged.connect(lambda state, entry=entry: self._on_state_changed(entry, state))
            sink.start(buffer)
        except Exception as e:
            self._disable(str(e))

    def _on_state_changed(self, entry: Tuple[QAudioSink, QBuffer], state: QAudio.State) -> None:
        if state not in (QAudio.State.IdleState, QAudio.State.StoppedState):
            return
        if entry not in self._active:
            return
        self._active.remove(entry)
        sink, buffer = entry
        sink.stop()
        buffer.close()
        sink.deleteLater()

    def _disable(self, reason: str) -> None:
        logger.info("Sound effects disabled: %s", reason)
        self._enabled = False
