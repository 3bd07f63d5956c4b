"""Sound effects as data, plus a small numpy interpreter that renders them.

Each effect is a set of layers. A layer is one source (an oscillator or a
burst of noise), an optional lowpass filter and a gain envelope. Frequency
and gain are described by automation events with the same meaning as the
Web Audio ``setValueAtTime`` / ``linearRampToValueAtTime`` /
``exponentialRampToValueAtTime`` calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Protocol, Sequence, Tuple

import numpy as np

SAMPLE_RATE = 44100
LOWPASS_Q = 1.0 / np.sqrt(2.0)

C5 = 523.25
E5 = 659.25
G5 = 783.99
C6 = 1046.50


class Effect(Enum):
    GRAB = "grab"
    DROP = "drop"
    RUSTLE = "rustle"
    SUCCESS = "success"
    FANFARE = "fanfare"


class Ramp(Enum):
    SET = "set"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


class Waveform(Enum):
    SINE = "sine"
    TRIANGLE = "triangle"
    NOISE = "noise"


@dataclass(frozen=True)
class Automation:
    ramp: Ramp
    value: float
    time: float


@dataclass(frozen=True)
class Layer:
    waveform: Waveform
    start: float
    stop: float
    gain: Tuple[Automation, ...]
    frequency: Tuple[Automation, ...] = ()
    detune_cents: float = 0.0
    lowpass_hz: Optional[float] = None


@dataclass(frozen=True)
class EffectSpec:
    effect: Effect
    layers: Tuple[Layer, ...]

    @property
    def duration(self) -> float:
        return max(layer.stop for layer in self.layers)


def _set(value: float, time: float) -> Automation:
    return Automation(Ramp.SET, value, time)


def _linear(value: float, time: float) -> Automation:
    return Automation(Ramp.LINEAR, value, time)


def _exponential(value: float, time: float) -> Automation:
    return Automation(Ramp.EXPONENTIAL, value, time)


def _bloop(effect: Effect) -> EffectSpec:
    # water-drop "bul'k": a falling sine with a quick swell and decay
    return EffectSpec(
        effect,
        (
            Layer(
                Waveform.SINE,
                start=0.0,
                stop=0.25,
                frequency=(_set(400.0, 0.0), _exponential(150.0, 0.1)),
                gain=(_set(0.0, 0.0), _linear(0.15, 0.02), _exponential(0.001, 0.2)),
            ),
        ),
    )


def _rustle() -> EffectSpec:
    return EffectSpec(
        Effect.RUSTLE,
        (
            Layer(
                Waveform.NOISE,
                start=0.0,
                stop=0.2,
                lowpass_hz=600.0,
                gain=(_set(0.0, 0.0), _linear(0.08, 0.05), _linear(0.0, 0.2)),
            ),
        ),
    )


def _success() -> EffectSpec:
    layers = []
    for i, freq in enumerate((C5, E5, G5)):
        start = i * 0.05
        layers.append(
            Layer(
                Waveform.TRIANGLE,
                start=start,
                stop=start + 0.6,
                frequency=(_set(freq, start),),
                gain=(_set(0.0, start), _linear(0.1, start + 0.05), _exponential(0.001, start + 0.5)),
            )
        )
    return EffectSpec(Effect.SUCCESS, tuple(layers))


FANFARE_ATTACK = 0.08
FANFARE_RELEASE = 0.2
FANFARE_TAIL = 0.2


def fanfare_tone(freq: float, start: float, duration: float, volume: float) -> Tuple[Layer, Layer]:
    """One softened fanfare note: a triangle and a slightly detuned sine through a lowpass."""
    start = max(0.0, start)
    attack_end = start + FANFARE_ATTACK
    release_start = max(start + duration - FANFARE_RELEASE, attack_end)
    stop = start + duration + FANFARE_TAIL
    gain = (
        _set(0.0, start),
        _linear(volume, attack_end),
        _set(volume, release_start),
        _exponential(0.001, stop),
    )
    frequency = (_set(freq, start),)
    return (
        Layer(Waveform.TRIANGLE, start, stop, gain, frequency, lowpass_hz=1500.0),
        Layer(Waveform.SINE, start, stop, gain, frequency, detune_cents=3.0, lowpass_hz=1500.0),
    )


def _fanfare() -> EffectSpec:
    note = 0.15
    intro_volume = 0.08
    layers = []
    for i, freq in enumerate((C5, E5, C5)):
        layers.extend(fanfare_tone(freq, i * note, note, intro_volume))

    chord_start = 3 * note
    for freq in (C5, E5, G5, C6):
        layers.extend(fanfare_tone(freq, chord_start, 1.5, 0.06))
    return EffectSpec(Effect.FANFARE, tuple(layers))


EFFECTS: Dict[Effect, EffectSpec] = {
    Effect.GRAB: _bloop(Effect.GRAB),
    Effect.DROP: _bloop(Effect.DROP),
    Effect.RUSTLE: _rustle(),
    Effect.SUCCESS: _success(),
    Effect.FANFARE: _fanfare(),
}


class SoundPlayer(Protocol):
    def play(self, effect: Effect) -> None: ...


class NullSoundPlayer:
    """Player for muted runs and machines without audio output."""

    def play(self, effect: Effect) -> None:
        pass


def automation_curve(events: Sequence[Automation], times: np.ndarray, default: float = 0.0) -> np.ndarray:
    """Evaluate a parameter's automation events at the given sample times."""
    values = np.full(times.shape, default, dtype=np.float64)
    prev_time, prev_value = 0.0, default
    for event in sorted(events, key=lambda e: e.time):
        after = times >= event.time
        span = event.time - prev_time
        if event.ramp is not Ramp.SET and span > 0:
            during = (times >= prev_time) & (times < event.time)
            frac = (times[during] - prev_time) / span
            if event.ramp is Ramp.LINEAR:
                values[during] = prev_value + (event.value - prev_value) * frac
            elif prev_value > 0 and event.value > 0:
                values[during] = prev_value * (event.value / prev_value) ** frac
            else:
                # exponential ramps cannot leave or cross zero
                values[during] = prev_value
        values[after] = event.value
        prev_time, prev_value = event.time, event.value
    return values


def lowpass(samples: np.ndarray, cutoff_hz: float, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Apply a second-order lowpass by multiplying the spectrum with the biquad response."""
    n = len(samples)
    if n == 0:
        return samples
    size = 2 * n
    w0 = 2.0 * np.pi * cutoff_hz / sample_rate
    alpha = np.sin(w0) / (2.0 * LOWPASS_Q)
    cos_w0 = np.cos(w0)
    b0 = b2 = (1.0 - cos_w0) / 2.0
    b1 = 1.0 - cos_w0
    a0, a1, a2 = 1.0 + alpha, -2.0 * cos_w0, 1.0 - alpha

    z1 = np.exp(-1j * 2.0 * np.pi * np.fft.rfftfreq(size))
    z2 = z1 * z1
    response = (b0 + b1 * z1 + b2 * z2) / (a0 + a1 * z1 + a2 * z2)
    spectrum = np.fft.rfft(samples, size) * response
    return np.fft.irfft(spectrum, size)[:n]


def _source(layer: Layer, times: np.ndarray, sample_rate: int, rng: np.random.Generator) -> np.ndarray:
    active = (times >= layer.start) & (times < layer.stop)
    if layer.waveform is Waveform.NOISE:
        return rng.uniform(-1.0, 1.0, times.shape) * active

    freq = automation_curve(layer.frequency, times, default=440.0)
    freq *= 2.0 ** (layer.detune_cents / 1200.0)
    phase = 2.0 * np.pi * np.cumsum(freq * active) / sample_rate
    if layer.waveform is Waveform.TRIANGLE:
        wave = (2.0 / np.pi) * np.arcsin(np.sin(phase))
    else:
        wave = np.sin(phase)
    return wave * active


def render_layer(
    layer: Layer,
    times: np.ndarray,
    sample_rate: int = SAMPLE_RATE,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    signal = _source(layer, times, sample_rate, rng or np.random.default_rng())
    if layer.lowpass_hz is not None:
        signal = lowpass(signal, layer.lowpass_hz, sample_rate)
    return signal * automation_curve(layer.gain, times, default=1.0)


def render(
    effect: Effect,
    sample_rate: int = SAMPLE_RATE,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Render an effect to mono float32 samples in [-1, 1]."""
    spec = EFFECTS[effect]
    times = np.arange(int(np.ceil(spec.duration * sample_rate))) / sample_rate
    rng = rng or np.random.default_rng()
    mix = np.zeros(times.shape, dtype=np.float64)
    for layer in spec.layers:
        mix += render_layer(layer, times, sample_rate, rng)
    return np.clip(mix, -1.0, 1.0).astype(np.float32)


def to_pcm16(samples: np.ndarray) -> bytes:
    """Little-endian signed 16-bit PCM bytes for an audio sink."""
    return (np.clip(samples, -1.0, 1.0) * 32767.0).astype("<i2").tobytes()


class EffectBank:
    """PCM for every effect, rendered once up front.

    Rendering the fanfare takes a noticeable fraction of a second, so all
    fixed effects are rendered when the bank is built and playback only
    looks them up. The rustle is noise and gets a fresh render per request.
    """

    FRESH = frozenset({Effect.RUSTLE})

    def __init__(self, sample_rate: int = SAMPLE_RATE) -> None:
        self._sample_rate = sample_rate
        self._pcm: Dict[Effect, bytes] = {
            effect: to_pcm16(render(effect, sample_rate)) for effect in Effect if effect not in self.FRESH
        }

    @property
    def cached(self) -> Tuple[Effect, ...]:
        return tuple(self._pcm)

    def pcm(self, effect: Effect) -> bytes:
        if effect in self.FRESH:
            return to_pcm16(render(effect, self._sample_rate))
        return self._pcm[effect]
