"""Shared fixtures: scripted randomness, a fake tick timer, recording audio."""

from __future__ import annotations

import pytest

from entities import Mode
from simulation import RandomSource, SimulationState


class ScriptedRandom(RandomSource):
    """Hands out queued values; falls back to 0 / False once the script runs dry."""

    def __init__(self, values=(), chances=()) -> None:
        super().__init__(0)
        self.values = list(values)
        self.chances = list(chances)
        self.calls: list[int] = []

    def randrange(self, n: int) -> int:
        self.calls.append(n)
        if not self.values:
            return 0
        value = self.values.pop(0)
        assert 0 <= value < n, f"scripted {value} outside [0, {n})"
        return value

    def chance(self, probability: float) -> bool:
        return self.chances.pop(0) if self.chances else False


class FakeTimer:
    """Records start/stop calls instead of running a thread."""

    def __init__(self) -> None:
        self.starts: list[int] = []
        self.stops = 0
        self.interval: int | None = None

    @property
    def running(self) -> bool:
        return self.interval is not None

    def start(self, interval_ms: int) -> None:
        self.starts.append(interval_ms)
        self.interval = interval_ms

    def stop(self) -> None:
        self.stops += 1
        self.interval = None


class RecordingAudio:
    def __init__(self) -> None:
        self.tones: list[tuple[float, float, int]] = []
        self.vibrations: list[int] = []

    def play_tone(self, freq: float, volume: float, ms: int) -> None:
        self.tones.append((freq, volume, ms))

    def vibrate(self, ms: int) -> None:
        self.vibrations.append(ms)


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def state() -> SimulationState:
    """A freshly started Normal run with every pool empty."""
    s = SimulationState()
    s.reset_run(ScriptedRandom())
    assert s.mode is Mode.PLAYING
    return s


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def audio() -> RecordingAudio:
    return RecordingAudio()
