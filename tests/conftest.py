from __future__ import annotations

from typing import List, Optional

import pytest


class FakeClock:
    def __init__(self, start_ms: float = 0.0):
        self.now = float(start_ms)

    def __call__(self) -> float:
        return self.now

    def set(self, ms: float) -> None:
        self.now = float(ms)


class ScriptedLevel:
    """Amplitude source whose next reading is set by the test."""

    def __init__(self, level: Optional[float] = 0.0):
        self.level = level
        self.reads: List[Optional[float]] = []

    def __call__(self) -> Optional[float]:
        self.reads.append(self.level)
        return self.level


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def level() -> ScriptedLevel:
    return ScriptedLevel()
