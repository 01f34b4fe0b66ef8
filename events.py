from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List


class FillerSource(Enum):
    LEXICAL = auto()
    ACOUSTIC = auto()


@dataclass(frozen=True)
class FillerEvent:
    term: str
    timestamp_ms: float
    source: FillerSource
    snippet: str = ""


@dataclass(frozen=True)
class TranscriptResult:
    transcript: str
    is_final: bool


@dataclass(frozen=True)
class TranscriptEvent:
    """
    One recognizer callback: results from `result_index` onward are new or
    revised; earlier entries were already delivered.
    """
    result_index: int = 0
    results: List[TranscriptResult] = field(default_factory=list)
