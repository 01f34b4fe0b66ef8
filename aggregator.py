from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List

from config import EVENT_LOG_CAP
from events import FillerEvent


@dataclass
class Aggregator:
    cap: int = EVENT_LOG_CAP
    counts: Dict[str, int] = field(default_factory=dict)
    events: Deque[FillerEvent] = field(default_factory=deque)

    def __post_init__(self) -> None:
        if self.cap <= 0:
            raise ValueError(f"event log cap must be positive, got {self.cap}")
        self.events = deque(self.events, maxlen=self.cap)


def init_aggregator(cap: int = EVENT_LOG_CAP) -> Aggregator:
    return Aggregator(cap=cap)


def record(agg: Aggregator, event: FillerEvent) -> Aggregator:
    agg.counts[event.term] = agg.counts.get(event.term, 0) + 1
    agg.events.append(event)
    return agg


def reset_aggregator(agg: Aggregator) -> Aggregator:
    agg.counts.clear()
    agg.events.clear()
    return agg


def total(agg: Aggregator) -> int:
    return int(sum(agg.counts.values()))


def hits_for(agg: Aggregator, term: str) -> List[FillerEvent]:
    """Recent events for one term (bounded by the log cap)."""
    return [e for e in agg.events if e.term == term]


def top_terms(agg: Aggregator, n: int = 5) -> List[tuple]:
    return sorted(agg.counts.items(), key=lambda kv: (-kv[1], kv[0]))[:n]
