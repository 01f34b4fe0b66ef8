import json
import time
from typing import Any, Dict, Optional

from events import FillerEvent


def _append(log_path: str, entry: Dict[str, Any]) -> None:
    with open(log_path, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False) + "\n")


def log_event(
    log_path: str,
    event: FillerEvent,
    *,
    count: int = 0,
    note: str = "",
) -> None:
    entry = {
        "ts": time.time(),
        "kind": "filler",
        "term": event.term,
        "source": event.source.name.lower(),
        "ms": event.timestamp_ms,
        "count": count,
        "snippet": event.snippet,
        "note": note,
    }
    _append(log_path, entry)


def log_calibration(
    log_path: str,
    noise_max: float,
    threshold: float,
    *,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    entry = {
        "ts": time.time(),
        "kind": "vad_calibration",
        "noise_max": noise_max,
        "threshold": threshold,
    }
    if extra:
        entry.update(extra)
    _append(log_path, entry)


def log_reset(log_path: str, counts: Dict[str, int]) -> None:
    _append(log_path, {"ts": time.time(), "kind": "reset", "counts_before": dict(counts)})
