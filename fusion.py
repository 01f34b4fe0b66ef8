from __future__ import annotations

from typing import Optional

from events import FillerEvent


def admit(candidate: FillerEvent, last_lexical_final_ms: Optional[float], ignore_after_final_ms: float) -> bool:
    """
    Drop an acoustic candidate that lands right after an ASR final chunk:
    the recognizer most likely already turned that sound into text.
    """
    if last_lexical_final_ms is None:
        return True
    return candidate.timestamp_ms - last_lexical_final_ms >= ignore_after_final_ms
