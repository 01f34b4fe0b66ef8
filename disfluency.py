from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Dict, List, Optional

from config import STT_LANG
from events import FillerEvent, FillerSource, TranscriptEvent
from lexicon import (
    AMBIGUOUS_SINGLE,
    FILLERS_MULTI,
    FILLERS_SINGLE,
    STRETCHED_DISPLAY,
    is_stretched,
)
from text_normalize import normalize


_WS = re.compile(r"\s+")

# Ambiguous word right after sentence-level punctuation (or at the very start)
_CLAUSE_START_TMPL = r"(^|[.!?;:,\n\r\t]\s*)({word})\b"


@dataclass
class ScannerState:
    enabled: bool = False
    status: str = "idle"  # idle | listening | error
    lang: str = STT_LANG

    final_transcript: str = ""
    interim_transcript: str = ""

    last_any_ms: Optional[float] = None
    last_final_ms: Optional[float] = None


def init_scanner(lang: str = STT_LANG) -> ScannerState:
    return ScannerState(lang=lang or STT_LANG)


# Lifecycle

def start(state: ScannerState) -> ScannerState:
    if state.status == "error":
        return state
    state.enabled = True
    state.status = "listening"
    return state


def stop(state: ScannerState) -> ScannerState:
    state.enabled = False
    if state.status != "error":
        state.status = "idle"
    return state


def mark_unavailable(state: ScannerState) -> ScannerState:
    """Transcript source is gone: lexical path off, acoustic path unaffected."""
    state.enabled = False
    state.status = "error"
    return state


def set_language(state: ScannerState, lang: str) -> bool:
    """
    Store the recognizer language. True when the recognizer stream has to be
    reopened with it.
    """
    new_lang = lang or STT_LANG
    changed = new_lang != state.lang
    state.lang = new_lang
    return changed and state.status != "error"


def reset_scanner(state: ScannerState) -> ScannerState:
    state.final_transcript = ""
    state.interim_transcript = ""
    state.last_any_ms = None
    state.last_final_ms = None
    return state


def combined_transcript(state: ScannerState) -> str:
    interim = f" {state.interim_transcript}" if state.interim_transcript else ""
    return (state.final_transcript + interim).strip()


# Counting

def _on_word_edges(normalized: str, start: int, end: int) -> bool:
    """Phrase occupies whole tokens: "kind of" in "mankind often" does not count."""
    left_ok = start == 0 or normalized[start - 1] == " "
    right_ok = end == len(normalized) or normalized[end] == " "
    return left_ok and right_ok


def _clause_start_count(word: str, raw_lower: str) -> int:
    pattern = _CLAUSE_START_TMPL.format(word=re.escape(word))
    return sum(1 for _ in re.finditer(pattern, raw_lower))


def scan_final_chunk(raw_chunk: str, now_ms: float) -> List[FillerEvent]:
    """
    Scan one finalized transcript increment and return the filler events in it.

    Three independent passes over the normalized chunk:
      1) stretched interjections (hum, hmmm, ahhh...) keyed by the token itself
      2) multi-word phrases, non-overlapping, each phrase on its own
      3) single words; ambiguous ones ("so", "well"...) only where the raw
         chunk has them opening a clause

    A token like "hmm" is both stretched and a lexicon word, so it counts in
    pass 1 and pass 3.
    """
    raw = (raw_chunk or "").strip()
    if not raw:
        return []

    normalized = normalize(raw)
    if not normalized:
        return []

    hits: List[FillerEvent] = []

    def emit(term: str) -> None:
        hits.append(FillerEvent(term, now_ms, FillerSource.LEXICAL, raw))

    tokens = normalized.split(" ")

    for tok in tokens:
        if is_stretched(tok):
            emit(tok)

    for phrase in FILLERS_MULTI:
        idx = normalized.find(phrase)
        while idx != -1:
            end = idx + len(phrase)
            if _on_word_edges(normalized, idx, end):
                emit(phrase)
                idx = normalized.find(phrase, end)
            else:
                idx = normalized.find(phrase, idx + 1)

    raw_lower = raw.lower()
    clause_budget: Dict[str, int] = {}
    for tok in tokens:
        if tok not in FILLERS_SINGLE:
            continue

        if tok in AMBIGUOUS_SINGLE:
            if tok not in clause_budget:
                clause_budget[tok] = _clause_start_count(tok, raw_lower)
            if clause_budget[tok] <= 0:
                continue
            clause_budget[tok] -= 1

        emit(tok)

    return hits


def ingest_transcript(state: ScannerState, event: TranscriptEvent, now_ms: float) -> List[FillerEvent]:
    """
    Apply one recognizer callback.

    Final text is appended to the running transcript and scanned; interim text
    only replaces the display buffer and is never counted.
    """
    if not state.enabled or event is None:
        return []

    state.last_any_ms = now_ms

    new_final = ""
    new_interim = ""
    for res in event.results[max(0, event.result_index):]:
        txt = res.transcript or ""
        if res.is_final:
            new_final += txt
        else:
            new_interim += txt

    hits: List[FillerEvent] = []
    if new_final.strip():
        state.last_final_ms = now_ms
        state.final_transcript = _WS.sub(" ", f"{state.final_transcript} {new_final}").strip()
        hits = scan_final_chunk(new_final, now_ms)

    state.interim_transcript = new_interim.strip()
    return hits


# Display

def highlight(text: str) -> str:
    """
    Bracket fillers for display, keeping the original spelling and casing.

    Phrases become [..] (longest first), then single words and stretched
    interjections become {..}. Each layer runs over the output of the previous
    one, so a lexicon word inside a bracketed phrase can be marked twice.
    Display only; never feeds the counts.
    """
    out = text or ""

    for phrase in sorted(FILLERS_MULTI, key=len, reverse=True):
        if not phrase:
            continue
        parts = r"\s+".join(re.escape(p) for p in phrase.split(" "))
        out = re.sub(rf"\b{parts}\b", lambda m: f"[{m.group(0)}]", out, flags=re.IGNORECASE)

    for word in sorted(FILLERS_SINGLE):
        out = re.sub(rf"\b{re.escape(word)}\b", lambda m: f"{{{m.group(0)}}}", out, flags=re.IGNORECASE)

    out = STRETCHED_DISPLAY.sub(lambda m: f"{{{m.group(0)}}}", out)
    return out
