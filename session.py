from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional

import aggregator
import disfluency
import fusion
import vad
from aggregator import Aggregator
from config import STT_LANG
from disfluency import ScannerState
from events import FillerEvent, TranscriptEvent
from logger import log_calibration, log_event, log_reset
from vad import AmplitudeSource, VADConfig, VADState


Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FillerSession:
    """
    Per-session owner of both detectors and the merged view.

    Every mutation goes through one of the entry points below and every
    timestamp comes from the same clock, so the fusion gate and the VAD
    cooldown compare like with like. Not thread-safe: a multi-threaded host
    must funnel calls through one thread (see main_live.py).
    """

    def __init__(
        self,
        *,
        vad_config: Optional[VADConfig] = None,
        clock: Clock = monotonic_ms,
        lang: str = STT_LANG,
        log_path: Optional[str] = None,
        event_log_cap: Optional[int] = None,
    ):
        self.clock = clock
        self.log_path = log_path
        self.scanner: ScannerState = disfluency.init_scanner(lang)
        self.vad_config: VADConfig = vad_config if vad_config is not None else VADConfig()
        self.vad_state: VADState = vad.init_vad()
        self.agg: Aggregator = (
            aggregator.init_aggregator() if event_log_cap is None else aggregator.init_aggregator(event_log_cap)
        )

    # Read-only views

    @property
    def counts(self) -> Dict[str, int]:
        return self.agg.counts

    @property
    def events(self) -> List[FillerEvent]:
        return list(self.agg.events)

    def highlight(self, text: str) -> str:
        return disfluency.highlight(text)

    def combined_transcript(self) -> str:
        return disfluency.combined_transcript(self.scanner)

    def diagnostics(self) -> Dict[str, object]:
        return {
            "vad_phase": self.vad_state.phase.name,
            "vad_enabled": self.vad_config.enabled,
            "threshold": self.vad_config.threshold,
            "level": self.vad_state.last_level,
            "mic_state": self.vad_state.mic_state,
            "asr_status": self.scanner.status,
            "asr_enabled": self.scanner.enabled,
            "lang": self.scanner.lang,
        }

    # Data streams

    def on_transcript(self, event: TranscriptEvent) -> List[FillerEvent]:
        hits = disfluency.ingest_transcript(self.scanner, event, self.clock())
        for hit in hits:
            self._record(hit)
        return hits

    def tick(self) -> Optional[FillerEvent]:
        was_calibrating = self.vad_state.calibrating
        candidate = vad.update(self.vad_state, self.vad_config, self.clock())

        if was_calibrating and not self.vad_state.calibrating and self.log_path:
            log_calibration(self.log_path, self.vad_state.noise_max, self.vad_config.threshold)

        if candidate is None:
            return None
        if not fusion.admit(candidate, self.scanner.last_final_ms, self.vad_config.ignore_after_final_ms):
            return None
        self._record(candidate)
        return candidate

    # Lifecycle controls

    def set_lexical_enabled(self, enabled: bool) -> None:
        if enabled:
            disfluency.start(self.scanner)
        else:
            disfluency.stop(self.scanner)

    def set_acoustic_enabled(self, enabled: bool) -> None:
        vad.set_enabled(self.vad_state, self.vad_config, enabled)

    def set_language(self, lang: str) -> bool:
        return disfluency.set_language(self.scanner, lang)

    def attach_amplitude_source(self, source: AmplitudeSource) -> None:
        vad.attach_source(self.vad_state, self.vad_config, source, self.clock())

    def amplitude_source_starting(self) -> None:
        vad.source_starting(self.vad_state)

    def amplitude_source_failed(self) -> None:
        vad.source_failed(self.vad_state)

    def transcript_source_failed(self) -> None:
        disfluency.mark_unavailable(self.scanner)

    def reset(self) -> None:
        """Clear counts, the event log, transcript buffers and VAD timers."""
        if self.log_path:
            log_reset(self.log_path, self.agg.counts)
        aggregator.reset_aggregator(self.agg)
        disfluency.reset_scanner(self.scanner)
        vad.reset_vad(self.vad_state)

    def _record(self, event: FillerEvent) -> None:
        aggregator.record(self.agg, event)
        if self.log_path:
            log_event(self.log_path, event, count=self.agg.counts[event.term])


# Console commands, applied on the session's thread
CMD_RESET = "r"
CMD_TOGGLE_ASR = "t"
CMD_TOGGLE_VAD = "v"
CMD_LANG = "l"
CMD_QUIT = "q"

ACTION_NONE = ""
ACTION_QUIT = "quit"
ACTION_RESTART_STT = "restart_stt"


def apply_command(sess: FillerSession, line: str) -> str:
    """
    Apply one console command ("r", "t", "v", "l pt-PT", "q") and return
    what the driver must do next.
    """
    parts = (line or "").strip().split()
    if not parts:
        return ACTION_NONE
    cmd = parts[0].lower()

    if cmd == CMD_RESET:
        sess.reset()
        print("[Session] reset")
    elif cmd == CMD_TOGGLE_ASR:
        sess.set_lexical_enabled(not sess.scanner.enabled)
        print(f"[Session] ASR {'on' if sess.scanner.enabled else 'off'}")
    elif cmd == CMD_TOGGLE_VAD:
        sess.set_acoustic_enabled(not sess.vad_config.enabled)
        print(f"[Session] VAD {'on' if sess.vad_config.enabled else 'off'}")
    elif cmd == CMD_LANG:
        if len(parts) < 2:
            print(f"[Session] lang {sess.scanner.lang}")
            return ACTION_NONE
        restart = sess.set_language(parts[1])
        print(f"[Session] lang {sess.scanner.lang}")
        if restart:
            return ACTION_RESTART_STT
    elif cmd == CMD_QUIT:
        return ACTION_QUIT
    return ACTION_NONE
