from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from config import (
    VAD_ENABLED,
    VAD_THRESHOLD,
    VAD_MIN_MS,
    VAD_MAX_MS,
    VAD_COOLDOWN_MS,
    VAD_AUTO_CALIB_MS,
    VAD_THRESHOLD_FLOOR,
    VAD_THRESHOLD_CEIL,
    VAD_NOISE_MULTIPLIER,
    VAD_RELEASE_FACTOR,
    VAD_IGNORE_AFTER_FINAL_MS,
    VAD_SHORT_FILLER_MAX_MS,
)
from events import FillerEvent, FillerSource

# Polled level in [0, 1]; None while the meter has nothing to report
AmplitudeSource = Callable[[], Optional[float]]

VOCAL_FILLER_SHORT = "vocal_filler_short"
VOCAL_FILLER_LONG = "vocal_filler_long"


class VADPhase(Enum):
    OFF = auto()
    CALIBRATING = auto()
    IDLE = auto()
    ACTIVE = auto()


@dataclass
class VADConfig:
    threshold: float = VAD_THRESHOLD
    min_duration_ms: float = VAD_MIN_MS
    max_duration_ms: float = VAD_MAX_MS
    cooldown_ms: float = VAD_COOLDOWN_MS
    auto_calib_ms: float = VAD_AUTO_CALIB_MS
    threshold_floor: float = VAD_THRESHOLD_FLOOR
    threshold_ceil: float = VAD_THRESHOLD_CEIL
    noise_multiplier: float = VAD_NOISE_MULTIPLIER
    release_factor: float = VAD_RELEASE_FACTOR
    ignore_after_final_ms: float = VAD_IGNORE_AFTER_FINAL_MS
    short_filler_max_ms: float = VAD_SHORT_FILLER_MAX_MS
    enabled: bool = VAD_ENABLED

    def __post_init__(self) -> None:
        if self.threshold_floor > self.threshold_ceil:
            raise ValueError(
                f"threshold_floor ({self.threshold_floor}) is above threshold_ceil ({self.threshold_ceil})"
            )
        if self.min_duration_ms > self.max_duration_ms:
            raise ValueError(
                f"min_duration_ms ({self.min_duration_ms}) is above max_duration_ms ({self.max_duration_ms})"
            )
        if not 0.0 < self.release_factor <= 1.0:
            raise ValueError(f"release_factor must be in (0, 1], got {self.release_factor}")


@dataclass
class VADState:
    source: Optional[AmplitudeSource] = None
    mic_state: str = "off"  # off | starting | on | error

    calibrating: bool = False
    calib_start_ms: float = 0.0
    noise_max: float = 0.0

    active: bool = False
    active_start_ms: float = 0.0
    last_hit_ms: Optional[float] = None

    last_level: Optional[float] = None

    @property
    def phase(self) -> VADPhase:
        if self.source is None:
            return VADPhase.OFF
        if self.active:
            return VADPhase.ACTIVE
        if self.calibrating:
            return VADPhase.CALIBRATING
        return VADPhase.IDLE


def init_vad() -> VADState:
    return VADState()


def calibrated_threshold(noise_max: float, cfg: VADConfig) -> float:
    t = max(cfg.threshold_floor, noise_max * cfg.noise_multiplier)
    return min(t, cfg.threshold_ceil)


def attach_source(state: VADState, cfg: VADConfig, source: AmplitudeSource, now_ms: float) -> VADState:
    """
    Mic is ready: start the calibration window.

    Detection keeps running with the prior threshold while the window is open.
    """
    state.source = source
    state.mic_state = "on"
    state.active = False
    state.noise_max = 0.0
    state.calib_start_ms = now_ms
    state.calibrating = cfg.auto_calib_ms > 0
    return state


def source_starting(state: VADState) -> VADState:
    state.mic_state = "starting"
    return state


def source_failed(state: VADState) -> VADState:
    """Mic denied or unavailable. The detector stays OFF."""
    state.source = None
    state.mic_state = "error"
    state.calibrating = False
    state.active = False
    return state


def set_enabled(state: VADState, cfg: VADConfig, enabled: bool) -> VADState:
    cfg.enabled = bool(enabled)
    if not cfg.enabled:
        # open span is abandoned, never emitted
        state.active = False
        state.active_start_ms = 0.0
    return state


def reset_vad(state: VADState) -> VADState:
    state.active = False
    state.active_start_ms = 0.0
    state.last_hit_ms = None
    return state


def _classify(duration_ms: float, cfg: VADConfig) -> str:
    return VOCAL_FILLER_SHORT if duration_ms < cfg.short_filler_max_ms else VOCAL_FILLER_LONG


def update(state: VADState, cfg: VADConfig, now_ms: float) -> Optional[FillerEvent]:
    """
    One scheduler tick. Polls the amplitude source and advances the
    Idle/Active hysteresis.

    Returns a candidate vocal-filler event when a span closes with a duration
    inside [min_duration_ms, max_duration_ms]. The candidate has not been
    checked against the transcript yet; that is the fusion gate's job.
    """
    if not cfg.enabled or state.source is None:
        return None

    level = state.source()
    if level is None:
        return None
    level = float(level)
    state.last_level = level

    # auto-calibration
    if state.calibrating:
        state.noise_max = max(state.noise_max, level)
        if now_ms - state.calib_start_ms > cfg.auto_calib_ms:
            state.calibrating = False
            cfg.threshold = calibrated_threshold(state.noise_max, cfg)
            print(f"[VAD] calibrated: noise_max={state.noise_max:.4f} threshold={cfg.threshold:.4f}")

    # start
    if not state.active and level >= cfg.threshold:
        if state.last_hit_ms is not None and now_ms - state.last_hit_ms < cfg.cooldown_ms:
            return None
        state.active = True
        state.active_start_ms = now_ms
        return None

    # end
    if state.active and level < cfg.threshold * cfg.release_factor:
        dur = now_ms - state.active_start_ms
        state.active = False

        if dur < cfg.min_duration_ms or dur > cfg.max_duration_ms:
            return None

        state.last_hit_ms = now_ms
        return FillerEvent(
            term=_classify(dur, cfg),
            timestamp_ms=now_ms,
            source=FillerSource.ACOUSTIC,
            snippet=f"VAD {int(round(dur))}ms",
        )

    return None
