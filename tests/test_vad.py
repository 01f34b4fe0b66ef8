import pytest

import vad
from events import FillerSource
from vad import VADConfig, VADPhase, VOCAL_FILLER_LONG, VOCAL_FILLER_SHORT


HIGH = 0.1
LOW = 0.0


def _ready(level, **overrides):
    params = dict(auto_calib_ms=0)
    params.update(overrides)
    cfg = VADConfig(**params)
    state = vad.attach_source(vad.init_vad(), cfg, level, 0)
    return state, cfg


def _span(state, cfg, level, start_ms, dur_ms):
    level.level = HIGH
    assert vad.update(state, cfg, start_ms) is None
    level.level = LOW
    return vad.update(state, cfg, start_ms + dur_ms)


@pytest.mark.parametrize(
    "dur_ms, expected",
    [
        (50, None),
        (300, VOCAL_FILLER_SHORT),
        (800, VOCAL_FILLER_LONG),
        (2000, None),
    ],
)
def test_duration_gating(level, dur_ms, expected):
    state, cfg = _ready(level)
    hit = _span(state, cfg, level, 1000, dur_ms)
    if expected is None:
        assert hit is None
    else:
        assert hit.term == expected
        assert hit.source is FillerSource.ACOUSTIC
        assert hit.timestamp_ms == 1000 + dur_ms
        assert hit.snippet == f"VAD {dur_ms}ms"
    assert state.phase is VADPhase.IDLE


def test_starts_off_and_ignores_updates(level):
    state = vad.init_vad()
    cfg = VADConfig()
    assert state.phase is VADPhase.OFF
    assert vad.update(state, cfg, 100) is None
    assert level.reads == []


def test_unready_source_is_noop(level):
    state, cfg = _ready(level)
    level.level = None
    assert vad.update(state, cfg, 10) is None
    assert state.phase is VADPhase.IDLE
    assert state.last_level is None


def test_hysteresis_holds_between_release_and_threshold(level):
    state, cfg = _ready(level, threshold=0.04, release_factor=0.75)
    level.level = 0.05
    vad.update(state, cfg, 0)
    assert state.phase is VADPhase.ACTIVE

    # below threshold but above threshold * release_factor
    level.level = 0.035
    assert vad.update(state, cfg, 200) is None
    assert state.phase is VADPhase.ACTIVE

    level.level = 0.02
    hit = vad.update(state, cfg, 400)
    assert hit.term == VOCAL_FILLER_LONG


def test_cooldown_suppresses_second_rising_edge(level):
    state, cfg = _ready(level, cooldown_ms=900)
    assert _span(state, cfg, level, 0, 300).term == VOCAL_FILLER_SHORT

    level.level = HIGH
    assert vad.update(state, cfg, 500) is None
    assert state.phase is VADPhase.IDLE

    assert vad.update(state, cfg, 1200) is None
    assert state.phase is VADPhase.ACTIVE
    assert state.active_start_ms == 1200


def test_rejected_span_does_not_start_cooldown(level):
    state, cfg = _ready(level)
    assert _span(state, cfg, level, 0, 50) is None
    assert _span(state, cfg, level, 100, 300).term == VOCAL_FILLER_SHORT


def test_calibration_sets_threshold_and_ends_idle(level):
    cfg = VADConfig(auto_calib_ms=1000, noise_multiplier=2.5)
    state = vad.attach_source(vad.init_vad(), cfg, level, 0)
    assert state.phase is VADPhase.CALIBRATING

    level.level = 0.01
    vad.update(state, cfg, 0)
    level.level = 0.012
    vad.update(state, cfg, 500)
    level.level = 0.005
    vad.update(state, cfg, 1001)

    assert state.phase is VADPhase.IDLE
    assert state.noise_max == 0.012
    assert cfg.threshold == pytest.approx(0.03)


@pytest.mark.parametrize(
    "samples",
    [
        [0.0, 0.0],
        [0.001, 0.002],
        [0.02, 0.01],
        [0.5, 0.9, 1.0],
    ],
)
def test_calibrated_threshold_within_bounds(level, samples):
    cfg = VADConfig(auto_calib_ms=100)
    state = vad.attach_source(vad.init_vad(), cfg, level, 0)
    for i, s in enumerate(samples):
        level.level = s
        vad.update(state, cfg, i * 10)
    level.level = 0.0
    vad.update(state, cfg, 1000)

    assert not state.calibrating
    assert cfg.threshold_floor <= cfg.threshold <= cfg.threshold_ceil


def test_detection_runs_during_calibration(level):
    cfg = VADConfig(auto_calib_ms=4000, threshold=0.02)
    state = vad.attach_source(vad.init_vad(), cfg, level, 0)
    hit = _span(state, cfg, level, 100, 300)
    assert hit.term == VOCAL_FILLER_SHORT
    assert state.calibrating


def test_disable_mid_span_discards_it(level):
    state, cfg = _ready(level)
    level.level = HIGH
    vad.update(state, cfg, 0)
    assert state.phase is VADPhase.ACTIVE

    vad.set_enabled(state, cfg, False)
    assert state.phase is VADPhase.IDLE

    level.level = LOW
    assert vad.update(state, cfg, 300) is None
    vad.set_enabled(state, cfg, True)
    assert vad.update(state, cfg, 400) is None


def test_reset_discards_open_span(level):
    state, cfg = _ready(level)
    level.level = HIGH
    vad.update(state, cfg, 0)
    vad.reset_vad(state)

    level.level = LOW
    assert vad.update(state, cfg, 300) is None
    assert state.last_hit_ms is None


def test_source_failure_stays_off(level):
    state = vad.source_failed(vad.init_vad())
    assert state.phase is VADPhase.OFF
    assert state.mic_state == "error"


def test_invalid_config_raises():
    with pytest.raises(ValueError):
        VADConfig(threshold_floor=0.1, threshold_ceil=0.05)
    with pytest.raises(ValueError):
        VADConfig(min_duration_ms=500, max_duration_ms=100)
    with pytest.raises(ValueError):
        VADConfig(release_factor=0.0)
