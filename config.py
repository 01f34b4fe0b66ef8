from __future__ import annotations

# Speech-to-text
STT_LANG = "en-US"
SAMPLE_RATE = 16000


# VAD defaults (auto-calibration adjusts the threshold)
VAD_ENABLED = True
VAD_THRESHOLD = 0.020
VAD_MIN_MS = 120
VAD_MAX_MS = 1200
VAD_COOLDOWN_MS = 900
VAD_AUTO_CALIB_MS = 4000
VAD_THRESHOLD_FLOOR = 0.015
VAD_THRESHOLD_CEIL = 0.08
VAD_NOISE_MULTIPLIER = 2.5
VAD_RELEASE_FACTOR = 0.75

# Acoustic hit is dropped if an ASR final arrived this recently
VAD_IGNORE_AFTER_FINAL_MS = 250

# Spans shorter than this are "short" vocal fillers
VAD_SHORT_FILLER_MAX_MS = 320


# Mic metering
MIC_BLOCK_MS = 20


# Aggregation
EVENT_LOG_CAP = 300


# Console driver
LOG_PATH = "fillers.jsonl"
TICK_SEC = 0.02
PRINT_EVERY_SEC = 2.0

# Recognizer feed: ~5 s of mic blocks, older audio is dropped beyond this
AUDIO_QUEUE_MAX = 250
