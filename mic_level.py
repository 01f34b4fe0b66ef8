from __future__ import annotations

from typing import Callable, Optional
import numpy as np
import sounddevice as sd

from config import MIC_BLOCK_MS, SAMPLE_RATE


def rms_level(frames: np.ndarray) -> float:
    """RMS of int16 PCM scaled to [0, 1]."""
    if frames is None or frames.size == 0:
        return 0.0
    data = frames.astype(np.float32).flatten() / 32768.0
    level = float(np.sqrt(np.mean(np.square(data))))
    return min(1.0, max(0.0, level))


class MicLevel:
    """
    Microphone level meter. The stream callback stores the level of the latest
    block (and hands raw PCM to `on_audio` for the recognizer, if set);
    `get_level` is the polled amplitude source for the VAD.
    """

    def __init__(
        self,
        sr: int = SAMPLE_RATE,
        block_ms: int = MIC_BLOCK_MS,
        on_audio: Optional[Callable[[bytes], object]] = None,
    ):
        self.sr = sr
        self.block_size = max(1, int(sr * block_ms / 1000))
        self.on_audio = on_audio
        self._stream: Optional[sd.InputStream] = None
        self._level: Optional[float] = None

    @property
    def ready(self) -> bool:
        return self._stream is not None

    def _callback(self, indata, frames, time_info, status) -> None:
        if status:
            print(f"[Mic] status: {status}")
        self._level = rms_level(indata)
        on_audio = self.on_audio
        if on_audio is not None:
            on_audio(indata.tobytes())

    def start(self) -> None:
        stream = sd.InputStream(
            samplerate=self.sr,
            channels=1,
            dtype="int16",
            blocksize=self.block_size,
            callback=self._callback,
        )
        stream.start()
        self._stream = stream

    def stop(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
        self._level = None

    def get_level(self) -> Optional[float]:
        if self._stream is None:
            return None
        return self._level
