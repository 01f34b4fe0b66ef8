from __future__ import annotations

import queue
import threading
from typing import Iterable, Iterator, Optional
from google.cloud import speech_v1p1beta1 as speech

from events import TranscriptEvent, TranscriptResult

_SPEECH_CLIENT: Optional[speech.SpeechClient] = None


def get_speech_client() -> speech.SpeechClient:
    """
    One client for the whole session. The recognizer stream is reopened on
    every language change and after Google's stream time limit, and each new
    client would repeat the gRPC channel setup.
    """
    global _SPEECH_CLIENT
    if _SPEECH_CLIENT is None:
        _SPEECH_CLIENT = speech.SpeechClient()
    return _SPEECH_CLIENT


def make_streaming_config(sample_rate: int, language_code: str) -> speech.StreamingRecognitionConfig:
    # interim results feed the live display, finals feed the filler counts
    config = speech.RecognitionConfig(
        encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
        sample_rate_hertz=sample_rate,
        language_code=language_code,
        enable_automatic_punctuation=True,
        model="latest_long",
    )
    return speech.StreamingRecognitionConfig(
        config=config,
        interim_results=True,
        single_utterance=False,
    )


def offer_audio(audio_q: "queue.Queue[bytes]", chunk: bytes) -> bool:
    """
    Hand a PCM block to the recognizer without blocking the mic callback.
    Drops the block (returns False) when the queue is full.
    """
    try:
        audio_q.put_nowait(chunk)
    except queue.Full:
        return False
    return True


def audio_requests(
    audio_q: "queue.Queue[bytes]",
    stop: threading.Event,
) -> Iterator[speech.StreamingRecognizeRequest]:
    while not stop.is_set():
        try:
            chunk = audio_q.get(timeout=0.5)
        except queue.Empty:
            continue
        yield speech.StreamingRecognizeRequest(audio_content=chunk)


def streaming_recognize(
    requests: Iterable[speech.StreamingRecognizeRequest],
    streaming_config: speech.StreamingRecognitionConfig,
):
    client = get_speech_client()
    return client.streaming_recognize(config=streaming_config, requests=requests)


def to_transcript_event(resp) -> TranscriptEvent:
    """
    Google sends only the results that changed in each response, so the whole
    list is new (result_index 0).
    """
    results = []
    for r in resp.results:
        txt = r.alternatives[0].transcript if r.alternatives else ""
        results.append(TranscriptResult(transcript=txt or "", is_final=bool(r.is_final)))
    return TranscriptEvent(result_index=0, results=results)
