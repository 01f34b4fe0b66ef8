import queue
import threading
from types import SimpleNamespace

import stt_gcloud


def _result(text, is_final):
    return SimpleNamespace(alternatives=[SimpleNamespace(transcript=text)], is_final=is_final)


def test_response_becomes_transcript_event():
    resp = SimpleNamespace(results=[_result("um so", True), _result("you", False)])
    event = stt_gcloud.to_transcript_event(resp)

    assert event.result_index == 0
    assert [(r.transcript, r.is_final) for r in event.results] == [("um so", True), ("you", False)]


def test_result_without_alternatives():
    resp = SimpleNamespace(results=[SimpleNamespace(alternatives=[], is_final=True)])
    event = stt_gcloud.to_transcript_event(resp)
    assert event.results[0].transcript == ""


def test_offer_audio_drops_when_queue_is_full():
    audio_q = queue.Queue(maxsize=2)
    assert stt_gcloud.offer_audio(audio_q, b"a")
    assert stt_gcloud.offer_audio(audio_q, b"b")
    assert not stt_gcloud.offer_audio(audio_q, b"c")
    assert audio_q.qsize() == 2


def test_audio_requests_wrap_queued_chunks_until_stopped():
    audio_q = queue.Queue()
    audio_q.put(b"\x00\x01")
    stop = threading.Event()

    gen = stt_gcloud.audio_requests(audio_q, stop)
    req = next(gen)
    assert req.audio_content == b"\x00\x01"

    stop.set()
    assert list(gen) == []
