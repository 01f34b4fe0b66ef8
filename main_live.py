from __future__ import annotations

import functools
import queue
import sys
import threading
import time
from typing import Optional

from config import (
    AUDIO_QUEUE_MAX,
    LOG_PATH,
    PRINT_EVERY_SEC,
    SAMPLE_RATE,
    STT_LANG,
    TICK_SEC,
)
from aggregator import top_terms
from events import TranscriptEvent
from mic_level import MicLevel
from session import ACTION_QUIT, ACTION_RESTART_STT, FillerSession, apply_command
from stt_gcloud import (
    audio_requests,
    make_streaming_config,
    offer_audio,
    streaming_recognize,
    to_transcript_event,
)


def stt_worker(
    audio_q: "queue.Queue[bytes]",
    inbox: queue.Queue,
    stop: threading.Event,
    lang_code: str,
) -> None:
    """
    Recognizer thread. Never touches the session: every transcript event goes
    through `inbox` so the main loop stays the only writer. Google closes a
    stream after a few minutes, so it is reopened until `stop` is set.
    """
    streaming_config = make_streaming_config(sample_rate=SAMPLE_RATE, language_code=lang_code)
    while not stop.is_set():
        try:
            for resp in streaming_recognize(audio_requests(audio_q, stop), streaming_config):
                if stop.is_set():
                    return
                inbox.put(to_transcript_event(resp))
        except Exception as e:
            if stop.is_set():
                return
            print(f"[STT error] {repr(e)}")
            inbox.put(e)
            return


def start_stt(audio_q: "queue.Queue[bytes]", inbox: queue.Queue, lang_code: str) -> threading.Event:
    stop = threading.Event()
    threading.Thread(target=stt_worker, args=(audio_q, inbox, stop, lang_code), daemon=True).start()
    return stop


def stdin_worker(inbox: queue.Queue) -> None:
    for line in sys.stdin:
        inbox.put(line.strip())


def _print_status(sess: FillerSession) -> None:
    diag = sess.diagnostics()
    level = diag["level"]
    level_txt = f"{level:.3f}" if level is not None else "-"
    print(
        f"[Status] asr={diag['asr_status']} lang={diag['lang']} vad={diag['vad_phase']} "
        f"thr={diag['threshold']:.3f} level={level_txt} mic={diag['mic_state']}"
    )
    top = ", ".join(f"{t}={c}" for t, c in top_terms(sess.agg, n=8))
    print(f"[Counts] {top or '-'}")


def _drain(audio_q: "queue.Queue[bytes]") -> None:
    while True:
        try:
            audio_q.get_nowait()
        except queue.Empty:
            return


def run(lang_code: str = STT_LANG) -> FillerSession:
    sess = FillerSession(lang=lang_code, log_path=LOG_PATH)
    inbox: queue.Queue = queue.Queue()
    audio_q: "queue.Queue[bytes]" = queue.Queue(maxsize=AUDIO_QUEUE_MAX)
    stt_stop: Optional[threading.Event] = None

    mic = MicLevel(on_audio=functools.partial(offer_audio, audio_q))
    sess.amplitude_source_starting()
    try:
        mic.start()
        sess.attach_amplitude_source(mic.get_level)
    except Exception as e:
        print(f"[Mic error] {repr(e)}")
        sess.amplitude_source_failed()

    # The recognizer is fed from the same capture stream, so without a mic
    # there is no audio to transcribe either.
    if mic.ready:
        sess.set_lexical_enabled(True)
        stt_stop = start_stt(audio_q, inbox, sess.scanner.lang)
    else:
        sess.transcript_source_failed()

    threading.Thread(target=stdin_worker, args=(inbox,), daemon=True).start()
    print("Commands: r=reset  t=toggle ASR  v=toggle VAD  l <lang>=set ASR language  q=quit")

    last_print = time.time()
    running = True
    try:
        while running:
            while True:
                try:
                    item = inbox.get_nowait()
                except queue.Empty:
                    break
                if isinstance(item, TranscriptEvent):
                    for hit in sess.on_transcript(item):
                        print(f"[Filler] {hit.term}  <- {sess.highlight(hit.snippet)}")
                elif isinstance(item, Exception):
                    # nobody reads the recognizer feed any more
                    mic.on_audio = None
                    _drain(audio_q)
                    sess.transcript_source_failed()
                    stt_stop = None
                elif isinstance(item, str):
                    action = apply_command(sess, item)
                    if action == ACTION_QUIT:
                        running = False
                    elif action == ACTION_RESTART_STT and stt_stop is not None:
                        stt_stop.set()
                        _drain(audio_q)
                        stt_stop = start_stt(audio_q, inbox, sess.scanner.lang)

            hit = sess.tick()
            if hit is not None:
                print(f"[Filler] {hit.term}  ({hit.snippet})")

            if time.time() - last_print >= PRINT_EVERY_SEC:
                _print_status(sess)
                last_print = time.time()

            time.sleep(TICK_SEC)
    except KeyboardInterrupt:
        print("\nStopped by user.")
    finally:
        if stt_stop is not None:
            stt_stop.set()
        mic.stop()

    return sess


if __name__ == "__main__":
    print("Filler detector: transcript + voice activity")
    run(sys.argv[1] if len(sys.argv) > 1 else STT_LANG)
