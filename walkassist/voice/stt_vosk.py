"""Offline speech-to-text session using Vosk."""

from __future__ import annotations

from typing import Any, Callable, Optional

import json
import logging
import os
import queue
import threading

from walkassist.config import STT_SAMPLE_RATE, VOSK_MODEL_PATH


class VoskSession:
    """Continuous Vosk listening session.

    Mirrors a browser recognition session: ``start()`` / ``stop()`` plus
    ``on_result(text)``, ``on_error(exc)`` and ``on_end()`` callbacks. The
    session runs on its own thread and ends after ``stop()`` or an error;
    ``on_end`` fires in both cases.
    """

    def __init__(
        self,
        *,
        model_path: Optional[str] = None,
        sample_rate: int = STT_SAMPLE_RATE,
        device: Optional[int] = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._sample_rate = sample_rate
        self._device = device
        self._model_path = model_path or VOSK_MODEL_PATH
        self._model: Optional[Any] = None
        self._vosk: Optional[Any] = None
        self._sd: Optional[Any] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._ending = False

        self.on_result: Callable[[str], None] = lambda _text: None
        self.on_error: Callable[[BaseException], None] = lambda _exc: None
        self.on_end: Callable[[], None] = lambda: None

        try:
            import sounddevice as sd
            import vosk
        except Exception as exc:
            self._logger.warning("Speech recognition unavailable: %s", exc)
            return

        self._vosk = vosk
        self._sd = sd
        if os.path.isdir(self._model_path):
            try:
                self._model = vosk.Model(self._model_path)
            except Exception as exc:
                self._logger.error("Vosk model init failed: %s", exc)
        else:
            self._logger.warning("Vosk model path not found: %s", self._model_path)

    @property
    def available(self) -> bool:
        return self._model is not None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if not self.available:
            return
        if self.running:
            if not self._ending:
                return
            # Previous session is inside its end callback; let it finish.
            if self._thread is not threading.current_thread():
                self._thread.join(timeout=1.0)
        self._ending = False
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._listen, name="VoskSession", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def _listen(self) -> None:
        recognizer = self._vosk.KaldiRecognizer(self._model, self._sample_rate)
        results: queue.Queue[str] = queue.Queue(maxsize=16)

        def _callback(indata: bytes, _frames: int, _time, _status) -> None:
            if _status:
                self._logger.debug("STT stream status: %s", _status)
            if recognizer.AcceptWaveform(bytes(indata)):
                result = json.loads(recognizer.Result())
                text = (result.get("text") or "").strip()
                if text:
                    try:
                        results.put_nowait(text)
                    except queue.Full:
                        return

        try:
            with self._sd.RawInputStream(
                samplerate=self._sample_rate,
                blocksize=8000,
                dtype="int16",
                channels=1,
                callback=_callback,
                device=self._device,
            ):
                # Handlers run here, never inside the audio callback.
                while not self._stop_event.is_set():
                    try:
                        text = results.get(timeout=0.1)
                    except queue.Empty:
                        continue
                    self.on_result(text)
        except Exception as exc:
            self.on_error(exc)
        finally:
            self._ending = True
            self.on_end()
