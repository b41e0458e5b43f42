# speech_module.py
"""
Offline TTS engine with a single worker thread.

Design goals:
- Offline only (pyttsx3)
- No overlapping speech (single worker thread + queue)
- Fire-and-forget: callers never wait for audio
- cancel() drops queued text and interrupts the current utterance
- Throttling lives in the AnnouncementManager, not here
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from walkassist.config import SPEECH_RATE


@dataclass(frozen=True)
class SpeechConfig:
    rate: Optional[int] = SPEECH_RATE  # words per minute; None = keep default
    volume: Optional[float] = 1.0      # 0.0..1.0; None = keep default
    queue_maxsize: int = 8             # prevent unbounded memory growth


@dataclass(frozen=True)
class VoiceInfo:
    id: str
    name: str
    languages: Tuple[str, ...] = ()


def _voice_languages(voice: Any) -> Tuple[str, ...]:
    langs = getattr(voice, "languages", []) or []
    out: List[str] = []
    for lang in langs:
        if isinstance(lang, bytes):
            lang = lang.decode("utf-8", errors="ignore")
        # espeak reports languages like b"\x05en-us"
        cleaned = "".join(ch for ch in str(lang) if ch.isprintable()).strip()
        if cleaned:
            out.append(cleaned)
    return tuple(out)


def to_voice_info(voice: Any) -> VoiceInfo:
    return VoiceInfo(
        id=str(getattr(voice, "id", "") or ""),
        name=str(getattr(voice, "name", "") or ""),
        languages=_voice_languages(voice),
    )


class SpeechEngine:
    """
    Speech-synthesis collaborator:

        speak(text, voice) -> None   # enqueue, non-blocking
        cancel() -> None             # drop queue + stop current utterance
        voices() -> list[VoiceInfo]
    """

    def __init__(self, config: SpeechConfig | None = None) -> None:
        self.config = config or SpeechConfig()
        self._logger = logging.getLogger(__name__)

        self._q: queue.Queue[Tuple[str, Optional[str]]] = queue.Queue(
            maxsize=self.config.queue_maxsize
        )
        self._shutdown = threading.Event()
        self._engine_lock = threading.Lock()
        self._engine: Optional[Any] = None
        self._voices: List[VoiceInfo] = []
        self._worker: Optional[threading.Thread] = None

        try:
            import pyttsx3

            self._engine = pyttsx3.init()
        except Exception as exc:
            self._logger.warning("Speech synthesis unavailable, output disabled: %s", exc)
            return

        self._apply_config()
        self._voices = self._load_voices()

        self._worker = threading.Thread(target=self._run_worker, name="SpeechWorker", daemon=True)
        self._worker.start()

    # ---------------------------
    # Public API
    # ---------------------------

    @property
    def available(self) -> bool:
        return self._engine is not None and not self._shutdown.is_set()

    def voices(self, refresh: bool = False) -> List[VoiceInfo]:
        if refresh and self._engine is not None:
            self._voices = self._load_voices()
        return list(self._voices)

    def speak(self, text: str, voice: Optional[VoiceInfo] = None) -> None:
        text = (text or "").strip()
        if not text or not self.available:
            return
        try:
            self._q.put_nowait((text, voice.id if voice else None))
        except queue.Full:
            self._logger.debug("Speech queue full, dropping: %s", text)

    def cancel(self) -> None:
        """Drop queued utterances and interrupt the current one."""
        self._clear_queue()
        if self._engine is None:
            return
        # Not under the engine lock: the worker holds it while talking.
        try:
            self._engine.stop()
        except Exception as exc:
            self._logger.debug("pyttsx3 stop failed: %s", exc)

    def shutdown(self) -> None:
        """Stop worker and release resources."""
        if self._shutdown.is_set():
            return
        self._shutdown.set()
        self.cancel()
        if self._worker is None:
            return
        # Unblock worker if it's waiting
        try:
            self._q.put_nowait(("", None))
        except queue.Full:
            pass
        self._worker.join(timeout=2.0)

    # ---------------------------
    # Internal helpers
    # ---------------------------

    def _apply_config(self) -> None:
        with self._engine_lock:
            if self.config.rate is not None:
                try:
                    self._engine.setProperty("rate", int(self.config.rate))
                except Exception as exc:
                    self._logger.debug("Failed to set rate: %s", exc)
            if self.config.volume is not None:
                try:
                    v = float(self.config.volume)
                    self._engine.setProperty("volume", max(0.0, min(1.0, v)))
                except Exception as exc:
                    self._logger.debug("Failed to set volume: %s", exc)

    def _load_voices(self) -> List[VoiceInfo]:
        with self._engine_lock:
            try:
                voices = self._engine.getProperty("voices") or []
            except Exception as exc:
                self._logger.error("Failed to list voices: %s", exc)
                return []
        return [to_voice_info(v) for v in voices]

    def _clear_queue(self) -> None:
        try:
            while True:
                self._q.get_nowait()
                self._q.task_done()
        except queue.Empty:
            return

    def _run_worker(self) -> None:
        while not self._shutdown.is_set():
            try:
                text, voice_id = self._q.get(timeout=0.2)
            except queue.Empty:
                continue

            try:
                # Ignore dummy wake item
                if not text or self._shutdown.is_set():
                    continue
                with self._engine_lock:
                    if voice_id:
                        self._engine.setProperty("voice", voice_id)
                    self._engine.say(text)
                    self._engine.runAndWait()
            except Exception as exc:
                # A failed utterance is skipped; the worker keeps running.
                self._logger.error("pyttsx3 speak failed: %s", exc)
            finally:
                self._q.task_done()
