"""Throttled, deduplicated speech output."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional, Protocol, Sequence, Tuple

from walkassist.config import (
    MIN_ANNOUNCE_INTERVAL_S,
    VOICE_LANGUAGE_PREFIX,
    VOICE_NAME_PREFERENCES,
)
from walkassist.voice.speech_formatter import SpeechFormatter
from walkassist.voice.speech_module import VoiceInfo

VoiceMatcher = Callable[[VoiceInfo], bool]


class Synthesizer(Protocol):
    def speak(self, text: str, voice: Optional[VoiceInfo] = None) -> None: ...

    def cancel(self) -> None: ...

    def voices(self, refresh: bool = False) -> List[VoiceInfo]: ...


def name_contains(fragment: str) -> VoiceMatcher:
    return lambda voice: fragment in voice.name


def language_prefix(prefix: str) -> VoiceMatcher:
    want = prefix.lower()

    def _match(voice: VoiceInfo) -> bool:
        return any(lang.lower().startswith(want) for lang in voice.languages)

    return _match


@dataclass(frozen=True)
class VoicePreference:
    """Ordered voice matchers; the first matcher that hits any voice wins."""

    matchers: Tuple[VoiceMatcher, ...] = field(default_factory=tuple)

    @classmethod
    def default(cls) -> "VoicePreference":
        matchers = [name_contains(name) for name in VOICE_NAME_PREFERENCES]
        matchers.append(language_prefix(VOICE_LANGUAGE_PREFIX))
        return cls(tuple(matchers))

    def resolve(self, voices: Sequence[VoiceInfo]) -> Optional[VoiceInfo]:
        if not voices:
            return None
        for matcher in self.matchers:
            for voice in voices:
                if matcher(voice):
                    return voice
        return voices[0]


class AnnouncementManager:
    """Speaks text at most once per ``min_interval_s``.

    Requests inside the interval are dropped, not queued, so repeating the
    last text only speaks again once the interval has passed. Several
    triggers in the same detection tick may produce a single utterance.
    """

    def __init__(
        self,
        synth: Synthesizer,
        min_interval_s: float = MIN_ANNOUNCE_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
        preference: VoicePreference | None = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._synth = synth
        self._min_interval_s = min_interval_s
        self._clock = clock
        self._preference = preference or VoicePreference.default()
        self._lock = threading.Lock()

        self._last_spoken_text = ""
        self._last_spoken_at: Optional[float] = None

        self._voice: Optional[VoiceInfo] = None
        self._voice_ids: FrozenSet[str] = frozenset()

    @property
    def last_spoken_text(self) -> str:
        return self._last_spoken_text

    @property
    def voice(self) -> Optional[VoiceInfo]:
        return self._voice

    def announce(self, text: str) -> bool:
        """Returns True if the text was handed to the synthesizer."""
        text = (text or "").strip()
        if not text:
            return False
        with self._lock:
            now = self._clock()
            if self._last_spoken_at is not None and now - self._last_spoken_at < self._min_interval_s:
                if text == self._last_spoken_text:
                    self._logger.debug("Skipping duplicate speech: %s", text)
                else:
                    self._logger.debug("Skipping speech due to cooldown: %s", text)
                return False
            self._say(text)
            self._last_spoken_at = now
            return True

    def stop_speaking(self, confirmation: str = SpeechFormatter.STOPPED) -> None:
        """Cancel current speech and leave the throttle open for the next announcement."""
        with self._lock:
            self._synth.cancel()
            self._last_spoken_at = None
            if confirmation:
                self._say(confirmation)

    def on_voices_changed(self, voices: Sequence[VoiceInfo]) -> Optional[VoiceInfo]:
        ids = frozenset(v.id for v in voices)
        with self._lock:
            if ids == self._voice_ids and self._voice is not None:
                return self._voice
            self._voice_ids = ids
            self._voice = self._preference.resolve(voices)
        if self._voice is not None:
            self._logger.info("Voice selected: %s", self._voice.name or self._voice.id)
        else:
            self._logger.warning("No synthesis voices available; using engine default.")
        return self._voice

    def refresh_voice(self) -> Optional[VoiceInfo]:
        return self.on_voices_changed(self._synth.voices(refresh=True))

    def _say(self, text: str) -> None:
        self._logger.info("Speaking: %s", text)
        self._synth.cancel()
        self._synth.speak(text, self._voice)
        self._last_spoken_text = text
