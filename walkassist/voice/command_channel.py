# command_channel.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from walkassist.config import RECOGNITION_RESTART_DELAY_S
from walkassist.logic.state import PerceptionState
from walkassist.voice.announcer import AnnouncementManager
from walkassist.voice.commands import Command, normalize, parse_command
from walkassist.voice.speech_formatter import SpeechFormatter


class RecognitionSession(Protocol):
    on_result: Callable[[str], None]
    on_error: Callable[[BaseException], None]
    on_end: Callable[[], None]

    @property
    def available(self) -> bool: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...


class VoiceCommandChannel:
    """
    Connects speech input -> command -> spoken answer.

    The recognition session restarts itself after every end or error for as
    long as the channel is running, so a flaky microphone never silences the
    command surface.
    """

    def __init__(
        self,
        session: RecognitionSession,
        state_provider: Callable[[], PerceptionState],
        announcer: AnnouncementManager,
        start_camera: Callable[[], object],
        restart_delay_s: float = RECOGNITION_RESTART_DELAY_S,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._session = session
        self._state_provider = state_provider
        self._announcer = announcer
        self._start_camera = start_camera
        self._restart_delay_s = restart_delay_s

        self._running = False
        self._lock = threading.Lock()
        self._restart_timer: Optional[threading.Timer] = None
        self.restarts = 0

        self._session.on_result = self.handle_utterance
        self._session.on_error = self._on_error
        self._session.on_end = self._on_end

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> bool:
        with self._lock:
            if self._running:
                return True
            if not self._session.available:
                self._logger.warning("Speech recognition not supported; voice commands disabled.")
                return False
            self._running = True
        self._session.start()
        self._logger.info("Voice commands listening.")
        return True

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            timer, self._restart_timer = self._restart_timer, None
        if timer is not None:
            timer.cancel()
        self._session.stop()

    def handle_utterance(self, text: str) -> Command:
        command = parse_command(text)
        self._logger.info("Voice command: %r -> %s", normalize(text), command.value)
        return self.dispatch(command)

    def dispatch(self, command: Command) -> Command:
        if command is Command.DESCRIBE:
            snapshot = self._state_provider().snapshot()
            self._announcer.announce(SpeechFormatter.describe(snapshot))
        elif command is Command.STOP_SPEAKING:
            self._announcer.stop_speaking()
        elif command is Command.START_CAMERA:
            self._start_camera()
        return command

    # ---------------------------
    # Session events
    # ---------------------------

    def _on_error(self, exc: BaseException) -> None:
        self._logger.warning("Speech recognition error: %s", exc)

    def _on_end(self) -> None:
        with self._lock:
            if not self._running:
                return
            self.restarts += 1
            if self._restart_delay_s <= 0:
                timer = None
            else:
                timer = threading.Timer(self._restart_delay_s, self._restart)
                timer.daemon = True
                self._restart_timer = timer
        self._logger.debug("Recognition session ended; restarting.")
        if timer is None:
            self._restart()
        else:
            timer.start()

    def _restart(self) -> None:
        with self._lock:
            self._restart_timer = None
            if not self._running:
                return
        self._session.start()
