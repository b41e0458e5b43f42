"""Main integration entry point."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from walkassist.camera_module import CameraStream
from walkassist.common import CaptureError, InferenceError
from walkassist.config import DEBUG_DRAW, IDLE_SLEEP_S, WEIGHTS_PATH, WINDOW_NAME, PipelineConfig
from walkassist.detection_module import DetectionLoop, TickResult
from walkassist.logic.state import PerceptionState
from walkassist.voice.announcer import AnnouncementManager
from walkassist.voice.command_channel import VoiceCommandChannel
from walkassist.voice.commands import Command, key_to_command
from walkassist.voice.speech_formatter import SpeechFormatter
from walkassist.voice.speech_module import SpeechEngine
from walkassist.voice.stt_vosk import VoskSession
from walkassist.vision_module import VisionEngine


def _draw_debug(cv2, frame, result: Optional[TickResult], fps: float, stable: str) -> None:
    if result is not None:
        for det in result.detections:
            box = det.box
            x1, y1 = int(box.x), int(box.y)
            x2, y2 = int(box.x + box.width), int(box.y + box.height)
            cv2.rectangle(frame, (x1, y1), (x2, y2), (0, 255, 0), 2)
            cv2.putText(
                frame,
                f"{det.label} {det.confidence:.2f}",
                (x1, max(20, y1 - 5)),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.6,
                (0, 255, 0),
                2,
            )
    cv2.putText(
        frame,
        f"FPS: {fps:.1f} | Stable: {stable}",
        (10, 30),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.7,
        (255, 0, 0),
        2,
    )
    if result is not None and result.hazard:
        cv2.putText(frame, "HAZARD", (10, 55), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 255), 2)


class AssistantApp:
    """Owns the collaborators and the lifecycle of the perception pipeline."""

    def __init__(
        self,
        camera: CameraStream,
        vision: VisionEngine,
        speech: SpeechEngine,
        session: VoskSession,
        config: PipelineConfig | None = None,
        on_status: Callable[[str], None] | None = None,
        debug_draw: bool = False,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._config = config or PipelineConfig()
        self._camera = camera
        self._vision = vision
        self._speech = speech
        self._on_status = on_status
        self._debug_draw = debug_draw
        self._status = ""
        self._lock = threading.Lock()
        self._model_ready = False
        self._stopped = False

        self.announcer = AnnouncementManager(speech, self._config.min_announce_interval_s)
        self.state = PerceptionState()
        self.loop: Optional[DetectionLoop] = None
        self.channel = VoiceCommandChannel(
            session,
            lambda: self.state,
            self.announcer,
            self.start_capture,
            self._config.restart_delay_s,
        )

    @property
    def status(self) -> str:
        return self._status

    @property
    def running(self) -> bool:
        return self.loop is not None

    def set_status(self, status: str) -> None:
        self._status = status
        self._logger.info("Status: %s", status)
        if self._on_status is not None:
            self._on_status(status)

    def load_model(self) -> bool:
        self.set_status("Loading object detection model...")
        try:
            self._vision.load()
        except InferenceError as exc:
            self._logger.error("Model load error: %s", exc)
            self.set_status("Failed to load models.")
            return False
        self._model_ready = True
        self.set_status("Models ready. Say 'start camera' to begin.")
        return True

    def start_voice(self) -> None:
        self.announcer.refresh_voice()
        self.channel.start()

    def start_capture(self) -> bool:
        with self._lock:
            if self._stopped:
                return False
            if self.loop is not None:
                self._logger.info("Camera already running.")
                return True
            if not self._model_ready:
                self.set_status("Object detection unavailable.")
                return False
            try:
                self._camera.start()
            except CaptureError as exc:
                self._logger.error("Camera error: %s", exc)
                self.set_status("Camera permission denied or unavailable.")
                return False
            self.state = PerceptionState()
            self.loop = DetectionLoop(self._vision, self.state, self.announcer, self._config)
        self.set_status("Camera started. Detecting surroundings...")
        self.announcer.announce(SpeechFormatter.INTRO)
        return True

    def step(self) -> bool:
        """Read one frame and tick the loop. Returns False when quitting."""
        loop = self.loop
        if loop is None:
            time.sleep(IDLE_SLEEP_S)
            return not self._stopped
        frame = self._camera.read()
        if frame is not None:
            # The overlay draws into ``frame`` while inference may still read it.
            loop.tick(frame.copy() if self._debug_draw else frame)
        if not self._debug_draw:
            return not self._stopped
        return self._show(frame, loop)

    def run(self) -> None:
        try:
            while self.step():
                pass
        finally:
            self.stop()

    def stop(self) -> None:
        """Tear everything down; safe to call more than once."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            loop, self.loop = self.loop, None
        self.channel.stop()
        if loop is not None:
            loop.shutdown(wait=False)
        self._camera.release()
        self._speech.shutdown()
        self.set_status("Stopped.")

    def _show(self, frame, loop: DetectionLoop) -> bool:
        import cv2

        if frame is not None:
            _draw_debug(cv2, frame, loop.last_result, self._camera.fps, self.state.stable_label)
            cv2.imshow(WINDOW_NAME, frame)
        key = cv2.waitKey(1) & 0xFF
        if key in (ord("q"), 27):
            return False
        command = key_to_command(key)
        if command is not Command.UNKNOWN:
            self.channel.dispatch(command)
        return not self._stopped


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    app = AssistantApp(
        camera=CameraStream(),
        vision=VisionEngine(weights_path=WEIGHTS_PATH),
        speech=SpeechEngine(),
        session=VoskSession(),
        debug_draw=DEBUG_DRAW,
    )
    if not app.load_model():
        app.stop()
        return
    app.start_voice()
    # Start immediately; "start camera" retries after a failure.
    app.start_capture()
    try:
        app.run()
    except KeyboardInterrupt:
        pass
    finally:
        app.stop()
        if DEBUG_DRAW:
            import cv2

            cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
