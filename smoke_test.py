"""Lightweight smoke tests for camera, vision, TTS and STT."""

from __future__ import annotations

import logging
import time

from walkassist.camera_module import CameraStream
from walkassist.common import CaptureError, InferenceError
from walkassist.config import WEIGHTS_PATH
from walkassist.voice.announcer import AnnouncementManager
from walkassist.voice.speech_module import SpeechEngine
from walkassist.voice.stt_vosk import VoskSession
from walkassist.vision_module import VisionEngine


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    camera = CameraStream()
    frame = None
    try:
        camera.start()
        frame = camera.read()
    except CaptureError as exc:
        logging.error("Camera test failed: %s", exc)
    if frame is None:
        logging.error("Camera test failed: no frame.")
    else:
        logging.info("Camera test passed (%dx%d).", *camera.frame_size)
    camera.release()

    vision = VisionEngine(weights_path=WEIGHTS_PATH)
    try:
        vision.load()
        detections = vision.detect(frame) if frame is not None else []
        logging.info("Vision test passed: %d detections.", len(detections))
    except InferenceError as exc:
        logging.warning("Vision test failed: %s", exc)

    speech = SpeechEngine()
    announcer = AnnouncementManager(speech)
    announcer.refresh_voice()
    announcer.announce("Smoke test: Text to speech OK")
    logging.info("TTS test invoked.")

    session = VoskSession()
    logging.info("STT available: %s", session.available)

    time.sleep(3)
    speech.shutdown()


if __name__ == "__main__":
    main()
