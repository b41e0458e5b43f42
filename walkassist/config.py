"""Application configuration constants."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Tuple

# Detection loop
FRAME_SKIP: int = 3
CONF_THRESHOLD: float = 0.4
LABEL_HISTORY_N: int = 6
MAJORITY_RATIO: float = 0.4
NOTHING_LABEL: str = "nothing"

# Spatial heuristics
FAR_DISTANCE_M: float = 5.0
NEAR_DISTANCE_M: float = 0.5
DISTANCE_HEIGHT_SCALE: float = 6.0

# Hazards
HAZARD_LABELS: Tuple[str, ...] = ("car", "bicycle", "motorcycle", "bus", "truck")
HAZARD_BOTTOM_RATIO: float = 0.7

# Speech
MIN_ANNOUNCE_INTERVAL_S: float = 2.5
SPEECH_RATE: int = 240  # ~1.2x the pyttsx3 default
VOICE_NAME_PREFERENCES: Tuple[str, ...] = ("Google US English", "Google UK English Female")
VOICE_LANGUAGE_PREFIX: str = "en"

# Voice commands
RECOGNITION_RESTART_DELAY_S: float = 0.5
STT_SAMPLE_RATE: int = 16000

# Paths
WEIGHTS_PATH: str = os.environ.get(
    "WALKASSIST_WEIGHTS", os.path.join("assets", "yolov8n.pt")
)
VOSK_MODEL_PATH: str = os.environ.get("VOSK_MODEL_PATH", os.path.join("assets", "vosk-model"))

# UI
WINDOW_NAME: str = "Walking Assistant"
DEBUG_DRAW: bool = True
IDLE_SLEEP_S: float = 0.1


@dataclass(frozen=True)
class PipelineConfig:
    frame_skip: int = FRAME_SKIP
    conf_threshold: float = CONF_THRESHOLD
    history_len: int = LABEL_HISTORY_N
    majority_ratio: float = MAJORITY_RATIO
    min_announce_interval_s: float = MIN_ANNOUNCE_INTERVAL_S
    hazard_labels: Tuple[str, ...] = field(default=HAZARD_LABELS)
    hazard_bottom_ratio: float = HAZARD_BOTTOM_RATIO
    restart_delay_s: float = RECOGNITION_RESTART_DELAY_S
