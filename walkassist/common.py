"""Shared dataclasses, enums and errors for the perception pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Rect:
    """Box in frame pixels: top-left corner plus size."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x_center(self) -> float:
        return self.x + self.width / 2.0

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class DetectedObject:
    box: Rect
    label: str
    confidence: float


class Zone(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class CaptureError(RuntimeError):
    """Camera could not be started."""


class PermissionDenied(CaptureError):
    pass


class DeviceUnavailable(CaptureError):
    pass


class InferenceError(RuntimeError):
    """Detector could not be loaded or failed on a frame."""
