"""Camera capture module."""

from __future__ import annotations

import logging
import os
import sys
import time
from typing import Optional, TYPE_CHECKING, Any, Iterable, Tuple

from walkassist.common import DeviceUnavailable, PermissionDenied

if TYPE_CHECKING:
    import numpy as np

Frame = "np.ndarray" if TYPE_CHECKING else Any


class CameraStream:
    """Simple camera stream wrapper.

    Nothing is opened until :meth:`start`; a failed start can be retried.
    """

    def __init__(
        self,
        camera_index: int = 0,
        width: int | None = 640,
        height: int | None = 480,
        fps_smoothing: float = 0.9,
        backend: int | None = None,
        fallback_indices: Iterable[int] = (1, 2, 3),
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._cv2 = None
        self._cap = None
        self._camera_index = camera_index
        self._fallback_indices = tuple(fallback_indices)
        self._width = width
        self._height = height
        self._fps_smoothing = max(0.0, min(fps_smoothing, 0.99))
        self._last_ts = time.monotonic()
        self._fps = 0.0
        self._backend = backend
        self._frame_size: Tuple[int, int] = (0, 0)

    @property
    def fps(self) -> float:
        return self._fps

    @property
    def started(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    @property
    def frame_size(self) -> Tuple[int, int]:
        """(width, height) of the last frame read."""
        return self._frame_size

    def start(self) -> None:
        if self.started:
            return
        try:
            import cv2
        except Exception as exc:
            raise DeviceUnavailable(f"OpenCV not available: {exc}") from exc

        self._cv2 = cv2
        if self._backend is None and sys.platform == "darwin":
            self._backend = cv2.CAP_AVFOUNDATION
        indices = [self._camera_index] + [
            idx for idx in self._fallback_indices if idx != self._camera_index
        ]
        self._cap = self._open_camera(indices)
        if self._cap is None:
            if self._permission_denied(indices):
                raise PermissionDenied("Camera access denied. Check device permissions.")
            raise DeviceUnavailable("No camera found. Try a different index.")

    def read(self) -> Optional[Frame]:
        if not self.started:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        height, width = frame.shape[:2]
        self._frame_size = (int(width), int(height))
        self._update_fps()
        return frame

    def release(self) -> None:
        if self._cap is not None:
            if self._cap.isOpened():
                self._cap.release()
            self._cap = None
            self._logger.info("Camera released")

    def _open_camera(self, indices: Iterable[int]) -> Optional[Any]:
        for idx in indices:
            cap = self._create_capture(idx)
            if cap is None:
                continue
            if cap.isOpened():
                self._configure_capture(cap)
                self._logger.info("Camera opened at index %s", idx)
                return cap
            cap.release()
        return None

    def _create_capture(self, index: int) -> Optional[Any]:
        try:
            if self._backend is not None:
                return self._cv2.VideoCapture(index, self._backend)
            return self._cv2.VideoCapture(index)
        except Exception as exc:
            self._logger.warning("Failed to open camera index %s: %s", index, exc)
            return None

    def _configure_capture(self, cap: Any) -> None:
        if self._width is not None:
            cap.set(self._cv2.CAP_PROP_FRAME_WIDTH, self._width)
        if self._height is not None:
            cap.set(self._cv2.CAP_PROP_FRAME_HEIGHT, self._height)

    @staticmethod
    def _permission_denied(indices: Iterable[int]) -> bool:
        # Only detectable on Linux: the device node exists but is not readable.
        for idx in indices:
            node = f"/dev/video{idx}"
            if os.path.exists(node) and not os.access(node, os.R_OK):
                return True
        return False

    def _update_fps(self) -> None:
        now = time.monotonic()
        dt = now - self._last_ts
        if dt > 0:
            inst = 1.0 / dt
            if self._fps == 0.0:
                self._fps = inst
            else:
                self._fps = (self._fps * self._fps_smoothing) + (inst * (1.0 - self._fps_smoothing))
        self._last_ts = now
