"""Vision module using YOLOv8."""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from typing import Any, List, Tuple

from walkassist.common import DetectedObject, InferenceError, Rect


class VisionEngine:
    """YOLOv8 detection engine.

    ``load()`` must succeed before ``detect()``; both raise
    :class:`InferenceError` instead of leaking library exceptions.
    """

    def __init__(self, weights_path: str) -> None:
        self._weights_path = Path(weights_path)
        self._logger = logging.getLogger(__name__)
        self._model = None

    @property
    def loaded(self) -> bool:
        return self._model is not None

    def load(self) -> None:
        if self._model is not None:
            return
        if importlib.util.find_spec("ultralytics") is None:
            raise InferenceError("Ultralytics not installed. Install the package dependencies.")
        if not self._weights_path.exists():
            raise InferenceError(f"YOLO weights not found at {self._weights_path}")

        from ultralytics import YOLO

        try:
            self._model = YOLO(str(self._weights_path))
        except Exception as exc:
            raise InferenceError(f"Failed to load YOLO weights: {exc}") from exc
        self._logger.info("YOLO model loaded from %s", self._weights_path)

    def detect(self, frame: Any) -> List[DetectedObject]:
        if self._model is None:
            raise InferenceError("Model not loaded")
        if frame is None:
            return []
        try:
            results = self._model.predict(source=frame, verbose=False)
        except Exception as exc:
            raise InferenceError(f"YOLO inference failed: {exc}") from exc

        detections: List[DetectedObject] = []
        height, width = frame.shape[:2]
        for result in results:
            boxes = result.boxes
            if boxes is None or len(boxes) == 0:
                continue
            xyxy = boxes.xyxy.cpu().numpy()
            confs = boxes.conf.cpu().numpy()
            classes = boxes.cls.cpu().numpy().astype(int)
            names = result.names or getattr(self._model, "names", {})
            for (x1, y1, x2, y2), conf, cls_idx in zip(xyxy, confs, classes):
                label = names.get(int(cls_idx), str(int(cls_idx)))
                detections.append(
                    DetectedObject(
                        box=self._to_rect((x1, y1, x2, y2), width, height),
                        label=label,
                        confidence=float(conf),
                    )
                )
        return detections

    @staticmethod
    def _to_rect(bbox: Tuple[float, float, float, float], width: int, height: int) -> Rect:
        x1, y1, x2, y2 = bbox
        x1_i = max(0, min(int(x1), width - 1))
        y1_i = max(0, min(int(y1), height - 1))
        x2_i = max(0, min(int(x2), width - 1))
        y2_i = max(0, min(int(y2), height - 1))
        return Rect(x=x1_i, y=y1_i, width=max(0, x2_i - x1_i), height=max(0, y2_i - y1_i))
