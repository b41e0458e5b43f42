"""Ground-level hazard heuristic."""

from __future__ import annotations

from typing import Iterable, Sequence

from walkassist.common import DetectedObject, Zone
from walkassist.config import HAZARD_BOTTOM_RATIO, HAZARD_LABELS
from walkassist.logic.spatial import zone_of


class HazardDetector:
    """Flags a vehicle straight ahead whose box reaches the lower part of the frame.

    Stateless; repeated hazards across ticks are left to the announcement throttle.
    """

    def __init__(
        self,
        labels: Iterable[str] = HAZARD_LABELS,
        bottom_ratio: float = HAZARD_BOTTOM_RATIO,
    ) -> None:
        self._labels = {label.strip().lower() for label in labels}
        self._bottom_ratio = bottom_ratio

    def check(
        self, detections: Sequence[DetectedObject], frame_width: float, frame_height: float
    ) -> bool:
        limit = frame_height * self._bottom_ratio
        for det in detections:
            if det.label.lower() not in self._labels:
                continue
            if zone_of(det.box, frame_width) is Zone.CENTER and det.box.bottom > limit:
                return True
        return False
