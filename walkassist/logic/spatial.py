"""Zone and distance heuristics for detection boxes."""

from __future__ import annotations

import math

from walkassist.common import Rect, Zone
from walkassist.config import DISTANCE_HEIGHT_SCALE, FAR_DISTANCE_M, NEAR_DISTANCE_M


def zone_of(box: Rect, frame_width: float) -> Zone:
    """Split the frame width into three equal thirds."""
    third = frame_width / 3.0
    center_x = box.x_center
    if center_x < third:
        return Zone.LEFT
    if center_x > 2 * third:
        return Zone.RIGHT
    return Zone.CENTER


def distance_of(box: Rect, frame_height: float) -> float:
    """Rough distance in meters from the apparent box height.

    This is an approximation, not a measurement: taller boxes are reported as
    closer, clamped to ``NEAR_DISTANCE_M``. No camera calibration is involved.
    """
    if frame_height <= 0:
        return FAR_DISTANCE_M
    height_ratio = box.height / frame_height
    return max(NEAR_DISTANCE_M, FAR_DISTANCE_M - height_ratio * DISTANCE_HEIGHT_SCALE)


def round_distance(distance: float) -> float:
    return math.floor(distance * 10 + 0.5) / 10
