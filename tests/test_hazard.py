from walkassist.common import DetectedObject, Rect
from walkassist.logic.hazard import HazardDetector

W, H = 640, 480


def _det(label, x, y, w, h, conf=0.9):
    return DetectedObject(box=Rect(x, y, w, h), label=label, confidence=conf)


def test_vehicle_low_in_center_is_hazard():
    hazard = HazardDetector()
    assert hazard.check([_det("car", 270, 300, 100, 100)], W, H)


def test_vehicle_high_in_frame_is_not_hazard():
    hazard = HazardDetector()
    # bottom edge at 300 < 0.7 * 480
    assert not hazard.check([_det("car", 270, 100, 100, 200)], W, H)


def test_vehicle_on_the_side_is_not_hazard():
    hazard = HazardDetector()
    assert not hazard.check([_det("bicycle", 10, 300, 100, 150)], W, H)


def test_non_vehicle_is_ignored():
    hazard = HazardDetector()
    assert not hazard.check([_det("person", 270, 300, 100, 170)], W, H)


def test_low_confidence_still_counts():
    hazard = HazardDetector()
    assert hazard.check([_det("truck", 270, 300, 100, 100, conf=0.1)], W, H)


def test_custom_vocabulary():
    hazard = HazardDetector(labels=["Dog"], bottom_ratio=0.5)
    assert hazard.check([_det("dog", 270, 200, 100, 100)], W, H)
    assert not hazard.check([_det("car", 270, 300, 100, 100)], W, H)


def test_empty_detections():
    assert not HazardDetector().check([], W, H)
