import types

import numpy as np
import pytest

from walkassist.common import InferenceError, Rect
from walkassist.vision_module import VisionEngine


class FakeTensor:
    def __init__(self, values):
        self._values = np.asarray(values)

    def cpu(self):
        return self

    def numpy(self):
        return self._values


class FakeBoxes:
    def __init__(self, xyxy, conf, cls):
        self.xyxy = FakeTensor(xyxy)
        self.conf = FakeTensor(conf)
        self.cls = FakeTensor(cls)

    def __len__(self):
        return len(self.xyxy.numpy())


class FakeYolo:
    names = {0: "person", 2: "car", 46: "banana"}

    def __init__(self, boxes):
        self._boxes = boxes

    def predict(self, source, verbose=False):
        return [types.SimpleNamespace(boxes=self._boxes, names=self.names)]


def _engine(model):
    engine = VisionEngine(weights_path="missing.pt")
    engine._model = model
    return engine


def test_detect_keeps_every_class_and_clips_boxes():
    boxes = FakeBoxes(
        xyxy=[[10, 20, 110, 220], [600, 400, 700, 500], [0, 0, 5, 5]],
        conf=[0.9, 0.6, 0.3],
        cls=[0, 2, 46],
    )
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    detections = _engine(FakeYolo(boxes)).detect(frame)
    assert [det.label for det in detections] == ["person", "car", "banana"]
    assert detections[0].box == Rect(10, 20, 100, 200)
    assert detections[1].box == Rect(600, 400, 39, 79)
    assert detections[2].confidence == pytest.approx(0.3)


def test_detect_before_load_raises():
    with pytest.raises(InferenceError):
        VisionEngine(weights_path="missing.pt").detect(np.zeros((4, 4, 3), dtype=np.uint8))


def test_load_with_missing_weights_raises(tmp_path):
    engine = VisionEngine(weights_path=str(tmp_path / "missing.pt"))
    with pytest.raises(InferenceError):
        engine.load()
    assert not engine.loaded
