"""Detection loop: frames -> inference -> perception state -> announcements."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Sequence

from walkassist.common import DetectedObject
from walkassist.config import NOTHING_LABEL, PipelineConfig
from walkassist.logic.hazard import HazardDetector
from walkassist.logic.spatial import distance_of, zone_of
from walkassist.logic.stability import StabilityFilter
from walkassist.logic.state import PerceptionState, Surroundings, SurroundingsBuilder
from walkassist.voice.speech_formatter import SpeechFormatter


class Detector(Protocol):
    def detect(self, frame: Any) -> List[DetectedObject]: ...


class Announcer(Protocol):
    def announce(self, text: str) -> bool: ...


@dataclass
class TickResult:
    detections: List[DetectedObject]
    primary: Optional[DetectedObject]
    stable_label: str
    label_changed: bool
    surroundings: Surroundings
    surroundings_changed: bool
    hazard: bool
    requested: List[str] = field(default_factory=list)


class DetectionLoop:
    """Runs inference on camera frames, one request at a time.

    ``tick()`` is called for every frame. Only every ``frame_skip``-th tick is
    considered, and a tick that finds an inference still running does nothing.
    Inference and the state update happen on a single worker thread.
    """

    def __init__(
        self,
        detector: Detector,
        state: PerceptionState,
        announcer: Announcer,
        config: PipelineConfig | None = None,
        hazard: HazardDetector | None = None,
        stability: StabilityFilter | None = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._config = config or PipelineConfig()
        self._detector = detector
        self._state = state
        self._announcer = announcer
        self._hazard = hazard or HazardDetector(
            self._config.hazard_labels, self._config.hazard_bottom_ratio
        )
        self._stability = stability or StabilityFilter(
            self._config.history_len, self._config.majority_ratio
        )
        self._frame_skip = max(1, int(self._config.frame_skip))

        self._busy = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="Inference")
        self._closed = False
        self._frame_counter = 0
        self._last_result: Optional[TickResult] = None

        self.ticks = 0
        self.inferences = 0
        self.failures = 0
        self.busy_skips = 0

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    @property
    def state(self) -> PerceptionState:
        return self._state

    @property
    def last_result(self) -> Optional[TickResult]:
        return self._last_result

    @property
    def history(self) -> List[str]:
        return self._stability.history

    def tick(self, frame: Any) -> Optional[Future]:
        """Schedule inference for ``frame`` if this tick is accepted.

        Returns the pending future, or None when the tick was skipped.
        """
        if self._closed or frame is None:
            return None
        self.ticks += 1
        self._frame_counter += 1
        if self._frame_counter % self._frame_skip != 0:
            return None
        if not self._busy.acquire(blocking=False):
            self.busy_skips += 1
            return None
        try:
            return self._executor.submit(self._run, frame)
        except RuntimeError:
            # Executor already shut down.
            self._busy.release()
            return None

    def process(
        self, detections: Sequence[DetectedObject], frame_width: float, frame_height: float
    ) -> TickResult:
        """Apply one tick of detections to the shared state and announce changes."""
        builder = SurroundingsBuilder()
        primary: Optional[DetectedObject] = None
        closest: Optional[float] = None

        confident = sorted(
            (det for det in detections if det.confidence > self._config.conf_threshold),
            key=lambda det: det.confidence,
            reverse=True,
        )
        for det in confident:
            builder.add(zone_of(det.box, frame_width), det.label)
            distance = distance_of(det.box, frame_height)
            if closest is None or distance < closest:
                closest = distance
                primary = det

        self._stability.add(primary.label if primary is not None else NOTHING_LABEL)
        stable = self._stability.stable_label()
        surroundings = builder.build()

        previous = self._state.snapshot()
        label_changed = stable != previous.stable_label
        surroundings_changed = not surroundings.same_labels(previous.surroundings)

        changes = {"current_distance": closest if closest is not None else 0.0}
        if label_changed:
            changes["stable_label"] = stable
        if surroundings_changed:
            changes["surroundings"] = surroundings
        self._state.update(**changes)

        result = TickResult(
            detections=list(detections),
            primary=primary,
            stable_label=stable,
            label_changed=label_changed,
            surroundings=surroundings,
            surroundings_changed=surroundings_changed,
            hazard=self._hazard.check(detections, frame_width, frame_height),
        )

        if label_changed:
            self._logger.debug("Stable label %s -> %s", previous.stable_label, stable)
            self._request(result, SpeechFormatter.stable(stable, closest))
        if surroundings_changed:
            self._request(
                result, SpeechFormatter.surroundings(surroundings, changes["current_distance"])
            )
        if result.hazard:
            self._request(result, SpeechFormatter.HAZARD)

        self._last_result = result
        return result

    def shutdown(self, wait: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)
        self._stability.clear()
        self._logger.info(
            "Detection loop stopped (ticks=%d, inferences=%d, failures=%d, busy_skips=%d)",
            self.ticks,
            self.inferences,
            self.failures,
            self.busy_skips,
        )

    def _run(self, frame: Any) -> Optional[TickResult]:
        try:
            height, width = frame.shape[:2]
            try:
                detections = self._detector.detect(frame)
            except Exception as exc:
                self.failures += 1
                self._logger.warning("Inference failed, skipping tick: %s", exc)
                return None
        finally:
            self._busy.release()
        self.inferences += 1
        try:
            return self.process(detections, width, height)
        except Exception:
            self._logger.exception("Failed to process detections")
            return None

    def _request(self, result: TickResult, text: str) -> None:
        if not text:
            return
        result.requested.append(text)
        self._announcer.announce(text)
