"""Shared perception state read by the detection loop and the voice channel."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

from walkassist.common import Zone
from walkassist.config import NOTHING_LABEL


@dataclass(frozen=True)
class Surroundings:
    """Distinct labels visible in each zone, in order of first appearance."""

    left: Tuple[str, ...] = ()
    center: Tuple[str, ...] = ()
    right: Tuple[str, ...] = ()

    @classmethod
    def from_zones(cls, zones: Dict[Zone, list]) -> "Surroundings":
        return cls(
            left=tuple(zones.get(Zone.LEFT, ())),
            center=tuple(zones.get(Zone.CENTER, ())),
            right=tuple(zones.get(Zone.RIGHT, ())),
        )

    def labels(self, zone: Zone) -> Tuple[str, ...]:
        return getattr(self, zone.value)

    def is_empty(self) -> bool:
        return not (self.left or self.center or self.right)

    def same_labels(self, other: "Surroundings") -> bool:
        # Set-wise per zone: order inside a zone does not count as a change.
        return all(set(self.labels(z)) == set(other.labels(z)) for z in Zone)


class SurroundingsBuilder:
    def __init__(self) -> None:
        self._zones: Dict[Zone, list] = {zone: [] for zone in Zone}

    def add(self, zone: Zone, label: str) -> None:
        labels = self._zones[zone]
        if label not in labels:
            labels.append(label)

    def build(self) -> Surroundings:
        return Surroundings.from_zones(self._zones)


@dataclass(frozen=True)
class PerceptionSnapshot:
    stable_label: str = NOTHING_LABEL
    current_distance: float = 0.0
    surroundings: Surroundings = field(default_factory=Surroundings)


class PerceptionState:
    """Single source of truth for what the assistant currently sees.

    The detection loop is the only writer. Readers call :meth:`snapshot` and
    get an immutable copy, so a query never sees a half-applied tick.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = PerceptionSnapshot()

    @property
    def stable_label(self) -> str:
        return self.snapshot().stable_label

    @property
    def current_distance(self) -> float:
        return self.snapshot().current_distance

    @property
    def surroundings(self) -> Surroundings:
        return self.snapshot().surroundings

    def snapshot(self) -> PerceptionSnapshot:
        with self._lock:
            return self._snapshot

    def update(self, **changes) -> PerceptionSnapshot:
        with self._lock:
            self._snapshot = replace(self._snapshot, **changes)
            return self._snapshot
