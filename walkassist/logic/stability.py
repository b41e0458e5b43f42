"""Prediction stabilization helpers."""

from __future__ import annotations

from collections import Counter, deque
from typing import Deque, Iterable, List

from walkassist.config import LABEL_HISTORY_N, MAJORITY_RATIO, NOTHING_LABEL


def stable_label(history: Iterable[str], ratio: float = MAJORITY_RATIO) -> str:
    """Majority vote over recent labels.

    Returns ``NOTHING_LABEL`` until one label fills at least ``ratio`` of the
    history. Ties go to the label seen first.
    """
    labels = list(history)
    if not labels:
        return NOTHING_LABEL
    counts = Counter(labels)
    label, votes = counts.most_common(1)[0]
    if votes < len(labels) * ratio:
        return NOTHING_LABEL
    return label


class StabilityFilter:
    """Ring-buffer voting filter for stable labels."""

    def __init__(self, maxlen: int = LABEL_HISTORY_N, ratio: float = MAJORITY_RATIO) -> None:
        if maxlen < 1:
            raise ValueError("maxlen must be >= 1")
        self._buffer: Deque[str] = deque(maxlen=maxlen)
        self._ratio = ratio

    @property
    def history(self) -> List[str]:
        return list(self._buffer)

    def add(self, label: str) -> None:
        self._buffer.append(label)

    def stable_label(self) -> str:
        return stable_label(self._buffer, self._ratio)

    def clear(self) -> None:
        self._buffer.clear()
