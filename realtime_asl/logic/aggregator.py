"""Prediction stabilization helpers."""

from __future__ import annotations

import math
import threading
from collections import deque
from typing import Deque, Dict, List, Tuple

from realtime_asl.common import EMPTY_PREDICTION, RawPrediction, StabilizedPrediction
from realtime_asl.config import WINDOW_SIZE


class SmoothingAggregator:
    """Ring-buffer aggregator that averages confidence per label.

    The winning label is the one with the highest mean confidence over the
    window. Equal means resolve to the lexicographically smallest label so the
    result depends only on the multiset of entries, not their arrival order.
    """

    def __init__(self, window_size: int = WINDOW_SIZE) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self._window_size = window_size
        self._buffer: Deque[RawPrediction] = deque(maxlen=window_size)
        self._current: StabilizedPrediction = EMPTY_PREDICTION
        self._lock = threading.Lock()

    @property
    def window_size(self) -> int:
        return self._window_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def ingest(self, prediction: RawPrediction) -> StabilizedPrediction:
        with self._lock:
            self._buffer.append(prediction)
            self._current = self._stabilize(self._buffer)
            return self._current

    def reset(self) -> None:
        with self._lock:
            self._buffer.clear()
            self._current = EMPTY_PREDICTION

    def current_stabilized(self) -> StabilizedPrediction:
        with self._lock:
            return self._current

    def history(self) -> Tuple[RawPrediction, ...]:
        with self._lock:
            return tuple(self._buffer)

    def snapshot(self) -> Tuple[Tuple[RawPrediction, ...], StabilizedPrediction]:
        """History and the value computed from it, read under one lock."""
        with self._lock:
            return tuple(self._buffer), self._current

    @staticmethod
    def _stabilize(entries: Deque[RawPrediction]) -> StabilizedPrediction:
        if not entries:
            return EMPTY_PREDICTION
        grouped: Dict[str, List[float]] = {}
        for entry in entries:
            grouped.setdefault(entry.label, []).append(entry.confidence)
        means = {label: math.fsum(confs) / len(confs) for label, confs in grouped.items()}
        # highest mean first, then smallest label
        label = min(means, key=lambda name: (-means[name], name))
        return StabilizedPrediction(label=label, confidence=means[label])
