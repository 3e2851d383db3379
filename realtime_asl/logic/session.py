"""Translation on/off state handling."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from realtime_asl.classifier.base import FrameClassifier
from realtime_asl.common import EMPTY_PREDICTION, RawPrediction, StabilizedPrediction
from realtime_asl.errors import ModelUnavailable
from realtime_asl.logic.aggregator import SmoothingAggregator


class TranslationSession:
    """Owns the translation flag and the aggregator it gates."""

    def __init__(
        self,
        aggregator: SmoothingAggregator | None = None,
        classifier: Optional[FrameClassifier] = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._aggregator = aggregator or SmoothingAggregator()
        self._classifier = classifier
        self._active = threading.Event()
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def active(self) -> bool:
        return self._active.is_set()

    @property
    def aggregator(self) -> SmoothingAggregator:
        return self._aggregator

    @property
    def generation(self) -> int:
        """Bumped on every start and stop; results from an older one are stale."""
        with self._lock:
            return self._generation

    @property
    def status_text(self) -> str:
        return "Translating..." if self.active else "Ready to Translate"

    def start(self) -> None:
        if self._classifier is not None and not self._classifier.available:
            raise ModelUnavailable(self._classifier.unavailable_reason or "classifier unavailable")
        with self._lock:
            self._generation += 1
            self._aggregator.reset()
            self._active.set()
        self._logger.info("Translation started (window=%s)", self._aggregator.window_size)

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            self._active.clear()
            self._aggregator.reset()
        self._logger.info("Translation stopped")

    def toggle(self) -> bool:
        if self.active:
            self.stop()
        else:
            self.start()
        return self.active

    def offer(
        self, prediction: RawPrediction, generation: Optional[int] = None
    ) -> Optional[StabilizedPrediction]:
        """Ingest while active. Returns None if ``generation`` is no longer current."""
        with self._lock:
            if generation is not None and generation != self._generation:
                return None
            if not self.active:
                return EMPTY_PREDICTION
            return self._aggregator.ingest(prediction)

    def current(self) -> StabilizedPrediction:
        if not self.active:
            return EMPTY_PREDICTION
        return self._aggregator.current_stabilized()
