"""Shared dataclasses for raw and stabilized predictions."""

from __future__ import annotations

from dataclasses import dataclass

from realtime_asl.config import EMPTY_LABEL


@dataclass(frozen=True)
class RawPrediction:
    label: str
    confidence: float


@dataclass(frozen=True)
class StabilizedPrediction:
    label: str
    confidence: float

    @property
    def confidence_percent(self) -> float:
        return self.confidence * 100.0

    @property
    def is_empty(self) -> bool:
        return self.label == EMPTY_LABEL and self.confidence == 0.0


EMPTY_PREDICTION = StabilizedPrediction(label=EMPTY_LABEL, confidence=0.0)
