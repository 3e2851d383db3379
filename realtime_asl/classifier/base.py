"""Frame classifier interface."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Tuple

from realtime_asl.common import RawPrediction


class FrameClassifier(Protocol):
    """Maps one preprocessed fixed-size image to its top-ranked prediction.

    Implementations raise ``ModelUnavailable`` when no model is loaded,
    ``InvalidInput`` when the image does not match ``input_size`` and
    ``InferenceFailed`` when the backend itself fails.
    """

    @property
    def input_size(self) -> Tuple[int, int]:
        """Required (width, height) of the input image."""
        ...

    @property
    def available(self) -> bool:
        ...

    @property
    def unavailable_reason(self) -> Optional[str]:
        ...

    def prepare(self, frame: Any) -> Any:
        """Convert a raw camera frame into the model's input tensor."""
        ...

    def classify(self, image: Any) -> RawPrediction:
        ...
