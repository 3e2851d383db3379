"""TFLite ASL letter classifier."""

from __future__ import annotations

import importlib
import logging
import re
import string
from pathlib import Path
from typing import Any, List, Optional, Tuple

import numpy as np

from realtime_asl.classifier.preprocess import preprocess
from realtime_asl.common import RawPrediction
from realtime_asl.config import INPUT_SIZE, LABELS_PATH, MODEL_PATH
from realtime_asl.errors import InferenceFailed, InvalidInput, ModelUnavailable

SPECIAL_LABELS: Tuple[str, ...] = ("del", "nothing", "space")
DEFAULT_LABELS: List[str] = list(string.ascii_uppercase) + list(SPECIAL_LABELS)

# tried in order; tensorflow is the heavier fallback
RUNTIME_MODULES: Tuple[str, ...] = ("tflite_runtime.interpreter", "tensorflow.lite")

_INDEX_PREFIX = re.compile(r"^\d+\s*[:,]?\s+")


class TfliteFrameClassifier:
    """TFLite classifier with graceful fallback when unavailable."""

    def __init__(
        self,
        model_path: str = MODEL_PATH,
        labels_path: str = LABELS_PATH,
        interpreter: Any = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._model_path = Path(model_path)
        self._labels_path = Path(labels_path)
        self._interpreter = None
        self._input_details = None
        self._output_details = None
        self._input_size: Tuple[int, int] = INPUT_SIZE
        self._reason: Optional[str] = None
        self._labels = self._load_labels()

        if interpreter is None:
            interpreter = self._create_interpreter()
            if interpreter is None:
                self._logger.warning("ASL classifier unavailable: %s", self._reason)
                return
        self._attach(interpreter)

    @property
    def input_size(self) -> Tuple[int, int]:
        return self._input_size

    @property
    def available(self) -> bool:
        return self._interpreter is not None

    @property
    def unavailable_reason(self) -> Optional[str]:
        return self._reason

    @property
    def labels(self) -> List[str]:
        return list(self._labels)

    def prepare(self, frame: Any) -> np.ndarray:
        if self._input_details is None:
            return preprocess(frame, self._input_size)
        info = self._input_details[0]
        return preprocess(
            frame,
            self._input_size,
            dtype=info["dtype"],
            quantization=tuple(info.get("quantization", (0.0, 0))),
        )

    def classify(self, image: Any) -> RawPrediction:
        if self._interpreter is None or self._input_details is None or self._output_details is None:
            raise ModelUnavailable(self._reason or "tflite unavailable")
        self._check_input(image)

        try:
            self._interpreter.set_tensor(self._input_details[0]["index"], image)
            self._interpreter.invoke()
            output = self._interpreter.get_tensor(self._output_details[0]["index"])
        except Exception as exc:
            raise InferenceFailed(f"tflite inference failed: {exc}") from exc

        scores = np.asarray(output[0]).reshape(-1)
        out_scale, out_zero = self._output_details[0].get("quantization", (0.0, 0))
        if out_scale > 0:
            scores = (scores.astype(np.float32) - out_zero) * out_scale
        if scores.size == 0:
            raise InferenceFailed("tflite returned no scores")
        label_idx = int(np.argmax(scores))
        conf = float(np.clip(scores[label_idx], 0.0, 1.0))
        label = self._labels[label_idx] if label_idx < len(self._labels) else str(label_idx)
        return RawPrediction(label=label, confidence=conf)

    def _create_interpreter(self) -> Any:
        tflite = self._load_tflite_runtime()
        if tflite is None:
            self._reason = "tflite runtime missing"
            return None
        if not self._model_path.exists():
            self._reason = f"model missing: {self._model_path}"
            return None
        try:
            interpreter = tflite.Interpreter(model_path=str(self._model_path))
            interpreter.allocate_tensors()
        except Exception as exc:
            self._reason = f"tflite init failed: {exc}"
            return None
        self._logger.info("ASL model loaded from %s", self._model_path)
        return interpreter

    def _attach(self, interpreter: Any) -> None:
        self._interpreter = interpreter
        self._input_details = interpreter.get_input_details()
        self._output_details = interpreter.get_output_details()
        shape = list(self._input_details[0].get("shape", []))
        if len(shape) == 4:
            self._input_size = (int(shape[2]), int(shape[1]))
        output_shape = self._output_details[0].get("shape")
        classes = int(list(output_shape)[-1]) if output_shape is not None and len(output_shape) > 0 else None
        if classes is not None and classes != len(self._labels):
            # unlabeled classes are reported by index
            self._logger.warning(
                "ASL model predicts %s classes but %s has %s labels.",
                classes,
                self._labels_path,
                len(self._labels),
            )

    def _check_input(self, image: Any) -> None:
        if not isinstance(image, np.ndarray):
            raise InvalidInput(f"expected ndarray, got {type(image).__name__}")
        width, height = self._input_size
        if image.ndim != 4 or image.shape[1:3] != (height, width):
            raise InvalidInput(
                f"expected input of shape (1, {height}, {width}, C), got {image.shape}"
            )

    def _load_labels(self) -> List[str]:
        if not self._labels_path.exists():
            self._logger.warning(
                "ASL labels file %s not found, using default A-Z/del/nothing/space labels.",
                self._labels_path,
            )
            return list(DEFAULT_LABELS)
        labels = [
            self._normalize_label(line)
            for line in self._labels_path.read_text(encoding="utf-8").splitlines()
            if line.strip()
        ]
        if not labels:
            self._logger.warning("ASL labels file %s is empty, using default labels.", self._labels_path)
            return list(DEFAULT_LABELS)
        return labels

    def _load_tflite_runtime(self) -> Any:
        for name in RUNTIME_MODULES:
            try:
                return importlib.import_module(name)
            except Exception as exc:
                self._logger.debug("TFLite runtime %s not usable: %s", name, exc)
        return None

    @staticmethod
    def _normalize_label(line: str) -> str:
        """Strip an index prefix ("3 D", "3: D") and canonicalize letter case.

        Single letters are upper case and the special classes lower case, so
        label files exported as "a".."z" or "DEL" map to the same names.
        """
        label = _INDEX_PREFIX.sub("", line.strip()).strip()
        if len(label) == 1 and label.isalpha():
            return label.upper()
        if label.lower() in SPECIAL_LABELS:
            return label.lower()
        return label
