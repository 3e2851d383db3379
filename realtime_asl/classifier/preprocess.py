"""Frame preprocessing for fixed-size image classifiers."""

from __future__ import annotations

from typing import Any, Tuple

import numpy as np

from realtime_asl.errors import InvalidInput


def preprocess(
    frame: Any,
    input_size: Tuple[int, int],
    dtype: Any = np.float32,
    quantization: Tuple[float, int] = (0.0, 0),
) -> np.ndarray:
    """Resize a BGR frame to ``input_size`` and return a batched RGB tensor.

    Float inputs are scaled to [0, 1]. Integer inputs are quantized with the
    model's (scale, zero_point) when a scale is given.
    """
    if frame is None:
        raise InvalidInput("no frame")
    if not isinstance(frame, np.ndarray) or frame.size == 0:
        raise InvalidInput("frame is empty")
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise InvalidInput(f"expected HxWx3 frame, got shape {frame.shape}")

    import cv2

    width, height = input_size
    try:
        resized = cv2.resize(frame, (width, height))
        rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
    except cv2.error as exc:
        raise InvalidInput(f"conversion failed: {exc}") from exc

    data = np.expand_dims(rgb, axis=0)
    if np.dtype(dtype) in (np.dtype(np.float32), np.dtype(np.float16)):
        return (data.astype(np.float32) / 255.0).astype(dtype)

    scale, zero = quantization
    if scale > 0:
        data = np.round(data.astype(np.float32) / 255.0 / scale + zero)
    info = np.iinfo(np.dtype(dtype))
    return np.clip(data, info.min, info.max).astype(dtype)
