"""Camera capture module."""

from __future__ import annotations

import logging
import sys
import time
from typing import Any, Iterable, Optional


class CameraStream:
    """OpenCV capture wrapper that yields BGR frames for the translator."""

    def __init__(
        self,
        camera_index: int = 0,
        width: int | None = 1280,
        height: int | None = 720,
        mirror: bool = True,
        fps_smoothing: float = 0.9,
        fallback_indices: Iterable[int] = (1, 2),
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._cv2 = None
        self._cap = None
        self._width = width
        self._height = height
        self._mirror = mirror
        self._fps_smoothing = max(0.0, min(fps_smoothing, 0.99))
        self._last_ts = time.monotonic()
        self._fps = 0.0
        self._backend: Optional[int] = None

        try:
            import cv2
        except Exception as exc:
            self._logger.error("OpenCV not available: %s", exc)
            return

        self._cv2 = cv2
        if sys.platform == "darwin":
            self._backend = cv2.CAP_AVFOUNDATION
        self._cap = self._open(camera_index, fallback_indices)
        if self._cap is None:
            self._logger.error("No camera found. Try a different index or check permissions.")

    def __enter__(self) -> "CameraStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()

    @property
    def opened(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    @property
    def fps(self) -> float:
        return self._fps

    def read(self) -> Optional[Any]:
        """Return the next frame, or None if the camera produced nothing."""
        if not self.opened:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        if self._mirror:
            frame = self._cv2.flip(frame, 1)
        self._update_fps()
        return frame

    def release(self) -> None:
        if self.opened:
            self._cap.release()
            self._logger.info("Camera released")

    def _open(self, camera_index: int, fallback_indices: Iterable[int]) -> Optional[Any]:
        indices = [camera_index] + [idx for idx in fallback_indices if idx != camera_index]
        for idx in indices:
            try:
                if self._backend is not None:
                    cap = self._cv2.VideoCapture(idx, self._backend)
                else:
                    cap = self._cv2.VideoCapture(idx)
            except Exception as exc:
                self._logger.warning("Failed to open camera index %s: %s", idx, exc)
                continue
            if cap.isOpened():
                if self._width is not None:
                    cap.set(self._cv2.CAP_PROP_FRAME_WIDTH, self._width)
                if self._height is not None:
                    cap.set(self._cv2.CAP_PROP_FRAME_HEIGHT, self._height)
                self._logger.info("Camera opened at index %s", idx)
                return cap
            cap.release()
        return None

    def _update_fps(self) -> None:
        now = time.monotonic()
        dt = now - self._last_ts
        if dt > 0:
            inst = 1.0 / dt
            if self._fps == 0.0:
                self._fps = inst
            else:
                self._fps = (self._fps * self._fps_smoothing) + (inst * (1.0 - self._fps_smoothing))
        self._last_ts = now
