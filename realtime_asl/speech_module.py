"""Offline announcement of stabilized letters.

- Offline only (pyttsx3)
- No overlapping speech (single worker thread + queue)
- A letter is announced once when it becomes the stable prediction
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from realtime_asl.common import StabilizedPrediction
from realtime_asl.config import ANNOUNCE_MIN_CONF, SPEAK_COOLDOWN_S

SPOKEN_NAMES: Dict[str, str] = {
    "del": "delete",
    "space": "space",
}
SILENT_LABELS = {"nothing"}


@dataclass(frozen=True)
class SpeechConfig:
    cooldown_seconds: float = SPEAK_COOLDOWN_S
    min_confidence: float = ANNOUNCE_MIN_CONF
    queue_maxsize: int = 5
    rate: Optional[int] = None


class LetterAnnouncer:
    """Speaks a letter when the stabilized prediction settles on a new one."""

    def __init__(self, config: SpeechConfig | None = None, engine: object | None = None) -> None:
        self._logger = logging.getLogger(__name__)
        self.config = config or SpeechConfig()
        self._q: queue.Queue[str] = queue.Queue(maxsize=self.config.queue_maxsize)
        self._shutdown = threading.Event()
        self._last_label: Optional[str] = None
        self._last_spoken_ts: Optional[float] = None
        self._engine = engine
        self._worker: Optional[threading.Thread] = None

        if self._engine is None:
            try:
                import pyttsx3

                self._engine = pyttsx3.init()
            except Exception as exc:
                self._logger.error("pyttsx3 init failed: %s", exc)
                return
        if self.config.rate is not None:
            try:
                self._engine.setProperty("rate", int(self.config.rate))
            except Exception as exc:
                self._logger.warning("Failed to set speech rate: %s", exc)

        self._worker = threading.Thread(target=self._run_worker, name="SpeechWorker", daemon=True)
        self._worker.start()

    @property
    def available(self) -> bool:
        return self._engine is not None and not self._shutdown.is_set()

    def text_for(self, prediction: StabilizedPrediction) -> Optional[str]:
        """Return what should be said for this prediction, if anything."""
        if prediction.is_empty or prediction.label in SILENT_LABELS:
            self._last_label = None
            return None
        if prediction.confidence < self.config.min_confidence:
            return None
        if prediction.label == self._last_label:
            return None
        if self._last_spoken_ts is not None and (time.monotonic() - self._last_spoken_ts) < self.config.cooldown_seconds:
            return None
        return SPOKEN_NAMES.get(prediction.label.lower(), prediction.label)

    def announce(self, prediction: StabilizedPrediction) -> bool:
        if not self.available:
            return False
        text = self.text_for(prediction)
        if text is None:
            return False
        try:
            self._q.put_nowait(text)
        except queue.Full:
            return False
        self._last_label = prediction.label
        self._last_spoken_ts = time.monotonic()
        return True

    def reset(self) -> None:
        self._last_label = None

    def shutdown(self) -> None:
        if self._shutdown.is_set():
            return
        self._shutdown.set()
        try:
            self._q.put_nowait("")
        except queue.Full:
            pass
        if self._worker is not None:
            self._worker.join(timeout=1.0)

    def _run_worker(self) -> None:
        while not self._shutdown.is_set():
            try:
                text = self._q.get(timeout=0.2)
            except queue.Empty:
                continue
            try:
                if not text:
                    continue
                self._logger.info("Speaking: %s", text)
                self._engine.say(text)
                self._engine.runAndWait()
            except Exception as exc:
                self._logger.error("pyttsx3 speak failed: %s", exc)
            finally:
                self._q.task_done()
