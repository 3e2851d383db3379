"""Frame → classifier → aggregator pipeline with an explicit display hand-off.

One worker thread owns the classify/ingest stage. Frames enter through a
bounded queue; when a classification is still running the new frame is
dropped. The display thread reads the latest stabilized prediction through
``latest()``, which never touches the aggregator's history.

Each queued frame carries the session generation it was submitted under.
A result whose generation is no longer current belongs to an earlier
translation session and is discarded instead of ingested or shown.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Optional, Tuple

from realtime_asl.classifier.base import FrameClassifier
from realtime_asl.common import EMPTY_PREDICTION, StabilizedPrediction
from realtime_asl.config import FRAME_QUEUE_SIZE
from realtime_asl.errors import InferenceFailed, InvalidInput, ModelUnavailable
from realtime_asl.logic.session import TranslationSession

_STOP = object()


class TranslationPipeline:
    def __init__(
        self,
        classifier: FrameClassifier,
        session: TranslationSession,
        queue_maxsize: int = FRAME_QUEUE_SIZE,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._classifier = classifier
        self._session = session
        self._q: queue.Queue[Any] = queue.Queue(maxsize=max(1, queue_maxsize))
        self._shutdown = threading.Event()
        self._latest_lock = threading.Lock()
        self._latest: Tuple[int, StabilizedPrediction] = (session.generation, EMPTY_PREDICTION)
        self._worker: Optional[threading.Thread] = None
        self._unavailable_logged = False

        self.processed = 0
        self.dropped = 0
        self.failed = 0
        self.stale = 0

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._shutdown.clear()
        self._worker = threading.Thread(target=self._run_worker, name="ClassifierWorker", daemon=True)
        self._worker.start()

    def shutdown(self, timeout: float = 2.0) -> None:
        if self._worker is None:
            return
        self._shutdown.set()
        self._drain()
        try:
            self._q.put_nowait(_STOP)
        except queue.Full:
            pass
        self._worker.join(timeout=timeout)
        self._worker = None

    def submit(self, frame: Any) -> bool:
        """Offer a frame to the worker. Returns False if it was dropped."""
        if self._shutdown.is_set() or not self._session.active:
            return False
        try:
            self._q.put_nowait((self._session.generation, frame))
        except queue.Full:
            self.dropped += 1
            return False
        return True

    def latest(self) -> StabilizedPrediction:
        if not self._session.active:
            return EMPTY_PREDICTION
        generation = self._session.generation
        with self._latest_lock:
            published_in, prediction = self._latest
        if published_in != generation:
            return EMPTY_PREDICTION
        return prediction

    def clear(self) -> None:
        """Forget queued frames and the last published prediction."""
        self._drain()
        with self._latest_lock:
            self._latest = (self._session.generation, EMPTY_PREDICTION)

    def process_frame(self, frame: Any, generation: Optional[int] = None) -> Optional[StabilizedPrediction]:
        if generation is None:
            generation = self._session.generation
        try:
            image = self._classifier.prepare(frame)
            raw = self._classifier.classify(image)
        except ModelUnavailable as exc:
            self.failed += 1
            if not self._unavailable_logged:
                self._logger.error("Classifier unavailable: %s", exc)
                self._unavailable_logged = True
            return None
        except (InvalidInput, InferenceFailed) as exc:
            self.failed += 1
            self._logger.debug("Dropping frame: %s", exc)
            return None

        stabilized = self._session.offer(raw, generation)
        if stabilized is None or not self._publish(generation, stabilized):
            self.stale += 1
            self._logger.debug("Discarding %s from an earlier session", raw.label)
            return None
        self.processed += 1
        return stabilized

    def _publish(self, generation: int, prediction: StabilizedPrediction) -> bool:
        with self._latest_lock:
            if generation != self._session.generation:
                return False
            self._latest = (generation, prediction)
            return True

    def _drain(self) -> None:
        try:
            while True:
                self._q.get_nowait()
                self._q.task_done()
        except queue.Empty:
            return

    def _run_worker(self) -> None:
        while not self._shutdown.is_set():
            try:
                frame = self._q.get(timeout=0.2)
            except queue.Empty:
                continue
            try:
                if frame is _STOP:
                    break
                generation, image = frame
                self.process_frame(image, generation)
            finally:
                self._q.task_done()
