"""
Pipeline Tests
==============
Frame hand-off, per-frame failure handling and backpressure.
"""

import sys
import threading
import time
import unittest
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from realtime_asl.common import EMPTY_PREDICTION, RawPrediction
from realtime_asl.errors import InferenceFailed, InvalidInput, ModelUnavailable
from realtime_asl.logic.aggregator import SmoothingAggregator
from realtime_asl.logic.session import TranslationSession
from realtime_asl.pipeline import TranslationPipeline


class ScriptedClassifier:
    """Frames are (label, confidence) tuples or exceptions to raise."""

    input_size = (299, 299)
    available = True
    unavailable_reason = None

    def __init__(self, gate=None):
        self.gate = gate
        self.calls = 0

    def prepare(self, frame):
        if frame is None:
            raise InvalidInput("no frame")
        return frame

    def classify(self, image):
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(timeout=2.0)
        if isinstance(image, Exception):
            raise image
        label, confidence = image
        return RawPrediction(label, confidence)


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestProcessFrame(unittest.TestCase):

    def setUp(self):
        self.session = TranslationSession(SmoothingAggregator())
        self.session.start()
        self.pipeline = TranslationPipeline(ScriptedClassifier(), self.session)

    def test_frames_flow_to_latest(self):
        self.pipeline.process_frame(("A", 0.9))
        self.pipeline.process_frame(("A", 0.7))
        self.pipeline.process_frame(("B", 0.95))
        latest = self.pipeline.latest()
        self.assertEqual(latest.label, "B")
        self.assertAlmostEqual(latest.confidence, 0.95)
        self.assertEqual(self.pipeline.processed, 3)

    def test_failed_frames_are_dropped(self):
        self.pipeline.process_frame(("C", 0.6))
        self.assertIsNone(self.pipeline.process_frame(None))
        self.assertIsNone(self.pipeline.process_frame(InferenceFailed("boom")))
        self.assertEqual(self.pipeline.failed, 2)
        self.assertEqual(len(self.session.aggregator), 1)
        self.assertEqual(self.pipeline.latest().label, "C")

    def test_model_unavailable_is_not_fatal(self):
        self.assertIsNone(self.pipeline.process_frame(ModelUnavailable("gone")))
        self.assertIsNone(self.pipeline.process_frame(ModelUnavailable("gone")))
        self.assertEqual(self.pipeline.latest(), EMPTY_PREDICTION)

    def test_inactive_session_shows_empty(self):
        self.pipeline.process_frame(("D", 0.9))
        self.session.stop()
        self.assertEqual(self.pipeline.latest(), EMPTY_PREDICTION)
        self.assertFalse(self.pipeline.submit(("D", 0.9)))

    def test_clear_forgets_last_prediction(self):
        self.pipeline.process_frame(("E", 0.9))
        self.session.toggle()
        self.session.toggle()
        self.pipeline.clear()
        self.assertEqual(self.pipeline.latest(), EMPTY_PREDICTION)


class TestWorker(unittest.TestCase):

    def test_worker_ingests_submitted_frames(self):
        session = TranslationSession(SmoothingAggregator())
        session.start()
        pipeline = TranslationPipeline(ScriptedClassifier(), session)
        pipeline.start()
        try:
            for _ in range(3):
                self.assertTrue(wait_for(lambda: pipeline.submit(("F", 0.5))))
            self.assertTrue(wait_for(lambda: pipeline.processed == 3))
            self.assertEqual(pipeline.latest().label, "F")
        finally:
            pipeline.shutdown()
        self.assertFalse(pipeline.running)

    def test_busy_worker_drops_frames(self):
        gate = threading.Event()
        classifier = ScriptedClassifier(gate=gate)
        session = TranslationSession(SmoothingAggregator())
        session.start()
        pipeline = TranslationPipeline(classifier, session, queue_maxsize=1)
        pipeline.start()
        try:
            self.assertTrue(pipeline.submit(("G", 0.5)))
            self.assertTrue(wait_for(lambda: classifier.calls == 1))
            self.assertTrue(pipeline.submit(("G", 0.5)))
            self.assertFalse(pipeline.submit(("G", 0.5)))
            self.assertEqual(pipeline.dropped, 1)
            gate.set()
            self.assertTrue(wait_for(lambda: pipeline.processed == 2))
        finally:
            gate.set()
            pipeline.shutdown()

    def test_frame_in_flight_across_toggle_is_discarded(self):
        """A classification that finishes after off/on must not reach the new session."""
        gate = threading.Event()
        classifier = ScriptedClassifier(gate=gate)
        session = TranslationSession(SmoothingAggregator())
        session.start()
        pipeline = TranslationPipeline(classifier, session)
        pipeline.start()
        try:
            self.assertTrue(pipeline.submit(("OLD", 0.9)))
            self.assertTrue(wait_for(lambda: classifier.calls == 1))
            session.toggle()
            session.toggle()
            pipeline.clear()
            gate.set()
            self.assertTrue(wait_for(lambda: pipeline.stale == 1))
            self.assertEqual(len(session.aggregator), 0)
            self.assertEqual(pipeline.latest(), EMPTY_PREDICTION)
            self.assertEqual(pipeline.processed, 0)

            self.assertTrue(wait_for(lambda: pipeline.submit(("NEW", 0.7))))
            self.assertTrue(wait_for(lambda: pipeline.processed == 1))
            self.assertEqual(pipeline.latest().label, "NEW")
            self.assertEqual(session.aggregator.history(), (RawPrediction("NEW", 0.7),))
        finally:
            gate.set()
            pipeline.shutdown()

    def test_stale_generation_is_not_published(self):
        session = TranslationSession(SmoothingAggregator())
        session.start()
        pipeline = TranslationPipeline(ScriptedClassifier(), session)
        old = session.generation
        session.stop()
        session.start()
        self.assertIsNone(pipeline.process_frame(("OLD", 0.9), old))
        self.assertEqual(pipeline.stale, 1)
        self.assertEqual(pipeline.latest(), EMPTY_PREDICTION)


if __name__ == "__main__":
    unittest.main()
