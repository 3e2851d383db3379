"""Lightweight smoke tests for camera, classifier, and TTS."""

from __future__ import annotations

import logging
import time

from realtime_asl.camera_module import CameraStream
from realtime_asl.classifier.tflite_classifier import TfliteFrameClassifier
from realtime_asl.common import StabilizedPrediction
from realtime_asl.errors import ClassifierError
from realtime_asl.speech_module import LetterAnnouncer


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    with CameraStream() as camera:
        frame = camera.read()
    if frame is None:
        logging.error("Camera test failed: no frame.")
    else:
        logging.info("Camera test passed.")

    classifier = TfliteFrameClassifier()
    if not classifier.available:
        logging.warning("ASL model unavailable (%s).", classifier.unavailable_reason)
    elif frame is not None:
        try:
            raw = classifier.classify(classifier.prepare(frame))
            logging.info("Classifier test passed: %s %.2f", raw.label, raw.confidence)
        except ClassifierError as exc:
            logging.error("Classifier test failed: %s", exc)

    announcer = LetterAnnouncer()
    announcer.announce(StabilizedPrediction(label="A", confidence=1.0))
    logging.info("TTS test invoked.")
    time.sleep(2.0)
    announcer.shutdown()


if __name__ == "__main__":
    main()
