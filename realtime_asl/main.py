"""Main integration entry point."""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import cv2

from realtime_asl.camera_module import CameraStream
from realtime_asl.classifier.tflite_classifier import TfliteFrameClassifier
from realtime_asl.config import DEBUG_DRAW, LABELS_PATH, MIRROR_PREVIEW, MODEL_PATH, WINDOW_NAME, WINDOW_SIZE
from realtime_asl.display import draw_overlay, format_confidence
from realtime_asl.errors import ModelUnavailable
from realtime_asl.logic.aggregator import SmoothingAggregator
from realtime_asl.logic.session import TranslationSession
from realtime_asl.pipeline import TranslationPipeline
from realtime_asl.speech_module import LetterAnnouncer

TOGGLE_KEYS = {ord("t"), ord("T"), ord(" ")}
QUIT_KEYS = {ord("q"), ord("Q"), 27}


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Realtime ASL letter recognition")
    parser.add_argument("--camera", "-c", type=int, default=0, help="Camera index")
    parser.add_argument("--model", "-m", default=MODEL_PATH, help="TFLite model path")
    parser.add_argument("--labels", "-l", default=LABELS_PATH, help="Labels file, one label per line")
    parser.add_argument("--window", "-w", type=int, default=WINDOW_SIZE, help="Smoothing window in frames")
    parser.add_argument("--speak", action="store_true", help="Announce stabilized letters")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log dropped frames")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    classifier = TfliteFrameClassifier(model_path=args.model, labels_path=args.labels)
    session = TranslationSession(SmoothingAggregator(window_size=args.window), classifier=classifier)
    pipeline = TranslationPipeline(classifier, session)
    announcer = LetterAnnouncer() if args.speak else None

    error_text: Optional[str] = None
    if not classifier.available:
        error_text = f"Model unavailable: {classifier.unavailable_reason}"

    if DEBUG_DRAW:
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

    pipeline.start()
    last_shown = None
    with CameraStream(camera_index=args.camera, mirror=MIRROR_PREVIEW) as camera:
        try:
            while True:
                frame = camera.read()
                if frame is None:
                    logging.warning("No frame received from camera.")
                    if cv2.waitKey(1) & 0xFF in QUIT_KEYS:
                        break
                    continue

                pipeline.submit(frame)
                stabilized = pipeline.latest()
                if session.active and stabilized != last_shown:
                    history, _ = session.aggregator.snapshot()
                    logging.debug(
                        "Stable: %s %s over %d frames",
                        stabilized.label,
                        format_confidence(stabilized),
                        len(history),
                    )
                    last_shown = stabilized
                if announcer is not None and session.active:
                    announcer.announce(stabilized)

                if DEBUG_DRAW:
                    draw_overlay(
                        frame,
                        stabilized,
                        session.status_text,
                        session.active,
                        fps=camera.fps,
                        error_text=error_text,
                    )
                    cv2.imshow(WINDOW_NAME, frame)

                key = cv2.waitKey(1) & 0xFF
                if key in QUIT_KEYS:
                    break
                if key in TOGGLE_KEYS:
                    try:
                        session.toggle()
                    except ModelUnavailable as exc:
                        error_text = f"Model unavailable: {exc}"
                        logging.error("Cannot start translation: %s", exc)
                    pipeline.clear()
                    last_shown = None
                    if announcer is not None:
                        announcer.reset()
        except KeyboardInterrupt:
            logging.info("Interrupted by user")
        finally:
            pipeline.shutdown()
            if announcer is not None:
                announcer.shutdown()
            cv2.destroyAllWindows()
            logging.info(
                "Frames processed=%s dropped=%s failed=%s stale=%s",
                pipeline.processed,
                pipeline.dropped,
                pipeline.failed,
                pipeline.stale,
            )


if __name__ == "__main__":
    main()
