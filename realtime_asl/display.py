"""Overlay rendering for the live preview window."""

from __future__ import annotations

from typing import Any, Optional

from realtime_asl.common import StabilizedPrediction


def display_label(prediction: StabilizedPrediction) -> str:
    # Hershey fonts are ASCII-only, so the en dash placeholder is drawn as "-"
    return "-" if prediction.is_empty else prediction.label


def format_confidence(prediction: StabilizedPrediction) -> str:
    return f"Confidence: {prediction.confidence_percent:.1f}%"


def draw_overlay(
    frame: Any,
    prediction: StabilizedPrediction,
    status_text: str,
    translating: bool,
    fps: float = 0.0,
    error_text: Optional[str] = None,
) -> Any:
    """Draw the bottom control panel in place and return the frame."""
    import cv2

    height, width = frame.shape[:2]
    panel_h = 200 if translating else 100
    top = height - panel_h

    overlay = frame.copy()
    cv2.rectangle(overlay, (0, top), (width, height), (245, 245, 245), -1)
    cv2.addWeighted(overlay, 0.85, frame, 0.15, 0, frame)

    cv2.putText(frame, status_text, (20, top + 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (128, 128, 128), 2)
    if translating:
        cv2.putText(
            frame,
            display_label(prediction),
            (20, top + 110),
            cv2.FONT_HERSHEY_DUPLEX,
            2.5,
            (0, 0, 0),
            4,
        )
        cv2.putText(
            frame,
            format_confidence(prediction),
            (20, top + 150),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            (128, 128, 128),
            1,
        )

    hint = "T = stop translation" if translating else "T = start translation"
    color = (40, 40, 220) if translating else (220, 120, 30)
    cv2.putText(frame, f"{hint} | Q = quit", (20, height - 15), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2)
    cv2.putText(frame, f"FPS: {fps:.1f}", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 0, 0), 2)
    if error_text:
        cv2.putText(frame, error_text, (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 0, 255), 2)
    return frame
