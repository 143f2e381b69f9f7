"""Overlay rendering for hand skeleton and the metric gauge."""

from __future__ import annotations

from typing import TYPE_CHECKING

import cv2
import numpy as np

from cycle_tracker.core.config import UISettings
from cycle_tracker.core.types import DetectorPhase, HandLandmark, TrackedHand

if TYPE_CHECKING:
    from numpy.typing import NDArray

_H = HandLandmark

HAND_CONNECTIONS = [
    # Palm
    (_H.WRIST.value, _H.THUMB_CMC.value),
    (_H.WRIST.value, _H.INDEX_FINGER_MCP.value),
    (_H.INDEX_FINGER_MCP.value, _H.MIDDLE_FINGER_MCP.value),
    (_H.MIDDLE_FINGER_MCP.value, _H.RING_FINGER_MCP.value),
    (_H.RING_FINGER_MCP.value, _H.PINKY_MCP.value),
    (_H.WRIST.value, _H.PINKY_MCP.value),
    # Thumb
    (_H.THUMB_CMC.value, _H.THUMB_MCP.value),
    (_H.THUMB_MCP.value, _H.THUMB_IP.value),
    (_H.THUMB_IP.value, _H.THUMB_TIP.value),
    # Index
    (_H.INDEX_FINGER_MCP.value, _H.INDEX_FINGER_PIP.value),
    (_H.INDEX_FINGER_PIP.value, _H.INDEX_FINGER_DIP.value),
    (_H.INDEX_FINGER_DIP.value, _H.INDEX_FINGER_TIP.value),
    # Middle
    (_H.MIDDLE_FINGER_MCP.value, _H.MIDDLE_FINGER_PIP.value),
    (_H.MIDDLE_FINGER_PIP.value, _H.MIDDLE_FINGER_DIP.value),
    (_H.MIDDLE_FINGER_DIP.value, _H.MIDDLE_FINGER_TIP.value),
    # Ring
    (_H.RING_FINGER_MCP.value, _H.RING_FINGER_PIP.value),
    (_H.RING_FINGER_PIP.value, _H.RING_FINGER_DIP.value),
    (_H.RING_FINGER_DIP.value, _H.RING_FINGER_TIP.value),
    # Pinky
    (_H.PINKY_MCP.value, _H.PINKY_PIP.value),
    (_H.PINKY_PIP.value, _H.PINKY_DIP.value),
    (_H.PINKY_DIP.value, _H.PINKY_TIP.value),
]

# Colors (BGR format)
COLOR_SKELETON = (0, 255, 0)  # Green
COLOR_LANDMARK = (255, 255, 255)  # White
COLOR_METRIC_SEGMENT = (0, 255, 255)  # Yellow
COLOR_HIGH = (0, 0, 255)  # Red
COLOR_LOW = (255, 128, 0)  # Blue
COLOR_GAUGE_BG = (40, 40, 40)

PHASE_COLORS = {
    DetectorPhase.LOW: (128, 128, 128),
    DetectorPhase.HIGH: (0, 255, 0),
}


class OverlayRenderer:
    """Draws tracking overlays on video frames."""

    def __init__(self, settings: UISettings | None = None) -> None:
        self.settings = settings or UISettings()

    def draw_skeleton(
        self,
        image: NDArray[np.uint8],
        hand: TrackedHand,
        metric_segment: tuple[int, int] | None = None,
        color: tuple[int, int, int] = COLOR_SKELETON,
        thickness: int = 2,
    ) -> NDArray[np.uint8]:
        """Draw hand skeleton.

        Args:
            image: Input image array
            hand: Tracked hand landmarks
            metric_segment: (anchor, extremity) indices highlighted as the metric
            color: Line color (BGR)
            thickness: Line thickness

        Returns:
            Image with skeleton overlay
        """
        result = image.copy()
        height, width = result.shape[:2]

        for start_idx, end_idx in HAND_CONNECTIONS:
            start_lm = hand.get_landmark(start_idx)
            end_lm = hand.get_landmark(end_idx)
            if start_lm is None or end_lm is None:
                continue
            cv2.line(
                result,
                start_lm.to_pixel(width, height),
                end_lm.to_pixel(width, height),
                color,
                thickness,
            )

        if metric_segment is not None:
            anchor = hand.get_landmark(metric_segment[0])
            extremity = hand.get_landmark(metric_segment[1])
            if anchor is not None and extremity is not None:
                cv2.line(
                    result,
                    anchor.to_pixel(width, height),
                    extremity.to_pixel(width, height),
                    COLOR_METRIC_SEGMENT,
                    thickness,
                )

        for landmark in hand.landmarks:
            cv2.circle(result, landmark.to_pixel(width, height), 3, COLOR_LANDMARK, -1)

        return result

    def draw_metric_gauge(
        self,
        image: NDArray[np.uint8],
        metric: float | None,
        high: float,
        low: float,
        phase: DetectorPhase,
        scale_max: float = 0.5,
    ) -> NDArray[np.uint8]:
        """Draw a vertical bar with the metric and both thresholds.

        Args:
            image: Input image array
            metric: Current metric, None if no hand is tracked
            high: Rising threshold
            low: Falling threshold
            phase: Detector phase, used for the bar color
            scale_max: Metric value mapped to the top of the gauge

        Returns:
            Image with gauge overlay
        """
        result = image.copy()
        height, width = result.shape[:2]

        bar_w = 24
        top = 60
        bottom = height - 60
        right = width - 20
        left = right - bar_w
        span = bottom - top

        def to_y(value: float) -> int:
            ratio = min(max(value / scale_max, 0.0), 1.0)
            return int(bottom - ratio * span)

        cv2.rectangle(result, (left, top), (right, bottom), COLOR_GAUGE_BG, -1)

        if metric is not None:
            cv2.rectangle(result, (left, to_y(metric)), (right, bottom), PHASE_COLORS[phase], -1)

        cv2.line(result, (left - 6, to_y(high)), (right + 6, to_y(high)), COLOR_HIGH, 2)
        cv2.line(result, (left - 6, to_y(low)), (right + 6, to_y(low)), COLOR_LOW, 2)

        return result

    def render_full_overlay(
        self,
        image: NDArray[np.uint8],
        hand: TrackedHand | None,
        metric: float | None,
        high: float,
        low: float,
        phase: DetectorPhase,
        metric_segment: tuple[int, int] | None = None,
        mirror: bool = False,
    ) -> NDArray[np.uint8]:
        """Render skeleton and gauge, then mirror the preview if requested.

        Text is drawn later by the HUD so it stays readable when mirrored.
        """
        result = image.copy()

        if self.settings.draw_skeleton and hand is not None:
            result = self.draw_skeleton(result, hand, metric_segment=metric_segment)

        if mirror:
            result = np.ascontiguousarray(cv2.flip(result, 1))

        if self.settings.show_metrics:
            result = self.draw_metric_gauge(result, metric, high, low, phase)

        return result
