"""Phase metrics: per-frame landmark sets mapped to one scalar.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from cycle_tracker.core.config import MetricSettings
from cycle_tracker.core.types import HandLandmark, Landmark, TrackedHand


def _get(landmarks: Sequence[Landmark | None], index: int) -> Landmark | None:
    if 0 <= index < len(landmarks):
        return landmarks[index]
    return None


def phase_metric(
    landmarks: Sequence[Landmark | None],
    anchor: int = HandLandmark.WRIST.value,
    extremity: int = HandLandmark.INDEX_FINGER_TIP.value,
) -> float:
    """Planar distance between an anchor and an extremity landmark.

    Args:
        landmarks: Landmark array for one tracked hand or body
        anchor: Index of the fixed reference point (default wrist)
        extremity: Index of the moving point (default index fingertip)

    Returns:
        Euclidean distance in the landmarks' coordinate space,
        or 0.0 if either landmark is absent
    """
    start = _get(landmarks, anchor)
    end = _get(landmarks, extremity)
    if start is None or end is None:
        return 0.0
    return math.hypot(end.x - start.x, end.y - start.y)


def joint_angle_metric(
    landmarks: Sequence[Landmark | None],
    first: int,
    vertex: int,
    last: int,
) -> float:
    """Angle at ``vertex`` between the two segments, in radians [0, pi].

    Returns 0.0 if a landmark is missing or a segment has zero length.
    """
    a = _get(landmarks, first)
    b = _get(landmarks, vertex)
    c = _get(landmarks, last)
    if a is None or b is None or c is None:
        return 0.0

    v1 = (a.x - b.x, a.y - b.y)
    v2 = (c.x - b.x, c.y - b.y)
    n1 = math.hypot(*v1)
    n2 = math.hypot(*v2)
    if n1 == 0.0 or n2 == 0.0:
        return 0.0

    cos_angle = (v1[0] * v2[0] + v1[1] * v2[1]) / (n1 * n2)
    return math.acos(max(-1.0, min(1.0, cos_angle)))


class MetricExtractor:
    """Distance metric bound to configured landmark indices."""

    def __init__(self, settings: MetricSettings | None = None) -> None:
        self.settings = settings or MetricSettings()

    def __call__(self, hand: TrackedHand | Sequence[Landmark | None]) -> float:
        landmarks = hand.landmarks if isinstance(hand, TrackedHand) else hand
        return phase_metric(
            landmarks,
            anchor=self.settings.anchor_index,
            extremity=self.settings.extremity_index,
        )
