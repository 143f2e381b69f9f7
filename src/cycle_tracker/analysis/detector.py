"""Hysteresis boundary detection state machine.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from cycle_tracker.core.config import DetectorSettings
from cycle_tracker.core.exceptions import InvalidThresholdsError
from cycle_tracker.core.logging import get_logger
from cycle_tracker.core.types import DetectorPhase, Sample

logger = get_logger(__name__)


@dataclass
class DetectorState:
    """Internal state for boundary detection."""

    phase: DetectorPhase = DetectorPhase.LOW
    last_boundary_time: float | None = None


class BoundaryDetector:
    """Two-threshold state machine turning a metric stream into boundaries.

    Transitions:
        LOW → HIGH: metric >= high. Attempts to emit a boundary.
        HIGH → LOW: metric <= low. Re-arms for the next rising edge.

    A rising edge closer than ``min_duration_s`` to the last accepted
    boundary is not emitted and does not move ``last_boundary_time``,
    but the phase still becomes HIGH.

    This class is pure logic - no I/O, no OpenCV, no side effects.
    """

    def __init__(self, settings: DetectorSettings | None = None) -> None:
        """Initialize detector with settings.

        Args:
            settings: Detector thresholds (uses defaults if None)

        Raises:
            InvalidThresholdsError: If low >= high
        """
        settings = settings or DetectorSettings()
        if settings.low >= settings.high:
            raise InvalidThresholdsError(settings.high, settings.low)

        self._high = settings.high
        self._low = settings.low
        self._min_duration_s = max(0.0, settings.min_duration_s)
        self._state = DetectorState()

    @classmethod
    def from_thresholds(
        cls,
        high: float,
        low: float,
        min_duration_s: float = 0.0,
    ) -> BoundaryDetector:
        """Build a detector from raw values without going through settings.

        Raises:
            InvalidThresholdsError: If low >= high
        """
        if low >= high:
            raise InvalidThresholdsError(high, low)
        return cls(
            DetectorSettings.model_construct(
                high=high, low=low, min_duration_s=max(0.0, min_duration_s)
            )
        )

    @property
    def high(self) -> float:
        return self._high

    @property
    def low(self) -> float:
        return self._low

    @property
    def min_duration_s(self) -> float:
        return self._min_duration_s

    @property
    def phase(self) -> DetectorPhase:
        """Get current detector phase."""
        return self._state.phase

    @property
    def last_boundary_time(self) -> float | None:
        """Timestamp of the last accepted boundary."""
        return self._state.last_boundary_time

    def set_thresholds(self, high: float, low: float) -> bool:
        """Update thresholds, ignoring pairs where low >= high.

        Returns:
            True if the new pair was applied
        """
        if low >= high:
            logger.debug("Ignoring thresholds high=%.3f low=%.3f", high, low)
            return False
        self._high = high
        self._low = low
        return True

    def set_min_duration(self, seconds: float) -> None:
        """Update minimum cycle duration, clamped to >= 0."""
        self._min_duration_s = max(0.0, seconds)

    def reset(self) -> None:
        """Return to LOW with no recorded boundary. Thresholds are kept."""
        self._state = DetectorState()

    def step(self, metric: float, timestamp: float) -> float | None:
        """Feed one sample.

        Args:
            metric: Phase metric value
            timestamp: Sample time in seconds (non-decreasing)

        Returns:
            Timestamp of the accepted boundary, or None
        """
        if self._state.phase == DetectorPhase.LOW:
            if metric >= self._high:
                self._state.phase = DetectorPhase.HIGH
                return self._try_boundary(timestamp)
        elif metric <= self._low:
            self._state.phase = DetectorPhase.LOW

        return None

    def _try_boundary(self, timestamp: float) -> float | None:
        last = self._state.last_boundary_time
        if last is None:
            self._state.last_boundary_time = timestamp
            logger.debug("First boundary at %.3fs", timestamp)
            return timestamp

        dt = timestamp - last
        if dt >= self._min_duration_s:
            self._state.last_boundary_time = timestamp
            logger.debug("Boundary at %.3fs (dt=%.3fs)", timestamp, dt)
            return timestamp

        logger.debug("Rejected crossing at %.3fs (dt=%.3fs)", timestamp, dt)
        return None


def detect_boundaries_batch(
    samples: Iterable[Sample | tuple[float, float]],
    settings: DetectorSettings | None = None,
) -> list[float]:
    """Run a fresh detector over a recorded sample sequence.

    Args:
        samples: (metric, timestamp) pairs in time order
        settings: Detector settings

    Returns:
        Accepted boundary timestamps
    """
    detector = BoundaryDetector(settings)
    boundaries: list[float] = []

    for metric, timestamp in samples:
        boundary = detector.step(metric, timestamp)
        if boundary is not None:
            boundaries.append(boundary)

    return boundaries
