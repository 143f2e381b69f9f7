"""Signal filtering utilities for phase metric smoothing."""

from __future__ import annotations

from collections import deque

from cycle_tracker.core.config import FilterSettings


class SmoothingFilter:
    """Moving average filter for smoothing sequences.

    Uses a sliding window to compute moving average of values.
    """

    def __init__(self, window_size: int = 5) -> None:
        """Initialize smoothing filter.

        Args:
            window_size: Number of samples in sliding window (>= 1)
        """
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self.window_size = window_size
        self._buffer: deque[float] = deque(maxlen=window_size)

    def reset(self) -> None:
        """Clear filter buffer."""
        self._buffer.clear()

    def update(self, value: float) -> float:
        """Add value and return smoothed result.

        Args:
            value: New measurement

        Returns:
            Smoothed value (moving average)
        """
        self._buffer.append(value)
        return sum(self._buffer) / len(self._buffer)


class MetricSmoother:
    """Optional smoothing stage between metric extraction and detection.

    A window of 1 passes values through unchanged.
    """

    def __init__(self, settings: FilterSettings | None = None) -> None:
        self.settings = settings or FilterSettings()
        self._filter = SmoothingFilter(self.settings.smoothing_window_size)

    @property
    def enabled(self) -> bool:
        return self.settings.smoothing_window_size > 1

    def smooth(self, metric: float) -> float:
        if not self.enabled:
            return metric
        return self._filter.update(metric)

    def reset(self) -> None:
        self._filter.reset()
