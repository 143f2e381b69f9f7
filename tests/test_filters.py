"""Tests for metric smoothing."""

from __future__ import annotations

import pytest

from cycle_tracker.core.config import FilterSettings
from cycle_tracker.vision.filters import MetricSmoother, SmoothingFilter


class TestSmoothingFilter:
    """Tests for the moving average filter."""

    def test_averages_window(self) -> None:
        sf = SmoothingFilter(window_size=3)
        assert sf.update(3.0) == 3.0
        assert sf.update(6.0) == 4.5
        assert sf.update(9.0) == 6.0
        # Oldest value drops out
        assert sf.update(12.0) == 9.0

    def test_reset(self) -> None:
        sf = SmoothingFilter(window_size=3)
        sf.update(10.0)
        sf.reset()
        assert sf.update(2.0) == 2.0

    def test_rejects_empty_window(self) -> None:
        with pytest.raises(ValueError):
            SmoothingFilter(window_size=0)


class TestMetricSmoother:
    """Tests for the pipeline smoothing stage."""

    def test_default_is_passthrough(self) -> None:
        smoother = MetricSmoother()
        assert not smoother.enabled
        assert [smoother.smooth(v) for v in (0.1, 0.9, 0.2)] == [0.1, 0.9, 0.2]

    def test_smooths_spike(self, filter_settings: FilterSettings) -> None:
        smoother = MetricSmoother(filter_settings)
        assert smoother.enabled
        smoother.smooth(0.1)
        smoother.smooth(0.1)
        assert smoother.smooth(0.4) == pytest.approx(0.2)

    def test_reset(self, filter_settings: FilterSettings) -> None:
        smoother = MetricSmoother(filter_settings)
        smoother.smooth(1.0)
        smoother.reset()
        assert smoother.smooth(0.0) == 0.0
