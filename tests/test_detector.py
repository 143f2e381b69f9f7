"""Tests for the hysteresis boundary detector."""

from __future__ import annotations

import pytest

from cycle_tracker.analysis.detector import BoundaryDetector, detect_boundaries_batch
from cycle_tracker.core.config import DetectorSettings
from cycle_tracker.core.exceptions import ConfigurationError, InvalidThresholdsError
from cycle_tracker.core.types import DetectorPhase, Sample


def _run(detector: BoundaryDetector, samples: list[Sample]) -> list[float]:
    return [b for b in (detector.step(m, t) for m, t in samples) if b is not None]


class TestBoundaryDetector:
    """Tests for the BoundaryDetector class."""

    def test_initial_state_is_low(self, detector_settings: DetectorSettings) -> None:
        """Detector should start LOW with no boundary."""
        detector = BoundaryDetector(detector_settings)
        assert detector.phase == DetectorPhase.LOW
        assert detector.last_boundary_time is None

    def test_rejects_inverted_thresholds(self) -> None:
        """Construction must fail when low >= high."""
        with pytest.raises(InvalidThresholdsError):
            BoundaryDetector.from_thresholds(high=0.2, low=0.2)

        with pytest.raises(ConfigurationError):
            BoundaryDetector.from_thresholds(high=0.1, low=0.3)

    def test_rejects_inverted_settings_constructed_without_validation(self) -> None:
        settings = DetectorSettings.model_construct(high=0.1, low=0.3, min_duration_s=0.0)
        with pytest.raises(InvalidThresholdsError) as exc_info:
            BoundaryDetector(settings)
        assert exc_info.value.high == 0.1
        assert exc_info.value.low == 0.3

    def test_first_crossing_is_emitted(self, detector_settings: DetectorSettings) -> None:
        detector = BoundaryDetector(detector_settings)
        assert detector.step(0.0, 0.0) is None
        assert detector.step(0.3, 0.1) == 0.1
        assert detector.phase == DetectorPhase.HIGH
        assert detector.last_boundary_time == 0.1

    def test_metric_equal_to_thresholds_transitions(self) -> None:
        """Crossing uses >= high and <= low."""
        detector = BoundaryDetector.from_thresholds(high=0.5, low=0.2)
        assert detector.step(0.5, 0.0) == 0.0
        assert detector.phase == DetectorPhase.HIGH
        detector.step(0.2, 1.0)
        assert detector.phase == DetectorPhase.LOW

    def test_reference_scenario(
        self,
        detector_settings: DetectorSettings,
        scenario_samples: list[Sample],
    ) -> None:
        """Crossings at 0.5 and 1.6 accepted, 2.05 debounced."""
        detector = BoundaryDetector(detector_settings)
        results = [detector.step(m, t) for m, t in scenario_samples]

        assert results == [None, 0.5, None, 1.6, None, None]
        assert detector.last_boundary_time == 1.6
        # Debounced crossing still moves the state machine to HIGH
        assert detector.phase == DetectorPhase.HIGH

    def test_dead_band_blocks_retrigger(self) -> None:
        """Oscillating between low and high after a rise emits nothing."""
        detector = BoundaryDetector.from_thresholds(high=0.6, low=0.4)
        assert detector.step(0.7, 0.0) == 0.0

        for i in range(1, 50):
            value = 0.45 if i % 2 else 0.7
            assert detector.step(value, float(i)) is None
        assert detector.phase == DetectorPhase.HIGH

        assert detector.step(0.4, 50.0) is None
        assert detector.step(0.6, 51.0) == 51.0

    def test_hovering_below_high_in_low_phase(self) -> None:
        detector = BoundaryDetector.from_thresholds(high=0.6, low=0.4)
        for i in range(20):
            assert detector.step(0.59, float(i)) is None
        assert detector.phase == DetectorPhase.LOW

    def test_debounce_measured_from_last_accepted(self) -> None:
        """A rejected crossing does not restart the debounce window."""
        detector = BoundaryDetector.from_thresholds(high=0.6, low=0.4, min_duration_s=1.0)
        samples = [
            Sample(0.7, 0.0),  # accepted
            Sample(0.3, 0.2),
            Sample(0.7, 0.6),  # dt=0.6 rejected
            Sample(0.3, 0.8),
            Sample(0.7, 1.0),  # dt=1.0 from 0.0, accepted
        ]
        assert _run(detector, samples) == [0.0, 1.0]

    def test_crossing_at_exact_min_duration_is_accepted(self) -> None:
        detector = BoundaryDetector.from_thresholds(high=0.6, low=0.4, min_duration_s=0.5)
        samples = [Sample(0.7, 0.5), Sample(0.3, 0.75), Sample(0.7, 1.0)]
        assert _run(detector, samples) == [0.5, 1.0]

    def test_ramp_yields_one_boundary_per_pass(self, ramp_factory) -> None:
        """Each rise of a periodic ramp slower than min duration counts once."""
        detector = BoundaryDetector.from_thresholds(high=0.7, low=0.3, min_duration_s=0.5)
        boundaries = _run(detector, ramp_factory(periods=6, period_s=1.0))

        assert len(boundaries) == 6
        gaps = [b - a for a, b in zip(boundaries, boundaries[1:])]
        assert all(g == pytest.approx(1.0) for g in gaps)

    def test_fast_ramp_is_debounced(self, ramp_factory) -> None:
        """Passes shorter than min duration are partly rejected."""
        detector = BoundaryDetector.from_thresholds(high=0.7, low=0.3, min_duration_s=0.5)
        boundaries = _run(detector, ramp_factory(periods=6, period_s=0.3))

        assert 1 < len(boundaries) < 6
        gaps = [b - a for a, b in zip(boundaries, boundaries[1:])]
        assert all(g >= 0.5 - 1e-9 for g in gaps)

    def test_reset_clears_state(
        self,
        detector_settings: DetectorSettings,
        scenario_samples: list[Sample],
    ) -> None:
        """Reset should return detector to initial state and keep thresholds."""
        detector = BoundaryDetector(detector_settings)
        detector.set_thresholds(0.3, 0.1)
        _run(detector, scenario_samples)

        detector.reset()

        assert detector.phase == DetectorPhase.LOW
        assert detector.last_boundary_time is None
        assert detector.high == 0.3
        assert detector.low == 0.1

    def test_reset_reproduces_fresh_output(
        self,
        detector_settings: DetectorSettings,
        scenario_samples: list[Sample],
    ) -> None:
        fresh = _run(BoundaryDetector(detector_settings), scenario_samples)

        reused = BoundaryDetector(detector_settings)
        _run(reused, scenario_samples)
        reused.reset()

        assert _run(reused, scenario_samples) == fresh

    def test_invalid_threshold_update_is_ignored(
        self, detector_settings: DetectorSettings
    ) -> None:
        detector = BoundaryDetector(detector_settings)

        assert detector.set_thresholds(0.1, 0.3) is False
        assert detector.set_thresholds(0.25, 0.25) is False
        assert (detector.high, detector.low) == (0.2, 0.15)

        assert detector.set_thresholds(0.5, 0.4) is True
        assert (detector.high, detector.low) == (0.5, 0.4)

    def test_threshold_update_applies_to_next_sample(self) -> None:
        detector = BoundaryDetector.from_thresholds(high=0.6, low=0.4)
        assert detector.step(0.5, 0.0) is None
        detector.set_thresholds(0.45, 0.2)
        assert detector.step(0.5, 0.1) == 0.1

    def test_min_duration_is_clamped(self, detector_settings: DetectorSettings) -> None:
        detector = BoundaryDetector(detector_settings)
        detector.set_min_duration(-1.0)
        assert detector.min_duration_s == 0.0
        detector.set_min_duration(0.8)
        assert detector.min_duration_s == 0.8

    def test_zero_min_duration_accepts_every_rising_edge(self) -> None:
        detector = BoundaryDetector.from_thresholds(high=0.6, low=0.4)
        samples = [Sample(0.7, 0.0), Sample(0.3, 0.0), Sample(0.7, 0.0)]
        assert _run(detector, samples) == [0.0, 0.0]


class TestDetectBoundariesBatch:
    """Tests for the batch detection function."""

    def test_batch_matches_incremental(
        self,
        detector_settings: DetectorSettings,
        scenario_samples: list[Sample],
    ) -> None:
        detector = BoundaryDetector(detector_settings)
        incremental = _run(detector, scenario_samples)

        assert detect_boundaries_batch(scenario_samples, detector_settings) == incremental
        assert incremental == [0.5, 1.6]

    def test_accepts_plain_tuples(self, detector_settings: DetectorSettings) -> None:
        assert detect_boundaries_batch([(0.3, 1.0)], detector_settings) == [1.0]

    def test_empty_sequence_returns_empty_list(
        self, detector_settings: DetectorSettings
    ) -> None:
        assert detect_boundaries_batch([], detector_settings) == []
