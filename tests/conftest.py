"""Pytest fixtures for Cycle Tracker tests."""

from __future__ import annotations

import pytest

from cycle_tracker.core.config import DetectorSettings, FilterSettings, MetricSettings
from cycle_tracker.core.types import (
    HAND_LANDMARK_COUNT,
    Cycle,
    HandLandmark,
    Landmark,
    Sample,
    TrackedHand,
)


def make_hand(
    openness: float,
    timestamp: float = 0.0,
    frame_idx: int = 0,
) -> TrackedHand:
    """Hand with the index fingertip ``openness`` above the wrist."""
    wrist = Landmark(x=0.5, y=0.8)
    landmarks = [Landmark(x=0.5, y=0.7) for _ in range(HAND_LANDMARK_COUNT)]
    landmarks[HandLandmark.WRIST.value] = wrist
    landmarks[HandLandmark.INDEX_FINGER_TIP.value] = Landmark(x=0.5, y=0.8 - openness)
    return TrackedHand(landmarks=landmarks, timestamp=timestamp, frame_idx=frame_idx)


def ramp_samples(
    periods: int,
    period_s: float,
    steps_per_half: int = 10,
) -> list[Sample]:
    """Triangle wave 0 → 1 → 0, repeated ``periods`` times."""
    samples = []
    dt = period_s / (2 * steps_per_half)
    t = 0.0
    for _ in range(periods):
        for i in range(2 * steps_per_half):
            if i <= steps_per_half:
                value = i / steps_per_half
            else:
                value = (2 * steps_per_half - i) / steps_per_half
            samples.append(Sample(value, t))
            t += dt
    samples.append(Sample(0.0, t))
    return samples


@pytest.fixture
def detector_settings() -> DetectorSettings:
    """Thresholds used by the reference scenario."""
    return DetectorSettings(high=0.2, low=0.15, min_duration_s=0.5)


@pytest.fixture
def scenario_samples() -> list[Sample]:
    """Two accepted crossings followed by one debounced crossing."""
    return [
        Sample(0.0, 0.0),
        Sample(0.25, 0.5),
        Sample(0.10, 1.0),
        Sample(0.25, 1.6),
        Sample(0.05, 2.0),
        Sample(0.25, 2.05),
    ]


@pytest.fixture
def metric_settings() -> MetricSettings:
    return MetricSettings()


@pytest.fixture
def filter_settings() -> FilterSettings:
    return FilterSettings(smoothing_window_size=3)


@pytest.fixture
def sample_hand() -> TrackedHand:
    return make_hand(0.3)


@pytest.fixture
def gapped_cycles() -> list[Cycle]:
    """Unordered candidate cycles with gaps and overlaps."""
    return [
        Cycle(start_time=5.0, end_time=10.0, id="c"),
        Cycle(start_time=0.0, end_time=4.0, id="a"),
        Cycle(start_time=3.5, end_time=5.5, id="b"),
        Cycle(start_time=12.0, end_time=11.0, id="d"),
    ]


@pytest.fixture
def hand_factory():
    """Factory building hands with a given wrist-to-fingertip distance."""
    return make_hand


@pytest.fixture
def ramp_factory():
    """Factory building triangle-wave sample sequences."""
    return ramp_samples
