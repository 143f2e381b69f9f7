"""Tests for the frame processing pipeline."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import numpy as np
import pytest

pytest.importorskip("cv2")
pytest.importorskip("mediapipe")

from cycle_tracker.core.config import DetectorSettings, Settings  # noqa: E402
from cycle_tracker.core.types import DetectorPhase, Frame, TrackedHand  # noqa: E402
from cycle_tracker.pipeline.processor import FrameProcessor  # noqa: E402


class ScriptedTracker:
    """Landmark source replaying a fixed openness sequence."""

    def __init__(
        self,
        openness: list[float | None],
        make_hand: Callable[..., TrackedHand],
    ) -> None:
        self._make_hand = make_hand
        self._values: Iterator[float | None] = iter(openness)
        self.initialized = False
        self.closed = False

    def initialize(self) -> None:
        self.initialized = True

    def close(self) -> None:
        self.closed = True

    def track(self, frame: Frame) -> TrackedHand | None:
        value = next(self._values)
        if value is None:
            return None
        return self._make_hand(value, frame.timestamp, frame.index)


def _frames(timestamps: list[float]) -> list[Frame]:
    image = np.zeros((48, 64, 3), dtype=np.uint8)
    return [Frame(image=image, timestamp=t, index=i) for i, t in enumerate(timestamps)]


@pytest.fixture
def settings() -> Settings:
    return Settings(detector=DetectorSettings(high=0.2, low=0.15, min_duration_s=0.5))


@pytest.fixture
def scripted(hand_factory):
    """Factory building scripted trackers from openness values."""

    def _build(openness: list[float | None]) -> ScriptedTracker:
        return ScriptedTracker(openness, hand_factory)

    return _build


class TestFrameProcessor:
    """Tests for FrameProcessor."""

    def test_session_clock_starts_at_first_hand(self, settings: Settings, scripted) -> None:
        tracker = scripted([None, 0.1, 0.25])
        processor = FrameProcessor(settings, tracker)

        results = [processor.process_frame(f, render=False) for f in _frames([3.0, 4.0, 4.5])]

        assert results[0].hand is None
        assert results[0].session_time is None
        assert results[1].session_time == 0.0
        assert results[2].boundary == 0.5
        assert tracker.initialized

    def test_builds_contiguous_cycles(self, settings: Settings, scripted) -> None:
        openness = [0.0, 0.25, 0.10, 0.25, 0.05, 0.25, 0.05, 0.25]
        timestamps = [0.0, 0.5, 1.0, 1.6, 2.0, 2.05, 2.5, 3.0]
        processor = FrameProcessor(settings, scripted(openness), session_origin=0.0)

        for frame in _frames(timestamps):
            processor.process_frame(frame, render=False)

        cycles = processor.cycles
        assert [(c.start_time, c.end_time) for c in cycles] == [(0.5, 1.6), (1.6, 3.0)]
        assert processor.stats.cycle_count == 2
        assert cycles[0].hand_keypoints

    def test_paused_processor_does_not_advance(self, settings: Settings, scripted) -> None:
        processor = FrameProcessor(settings, scripted([0.25, 0.25]), session_origin=0.0)
        processor.pause()

        result = processor.process_frame(_frames([1.0])[0], render=False)

        assert result.metric == pytest.approx(0.25)
        assert result.boundary is None
        assert processor.current_phase == DetectorPhase.LOW
        assert not processor.is_recording

    def test_reset_session_clears_cycles(self, settings: Settings, scripted) -> None:
        openness = [0.25, 0.0, 0.25, 0.0, 0.25]
        processor = FrameProcessor(settings, scripted(openness), session_origin=0.0)
        for frame in _frames([0.0, 0.5, 1.0, 1.5, 2.0]):
            processor.process_frame(frame, render=False)
        assert processor.cycles

        processor.reset_session()

        assert processor.cycles == []
        assert processor.detector.last_boundary_time is None
        assert processor.current_phase == DetectorPhase.LOW

    def test_reset_pauses_until_resumed(self, settings: Settings, scripted) -> None:
        tracker = scripted([0.25, 0.25, 0.0, 0.25])
        processor = FrameProcessor(settings, tracker, session_origin=0.0)
        processor.process_frame(_frames([0.0])[0], render=False)

        processor.reset_session()

        assert not processor.is_recording
        frames = _frames([1.0, 2.0, 3.0, 4.0])
        assert processor.process_frame(frames[1], render=False).boundary is None
        assert processor.current_phase == DetectorPhase.LOW

        processor.resume()
        processor.process_frame(frames[2], render=False)
        assert processor.process_frame(frames[3], render=False).boundary == 4.0

    def test_invalid_threshold_update_keeps_previous(self, settings: Settings, scripted) -> None:
        processor = FrameProcessor(settings, scripted([]))
        assert processor.set_thresholds(0.1, 0.3) is False
        assert (processor.detector.high, processor.detector.low) == (0.2, 0.15)

    def test_renders_overlay(self, settings: Settings, scripted) -> None:
        processor = FrameProcessor(settings, scripted([0.3]))
        result = processor.process_frame(_frames([0.0])[0])
        assert result.rendered_image is not None
        assert result.rendered_image.shape == (48, 64, 3)

    def test_context_manager_closes_tracker(self, settings: Settings, scripted) -> None:
        tracker = scripted([])
        with FrameProcessor(settings, tracker):
            assert tracker.initialized
        assert tracker.closed


class TestAnalyzeVideo:
    """Tests for offline analysis."""

    def test_missing_file_raises(self, settings: Settings, scripted, tmp_path: Path) -> None:
        from cycle_tracker.core.exceptions import VideoSourceError
        from cycle_tracker.pipeline.processor import analyze_video

        with pytest.raises(VideoSourceError):
            analyze_video(tmp_path / "missing.mp4", settings, scripted([]))
