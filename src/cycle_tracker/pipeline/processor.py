"""Frame processing pipeline orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import numpy as np

from cycle_tracker.analysis.assembler import CycleAssembler
from cycle_tracker.analysis.continuity import enforce_continuity
from cycle_tracker.analysis.detector import BoundaryDetector
from cycle_tracker.analysis.metric import MetricExtractor
from cycle_tracker.analysis.metrics import MetricsTracker
from cycle_tracker.capture.source import VideoSource
from cycle_tracker.core.config import Settings, get_settings
from cycle_tracker.core.logging import get_logger
from cycle_tracker.core.types import Cycle, DetectorPhase, Frame, SessionStats, TrackedHand
from cycle_tracker.vision.filters import MetricSmoother
from cycle_tracker.vision.hands import HandTracker
from cycle_tracker.vision.overlay import OverlayRenderer

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = get_logger(__name__)


class LandmarkSource(Protocol):
    """Anything that turns a frame into a tracked hand."""

    def initialize(self) -> None: ...

    def close(self) -> None: ...

    def track(self, frame: Frame) -> TrackedHand | None: ...


@dataclass
class ProcessedFrame:
    """Result of processing a single frame."""

    frame: Frame
    hand: TrackedHand | None
    metric: float | None
    session_time: float | None
    phase: DetectorPhase
    boundary: float | None
    cycle: Cycle | None
    rendered_image: NDArray[np.uint8] | None


class FrameProcessor:
    """Runs the per-frame chain for one capture or analysis session.

    hand tracking → phase metric → smoothing → boundary detector →
    cycle assembler → metrics, plus overlay rendering.

    Session time starts at the first frame with a tracked hand. While
    paused, frames are still tracked and rendered but the detector is
    not advanced. A reset leaves the processor paused.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        tracker: LandmarkSource | None = None,
        session_origin: float | None = None,
    ) -> None:
        """Initialize processor with settings.

        Args:
            settings: Application settings (uses defaults if None)
            tracker: Landmark source (MediaPipe hand tracker if None)
            session_origin: Fixed frame timestamp used as time zero; by
                default the first frame with a tracked hand

        Raises:
            InvalidThresholdsError: If detector thresholds are inverted
        """
        self.settings = settings or get_settings()

        self._tracker: LandmarkSource = tracker or HandTracker(self.settings.hands)
        self._extractor = MetricExtractor(self.settings.metric)
        self._smoother = MetricSmoother(self.settings.filter)
        self._detector = BoundaryDetector(self.settings.detector)
        self._assembler = CycleAssembler()
        self._metrics = MetricsTracker()
        self._overlay = OverlayRenderer(self.settings.ui)

        self._fixed_origin = session_origin
        self._session_origin = session_origin
        self._recording = True
        self._initialized = False

    @property
    def stats(self) -> SessionStats:
        """Get current session statistics."""
        return self._metrics.stats

    @property
    def cycles(self) -> list[Cycle]:
        return list(self._metrics.stats.cycles)

    @property
    def detector(self) -> BoundaryDetector:
        return self._detector

    @property
    def current_phase(self) -> DetectorPhase:
        return self._detector.phase

    @property
    def is_recording(self) -> bool:
        return self._recording

    def initialize(self) -> None:
        """Initialize the landmark source."""
        if not self._initialized:
            self._tracker.initialize()
            self._initialized = True
            logger.info("Frame processor initialized")

    def shutdown(self) -> None:
        """Release all resources."""
        self._tracker.close()
        self._initialized = False
        logger.info("Frame processor shutdown")

    def start(self) -> None:
        """Start a fresh recording."""
        self.reset_session()
        self._recording = True
        logger.info("Recording cycle boundaries")

    def pause(self) -> None:
        """Stop advancing the detector. State is kept for resuming."""
        self._recording = False
        logger.info("Recording paused")

    def resume(self) -> None:
        self._recording = True
        logger.info("Recording resumed")

    def set_thresholds(self, high: float, low: float) -> bool:
        """Update detector thresholds; invalid pairs are ignored."""
        applied = self._detector.set_thresholds(high, low)
        if applied:
            logger.info("Thresholds set: high=%.3f low=%.3f", high, low)
        return applied

    def set_min_duration(self, seconds: float) -> None:
        self._detector.set_min_duration(seconds)
        logger.info("Minimum cycle duration: %.2fs", self._detector.min_duration_s)

    def process_frame(self, frame: Frame, render: bool = True) -> ProcessedFrame:
        """Process a single frame through the full pipeline.

        Args:
            frame: Input video frame
            render: Whether to draw the overlay image

        Returns:
            ProcessedFrame with all results
        """
        if not self._initialized:
            self.initialize()

        hand = self._tracker.track(frame)

        metric = None
        session_time = None
        boundary = None
        cycle = None

        if hand is not None:
            metric = self._smoother.smooth(self._extractor(hand))

            if self._recording:
                if self._session_origin is None:
                    self._session_origin = frame.timestamp
                session_time = frame.timestamp - self._session_origin

                boundary = self._detector.step(metric, session_time)
                if boundary is not None:
                    cycle = self._assembler.add_boundary(boundary, hand.to_keypoints())

        if cycle is not None:
            self._metrics.add_cycle(cycle)
            logger.info(
                "Cycle %d: %.2fs (%.2f-%.2f)",
                self._metrics.cycle_count,
                cycle.duration,
                cycle.start_time,
                cycle.end_time,
            )

        rendered = None
        if render:
            rendered = self._overlay.render_full_overlay(
                frame.image,
                hand,
                metric,
                high=self._detector.high,
                low=self._detector.low,
                phase=self._detector.phase,
                metric_segment=(
                    self.settings.metric.anchor_index,
                    self.settings.metric.extremity_index,
                ),
                mirror=self.settings.capture.mirror,
            )

        return ProcessedFrame(
            frame=frame,
            hand=hand,
            metric=metric,
            session_time=session_time,
            phase=self._detector.phase,
            boundary=boundary,
            cycle=cycle,
            rendered_image=rendered,
        )

    def reset_session(self) -> None:
        """Clear cycles, detector state and the session clock.

        Recording stays paused until ``start()`` or ``resume()``.
        """
        self._metrics.reset()
        self._detector.reset()
        self._assembler.reset()
        self._smoother.reset()
        self._session_origin = self._fixed_origin
        self._recording = False
        logger.info("Session reset")

    def __enter__(self) -> FrameProcessor:
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.shutdown()


def analyze_video(
    video_path: Path,
    settings: Settings | None = None,
    tracker: LandmarkSource | None = None,
) -> list[Cycle]:
    """Detect cycles in a recorded video and normalize their timeline.

    Args:
        video_path: Path to the video file
        settings: Application settings
        tracker: Landmark source (MediaPipe hand tracker if None)

    Returns:
        Contiguous cycle list

    Raises:
        VideoSourceError: If the video cannot be opened
        HandTrackingError: If hand tracking fails
    """
    settings = settings or get_settings()

    # Cycle times are positions in the video, not offsets from the first hand
    processor = FrameProcessor(settings, tracker, session_origin=0.0)

    with processor, VideoSource(video_path) as source:
        for frame in source.frames():
            processor.process_frame(frame, render=False)
            if frame.index and frame.index % 300 == 0:
                logger.info("Processed %d frames...", frame.index)
        raw_cycles = processor.cycles

    logger.info("Detected %d cycles in %s", len(raw_cycles), video_path)

    return enforce_continuity(
        raw_cycles,
        session_start=settings.continuity.session_start,
        clamp_non_positive=settings.continuity.clamp_non_positive,
    )
