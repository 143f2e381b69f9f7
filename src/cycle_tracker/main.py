"""Main entry point for Cycle Tracker."""

from __future__ import annotations

import argparse
import sys
import time
from datetime import datetime
from pathlib import Path

from cycle_tracker.analysis.metrics import MetricsTracker, analyze_consistency, export_cycles
from cycle_tracker.capture.source import VideoSource
from cycle_tracker.core.config import Settings, get_settings
from cycle_tracker.core.exceptions import CycleTrackerError, VideoSourceError
from cycle_tracker.core.logging import get_logger, setup_logging
from cycle_tracker.core.types import SessionStats
from cycle_tracker.pipeline.processor import FrameProcessor, analyze_video
from cycle_tracker.ui.display import DisplayWindow, KeyAction
from cycle_tracker.ui.hud import HUDRenderer

logger = get_logger(__name__)

DEFAULT_OUTPUT_DIR = Path("data/sessions")

THRESHOLD_STEP = 0.005
MIN_DURATION_STEP = 0.05


def _session_path(output_dir: Path) -> Path:
    return output_dir / f"cycles_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"


def _log_summary(stats: SessionStats) -> None:
    summary = f"Session: {stats.cycle_count} cycles"
    if stats.avg_duration is not None:
        summary += f", avg {stats.avg_duration:.2f} s, {stats.cadence_cpm:.1f} cpm"
    logger.info(summary)


def _handle_key(
    action: KeyAction,
    processor: FrameProcessor,
    settings: Settings,
    display: DisplayWindow,
    output_dir: Path,
) -> bool:
    """Apply a key action. Returns False when the session should end."""
    detector = processor.detector

    if action == KeyAction.QUIT:
        logger.info("Quit requested")
        return False

    if action == KeyAction.PAUSE:
        if processor.is_recording:
            processor.pause()
        else:
            processor.resume()

    elif action == KeyAction.RESET:
        processor.reset_session()

    elif action == KeyAction.SAVE:
        if not processor.cycles:
            logger.info("No cycles to save yet")
        else:
            path = _session_path(output_dir)
            export_cycles(processor.cycles, path)
            logger.info("Saved %d cycles to %s", len(processor.cycles), path)
            display.flash(f"Saved {len(processor.cycles)} cycles")

    elif action == KeyAction.TOGGLE_SKELETON:
        settings.ui.draw_skeleton = not settings.ui.draw_skeleton

    elif action == KeyAction.TOGGLE_METRICS:
        settings.ui.show_metrics = not settings.ui.show_metrics

    elif action == KeyAction.TOGGLE_DEBUG:
        settings.ui.show_debug_info = not settings.ui.show_debug_info

    elif action == KeyAction.HIGH_DOWN:
        processor.set_thresholds(detector.high - THRESHOLD_STEP, detector.low)
    elif action == KeyAction.HIGH_UP:
        processor.set_thresholds(detector.high + THRESHOLD_STEP, detector.low)
    elif action == KeyAction.LOW_DOWN:
        processor.set_thresholds(detector.high, detector.low - THRESHOLD_STEP)
    elif action == KeyAction.LOW_UP:
        processor.set_thresholds(detector.high, detector.low + THRESHOLD_STEP)
    elif action == KeyAction.MIN_DURATION_DOWN:
        processor.set_min_duration(detector.min_duration_s - MIN_DURATION_STEP)
    elif action == KeyAction.MIN_DURATION_UP:
        processor.set_min_duration(detector.min_duration_s + MIN_DURATION_STEP)

    return True


def run_live_session(settings: Settings, output_dir: Path) -> int:
    """Run live capture from the webcam.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    logger.info("Starting live capture")

    display = DisplayWindow(settings.ui)
    processor = FrameProcessor(settings)
    hud = HUDRenderer(settings.ui)
    source = VideoSource.camera(settings.capture)

    try:
        processor.initialize()
        display.open()
        processor.start()

        frame_count = 0
        start_time = time.time()
        fps = 0.0

        logger.info("Starting tracking loop (press 'q' to quit)")

        with source:
            for frame in source.frames():
                result = processor.process_frame(frame)
                if result.rendered_image is None:
                    continue

                output = hud.render_full_hud(
                    result.rendered_image,
                    stats=processor.stats,
                    phase=result.phase,
                    high=processor.detector.high,
                    low=processor.detector.low,
                    min_duration_s=processor.detector.min_duration_s,
                    fps=fps,
                    recording=processor.is_recording,
                )
                display.show_frame(output)

                action = display.poll_key(wait_ms=1)
                if not _handle_key(action, processor, settings, display, output_dir):
                    break

                frame_count += 1
                elapsed = time.time() - start_time
                if elapsed > 1.0:
                    fps = frame_count / elapsed
                    frame_count = 0
                    start_time = time.time()

        _log_summary(processor.stats)
        return 0

    except VideoSourceError as e:
        logger.error("Camera unavailable: %s", e)
        return 1

    except CycleTrackerError as e:
        logger.error("Tracking error: %s", e)
        return 2

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        return 3

    finally:
        processor.shutdown()
        display.close()
        logger.info("Cycle Tracker stopped")


def run_video_analysis(settings: Settings, video: Path, output: Path | None) -> int:
    """Analyze a recorded video and write the normalized cycle list.

    Returns:
        Exit code
    """
    try:
        cycles = analyze_video(video, settings)
    except VideoSourceError as e:
        logger.error("Could not read video: %s", e)
        return 1
    except CycleTrackerError as e:
        logger.error("Analysis failed: %s", e)
        return 2
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        return 3

    tracker = MetricsTracker(SessionStats(cycles=cycles))
    _log_summary(tracker.stats)
    summary = tracker.get_summary()
    if summary.min_duration_s is not None:
        logger.info(
            "Durations: min %.2f s, max %.2f s", summary.min_duration_s, summary.max_duration_s
        )
    consistency = analyze_consistency(tracker.get_duration_trend())
    if consistency["coefficient_of_variation"] is not None:
        logger.info("Duration CV: %.1f%%", consistency["coefficient_of_variation"])

    output = output or video.with_suffix(".cycles.json")
    export_cycles(cycles, output, filename=video.name)
    logger.info("Cycles written to %s", output)
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Cycle Tracker - repetition cycle timing from hand tracking"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--high", type=float, help="Rising threshold")
    parser.add_argument("--low", type=float, help="Falling threshold")
    parser.add_argument("--min-duration", type=float, help="Minimum cycle duration (s)")

    subparsers = parser.add_subparsers(dest="command")

    live = subparsers.add_parser("live", help="Live capture from the webcam")
    live.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory for saved sessions (default: {DEFAULT_OUTPUT_DIR})",
    )

    analyze = subparsers.add_parser("analyze", help="Analyze a recorded video")
    analyze.add_argument("video", type=Path, help="Path to video file")
    analyze.add_argument("--output", "-o", type=Path, help="Output JSON path")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging("DEBUG" if args.debug else settings.logging.level, settings.logging.file)

    high = args.high if args.high is not None else settings.detector.high
    low = args.low if args.low is not None else settings.detector.low
    if low >= high:
        logger.error("Low threshold (%.3f) must be below high threshold (%.3f)", low, high)
        sys.exit(2)
    settings.detector.high = high
    settings.detector.low = low
    if args.min_duration is not None:
        settings.detector.min_duration_s = max(0.0, args.min_duration)

    if args.command == "analyze":
        exit_code = run_video_analysis(settings, args.video, args.output)
    else:
        exit_code = run_live_session(settings, getattr(args, "output_dir", DEFAULT_OUTPUT_DIR))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
