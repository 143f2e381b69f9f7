#!/usr/bin/env python3
"""Record raw webcam video for offline cycle analysis.

Recordings can be replayed with ``cycle-tracker analyze`` or
``scripts/validate_detection.py`` without a live camera.
"""

from __future__ import annotations

import argparse
import sys
import time
from datetime import datetime
from pathlib import Path

import cv2

from cycle_tracker.capture.source import VideoSource
from cycle_tracker.core.config import CaptureSettings, get_settings
from cycle_tracker.core.exceptions import VideoSourceError
from cycle_tracker.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

DEFAULT_OUTPUT_DIR = Path("data/recordings")


def record_from_camera(
    settings: CaptureSettings,
    output_path: Path,
    duration_seconds: float | None = None,
    fps: float = 30.0,
) -> int:
    """Record video from a camera.

    Args:
        settings: Camera settings
        output_path: Output video file path
        duration_seconds: Maximum recording duration (None = until 'q' pressed)
        fps: Output video frame rate

    Returns:
        Number of frames recorded
    """
    source = VideoSource.camera(settings)
    writer: cv2.VideoWriter | None = None
    frame_count = 0

    cv2.namedWindow("Recording", cv2.WINDOW_NORMAL)
    logger.info("Press 'q' to stop recording")

    start_time = time.time()

    try:
        with source:
            for frame in source.frames():
                if writer is None:
                    width, height = frame.dimensions
                    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
                    writer = cv2.VideoWriter(str(output_path), fourcc, fps, (width, height))
                    if not writer.isOpened():
                        logger.error("Could not open video writer")
                        return 0
                    logger.info(
                        "Recording to %s (%dx%d @ %.1f fps)", output_path, width, height, fps
                    )

                writer.write(frame.image)
                frame_count += 1

                elapsed = time.time() - start_time
                preview = frame.image.copy()
                status = f"Recording: {frame_count} frames | {elapsed:.1f}s"
                cv2.putText(preview, status, (20, 40), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (0, 0, 255), 2)
                cv2.circle(preview, (frame.width - 30, 30), 15, (0, 0, 255), -1)
                cv2.imshow("Recording", preview)

                key = cv2.waitKey(1) & 0xFF
                if key == ord("q"):
                    logger.info("Recording stopped by user")
                    break

                if duration_seconds and elapsed >= duration_seconds:
                    logger.info("Recording duration reached")
                    break

    finally:
        if writer is not None:
            writer.release()
        cv2.destroyAllWindows()

    logger.info("Recorded %d frames to %s", frame_count, output_path)
    return frame_count


def main() -> int:
    """Run recording script."""
    parser = argparse.ArgumentParser(description="Record video for offline analysis")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output video file path (default: auto-generated)",
    )
    parser.add_argument(
        "--duration",
        "-d",
        type=float,
        help="Maximum recording duration in seconds",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=30.0,
        help="Output frame rate (default: 30)",
    )
    parser.add_argument(
        "--camera",
        type=int,
        help="Webcam device ID (default: CAPTURE_CAMERA_INDEX)",
    )

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.logging.level)

    capture = settings.capture
    if args.camera is not None:
        capture = capture.model_copy(update={"camera_index": args.camera})

    if args.output is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        args.output = DEFAULT_OUTPUT_DIR / f"session_{timestamp}.mp4"

    args.output.parent.mkdir(parents=True, exist_ok=True)

    try:
        frame_count = record_from_camera(
            capture,
            args.output,
            duration_seconds=args.duration,
            fps=args.fps,
        )
    except VideoSourceError as e:
        logger.error("Camera unavailable: %s", e)
        return 1

    return 0 if frame_count > 0 else 1


if __name__ == "__main__":
    sys.exit(main())
