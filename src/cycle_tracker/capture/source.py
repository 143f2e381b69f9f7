"""Frame sources: webcam or recorded video file."""

from __future__ import annotations

import time
from collections.abc import Generator
from pathlib import Path

import cv2
import numpy as np

from cycle_tracker.core.config import CaptureSettings
from cycle_tracker.core.exceptions import VideoSourceError
from cycle_tracker.core.logging import get_logger
from cycle_tracker.core.types import Frame

logger = get_logger(__name__)

DEFAULT_FPS = 30.0


class VideoSource:
    """Generator-based frame source over cv2.VideoCapture.

    Camera frames are stamped with elapsed wall time since ``start()``.
    File frames use the container's position (or index / fps when the
    backend does not report it), so analysis does not depend on decode speed.
    """

    def __init__(
        self,
        source: int | str | Path,
        settings: CaptureSettings | None = None,
    ) -> None:
        """Initialize source.

        Args:
            source: Camera index or path to a video file
            settings: Capture settings used for cameras
        """
        self.source = source
        self.settings = settings or CaptureSettings()
        self._capture: cv2.VideoCapture | None = None
        self._frame_idx = 0
        self._start_time: float | None = None
        self._fps = DEFAULT_FPS

    @classmethod
    def camera(cls, settings: CaptureSettings | None = None) -> VideoSource:
        settings = settings or CaptureSettings()
        return cls(settings.camera_index, settings)

    @property
    def is_file(self) -> bool:
        return not isinstance(self.source, int)

    def start(self) -> None:
        """Open the camera or file.

        Raises:
            VideoSourceError: If the source cannot be opened
        """
        if self.is_file:
            path = Path(self.source)
            if not path.exists():
                raise VideoSourceError(f"Video file not found: {path}")
            capture = cv2.VideoCapture(str(path))
        else:
            capture = cv2.VideoCapture(int(self.source))
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.settings.width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.settings.height)

        if not capture.isOpened():
            capture.release()
            raise VideoSourceError(f"Could not open video source: {self.source}")

        reported_fps = capture.get(cv2.CAP_PROP_FPS)
        self._fps = reported_fps if reported_fps and reported_fps > 0 else DEFAULT_FPS
        self._capture = capture
        self._frame_idx = 0
        self._start_time = time.monotonic()
        logger.info("Video source opened: %s (%.1f fps)", self.source, self._fps)

    def stop(self) -> None:
        """Release the underlying capture."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("Video source closed (read %d frames)", self._frame_idx)

    def frames(self) -> Generator[Frame, None, None]:
        """Yield frames until the source is exhausted or stopped.

        Raises:
            VideoSourceError: If a camera read fails
        """
        if self._capture is None:
            self.start()

        while self._capture is not None:
            ok, image = self._capture.read()
            if not ok:
                if self.is_file:
                    break
                raise VideoSourceError("Camera read failed")

            frame = Frame(
                image=np.asarray(image, dtype=np.uint8),
                timestamp=self._timestamp(),
                index=self._frame_idx,
            )
            self._frame_idx += 1
            yield frame

    def _timestamp(self) -> float:
        if self.is_file and self._capture is not None:
            position_ms = self._capture.get(cv2.CAP_PROP_POS_MSEC)
            if position_ms and position_ms > 0:
                return position_ms / 1000.0
            return self._frame_idx / self._fps
        return time.monotonic() - (self._start_time or time.monotonic())

    def __enter__(self) -> VideoSource:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.stop()
