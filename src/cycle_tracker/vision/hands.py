"""MediaPipe hand landmark tracking using the Tasks API."""

from __future__ import annotations

import urllib.request
from pathlib import Path

import cv2
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from cycle_tracker.core.config import HandTrackingSettings
from cycle_tracker.core.exceptions import HandTrackingError
from cycle_tracker.core.logging import get_logger
from cycle_tracker.core.types import Frame, Landmark, TrackedHand

logger = get_logger(__name__)

MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/latest/hand_landmarker.task"
MODEL_DIR = Path(__file__).parent.parent.parent.parent / "data" / "models"
MODEL_PATH = MODEL_DIR / "hand_landmarker.task"


def _download_model() -> Path:
    """Download the hand landmarker model if not present.

    Raises:
        HandTrackingError: If download fails
    """
    if MODEL_PATH.exists():
        return MODEL_PATH

    logger.info("Downloading MediaPipe hand landmarker model...")
    MODEL_DIR.mkdir(parents=True, exist_ok=True)

    try:
        urllib.request.urlretrieve(MODEL_URL, MODEL_PATH)
        logger.info("Model downloaded to %s", MODEL_PATH)
        return MODEL_PATH
    except Exception as e:
        raise HandTrackingError(f"Failed to download model: {e}") from e


class HandTracker:
    """Wrapper for the MediaPipe hand landmarker in VIDEO mode.

    Converts MediaPipe results to TrackedHand/Landmark types so that
    MediaPipe objects never leave this module.
    """

    def __init__(self, settings: HandTrackingSettings | None = None) -> None:
        self.settings = settings or HandTrackingSettings()
        self._landmarker: vision.HandLandmarker | None = None
        self._last_timestamp_ms = -1

    @property
    def is_initialized(self) -> bool:
        """Check if the model is loaded."""
        return self._landmarker is not None

    def initialize(self) -> None:
        """Load the hand landmarker model.

        Raises:
            HandTrackingError: If model fails to load
        """
        try:
            model_path = _download_model()

            options = vision.HandLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=str(model_path)),
                running_mode=vision.RunningMode.VIDEO,
                num_hands=self.settings.max_num_hands,
                min_hand_detection_confidence=self.settings.min_detection_confidence,
                min_hand_presence_confidence=self.settings.min_presence_confidence,
                min_tracking_confidence=self.settings.min_tracking_confidence,
            )

            self._landmarker = vision.HandLandmarker.create_from_options(options)
            self._last_timestamp_ms = -1
            logger.info("MediaPipe HandLandmarker initialized (Tasks API)")

        except HandTrackingError:
            raise
        except Exception as e:
            raise HandTrackingError(f"Failed to initialize MediaPipe: {e}") from e

    def close(self) -> None:
        """Release MediaPipe resources."""
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None

    def track(self, frame: Frame) -> TrackedHand | None:
        """Run hand tracking on a frame.

        Args:
            frame: Input video frame

        Returns:
            First tracked hand, or None if no hand is visible

        Raises:
            HandTrackingError: If inference fails
        """
        if self._landmarker is None:
            self.initialize()

        if self._landmarker is None:
            raise HandTrackingError("Hand tracker not initialized")

        # VIDEO mode rejects non-increasing timestamps
        timestamp_ms = max(int(frame.timestamp * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        try:
            rgb_image = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB)
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_image)
            results = self._landmarker.detect_for_video(mp_image, timestamp_ms)
        except Exception as e:
            logger.error("Hand tracking failed: %s", e)
            raise HandTrackingError(f"Tracking failed: {e}") from e

        if not results.hand_landmarks:
            return None

        return self._convert_results(results, frame)

    def _convert_results(self, results: vision.HandLandmarkerResult, frame: Frame) -> TrackedHand:
        landmarks = [
            Landmark(x=float(lm.x), y=float(lm.y), z=float(lm.z))
            for lm in results.hand_landmarks[0]
        ]

        handedness = None
        confidence = 1.0
        if results.handedness and results.handedness[0]:
            category = results.handedness[0][0]
            handedness = category.category_name
            confidence = float(category.score)

        return TrackedHand(
            landmarks=landmarks,
            timestamp=frame.timestamp,
            frame_idx=frame.index,
            handedness=handedness,
            confidence=confidence,
        )

    def __enter__(self) -> HandTracker:
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()
