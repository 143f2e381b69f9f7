"""Core infrastructure: config, types, exceptions, and logging."""

from cycle_tracker.core.config import Settings, get_settings
from cycle_tracker.core.exceptions import (
    ConfigurationError,
    CycleDataError,
    CycleTrackerError,
    HandTrackingError,
    InvalidThresholdsError,
    VideoSourceError,
)
from cycle_tracker.core.logging import get_logger, setup_logging
from cycle_tracker.core.types import (
    Cycle,
    DetectorPhase,
    Frame,
    HandLandmark,
    Landmark,
    Sample,
    SessionStats,
    TrackedHand,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "Landmark",
    "HandLandmark",
    "TrackedHand",
    "Frame",
    "Sample",
    "DetectorPhase",
    "Cycle",
    "SessionStats",
    # Exceptions
    "CycleTrackerError",
    "ConfigurationError",
    "InvalidThresholdsError",
    "HandTrackingError",
    "VideoSourceError",
    "CycleDataError",
    # Logging
    "setup_logging",
    "get_logger",
]
