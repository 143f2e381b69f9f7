"""Custom exceptions for Cycle Tracker."""


class CycleTrackerError(Exception):
    """Base exception for all Cycle Tracker errors."""

    pass


class ConfigurationError(CycleTrackerError, ValueError):
    """Invalid configuration values."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        self.message = message
        super().__init__(self.message)


class InvalidThresholdsError(ConfigurationError):
    """Hysteresis thresholds where low is not strictly below high."""

    def __init__(self, high: float, low: float) -> None:
        self.high = high
        self.low = low
        super().__init__(f"low threshold ({low}) must be < high threshold ({high})")


class HandTrackingError(CycleTrackerError):
    """Hand landmark model failed to load or run."""

    def __init__(self, message: str = "Hand tracking failed") -> None:
        self.message = message
        super().__init__(self.message)


class VideoSourceError(CycleTrackerError):
    """Camera or video file could not be opened or read."""

    def __init__(self, message: str = "Video source error") -> None:
        self.message = message
        super().__init__(self.message)


class CycleDataError(CycleTrackerError):
    """Malformed cycle data on import."""

    def __init__(self, message: str = "Invalid cycle data") -> None:
        self.message = message
        super().__init__(self.message)
