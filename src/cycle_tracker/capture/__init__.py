"""Frame sources for live capture and recorded video."""

from cycle_tracker.capture.source import VideoSource

__all__ = ["VideoSource"]
