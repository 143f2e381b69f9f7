"""Frame processing pipeline orchestration."""

from cycle_tracker.pipeline.processor import FrameProcessor, ProcessedFrame, analyze_video

__all__ = ["FrameProcessor", "ProcessedFrame", "analyze_video"]
