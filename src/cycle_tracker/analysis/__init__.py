"""Pure analysis logic: phase metric, boundary detection, cycles, and metrics.

This module contains NO OpenCV imports.
All functions operate on typed dataclasses and return results.
"""

from cycle_tracker.analysis.assembler import CycleAssembler, assemble_cycles
from cycle_tracker.analysis.continuity import CLAMP_EPSILON_S, enforce_continuity
from cycle_tracker.analysis.detector import BoundaryDetector, detect_boundaries_batch
from cycle_tracker.analysis.metric import MetricExtractor, joint_angle_metric, phase_metric
from cycle_tracker.analysis.metrics import MetricsTracker

__all__ = [
    "BoundaryDetector",
    "CycleAssembler",
    "MetricExtractor",
    "MetricsTracker",
    "CLAMP_EPSILON_S",
    "assemble_cycles",
    "detect_boundaries_batch",
    "enforce_continuity",
    "joint_angle_metric",
    "phase_metric",
]
