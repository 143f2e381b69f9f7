"""Session statistics, metrics tracking, and cycle export.

Apart from the JSON export/import helpers, this module is pure logic
with NO OpenCV imports.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cycle_tracker.core.exceptions import CycleDataError
from cycle_tracker.core.types import Cycle, SessionStats


@dataclass
class SessionSummary:
    """Summary statistics for a session."""

    total_cycles: int
    avg_duration_s: float | None
    min_duration_s: float | None
    max_duration_s: float | None
    std_duration_s: float | None
    total_duration_s: float
    cadence_cpm: float


class MetricsTracker:
    """Tracks cycles for a session and computes statistics."""

    def __init__(self, stats: SessionStats | None = None) -> None:
        self.stats = stats or SessionStats(start_time=time.time())

    @property
    def cycle_count(self) -> int:
        return self.stats.cycle_count

    def add_cycle(self, cycle: Cycle) -> None:
        """Record a completed cycle."""
        self.stats.add_cycle(cycle)

    def get_summary(self) -> SessionSummary:
        """Get session summary statistics."""
        durations = self.get_duration_trend()

        return SessionSummary(
            total_cycles=self.cycle_count,
            avg_duration_s=self.stats.avg_duration,
            min_duration_s=self.stats.min_duration,
            max_duration_s=self.stats.max_duration,
            std_duration_s=_std(durations),
            total_duration_s=self.stats.total_duration,
            cadence_cpm=self.stats.cadence_cpm,
        )

    def get_duration_trend(self) -> list[float]:
        """Cycle durations in chronological order."""
        return [c.duration or 0.0 for c in self.stats.cycles]

    def reset(self) -> None:
        """Clear all recorded cycles and restart the session clock."""
        self.stats.reset()
        self.stats.start_time = time.time()


def _std(values: list[float]) -> float | None:
    if len(values) < 2:
        return None
    mean = sum(values) / len(values)
    return (sum((v - mean) ** 2 for v in values) / len(values)) ** 0.5


def analyze_consistency(durations: list[float]) -> dict[str, float | None]:
    """Rhythm consistency of a set of cycle durations.

    Args:
        durations: Cycle durations in seconds

    Returns:
        Coefficient of variation (%) and range, None when under two cycles
    """
    if len(durations) < 2:
        return {"coefficient_of_variation": None, "range": None}

    mean = sum(durations) / len(durations)
    std = _std(durations) or 0.0

    return {
        "coefficient_of_variation": (std / mean * 100) if mean > 0 else None,
        "range": max(durations) - min(durations),
    }


def build_analysis_record(
    cycles: list[Cycle],
    filename: str | None = None,
    timestamp: float | None = None,
) -> dict[str, Any]:
    """Cycle list in the analysis payload shape handed to storage."""
    stats = SessionStats(cycles=list(cycles))
    return {
        "filename": filename,
        "timestamp": timestamp if timestamp is not None else time.time(),
        "totalCycles": stats.cycle_count,
        "averageCycleTime": stats.avg_duration or 0.0,
        "cycles": [c.to_dict() for c in cycles],
    }


def export_cycles(
    cycles: list[Cycle],
    path: Path,
    filename: str | None = None,
) -> None:
    """Write cycles to a JSON analysis record.

    Args:
        cycles: Cycles to export
        path: Output file path
        filename: Source video name recorded in the document
    """
    data = build_analysis_record(cycles, filename=filename)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def import_cycles(path: Path) -> list[Cycle]:
    """Read cycles from a JSON analysis record or a bare cycle list.

    Raises:
        CycleDataError: If the document is not valid cycle data
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CycleDataError(f"Invalid JSON in {path}: {e}") from e

    items = data.get("cycles") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise CycleDataError(f"No cycle list in {path}")

    try:
        return [Cycle.from_dict(item) for item in items]
    except (KeyError, TypeError, ValueError) as e:
        raise CycleDataError(f"Malformed cycle in {path}: {e}") from e
