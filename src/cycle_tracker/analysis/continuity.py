"""Re-stitching of candidate cycles into a gap-free timeline.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import replace

from cycle_tracker.core.types import Cycle

# Duration forced onto degenerate cycles when clamping
CLAMP_EPSILON_S = 1e-3


def enforce_continuity(
    cycles: Iterable[Cycle],
    session_start: float | None = None,
    clamp_non_positive: bool = False,
) -> list[Cycle]:
    """Rebuild cycles so each one starts where the previous one ended.

    Cycles are ordered by start time (stable for ties). End times are
    trusted; every start after the first is overwritten with the
    previous end. Input cycles are not modified.

    Args:
        cycles: Candidate cycles in any order
        session_start: If given, forced onto the first cycle's start
        clamp_non_positive: Replace non-finite or non-positive durations
            with CLAMP_EPSILON_S, moving the end time accordingly

    Returns:
        New cycles, same count as the input
    """
    ordered = sorted(cycles, key=lambda c: c.start_time)
    result: list[Cycle] = []

    for i, cycle in enumerate(ordered):
        if i == 0:
            start = cycle.start_time if session_start is None else session_start
        else:
            start = result[i - 1].end_time

        end = cycle.end_time
        duration = end - start
        if clamp_non_positive and (not math.isfinite(duration) or duration <= 0):
            end = start + CLAMP_EPSILON_S
            # Equals end - start exactly; a second pass leaves it unchanged
            duration = end - start

        result.append(
            replace(
                cycle,
                start_time=start,
                end_time=end,
                duration=duration,
                body_keypoints=list(cycle.body_keypoints),
                hand_keypoints=list(cycle.hand_keypoints),
            )
        )

    return result
