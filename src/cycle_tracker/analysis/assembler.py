"""Pairing of consecutive boundaries into cycles.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from cycle_tracker.core.types import Cycle


class CycleAssembler:
    """Closes a cycle on every boundary after the first.

    N boundaries yield N-1 cycles, and each cycle starts exactly where
    the previous one ended.
    """

    def __init__(self, confidence: float | None = 1.0) -> None:
        """Initialize assembler.

        Args:
            confidence: Annotation attached to every emitted cycle
        """
        self.confidence = confidence
        self._previous_boundary: float | None = None
        self._cycles: list[Cycle] = []

    @property
    def cycles(self) -> list[Cycle]:
        """Cycles emitted so far, oldest first."""
        return list(self._cycles)

    def add_boundary(
        self,
        timestamp: float,
        hand_keypoints: list[Any] | None = None,
    ) -> Cycle | None:
        """Register an accepted boundary.

        Args:
            timestamp: Boundary time in seconds
            hand_keypoints: Optional landmark snapshot stored on the cycle

        Returns:
            The cycle closed by this boundary, or None for the first one
        """
        previous = self._previous_boundary
        self._previous_boundary = timestamp
        if previous is None:
            return None

        cycle = Cycle(
            start_time=previous,
            end_time=timestamp,
            duration=timestamp - previous,
            confidence=self.confidence,
            hand_keypoints=list(hand_keypoints or []),
        )
        self._cycles.append(cycle)
        return cycle

    def reset(self) -> None:
        """Forget the open boundary and all emitted cycles."""
        self._previous_boundary = None
        self._cycles.clear()


def assemble_cycles(
    boundaries: Iterable[float],
    confidence: float | None = 1.0,
) -> list[Cycle]:
    """Pair a boundary sequence into cycles.

    Args:
        boundaries: Accepted boundary timestamps in order
        confidence: Annotation attached to every cycle

    Returns:
        One cycle per consecutive boundary pair
    """
    assembler = CycleAssembler(confidence=confidence)
    for timestamp in boundaries:
        assembler.add_boundary(timestamp)
    return assembler.cycles
