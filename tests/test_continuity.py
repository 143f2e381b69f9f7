"""Tests for timeline continuity enforcement."""

from __future__ import annotations

import math

import pytest

from cycle_tracker.analysis.continuity import CLAMP_EPSILON_S, enforce_continuity
from cycle_tracker.core.types import Cycle


class TestEnforceContinuity:
    """Tests for enforce_continuity."""

    def test_empty_input(self) -> None:
        assert enforce_continuity([]) == []
        assert enforce_continuity([], session_start=0.0, clamp_non_positive=True) == []

    def test_sorts_and_stitches(self) -> None:
        cycles = [Cycle(start_time=5, end_time=10), Cycle(start_time=0, end_time=4)]
        result = enforce_continuity(cycles, session_start=0, clamp_non_positive=True)

        assert [(c.start_time, c.end_time, c.duration) for c in result] == [
            (0, 4, 4),
            (4, 10, 6),
        ]

    def test_degenerate_single_cycle_is_clamped(self) -> None:
        result = enforce_continuity(
            [Cycle(start_time=10, end_time=10)], clamp_non_positive=True
        )

        assert len(result) == 1
        assert result[0].start_time == 10
        assert result[0].end_time == pytest.approx(10.001)
        assert result[0].duration == pytest.approx(CLAMP_EPSILON_S)

    def test_single_cycle_recomputes_duration(self) -> None:
        cycle = Cycle(start_time=2.0, end_time=5.0, duration=99.0)
        result = enforce_continuity([cycle])
        assert result[0].duration == 3.0

    def test_single_cycle_session_start(self) -> None:
        result = enforce_continuity([Cycle(start_time=2.0, end_time=5.0)], session_start=0.0)
        assert result[0].start_time == 0.0
        assert result[0].duration == 5.0

    def test_without_clamp_keeps_negative_duration(self) -> None:
        result = enforce_continuity([Cycle(start_time=3.0, end_time=1.0)])
        assert result[0].duration == -2.0
        assert result[0].end_time == 1.0

    def test_non_finite_duration_is_clamped(self) -> None:
        result = enforce_continuity(
            [Cycle(start_time=1.0, end_time=math.nan)], clamp_non_positive=True
        )
        assert result[0].end_time == 1.0 + CLAMP_EPSILON_S
        assert result[0].duration == pytest.approx(CLAMP_EPSILON_S)

    def test_contiguity_and_positive_durations(self, gapped_cycles: list[Cycle]) -> None:
        result = enforce_continuity(gapped_cycles, clamp_non_positive=True)

        assert [c.id for c in result] == ["a", "b", "c", "d"]
        for prev, cur in zip(result, result[1:]):
            assert cur.start_time == prev.end_time
        assert all(c.duration > 0 for c in result)

    def test_clamped_end_feeds_next_start(self) -> None:
        cycles = [
            Cycle(start_time=0.0, end_time=4.0, id="a"),
            Cycle(start_time=1.0, end_time=3.0, id="b"),
            Cycle(start_time=2.0, end_time=6.0, id="c"),
        ]
        result = enforce_continuity(cycles, clamp_non_positive=True)

        assert result[1].start_time == 4.0
        assert result[1].end_time == 4.0 + CLAMP_EPSILON_S
        assert result[2].start_time == result[1].end_time

    def test_cardinality_preserved(self, gapped_cycles: list[Cycle]) -> None:
        assert len(enforce_continuity(gapped_cycles)) == len(gapped_cycles)
        assert len(enforce_continuity(gapped_cycles, clamp_non_positive=True)) == len(
            gapped_cycles
        )

    def test_stable_for_equal_starts(self) -> None:
        cycles = [
            Cycle(start_time=1.0, end_time=3.0, id="first"),
            Cycle(start_time=1.0, end_time=2.0, id="second"),
        ]
        result = enforce_continuity(cycles, clamp_non_positive=True)
        assert [c.id for c in result] == ["first", "second"]

    def test_idempotent(self, gapped_cycles: list[Cycle]) -> None:
        once = enforce_continuity(gapped_cycles, session_start=0.0, clamp_non_positive=True)
        twice = enforce_continuity(once, session_start=0.0, clamp_non_positive=True)

        assert [c.id for c in twice] == [c.id for c in once]
        assert [c.start_time for c in twice] == [c.start_time for c in once]
        assert [c.end_time for c in twice] == [c.end_time for c in once]
        assert [c.duration for c in twice] == [c.duration for c in once]

    def test_clamped_output_is_stable_on_second_pass(self) -> None:
        once = enforce_continuity([Cycle(start_time=10, end_time=10)], clamp_non_positive=True)
        twice = enforce_continuity(once, clamp_non_positive=True)

        assert twice[0].start_time == once[0].start_time
        assert twice[0].end_time == once[0].end_time
        assert twice[0].duration == once[0].duration
        assert once[0].duration == once[0].end_time - once[0].start_time

    def test_input_is_not_modified(self, gapped_cycles: list[Cycle]) -> None:
        before = [(c.id, c.start_time, c.end_time, c.duration) for c in gapped_cycles]
        enforce_continuity(gapped_cycles, session_start=-1.0, clamp_non_positive=True)
        after = [(c.id, c.start_time, c.end_time, c.duration) for c in gapped_cycles]
        assert before == after

    def test_annotations_carried_over(self) -> None:
        cycle = Cycle(
            start_time=0.0,
            end_time=1.0,
            id="x",
            confidence=0.4,
            hand_keypoints=[{"x": 0.1}],
        )
        result = enforce_continuity([cycle])
        assert result[0].id == "x"
        assert result[0].confidence == 0.4
        assert result[0].hand_keypoints == [{"x": 0.1}]
        assert result[0].hand_keypoints is not cycle.hand_keypoints
