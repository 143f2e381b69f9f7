#!/usr/bin/env python3
"""Validate cycle boundary detection against hand-labelled boundaries.

Processes a recorded video, then matches detected boundaries to
reference times from a CSV file to report timing error, precision
and recall.
"""

from __future__ import annotations

import argparse
import csv
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from cycle_tracker.core.config import get_settings
from cycle_tracker.core.exceptions import CycleTrackerError
from cycle_tracker.core.logging import get_logger, setup_logging
from cycle_tracker.core.types import Cycle
from cycle_tracker.pipeline.processor import analyze_video

logger = get_logger(__name__)


@dataclass
class BoundaryMatch:
    """A detected boundary and its closest reference, if any."""

    index: int
    detected_s: float
    reference_s: float | None
    error_s: float | None


@dataclass
class ValidationSummary:
    """Summary statistics for a validation run."""

    detected: int
    reference: int
    matched: int
    precision: float | None
    recall: float | None
    mean_absolute_error_s: float | None
    max_error_s: float | None


def boundaries_from_cycles(cycles: list[Cycle]) -> list[float]:
    """Boundary times implied by a contiguous cycle list."""
    if not cycles:
        return []
    return [cycles[0].start_time] + [c.end_time for c in cycles]


def load_reference_boundaries(csv_path: Path) -> list[float]:
    """Load reference boundary times from CSV.

    Expected format: a ``time_s`` (or ``time``) column, one row per boundary.
    """
    references = []

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            references.append(float(row.get("time_s", row.get("time", 0))))

    logger.info("Loaded %d reference boundaries", len(references))
    return sorted(references)


def match_boundaries(
    detected: list[float],
    references: list[float],
    tolerance_s: float = 0.25,
) -> list[BoundaryMatch]:
    """Greedily pair each detected boundary with an unused reference.

    Args:
        detected: Detected boundary times
        references: Reference boundary times
        tolerance_s: Maximum time difference for a match

    Returns:
        One match record per detected boundary
    """
    unused = list(references)
    results = []

    for i, t in enumerate(detected):
        best = None
        best_distance = float("inf")
        for ref in unused:
            distance = abs(t - ref)
            if distance < best_distance and distance <= tolerance_s:
                best = ref
                best_distance = distance

        if best is not None:
            unused.remove(best)
            results.append(BoundaryMatch(i, t, best, t - best))
        else:
            results.append(BoundaryMatch(i, t, None, None))

    return results


def compute_summary(matches: list[BoundaryMatch], total_references: int) -> ValidationSummary:
    """Compute summary statistics from boundary matches."""
    errors = [abs(m.error_s) for m in matches if m.error_s is not None]
    matched = len(errors)

    return ValidationSummary(
        detected=len(matches),
        reference=total_references,
        matched=matched,
        precision=matched / len(matches) if matches else None,
        recall=matched / total_references if total_references else None,
        mean_absolute_error_s=float(np.mean(errors)) if errors else None,
        max_error_s=max(errors) if errors else None,
    )


def print_results(matches: list[BoundaryMatch], summary: ValidationSummary) -> None:
    """Print validation results to console."""
    print("\n" + "=" * 50)
    print("BOUNDARY VALIDATION")
    print("=" * 50)
    print(f"{'#':<5} {'Detected':<12} {'Reference':<12} {'Error':<10}")
    print("-" * 50)

    for m in matches:
        ref_str = f"{m.reference_s:.3f}" if m.reference_s is not None else "N/A"
        err_str = f"{m.error_s:+.3f}" if m.error_s is not None else "N/A"
        print(f"{m.index:<5} {m.detected_s:<12.3f} {ref_str:<12} {err_str:<10}")

    print("\n" + "=" * 50)
    print("SUMMARY")
    print("=" * 50)
    print(f"Detected boundaries:  {summary.detected}")
    print(f"Reference boundaries: {summary.reference}")
    print(f"Matched:              {summary.matched}")
    if summary.precision is not None:
        print(f"Precision:            {summary.precision:.2f}")
    if summary.recall is not None:
        print(f"Recall:               {summary.recall:.2f}")
    if summary.mean_absolute_error_s is not None:
        print(f"Mean abs error:       {summary.mean_absolute_error_s * 1000:.0f} ms")
        print(f"Max error:            {summary.max_error_s * 1000:.0f} ms")


def main() -> int:
    """Run validation script."""
    parser = argparse.ArgumentParser(description="Validate cycle boundary detection")
    parser.add_argument("video", type=Path, help="Path to recorded video file")
    parser.add_argument(
        "--reference",
        "-r",
        type=Path,
        required=True,
        help="CSV with reference boundary times (time_s column)",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=0.25,
        help="Match tolerance in seconds (default: 0.25)",
    )
    parser.add_argument("--output", "-o", type=Path, help="Output CSV for matches")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.logging.level)

    try:
        cycles = analyze_video(args.video, settings)
    except CycleTrackerError as e:
        logger.error("Analysis failed: %s", e)
        return 1

    detected = boundaries_from_cycles(cycles)
    references = load_reference_boundaries(args.reference)
    matches = match_boundaries(detected, references, args.tolerance)
    summary = compute_summary(matches, len(references))

    print_results(matches, summary)

    if args.output:
        with open(args.output, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["index", "detected_s", "reference_s", "error_s"])
            for m in matches:
                writer.writerow(
                    [
                        m.index,
                        m.detected_s,
                        "" if m.reference_s is None else m.reference_s,
                        "" if m.error_s is None else m.error_s,
                    ]
                )
        logger.info("Results saved to %s", args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
