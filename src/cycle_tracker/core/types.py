"""Core data types and structures."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, NamedTuple

import numpy as np
from numpy.typing import NDArray

# Coordinates above this are assumed to be pixels rather than normalized
PIXEL_COORDINATE_THRESHOLD = 1.5


@dataclass(frozen=True, slots=True)
class Landmark:
    """A single tracked landmark.

    Coordinates are normalized [0, 1] relative to frame dimensions.
    Visibility is optional; hand models do not report it.
    """

    x: float
    y: float
    z: float = 0.0
    visibility: float | None = None

    @property
    def is_pixel_space(self) -> bool:
        """True when coordinates look like raw pixels instead of [0, 1]."""
        return abs(self.x) > PIXEL_COORDINATE_THRESHOLD or abs(self.y) > PIXEL_COORDINATE_THRESHOLD

    def to_pixel(self, width: int, height: int) -> tuple[int, int]:
        """Convert to pixel coordinates, passing pixel input through."""
        if self.is_pixel_space:
            return int(self.x), int(self.y)
        return int(self.x * width), int(self.y * height)

    def to_dict(self) -> dict[str, float]:
        data = {"x": self.x, "y": self.y, "z": self.z}
        if self.visibility is not None:
            data["visibility"] = self.visibility
        return data


class HandLandmark(Enum):
    """MediaPipe hand landmark indices (21 points)."""

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


HAND_LANDMARK_COUNT = len(HandLandmark)


@dataclass(slots=True)
class TrackedHand:
    """Landmarks of one tracked hand in a single frame.

    Attributes:
        landmarks: Fixed-size landmark array indexed by HandLandmark value
        timestamp: Frame timestamp in seconds
        frame_idx: Frame sequence number
        handedness: "Left", "Right" or None if unknown
        confidence: Handedness classification score [0, 1]
    """

    landmarks: list[Landmark]
    timestamp: float
    frame_idx: int
    handedness: str | None = None
    confidence: float = 1.0

    def get_landmark(self, index: HandLandmark | int) -> Landmark | None:
        """Get a landmark by enum or raw index, None if absent."""
        idx = index.value if isinstance(index, HandLandmark) else index
        if 0 <= idx < len(self.landmarks):
            return self.landmarks[idx]
        return None

    def to_keypoints(self) -> list[dict[str, float]]:
        """Landmarks as plain dicts for cycle snapshots."""
        return [lm.to_dict() for lm in self.landmarks]


@dataclass(slots=True)
class Frame:
    """A video frame with metadata.

    Attributes:
        image: BGR image array (OpenCV format)
        timestamp: Frame timestamp in seconds
        index: Frame sequence number
    """

    image: NDArray[np.uint8]
    timestamp: float
    index: int

    @property
    def width(self) -> int:
        """Frame width in pixels."""
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        """Frame height in pixels."""
        return int(self.image.shape[0])

    @property
    def dimensions(self) -> tuple[int, int]:
        """Frame dimensions as (width, height)."""
        return self.width, self.height


class Sample(NamedTuple):
    """One phase metric reading."""

    metric: float
    timestamp: float


class DetectorPhase(Enum):
    """States of the hysteresis boundary detector."""

    LOW = auto()
    HIGH = auto()


def _new_cycle_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Cycle:
    """One repetition delimited by two consecutive boundaries.

    Attributes:
        start_time: Cycle start in seconds from session origin
        end_time: Cycle end in seconds from session origin
        duration: end_time - start_time (computed when omitted)
        id: Opaque identifier
        confidence: Opaque caller-supplied annotation
        body_keypoints: Optional body landmark snapshots
        hand_keypoints: Optional hand landmark snapshots
    """

    start_time: float
    end_time: float
    duration: float | None = None
    id: str = field(default_factory=_new_cycle_id)
    confidence: float | None = None
    body_keypoints: list[Any] = field(default_factory=list)
    hand_keypoints: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.duration is None:
            self.duration = self.end_time - self.start_time

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the upload payload's camelCase keys."""
        return {
            "id": self.id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "confidence": self.confidence,
            "bodyKeypoints": list(self.body_keypoints),
            "handKeypoints": list(self.hand_keypoints),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cycle:
        """Build a cycle from camelCase or snake_case keys.

        Raises:
            KeyError: If start or end time is missing
        """
        start = data["startTime"] if "startTime" in data else data["start_time"]
        end = data["endTime"] if "endTime" in data else data["end_time"]
        kwargs: dict[str, Any] = {
            "start_time": float(start),
            "end_time": float(end),
            "duration": data.get("duration"),
            "confidence": data.get("confidence"),
            "body_keypoints": list(data.get("bodyKeypoints", data.get("body_keypoints")) or []),
            "hand_keypoints": list(data.get("handKeypoints", data.get("hand_keypoints")) or []),
        }
        if data.get("id") is not None:
            kwargs["id"] = str(data["id"])
        return cls(**kwargs)


@dataclass(slots=True)
class SessionStats:
    """Statistics for a capture or analysis session.

    Attributes:
        cycles: Completed cycles in chronological order
        start_time: Session start (wall clock, seconds since epoch)
    """

    cycles: list[Cycle] = field(default_factory=list)
    start_time: float = 0.0

    @property
    def cycle_count(self) -> int:
        """Total number of cycles recorded."""
        return len(self.cycles)

    @property
    def total_duration(self) -> float:
        """Sum of cycle durations in seconds."""
        return sum(c.duration or 0.0 for c in self.cycles)

    @property
    def avg_duration(self) -> float | None:
        """Average cycle duration in seconds."""
        if not self.cycles:
            return None
        return self.total_duration / len(self.cycles)

    @property
    def cadence_cpm(self) -> float:
        """Cycles per minute derived from the average duration."""
        avg = self.avg_duration
        if avg is None or avg <= 0:
            return 0.0
        return 60.0 / avg

    @property
    def min_duration(self) -> float | None:
        """Shortest cycle duration in seconds."""
        if not self.cycles:
            return None
        return min(c.duration or 0.0 for c in self.cycles)

    @property
    def max_duration(self) -> float | None:
        """Longest cycle duration in seconds."""
        if not self.cycles:
            return None
        return max(c.duration or 0.0 for c in self.cycles)

    @property
    def last_cycle(self) -> Cycle | None:
        """Most recent cycle."""
        return self.cycles[-1] if self.cycles else None

    def add_cycle(self, cycle: Cycle) -> None:
        """Add a completed cycle to the session."""
        self.cycles.append(cycle)

    def reset(self) -> None:
        """Clear all recorded cycles."""
        self.cycles.clear()
