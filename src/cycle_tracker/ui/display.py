"""Live preview window and keyboard controls."""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING

import cv2
import numpy as np

from cycle_tracker.core.config import UISettings
from cycle_tracker.core.logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = get_logger(__name__)


class KeyAction(Enum):
    """Session controls reachable from the keyboard."""

    NONE = auto()
    QUIT = auto()
    PAUSE = auto()
    RESET = auto()
    SAVE = auto()
    TOGGLE_SKELETON = auto()
    TOGGLE_METRICS = auto()
    TOGGLE_DEBUG = auto()
    HIGH_DOWN = auto()
    HIGH_UP = auto()
    LOW_DOWN = auto()
    LOW_UP = auto()
    MIN_DURATION_DOWN = auto()
    MIN_DURATION_UP = auto()


KEY_BINDINGS: dict[int, KeyAction] = {
    ord("q"): KeyAction.QUIT,
    27: KeyAction.QUIT,  # ESC
    ord(" "): KeyAction.PAUSE,
    ord("r"): KeyAction.RESET,
    ord("s"): KeyAction.SAVE,
    ord("k"): KeyAction.TOGGLE_SKELETON,
    ord("m"): KeyAction.TOGGLE_METRICS,
    ord("d"): KeyAction.TOGGLE_DEBUG,
    ord("["): KeyAction.HIGH_DOWN,
    ord("]"): KeyAction.HIGH_UP,
    ord(";"): KeyAction.LOW_DOWN,
    ord("'"): KeyAction.LOW_UP,
    ord("-"): KeyAction.MIN_DURATION_DOWN,
    ord("="): KeyAction.MIN_DURATION_UP,
}


def key_to_action(key: int) -> KeyAction:
    """Map a ``cv2.waitKey`` code to an action. Letters are case-insensitive."""
    key &= 0xFF
    if ord("A") <= key <= ord("Z"):
        key = ord(chr(key).lower())
    return KEY_BINDINGS.get(key, KeyAction.NONE)


class DisplayWindow:
    """Single resizable OpenCV window showing the annotated preview."""

    WINDOW_NAME = "Cycle Tracker"

    def __init__(self, settings: UISettings | None = None) -> None:
        self.settings = settings or UISettings()
        self._size = (self.settings.display_width, self.settings.display_height)
        self._open = False

    def open(self) -> None:
        cv2.namedWindow(self.WINDOW_NAME, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.WINDOW_NAME, *self._size)
        self._open = True
        logger.info("Display window opened (%dx%d)", *self._size)

    def close(self) -> None:
        if self._open:
            cv2.destroyWindow(self.WINDOW_NAME)
            self._open = False

    def show_frame(self, image: NDArray[np.uint8]) -> None:
        """Show a BGR image scaled to the configured window size."""
        if not self._open:
            self.open()
        if (image.shape[1], image.shape[0]) != self._size:
            image = cv2.resize(image, self._size)
        cv2.imshow(self.WINDOW_NAME, image)

    def poll_key(self, wait_ms: int = 1) -> KeyAction:
        return key_to_action(cv2.waitKey(wait_ms))

    def flash(self, message: str, duration_ms: int = 800) -> None:
        """Briefly show a message on a blank screen."""
        width, height = self._size
        image = np.zeros((height, width, 3), dtype=np.uint8)
        (text_w, text_h), _ = cv2.getTextSize(message, cv2.FONT_HERSHEY_SIMPLEX, 1.2, 2)
        origin = ((width - text_w) // 2, (height + text_h) // 2)
        cv2.putText(
            image, message, origin, cv2.FONT_HERSHEY_SIMPLEX, 1.2, (255, 255, 255), 2
        )
        self.show_frame(image)
        cv2.waitKey(max(1, duration_ms))
