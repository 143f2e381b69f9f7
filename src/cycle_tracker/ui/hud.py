"""Heads-up display (HUD) rendering for session metrics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import cv2
import numpy as np

from cycle_tracker.core.config import UISettings
from cycle_tracker.core.types import Cycle, DetectorPhase, SessionStats

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass
class HUDLayout:
    """Layout configuration for HUD elements."""

    # Metrics panel (top-left)
    metrics_x: int = 20
    metrics_y: int = 40
    metrics_line_height: int = 35

    # Phase indicator (top-right, left of the gauge)
    phase_margin: int = 70

    # Cycle history (bottom)
    history_height: int = 80
    history_bar_width: int = 30
    history_bar_gap: int = 8

    # Colors (BGR)
    color_text: tuple[int, int, int] = (255, 255, 255)
    color_bg: tuple[int, int, int] = (0, 0, 0)
    color_accent: tuple[int, int, int] = (0, 255, 255)
    color_success: tuple[int, int, int] = (0, 255, 0)
    color_warning: tuple[int, int, int] = (0, 165, 255)


PHASE_COLORS = {
    DetectorPhase.LOW: (128, 128, 128),
    DetectorPhase.HIGH: (0, 255, 0),
}


class HUDRenderer:
    """Renders the session panel, phase, cycle history and status bar."""

    def __init__(
        self,
        settings: UISettings | None = None,
        layout: HUDLayout | None = None,
    ) -> None:
        self.settings = settings or UISettings()
        self.layout = layout or HUDLayout()

    def render_metrics_panel(
        self,
        image: NDArray[np.uint8],
        stats: SessionStats,
    ) -> NDArray[np.uint8]:
        """Render cycle count, last/average duration and cadence."""
        result = image.copy()
        x = self.layout.metrics_x
        y = self.layout.metrics_y
        line_h = self.layout.metrics_line_height

        lines = [f"Cycles: {stats.cycle_count}"]

        if stats.last_cycle is not None:
            lines.append(f"Last: {stats.last_cycle.duration or 0.0:.2f} s")

        if stats.avg_duration is not None:
            lines.append(f"Avg: {stats.avg_duration:.2f} s")
            lines.append(f"Cadence: {stats.cadence_cpm:.1f} cpm")

        font = cv2.FONT_HERSHEY_SIMPLEX
        for i, text in enumerate(lines):
            self._draw_text_with_bg(result, text, (x, y + i * line_h), font, 0.8, 2)

        return result

    def render_phase_indicator(
        self,
        image: NDArray[np.uint8],
        phase: DetectorPhase,
    ) -> NDArray[np.uint8]:
        """Render detector phase pill."""
        result = image.copy()
        w = result.shape[1]
        color = PHASE_COLORS.get(phase, self.layout.color_text)

        text = phase.name
        font = cv2.FONT_HERSHEY_SIMPLEX
        font_scale = 1.0
        thickness = 2

        (text_w, text_h), _ = cv2.getTextSize(text, font, font_scale, thickness)
        x = w - text_w - self.layout.phase_margin
        y = 50
        padding = 12

        cv2.rectangle(
            result,
            (x - padding, y - text_h - padding // 2),
            (x + text_w + padding, y + padding // 2),
            self.layout.color_bg,
            -1,
        )
        cv2.rectangle(
            result,
            (x - padding, y - text_h - padding // 2),
            (x + text_w + padding, y + padding // 2),
            color,
            2,
        )
        cv2.putText(result, text, (x, y), font, font_scale, color, thickness)

        return result

    def render_cycle_history(
        self,
        image: NDArray[np.uint8],
        cycles: list[Cycle],
        max_display: int = 12,
    ) -> NDArray[np.uint8]:
        """Render a bar chart of recent cycle durations."""
        if not cycles:
            return image

        result = image.copy()
        h, w = result.shape[:2]

        recent = cycles[-max_display:]
        longest = max(c.duration or 0.0 for c in recent) or 1.0

        bar_w = self.layout.history_bar_width
        gap = self.layout.history_bar_gap
        chart_h = self.layout.history_height
        chart_y = h - chart_h - 40

        total_w = len(recent) * (bar_w + gap)
        chart_x = (w - total_w) // 2

        cv2.rectangle(
            result,
            (chart_x - 10, chart_y - 10),
            (chart_x + total_w + 10, chart_y + chart_h),
            self.layout.color_bg,
            -1,
        )

        font = cv2.FONT_HERSHEY_SIMPLEX
        for i, cycle in enumerate(recent):
            duration = cycle.duration or 0.0
            bar_x = chart_x + i * (bar_w + gap)
            bar_height = int((duration / longest) * (chart_h - 20))
            bar_y = chart_y + chart_h - bar_height - 10
            color = self.layout.color_success if i == len(recent) - 1 else self.layout.color_accent

            cv2.rectangle(result, (bar_x, bar_y), (bar_x + bar_w, chart_y + chart_h - 10), color, -1)

            label = f"{duration:.1f}"
            (label_w, _), _ = cv2.getTextSize(label, font, 0.4, 1)
            cv2.putText(
                result,
                label,
                (bar_x + (bar_w - label_w) // 2, bar_y - 5),
                font,
                0.4,
                self.layout.color_text,
                1,
            )

        return result

    def render_status_bar(
        self,
        image: NDArray[np.uint8],
        high: float,
        low: float,
        min_duration_s: float,
        fps: float | None = None,
        recording: bool = True,
    ) -> NDArray[np.uint8]:
        """Render thresholds, minimum duration, fps and recording state."""
        result = image.copy()
        h = result.shape[0]

        items = [
            ("REC" if recording else "PAUSED", self.layout.color_success if recording else self.layout.color_warning),
            (f"HIGH: {high:.3f}", self.layout.color_text),
            (f"LOW: {low:.3f}", self.layout.color_text),
            (f"MIN: {min_duration_s:.2f}s", self.layout.color_text),
        ]
        if fps is not None:
            items.append((f"FPS: {fps:.1f}", self.layout.color_text))

        bar_y = h - 15
        x = 20
        font = cv2.FONT_HERSHEY_SIMPLEX

        for text, color in items:
            cv2.putText(result, text, (x, bar_y), font, 0.5, color, 1)
            (text_w, _), _ = cv2.getTextSize(text, font, 0.5, 1)
            x += text_w + 30

        return result

    def _draw_text_with_bg(
        self,
        image: NDArray[np.uint8],
        text: str,
        position: tuple[int, int],
        font: int,
        font_scale: float,
        thickness: int,
    ) -> None:
        """Draw text over a filled background rectangle (in place)."""
        (text_w, text_h), _ = cv2.getTextSize(text, font, font_scale, thickness)
        x, y = position
        padding = 5

        cv2.rectangle(
            image,
            (x - padding, y - text_h - padding),
            (x + text_w + padding, y + padding),
            self.layout.color_bg,
            -1,
        )
        cv2.putText(image, text, position, font, font_scale, self.layout.color_text, thickness)

    def render_full_hud(
        self,
        image: NDArray[np.uint8],
        stats: SessionStats,
        phase: DetectorPhase,
        high: float,
        low: float,
        min_duration_s: float,
        fps: float | None = None,
        recording: bool = True,
    ) -> NDArray[np.uint8]:
        """Render complete HUD overlay."""
        result = image.copy()

        if self.settings.show_metrics:
            result = self.render_metrics_panel(result, stats)
            result = self.render_cycle_history(result, stats.cycles)

        if self.settings.show_debug_info:
            result = self.render_phase_indicator(result, phase)

        return self.render_status_bar(
            result,
            high=high,
            low=low,
            min_duration_s=min_duration_s,
            fps=fps,
            recording=recording,
        )
