"""
Marquee sizing for the notices screen.

When the notices block is taller than its viewport, it scrolls up one row
at a time, pausing on each row, then fades back to the top and loops.
One full loop is how long the notices screen stays up.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple


SCROLL_EASE = "power2.inOut"


@dataclass(frozen=True)
class NoticesMetrics:
    """
    Measured size of the rendered notices block.

    Attributes:
        content_height: Full height of the notices content in pixels
        viewport_height: Visible height of the notices viewport in pixels
        row_height: Height of one card including the gap below it (None if unmeasurable)
    """
    content_height: float
    viewport_height: float
    row_height: Optional[float] = None

    @property
    def overflow(self) -> float:
        return self.content_height - self.viewport_height


@dataclass(frozen=True)
class ScrollStep:
    """
    One step of a marquee schedule.

    kind is one of:
        "pause":  hold the current position
        "scroll": move to offset (negative, pixels) with ease
        "fade":   animate opacity
        "snap":   jump to offset with no visible motion
    """
    kind: str
    duration: float
    offset: Optional[float] = None
    opacity: Optional[float] = None
    ease: Optional[str] = None


@dataclass(frozen=True)
class MarqueeSchedule:
    steps: Tuple[ScrollStep, ...]
    overflow: float
    row_height: float

    @property
    def total_duration(self) -> float:
        return sum(step.duration for step in self.steps)

    @property
    def steps_needed(self) -> int:
        return sum(1 for step in self.steps if step.kind == "scroll")


class MarqueeSizer:
    """
    Builds marquee schedules for overflowing notices.

    Timings default to a 6s pause per row, 0.8s scroll transitions and a
    0.3s fade-out / 0.5s fade-in reset to the top.
    """

    def __init__(self, pause: float = 6.0, step_duration: float = 0.8,
                 fade_out: float = 0.3, fade_in: float = 0.5,
                 fallback_row_height: float = 296):
        """
        Initialize marquee sizer.

        Args:
            pause: Seconds to hold at the top and after every scroll step
            step_duration: Seconds per scroll step
            fade_out: Seconds to fade out before snapping back to the top
            fade_in: Seconds to fade back in at the top
            fallback_row_height: Row height (px) used when none can be measured
        """
        self.pause = pause
        self.step_duration = step_duration
        self.fade_out = fade_out
        self.fade_in = fade_in
        self.fallback_row_height = fallback_row_height

    def build_schedule(self, metrics: NoticesMetrics) -> Optional[MarqueeSchedule]:
        """
        Build the scroll schedule for a notices block.

        Args:
            metrics: Measured content and viewport heights

        Returns:
            MarqueeSchedule, or None if the content fits its viewport
        """
        overflow = metrics.overflow
        if overflow <= 0:
            return None

        row_height = metrics.row_height
        if not row_height or row_height <= 0:
            row_height = self.fallback_row_height

        steps_needed = math.ceil(overflow / row_height)

        steps = [ScrollStep("pause", self.pause)]
        for i in range(1, steps_needed + 1):
            steps.append(ScrollStep(
                "scroll",
                self.step_duration,
                offset=-min(i * row_height, overflow),
                ease=SCROLL_EASE,
            ))
            steps.append(ScrollStep("pause", self.pause))

        # Fade out, jump back to the top unseen, fade in: a seamless loop
        steps.append(ScrollStep("fade", self.fade_out, opacity=0.0))
        steps.append(ScrollStep("snap", 0.0, offset=0.0))
        steps.append(ScrollStep("fade", self.fade_in, opacity=1.0))

        return MarqueeSchedule(steps=tuple(steps), overflow=overflow, row_height=row_height)

    @staticmethod
    def dwell_time(schedule: Optional[MarqueeSchedule], default: float) -> float:
        """Seconds the notices screen stays up: one marquee loop, or the default."""
        if schedule is None:
            return default
        return schedule.total_duration
