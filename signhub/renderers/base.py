"""
Base class for renderers.

Renderers are the presentation layer: they own the screen surfaces, the
notices container and the four camera slots, and apply the directives the
scheduler hands them (show/hide, animations, content, marquee schedules).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence

from signhub.cctv import SlotDirective
from signhub.marquee import MarqueeSchedule, ScrollStep
from signhub.models import Birthday, Event, Notice, Screen


@dataclass(frozen=True)
class Animation:
    """
    A tween directive for a screen surface.

    Attributes:
        duration: Seconds
        ease: Easing curve name (interpreted by the renderer)
        from_props: Starting properties (opacity, x, scale)
        to_props: Final properties
    """
    duration: float
    ease: str
    from_props: Dict[str, Any] = field(default_factory=dict)
    to_props: Dict[str, Any] = field(default_factory=dict)


class Renderer(ABC):
    """
    Base class for renderers.

    The scheduler only ever talks to the presentation layer through these
    calls, so the rotation logic does not depend on how screens are drawn.
    """

    @abstractmethod
    def hide_all(self, screens: Iterable[Screen]):
        """Hide every screen surface."""
        pass

    @abstractmethod
    def reveal(self, screen: Screen):
        """Show a screen at full visibility with no animation."""
        pass

    @abstractmethod
    def hide(self, screen: Screen):
        """Hide a screen surface."""
        pass

    @abstractmethod
    def play_exit(self, screen: Screen, animation: Animation):
        """Start a screen's exit animation."""
        pass

    @abstractmethod
    def play_entrance(self, screen: Screen, animation: Animation):
        """Make a screen visible and start its entrance animation."""
        pass

    @abstractmethod
    def render_notices(self, notices: Sequence[Notice], schedule: Optional[MarqueeSchedule]):
        """
        Fill the notices container.

        Args:
            notices: Notices in display order
            schedule: Marquee schedule the scheduler will step through with
                scroll_notices(), None when the block fits its viewport

        Resets the block to offset 0 at full opacity.
        """
        pass

    @abstractmethod
    def render_events(self, events: Sequence[Event]):
        pass

    @abstractmethod
    def render_birthdays(self, birthdays: Sequence[Birthday]):
        """Fill the birthdays screen with today's birthdays only."""
        pass

    @abstractmethod
    def render_cctv(self, directives: Sequence[SlotDirective]):
        """Mount one directive per camera slot."""
        pass

    def scroll_notices(self, step: ScrollStep):
        """
        Apply one marquee step to the notices block. Optional.

        Called at the start of each step while notices are showing. Scroll
        and snap steps carry the target offset, fade steps the target opacity.
        """
        pass

    def clear(self):
        """Blank the display on shutdown. Optional."""
        pass
