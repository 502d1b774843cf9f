"""
Console renderer for debugging without a display.

Prints every presentation directive as text, so a rotation can be followed
in a terminal.
"""

from typing import Iterable, Optional, Sequence

from signhub.cctv import SlotDirective, SlotMode, slot_source
from signhub.marquee import MarqueeSchedule, ScrollStep
from signhub.models import Birthday, Event, Notice, Screen
from signhub.renderers.base import Animation, Renderer


class ConsoleRenderer(Renderer):
    """
    Renders directives as plain text.

    Content is printed when it is pushed to a screen; show/hide and
    animations print one line each.
    """

    RULE = "─" * 70

    def __init__(self, stream=None):
        """
        Initialize console renderer.

        Args:
            stream: File-like object to write to (default: stdout)
        """
        self.stream = stream
        self.visible = set()

    def _print(self, text: str = ""):
        print(text, file=self.stream)

    def hide_all(self, screens: Iterable[Screen]):
        self.visible.clear()
        self._print(f"[Display] Hiding all screens: {', '.join(s.value for s in screens)}")

    def reveal(self, screen: Screen):
        self.visible.add(screen)
        self._print(f"[Display] Showing '{screen.value}'")

    def hide(self, screen: Screen):
        self.visible.discard(screen)
        self._print(f"[Display] Hid '{screen.value}'")

    def play_exit(self, screen: Screen, animation: Animation):
        self._print(f"[Display] '{screen.value}' exit ({animation.duration:g}s {animation.ease})")

    def play_entrance(self, screen: Screen, animation: Animation):
        self.visible.add(screen)
        self._print(f"[Display] '{screen.value}' entrance ({animation.duration:g}s {animation.ease})")

    def render_notices(self, notices: Sequence[Notice], schedule: Optional[MarqueeSchedule]):
        self._print(self.RULE)
        self._print("NOTICES")
        for notice in notices:
            marker = "!! " if notice.urgent else "   "
            self._print(f"{marker}{notice.title}")
            if notice.content:
                self._print(f"     {notice.content}")
            if notice.date:
                self._print(f"     Date: {notice.date}")
        if not notices:
            self._print("   (no notices)")
        if schedule is not None:
            self._print(f"   [marquee: {schedule.steps_needed} steps, "
                        f"{schedule.total_duration:g}s loop]")
        self._print(self.RULE)

    def scroll_notices(self, step: ScrollStep):
        if step.kind == "scroll":
            self._print(f"[Display] notices scroll to {step.offset:g}px ({step.duration:g}s {step.ease})")
        elif step.kind == "fade":
            self._print(f"[Display] notices fade to {step.opacity:g} ({step.duration:g}s)")
        elif step.kind == "snap":
            self._print("[Display] notices back to top")

    def render_events(self, events: Sequence[Event]):
        self._print(self.RULE)
        self._print("EVENTS")
        for event in events:
            self._print(f"   {event.date:>12}  {event.title}")
            if event.description:
                self._print(f"                 {event.description}")
        if not events:
            self._print("   (no events)")
        self._print(self.RULE)

    def render_birthdays(self, birthdays: Sequence[Birthday]):
        self._print(self.RULE)
        self._print("BIRTHDAYS")
        for birthday in birthdays:
            self._print(f"   Happy Birthday {birthday.name}!")
            self._print(f"   Department: {birthday.department}")
        self._print(self.RULE)

    def render_cctv(self, directives: Sequence[SlotDirective]):
        self._print(self.RULE)
        self._print("CCTV")
        for directive in directives:
            if directive.mode is SlotMode.PLACEHOLDER:
                source = "(static)"
            else:
                source = f"{directive.mode.value}: {slot_source(directive)}"
            self._print(f"   [{directive.slot}] {directive.label}  {source}")
        self._print(self.RULE)
