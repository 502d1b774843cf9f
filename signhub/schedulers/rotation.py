"""
Rotation scheduler for signhub.

Cycles the active screens on the display, animating between them, and keeps
the dataset fresh in the background without disturbing what is on screen.
"""

import itertools
from typing import Optional

from signhub.cctv import project_feeds
from signhub.errors import EmptyActiveSet, FetchFailure, UnmeasurableLayout
from signhub.marquee import MarqueeSchedule, ScrollStep
from signhub.models import CANONICAL_ORDER, Dataset, Phase, RotationState, Screen, Transition
from signhub.renderers.base import Animation
from signhub.screens import active_birthdays, filter_screens
from .base import BaseScheduler


class RotationScheduler(BaseScheduler):
    """
    Rotation scheduler.

    States: IDLE until the first dataset arrives, then SHOWING a screen for
    its dwell time and TRANSITIONING to the next active screen. Two timer
    chains run side by side on the loop: the dwell/transition chain and a
    fixed-interval background poll. While notices are up, their marquee steps
    are scheduled on the loop as well. Handlers re-read the current state
    instead of trusting what was true when they were scheduled.
    """

    def __init__(self, **kwargs):
        """
        Initialize rotation scheduler.

        Args:
            **kwargs: Passed to BaseScheduler
        """
        super().__init__(**kwargs)

        self.poll_interval = self.scheduler_config.get("poll_interval", 30)
        self.retry_delay = self.scheduler_config.get("retry_delay", 5)

        transitions = self.config.get_transition_config()
        self.exit_duration = transitions.get("exit_duration", 0.5)
        self.entrance_duration = transitions.get("entrance_duration", 0.8)
        # Entrance starts this long before the exit finishes
        self.overlap = transitions.get("overlap", 0.2)

        self.exit_animation = Animation(
            duration=self.exit_duration,
            ease="power2.in",
            from_props={"opacity": 1, "x": 0},
            to_props={"opacity": 0, "x": -50},
        )
        self.entrance_animation = Animation(
            duration=self.entrance_duration,
            ease="back.out(1.7)",
            from_props={"opacity": 0, "x": 50, "scale": 0.95},
            to_props={"opacity": 1, "x": 0, "scale": 1},
        )

        self.state = RotationState()
        self.dataset: Optional[Dataset] = None
        self.marquee_schedule: Optional[MarqueeSchedule] = None

        self._dwell_handle = None
        self._poll_handle = None
        self._transition_ids = itertools.count(1)
        self._marquee_handles = []

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def apply_snapshot(self, dataset: Dataset):
        """
        Replace the dataset and recompute everything derived from it.

        Updates the active screen set and the notices marquee for future
        dwell decisions. Never touches current_index, the phase, or an
        animation in flight.
        """
        screens = filter_screens(dataset, self.now())
        if not screens:
            raise EmptyActiveSet("Screen filter returned no screens")
        schedule = self._size_marquee(dataset)

        # Swap everything in one go, before any other handler can run
        self.dataset = dataset
        self.state.active_screens = screens
        self.marquee_schedule = schedule
        self.state.marquee_duration = schedule.total_duration if schedule else None

    def _size_marquee(self, dataset: Dataset) -> Optional[MarqueeSchedule]:
        try:
            metrics = self.layout.measure(dataset.notices)
        except UnmeasurableLayout as e:
            print(f"[{self._timestamp()}] Could not measure notices ({e}), not scrolling")
            return None
        return self.marquee_sizer.build_schedule(metrics)

    def background_refresh(self) -> bool:
        """
        Fetch a fresh dataset without disturbing the display.

        On failure the last good dataset stays in use; there is no early
        retry, the next regular poll tries again.

        Returns:
            True if a new dataset was applied
        """
        try:
            dataset = self.client.fetch_dataset()
        except FetchFailure as e:
            print(f"[{self._timestamp()}] Background refresh failed: {e}")
            print(f"[{self._timestamp()}] Keeping last good data")
            return False

        self.apply_snapshot(dataset)
        self._log(f"Data refreshed - active screens: {self._screen_names()}")
        return True

    def _initial_load(self):
        if self.shutdown_requested:
            return

        try:
            dataset = self.client.fetch_dataset()
        except FetchFailure as e:
            print(f"[{self._timestamp()}] Failed to fetch signage data: {e}")
            print(f"[{self._timestamp()}] Retrying in {self.retry_delay}s...")
            self.loop.call_later(self.retry_delay, self._initial_load)
            return

        try:
            self.apply_snapshot(dataset)
            self._log(f"Data loaded - active screens: {self._screen_names()}")
            self._first_reveal()
        except Exception as e:
            print(f"[{self._timestamp()}] Could not start display: {e}")
            print(f"[{self._timestamp()}] Retrying in {self.retry_delay}s...")
            self._reset_to_idle()
            self.loop.call_later(self.retry_delay, self._initial_load)
            return

        self._poll_handle = self.loop.call_later(self.poll_interval, self._on_poll)

    def _reset_to_idle(self):
        if self._dwell_handle is not None:
            self._dwell_handle.cancel()
            self._dwell_handle = None
        self._stop_marquee()
        self.state.phase = Phase.IDLE
        self.state.displayed = None

    def _on_poll(self):
        if self.shutdown_requested:
            return
        # Re-arm first so one failed refresh cannot end polling
        self._poll_handle = self.loop.call_later(self.poll_interval, self._on_poll)
        self.background_refresh()

    # ------------------------------------------------------------------
    # Rotation
    # ------------------------------------------------------------------

    def dwell_time(self, screen: Screen) -> float:
        """How long screen stays up before the next transition."""
        return self._get_display_duration(screen, self.marquee_schedule)

    def _first_reveal(self):
        screen = self.state.active_screens[0]

        # Everything starts hidden except the first screen, shown without animation
        self.renderer.hide_all(CANONICAL_ORDER)
        self._render_content(screen)
        self.renderer.reveal(screen)

        self.state.current_index = 0
        self.state.displayed = screen
        self.state.phase = Phase.SHOWING
        self._log(f"Showing '{screen.value}'")
        self._arm_dwell(screen)

    def _arm_dwell(self, screen: Screen):
        if self._dwell_handle is not None:
            self._dwell_handle.cancel()
        duration = self.dwell_time(screen)
        self._log(f"Displaying '{screen.value}' for {duration:g}s...")
        self._dwell_handle = self.loop.call_later(duration, self._on_dwell_elapsed)
        if screen is Screen.NOTICES:
            self._start_marquee()

    def _start_marquee(self):
        """Step the notices marquee through one loop, alongside the notices dwell."""
        self._stop_marquee()
        schedule = self.marquee_schedule
        if schedule is None:
            return

        at = 0.0
        for step in schedule.steps:
            self._marquee_handles.append(self.loop.call_later(at, self._apply_marquee_step, step))
            at += step.duration

    def _stop_marquee(self):
        for handle in self._marquee_handles:
            handle.cancel()
        self._marquee_handles = []

    def _apply_marquee_step(self, step: ScrollStep):
        if self.state.displayed is Screen.NOTICES and self.state.phase is Phase.SHOWING:
            self.renderer.scroll_notices(step)

    def _next_index(self) -> int:
        count = len(self.state.active_screens)
        if count == 0:
            raise EmptyActiveSet("No active screens to rotate to")
        index = self.state.current_index
        # Membership shrank under us: start over from the first screen
        if not 0 <= index < count:
            return 0
        return (index + 1) % count

    def _on_dwell_elapsed(self):
        self._dwell_handle = None
        if self.shutdown_requested or self.state.phase is not Phase.SHOWING:
            return

        displayed = self.state.displayed
        next_index = self._next_index()
        target = self.state.active_screens[next_index]

        if target is displayed:
            # Nothing else to rotate to; refresh and check again next period
            try:
                if self.background_refresh():
                    self._render_content(displayed)
            finally:
                if displayed in self.state.active_screens:
                    self.state.current_index = self.state.active_screens.index(displayed)
                self._arm_dwell(displayed)
            return

        self._begin_transition(displayed, next_index)

    def _begin_transition(self, from_screen: Screen, next_index: int):
        to_screen = self.state.active_screens[next_index]
        transition_id = next(self._transition_ids)

        self.state.current_index = next_index
        self.state.phase = Phase.TRANSITIONING
        self.state.displayed = to_screen
        self.state.transition = Transition(
            transition_id=transition_id,
            from_screen=from_screen,
            to_screen=to_screen,
            started_at=self.loop.time(),
        )
        self._log(f"Rotation: '{from_screen.value}' -> '{to_screen.value}'")
        self._stop_marquee()

        entrance_delay = max(0.0, self.exit_duration - self.overlap)
        finish = max(self.exit_duration, entrance_delay + self.entrance_duration)
        self.loop.call_later(entrance_delay, self._start_entrance, transition_id)
        self.loop.call_later(self.exit_duration, self._finish_exit, transition_id)
        self.loop.call_later(finish, self._complete_transition, transition_id)

        self._render_content(to_screen)
        self.renderer.play_exit(from_screen, self.exit_animation)

    def _current_transition(self, transition_id: int) -> Optional[Transition]:
        transition = self.state.transition
        if transition is None or transition.transition_id != transition_id:
            return None
        return transition

    def _start_entrance(self, transition_id: int):
        transition = self._current_transition(transition_id)
        if transition is not None:
            self.renderer.play_entrance(transition.to_screen, self.entrance_animation)

    def _finish_exit(self, transition_id: int):
        transition = self._current_transition(transition_id)
        if transition is not None:
            self.renderer.hide(transition.from_screen)

    def _complete_transition(self, transition_id: int):
        transition = self._current_transition(transition_id)
        if transition is None:
            return
        self.state.transition = None
        self.state.phase = Phase.SHOWING
        self._arm_dwell(transition.to_screen)

    def _render_content(self, screen: Screen):
        """Push the current dataset's content for screen to the renderer."""
        dataset = self.dataset
        try:
            if screen is Screen.NOTICES:
                self.renderer.render_notices(dataset.notices, self.marquee_schedule)
            elif screen is Screen.EVENTS:
                self.renderer.render_events(dataset.events)
            elif screen is Screen.BIRTHDAYS:
                self.renderer.render_birthdays(active_birthdays(dataset.birthdays, self.now()))
            elif screen is Screen.CCTV:
                self.renderer.render_cctv(project_feeds(dataset.camera_feeds))
        except Exception as e:
            # Keep rotating on stale content rather than stalling the display
            print(f"[{self._timestamp()}] Error rendering '{screen.value}': {e}")

    def _screen_names(self) -> str:
        return ", ".join(s.value for s in self.state.active_screens)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def start(self):
        """Schedule the initial data load on the loop."""
        self.loop.call_later(0, self._initial_load)

    def run(self):
        """
        Main scheduler loop.

        Loads data, then rotates screens until shutdown.
        """
        print("=" * 70)
        print("signhub Rotation Scheduler")
        if self.debug:
            print("*** DEBUG MODE - Console Output ***")
        if self.quiet:
            print("*** QUIET MODE - Minimal Logging ***")
        print("=" * 70)
        print(f"Mode: {self.scheduler_config.get('mode', 'rotation')}")
        print(f"Default display duration: {self.default_duration}s")
        print(f"Background poll interval: {self.poll_interval}s")
        print(f"Data service: {self.client.data_url}")
        print("=" * 70)
        print()
        print("Starting rotation... (Press Ctrl+C to stop)")
        print()

        self.start()
        self.loop.run_forever()
