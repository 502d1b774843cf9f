"""
Base scheduler class for signhub.

Provides common functionality for all scheduler modes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from signhub.client import ContentStoreClient
from signhub.config import Config, get_config
from signhub.layout import NoticeLayout
from signhub.marquee import MarqueeSchedule, MarqueeSizer
from signhub.models import Screen
from signhub.renderers import BitmapRenderer, ConsoleRenderer, Renderer
from signhub.schedulers.timers import TimerLoop


class BaseScheduler(ABC):
    """
    Abstract base class for schedulers.

    Provides common functionality for data service access, notices layout,
    marquee sizing and rendering. Subclasses implement specific scheduling logic.
    """

    def __init__(self, config: Optional[Config] = None, renderer: Optional[Renderer] = None,
                 client: Optional[ContentStoreClient] = None, loop: Optional[TimerLoop] = None,
                 layout: Optional[NoticeLayout] = None, now: Callable[[], datetime] = datetime.now,
                 debug: bool = False, quiet: bool = False):
        """
        Initialize scheduler with configuration and components.

        Args:
            config: Config instance (default: global config)
            renderer: Presentation layer (default: console in debug mode, bitmap otherwise)
            client: Data service client (default: built from data_service config)
            loop: Timer loop (default: real-time loop)
            layout: Notices layout measurer (default: built from display config)
            now: Wall-clock source, used for birthday matching
            debug: If True, use the console renderer
            quiet: If True, reduce logging output to minimize SD card wear
        """
        self.config = config or get_config()
        self.shutdown_requested = False
        self.debug = debug
        self.quiet = quiet
        self.now = now

        # Load configurations
        self.scheduler_config = self.config.get_scheduler_config()
        self.display_config = self.config.get_display_config()
        self.service_config = self.config.get_data_service_config()
        if self.debug:
            print(f"scheduler config: {self.scheduler_config}")
            print(f"data service config: {self.service_config}")

        self.client = client or ContentStoreClient(
            base_url=self.service_config.get("url", "http://localhost:3001"),
            timeout=self.service_config.get("timeout", 10)
        )

        viewport = self.display_config.get("notices_viewport", {})
        marquee_config = self.config.get_marquee_config()
        self.layout = layout or NoticeLayout(
            width=viewport.get("width", 860),
            viewport_height=viewport.get("height", 820),
            font_path=self.display_config.get("font_path"),
            font_size=self.display_config.get("font_size", 22),
            gap=marquee_config.get("row_gap", 16)
        )

        if renderer is None:
            if self.debug:
                renderer = ConsoleRenderer()
            else:
                # Draws notices with the same layout the marquee is sized from
                renderer = BitmapRenderer(
                    width=self.display_config.get("width", 1920),
                    height=self.display_config.get("height", 1080),
                    font_path=self.display_config.get("font_path"),
                    output_dir=self.display_config.get("output_dir", "output"),
                    notices_layout=self.layout
                )
        self.renderer = renderer
        self.marquee_sizer = MarqueeSizer(
            pause=marquee_config.get("pause", 6.0),
            step_duration=marquee_config.get("step_duration", 0.8),
            fade_out=marquee_config.get("fade_out", 0.3),
            fade_in=marquee_config.get("fade_in", 0.5),
            fallback_row_height=marquee_config.get("fallback_row_height", 296)
        )

        self.loop = loop or TimerLoop()

        # Get common scheduler settings
        self.default_duration = self.scheduler_config.get("default_display_duration", 10)
        self.screen_durations: Dict[str, Any] = self.scheduler_config.get("screen_durations", {})

    def _get_display_duration(self, screen: Screen, schedule: Optional[MarqueeSchedule] = None,
                              override_duration: float = None) -> float:
        """
        Get display (dwell) duration for a screen.

        Priority:
        1. Explicit override duration passed to this method
        2. One full marquee loop, for the notices screen when it scrolls
        3. Per-screen duration from scheduler.screen_durations
        4. Scheduler's default_display_duration

        Args:
            screen: Screen being shown
            schedule: Current notices marquee schedule (None when notices fit)
            override_duration: Optional explicit duration override

        Returns:
            Duration in seconds
        """
        # Check explicit override
        if override_duration is not None:
            return override_duration

        if screen is Screen.NOTICES and schedule is not None:
            return schedule.total_duration

        configured = self.screen_durations.get(screen.value)
        if configured is not None:
            return configured

        # Fall back to default
        return self.default_duration

    def shutdown(self):
        """Request graceful shutdown."""
        print()
        print("=" * 70)
        print(f"[{self._timestamp()}] Shutdown requested...")
        print("=" * 70)
        self.shutdown_requested = True
        self.loop.stop()

    def _log(self, message: str):
        """Print a timestamped line unless running quiet."""
        if not self.quiet:
            print(f"[{self._timestamp()}] {message}")

    def _timestamp(self) -> str:
        """Get current timestamp for logging."""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    @abstractmethod
    def run(self):
        """
        Main scheduler loop.

        Subclasses must implement their specific scheduling logic.
        """
        pass
