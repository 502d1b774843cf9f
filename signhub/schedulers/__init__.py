"""
Schedulers for signhub.

Provides the scheduling modes that drive screen rotation.
"""

from .base import BaseScheduler
from .rotation import RotationScheduler
from .timers import TimerHandle, TimerLoop


def get_scheduler(config, renderer=None, debug: bool = False, quiet: bool = False):
    """
    Factory function to create appropriate scheduler based on config.

    Args:
        config: Config instance
        renderer: Optional presentation layer (default chosen by debug flag)
        debug: If True, render to the console
        quiet: If True, reduce logging output to minimize SD card wear

    Returns:
        Scheduler instance (BaseScheduler subclass)
    """
    scheduler_config = config.get_scheduler_config()
    mode = scheduler_config.get("mode", "rotation")

    if mode == "rotation":
        return RotationScheduler(config=config, renderer=renderer, debug=debug, quiet=quiet)
    else:
        raise ValueError(f"Unknown scheduler mode: {mode}. "
                        f"Valid modes: rotation")


__all__ = [
    "BaseScheduler",
    "RotationScheduler",
    "TimerHandle",
    "TimerLoop",
    "get_scheduler",
]
