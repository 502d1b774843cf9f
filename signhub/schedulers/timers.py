"""
Cooperative timer loop for signhub.

A single-threaded loop of delayed callbacks. Everything the display does
over time (dwell timers, transition steps, background polls, retries) is a
callback scheduled here, so no two handlers ever run at the same time.
"""

import heapq
import itertools
import time
import traceback
from datetime import datetime
from typing import Any, Callable, List, Optional


class TimerHandle:
    """A scheduled callback; cancel() prevents it from running."""

    def __init__(self, when: float, callback: Callable, args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def __repr__(self):
        name = getattr(self.callback, "__name__", repr(self.callback))
        state = " cancelled" if self.cancelled else ""
        return f"<TimerHandle {name} at {self.when:.2f}{state}>"


class TimerLoop:
    """
    Runs callbacks at their due time, one at a time.

    Callbacks due at the same time run in the order they were scheduled.
    A callback that raises is reported and the loop carries on.
    """

    # Longest single sleep, so stop() takes effect quickly
    MAX_SLEEP = 1.0

    def __init__(self, clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], Any] = time.sleep):
        """
        Initialize timer loop.

        Args:
            clock: Monotonic time source in seconds
            sleep: Blocking sleep function
        """
        self.clock = clock
        self.sleep = sleep
        self._queue: List[tuple] = []
        self._sequence = itertools.count()
        self._stopped = False

    def time(self) -> float:
        return self.clock()

    def call_later(self, delay: float, callback: Callable, *args) -> TimerHandle:
        """
        Schedule callback(*args) to run after delay seconds.

        Returns:
            TimerHandle that can be cancelled
        """
        handle = TimerHandle(self.clock() + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._sequence), handle))
        return handle

    def pending(self) -> int:
        """Number of scheduled, uncancelled callbacks."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def next_due(self) -> Optional[float]:
        """Due time of the next uncancelled callback, or None."""
        self._drop_cancelled()
        if self._queue:
            return self._queue[0][0]
        return None

    def _drop_cancelled(self):
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)

    def _sleep_until(self, deadline: float):
        while not self._stopped:
            remaining = deadline - self.clock()
            if remaining <= 0:
                return
            self.sleep(min(remaining, self.MAX_SLEEP))

    def _run_one(self, handle: TimerHandle):
        try:
            handle.callback(*handle.args)
        except Exception as e:
            print(f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] Error in timer callback {handle!r}: {e}")
            traceback.print_exc()

    def run_until(self, deadline: float):
        """
        Run every callback due up to deadline, then wait until deadline.

        Args:
            deadline: Absolute time on this loop's clock
        """
        self._stopped = False
        while not self._stopped:
            due = self.next_due()
            if due is None or due > deadline:
                break
            self._sleep_until(due)
            if self._stopped:
                break
            _, _, handle = heapq.heappop(self._queue)
            if not handle.cancelled:
                self._run_one(handle)
        self._sleep_until(deadline)

    def advance(self, seconds: float):
        """Run the loop for the given number of seconds from now."""
        self.run_until(self.clock() + seconds)

    def run_forever(self):
        """Run until stop() is called or nothing is left to do."""
        self._stopped = False
        while not self._stopped:
            due = self.next_due()
            if due is None:
                break
            self.run_until(due)

    def stop(self):
        """Stop the loop at the next opportunity."""
        self._stopped = True
