"""
Shared fixtures for signhub tests.

Timing is driven by a fake clock so rotation behaviour can be stepped
through second by second without sleeping.
"""

import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure project root is on sys.path for all test imports
_project_root = str(Path(__file__).parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from signhub.config import Config
from signhub.marquee import NoticesMetrics
from signhub.models import Dataset
from signhub.renderers.base import Renderer
from signhub.schedulers import RotationScheduler, TimerLoop


# Sunday, March 15th
TODAY = datetime(2026, 3, 15, 9, 30)


class FakeClock:
    """Monotonic clock whose sleep() just moves time forward."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.now += seconds


class FakeStoreClient:
    """
    Stand-in for ContentStoreClient.

    Returns (or raises) the queued results in order; the last one repeats.
    """

    data_url = "http://signage.test/api/data"

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def fetch_dataset(self) -> Dataset:
        index = min(self.calls, len(self.results) - 1)
        self.calls += 1
        result = self.results[index]
        if isinstance(result, Exception):
            raise result
        return result

    def queue(self, *results):
        """Replace everything not yet returned."""
        self.results = self.results[:self.calls] + list(results)


def make_dataset(notices=True, events=True, birthdays=True, cctv=True,
                 birthday_dates=(), notice_titles=("Fire drill",), **extra) -> Dataset:
    payload = {
        "notices": [{"title": t, "content": f"{t} details", "date": "", "urgent": False}
                    for t in notice_titles],
        "events": [{"title": "Town hall", "description": "Main hall", "date": "Mar 20"}],
        "birthdays": [{"name": f"Person {i}", "department": "Ops", "date": d}
                      for i, d in enumerate(birthday_dates)],
        "cameraFeeds": [{"label": "Lobby", "streamUrl": "http://cam.local/lobby.jpg", "gridSlot": 1}],
        "visibilityConfig": {
            "showNotices": notices,
            "showEvents": events,
            "showBirthdays": birthdays,
            "showCctv": cctv,
        },
    }
    payload.update(extra)
    return Dataset.from_dict(payload)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def loop(clock):
    return TimerLoop(clock=clock.time, sleep=clock.sleep)


@pytest.fixture
def config(tmp_path):
    """Default configuration (no config.json present)."""
    return Config(config_path=str(tmp_path / "config.json"))


@pytest.fixture
def renderer():
    return MagicMock(spec=Renderer)


@pytest.fixture
def make_scheduler(config, loop, renderer):
    """
    Build a RotationScheduler around fakes.

    Args (of the returned factory):
        *results: Datasets / exceptions the data service returns, in order
        metrics: NoticesMetrics the layout reports (default: notices fit)
        now: Wall-clock time used for birthdays
    """
    def _make(*results, metrics=None, now=TODAY):
        layout = MagicMock()
        layout.measure.return_value = metrics or NoticesMetrics(content_height=300, viewport_height=400)
        client = FakeStoreClient(*results)
        scheduler = RotationScheduler(
            config=config,
            renderer=renderer,
            client=client,
            loop=loop,
            layout=layout,
            now=lambda: now,
            quiet=True,
        )
        return scheduler
    return _make
