"""
Screen filtering for the rotation.

Decides which screens are eligible to display right now, from the dataset's
visibility toggles and today's date.
"""

from datetime import datetime
from typing import Iterable, List

from signhub.models import Birthday, CANONICAL_ORDER, Dataset, Screen


def active_birthdays(birthdays: Iterable[Birthday], now: datetime) -> List[Birthday]:
    """
    Birthdays falling on today's month-day, in list order.

    Args:
        birthdays: All birthdays from the dataset
        now: Current local date/time

    Returns:
        Birthdays to greet today
    """
    return [b for b in birthdays if b.is_today(now)]


def _is_eligible(screen: Screen, dataset: Dataset, now: datetime) -> bool:
    visibility = dataset.visibility

    if screen is Screen.NOTICES:
        return visibility.show_notices
    elif screen is Screen.EVENTS:
        return visibility.show_events
    elif screen is Screen.CCTV:
        return visibility.show_cctv
    elif screen is Screen.BIRTHDAYS:
        # Toggled on AND somebody has a birthday today
        return visibility.show_birthdays and bool(active_birthdays(dataset.birthdays, now))
    return False


def filter_screens(dataset: Dataset, now: datetime) -> List[Screen]:
    """
    Compute the ordered set of screens eligible for rotation.

    Screens keep the canonical order (notices, events, birthdays, cctv).
    If every screen is filtered out, notices is forced in so the display
    is never blank.

    Args:
        dataset: Current dataset snapshot
        now: Current local date/time (birthday eligibility depends on it)

    Returns:
        Non-empty list of screens
    """
    screens = [s for s in CANONICAL_ORDER if _is_eligible(s, dataset, now)]

    if not screens:
        screens = [Screen.NOTICES]

    return screens
