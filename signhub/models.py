"""
Data model for signhub.

The dataset is owned by the data service; signhub only ever holds a
read-only snapshot of it, replaced wholesale on every successful fetch.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


def _text(value: Any) -> str:
    """Coerce a wire value to a string ("" for None)."""
    if value is None:
        return ""
    return str(value)


def _slot_number(value: Any) -> Optional[int]:
    """Parse a grid slot ("1".."4" or 1..4); None if unparsable."""
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class Screen(Enum):
    """Statically declared display surfaces."""
    NOTICES = "notices"
    EVENTS = "events"
    BIRTHDAYS = "birthdays"
    CCTV = "cctv"


CANONICAL_ORDER: Tuple[Screen, ...] = (
    Screen.NOTICES,
    Screen.EVENTS,
    Screen.BIRTHDAYS,
    Screen.CCTV,
)


@dataclass(frozen=True)
class Notice:
    """
    A notice card.

    Attributes:
        title: Card heading
        content: Body text
        date: Free-form date string (optional)
        urgent: Highlight the card and show the blinking urgent footer
    """
    title: str
    content: str
    date: Optional[str] = None
    urgent: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notice":
        return cls(
            title=_text(data.get("title")),
            content=_text(data.get("content")),
            date=_text(data.get("date")) or None,
            urgent=bool(data.get("urgent", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "date": self.date or "",
            "urgent": self.urgent,
        }


@dataclass(frozen=True)
class Event:
    title: str
    description: str
    date: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        return cls(
            title=_text(data.get("title")),
            description=_text(data.get("description")),
            date=_text(data.get("date")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "description": self.description, "date": self.date}


@dataclass(frozen=True)
class Birthday:
    """
    A birthday entry.

    Attributes:
        name: Person's name
        department: Department shown under the greeting
        date: Month and day as "MM-DD"
    """
    name: str
    department: str
    date: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Birthday":
        return cls(
            name=_text(data.get("name")),
            department=_text(data.get("department")),
            date=_text(data.get("date")).strip(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "department": self.department, "date": self.date}

    def is_today(self, now: datetime) -> bool:
        """True if this birthday falls on now's local month-day."""
        return self.date == now.strftime("%m-%d")


@dataclass(frozen=True)
class CameraFeed:
    """
    A camera feed definition targeting one of the grid slots.

    Attributes:
        label: Caption shown over the slot (may be blank)
        stream_url: Image, MJPEG, video file or embeddable URL (may be blank)
        grid_slot: Target slot 1..4; anything else is ignored by the projector
    """
    label: str = ""
    stream_url: Optional[str] = None
    grid_slot: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CameraFeed":
        # The data service has also stored these under "stream" and "grid"
        stream = data.get("streamUrl", data.get("stream"))
        slot = data.get("gridSlot", data.get("grid"))
        return cls(
            label=_text(data.get("label")),
            stream_url=_text(stream) or None,
            grid_slot=_slot_number(slot),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "stream": self.stream_url or "",
            "grid": str(self.grid_slot) if self.grid_slot is not None else "",
        }


@dataclass(frozen=True)
class VisibilityConfig:
    """
    Per-screen visibility toggles. Only an explicit false hides a screen.
    """
    show_notices: bool = True
    show_events: bool = True
    show_birthdays: bool = True
    show_cctv: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "VisibilityConfig":
        if not isinstance(data, dict):
            return cls()
        return cls(
            show_notices=data.get("showNotices") is not False,
            show_events=data.get("showEvents") is not False,
            show_birthdays=data.get("showBirthdays") is not False,
            show_cctv=data.get("showCctv") is not False,
        )

    def to_dict(self) -> Dict[str, bool]:
        return {
            "showNotices": self.show_notices,
            "showEvents": self.show_events,
            "showBirthdays": self.show_birthdays,
            "showCctv": self.show_cctv,
        }


def _items(payload: Dict[str, Any], *keys: str) -> List[Dict[str, Any]]:
    """First list found under any of keys, keeping only dict entries."""
    for key in keys:
        value = payload.get(key)
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
    return []


@dataclass(frozen=True)
class Dataset:
    """
    Snapshot of everything the display shows.

    Attributes:
        notices: Notice cards in display order
        events: Upcoming events
        birthdays: All birthdays (filtered to today's by the screen filter)
        camera_feeds: Camera definitions in list order (later entries win a slot)
        visibility: Screen visibility toggles
    """
    notices: Tuple[Notice, ...] = ()
    events: Tuple[Event, ...] = ()
    birthdays: Tuple[Birthday, ...] = ()
    camera_feeds: Tuple[CameraFeed, ...] = ()
    visibility: VisibilityConfig = field(default_factory=VisibilityConfig)

    @classmethod
    def from_dict(cls, payload: Any) -> "Dataset":
        """
        Build a dataset from the data service's JSON body.

        Accepts both "visibilityConfig"/"cameraFeeds" and the older
        "config"/"cctv" keys.

        Raises:
            ValueError: If payload is not a JSON object
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Dataset must be a JSON object, got {type(payload).__name__}")

        visibility = payload.get("visibilityConfig", payload.get("config"))
        return cls(
            notices=tuple(Notice.from_dict(n) for n in _items(payload, "notices")),
            events=tuple(Event.from_dict(e) for e in _items(payload, "events")),
            birthdays=tuple(Birthday.from_dict(b) for b in _items(payload, "birthdays")),
            camera_feeds=tuple(CameraFeed.from_dict(c) for c in _items(payload, "cameraFeeds", "cctv")),
            visibility=VisibilityConfig.from_dict(visibility),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Wire form for POST /api/data.

        Written with the "cctv" and "config" keys the data service validates.
        """
        return {
            "notices": [n.to_dict() for n in self.notices],
            "events": [e.to_dict() for e in self.events],
            "birthdays": [b.to_dict() for b in self.birthdays],
            "cctv": [c.to_dict() for c in self.camera_feeds],
            "config": self.visibility.to_dict(),
        }


class Phase(Enum):
    IDLE = "idle"
    SHOWING = "showing"
    TRANSITIONING = "transitioning"


@dataclass
class Transition:
    """An in-flight screen change."""
    transition_id: int
    from_screen: Screen
    to_screen: Screen
    started_at: float


@dataclass
class RotationState:
    """
    Mutable rotation state, owned by the rotation scheduler.

    Attributes:
        active_screens: Screens eligible for rotation, canonical order (never empty once loaded)
        current_index: Index into active_screens of the screen being shown or entered
        marquee_duration: Full marquee cycle length in seconds, None when notices fit
        phase: IDLE before the first successful fetch, then SHOWING / TRANSITIONING
        displayed: Screen currently on display (the target, while transitioning)
        transition: The in-flight transition, if any
    """
    active_screens: List[Screen] = field(default_factory=list)
    current_index: int = 0
    marquee_duration: Optional[float] = None
    phase: Phase = Phase.IDLE
    displayed: Optional[Screen] = None
    transition: Optional[Transition] = None

    @property
    def current_screen(self) -> Optional[Screen]:
        if 0 <= self.current_index < len(self.active_screens):
            return self.active_screens[self.current_index]
        return None
