"""
Camera grid projection.

Maps the dataset's camera feed list onto the fixed 4-slot grid of the
cctv screen, producing one render directive per slot.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional

from signhub.models import CameraFeed


SLOT_COUNT = 4

EMBED_HOSTS = ("youtube.com", "youtu.be", "vimeo.com")
VIDEO_FILE_PATTERN = re.compile(r"\.(mp4|webm|ogg)(\?.*)?$", re.IGNORECASE)
EMBED_QUERY = "autoplay=1&mute=1&controls=0"


class SlotMode(Enum):
    PLACEHOLDER = "placeholder"
    IMAGE = "image"
    VIDEO = "video"
    EMBED = "embed"


@dataclass(frozen=True)
class SlotDirective:
    """
    What one grid slot should display.

    Attributes:
        slot: Slot number, 1-based
        label: Caption for the slot
        mode: How to mount resolved_url (PLACEHOLDER shows the static noise pattern)
        resolved_url: Sanitized stream URL, None for placeholders
    """
    slot: int
    label: str
    mode: SlotMode = SlotMode.PLACEHOLDER
    resolved_url: Optional[str] = None


def default_label(slot: int) -> str:
    return f"CAM 0{slot} // CURRENT SCREEN"


def sanitize_stream_url(url: str) -> str:
    """
    Cut off an accidentally concatenated second URL.

    Anything from a second "http" found at or after offset 4 is dropped,
    e.g. "http://a/x.jpghttp://b/y.jpg" -> "http://a/x.jpg".
    """
    url = url.strip()
    cut = url.find("http", 4)
    if cut != -1:
        url = url[:cut]
    return url


def classify_stream(url: str) -> SlotMode:
    """
    Decide how a stream URL is mounted.

    Video platform URLs are embedded, video files play in a video element,
    everything else (stills, MJPEG/CGI endpoints) is shown as an image.
    """
    lowered = url.lower()
    if any(host in lowered for host in EMBED_HOSTS):
        return SlotMode.EMBED
    if VIDEO_FILE_PATTERN.search(url):
        return SlotMode.VIDEO
    return SlotMode.IMAGE


def embed_url(url: str) -> str:
    """Embed URL with autoplay, muted and without player controls."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{EMBED_QUERY}"


def slot_source(directive: SlotDirective) -> Optional[str]:
    """
    URL a renderer should mount for a slot.

    Embeds get the autoplay query appended; images and videos use the
    resolved URL as is.

    Returns:
        Source URL, or None for a placeholder
    """
    if directive.mode is SlotMode.PLACEHOLDER or not directive.resolved_url:
        return None
    if directive.mode is SlotMode.EMBED:
        return embed_url(directive.resolved_url)
    return directive.resolved_url


def project_feeds(feeds: Iterable[CameraFeed], slot_count: int = SLOT_COUNT) -> List[SlotDirective]:
    """
    Project camera feeds onto the grid.

    Every slot starts as a labelled placeholder. Feeds are applied in list
    order, so a later feed for the same slot overrides an earlier one; feeds
    for slots outside 1..slot_count are ignored. A feed with only a label
    relabels its slot and keeps whatever the slot already shows. A feed
    with neither changes nothing.

    Args:
        feeds: Camera feeds in dataset order
        slot_count: Number of physical slots (default: 4)

    Returns:
        One SlotDirective per slot, ordered by slot number
    """
    directives = {slot: SlotDirective(slot, default_label(slot))
                  for slot in range(1, slot_count + 1)}

    for feed in feeds:
        slot = feed.grid_slot
        if slot is None or not 1 <= slot <= slot_count:
            continue

        label = (feed.label or "").strip()
        stream = (feed.stream_url or "").strip()

        if stream:
            url = sanitize_stream_url(stream)
            directives[slot] = SlotDirective(
                slot=slot,
                label=feed.label if label else default_label(slot),
                mode=classify_stream(url),
                resolved_url=url,
            )
        elif label:
            directives[slot] = replace(directives[slot], label=feed.label)

    return [directives[slot] for slot in range(1, slot_count + 1)]
