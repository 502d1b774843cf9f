"""
Bitmap renderer for signage displays.

Draws the screen being shown into a PIL Image and writes it to
<output_dir>/current.png, for a kiosk image viewer to pick up. The notices
block is drawn through the same NoticeLayout the marquee is sized with, and
a new frame is written on every marquee step.
"""

import os
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from signhub.cctv import SlotDirective, SlotMode, slot_source
from signhub.errors import UnmeasurableLayout
from signhub.layout import NoticeLayout
from signhub.marquee import MarqueeSchedule, ScrollStep
from signhub.models import Birthday, Event, Notice, Screen
from signhub.renderers.base import Animation, Renderer
from signhub.utils.text_helpers import (
    center_text_x,
    find_font_path,
    line_height,
    load_font,
    truncate_text,
    wrap_text,
)


BACKGROUND = (10, 10, 26)
CARD = (28, 30, 54)
CARD_HIGHLIGHT = (90, 24, 32)
TEXT = (235, 235, 245)
MUTED = (150, 160, 190)
ACCENT = (136, 187, 255)

SCREEN_TITLES = {
    Screen.NOTICES: "NOTICES",
    Screen.EVENTS: "UPCOMING EVENTS",
    Screen.BIRTHDAYS: "BIRTHDAYS",
    Screen.CCTV: "CCTV",
}

# (heading, body lines, footer, highlighted)
Card = Tuple[str, List[str], str, bool]


class BitmapRenderer(Renderer):
    """
    Renders the visible screen to a PNG frame.

    Screen content is kept per screen as it is pushed, and the frame is
    redrawn whenever a screen is revealed or starts its entrance.
    """

    MARGIN = 48
    HEADER_HEIGHT = 110
    GAP = 16
    PADDING = 24

    def __init__(self, width: int = 1920, height: int = 1080, font_path: str = None,
                 output_dir: str = "output", save_debug_files: bool = False,
                 notices_layout: Optional[NoticeLayout] = None):
        """
        Initialize bitmap renderer.

        Args:
            width: Frame width in pixels (default: 1920)
            height: Frame height in pixels (default: 1080)
            font_path: Path to TrueType font file (default: DejaVuSans if installed)
            output_dir: Directory to write current.png into
            save_debug_files: If True, also keep a timestamped copy of every frame
            notices_layout: Layout the marquee is measured with; its width and
                viewport height size the notices viewport (default: 860x820)
        """
        self.width = width
        self.height = height
        self.font_path = find_font_path(font_path)
        self.output_dir = output_dir
        self.save_debug_files = save_debug_files
        self.notices_layout = notices_layout or NoticeLayout(
            width=860, viewport_height=820, font_path=self.font_path)

        self.title_font = load_font(self.font_path, 48)
        self.heading_font = load_font(self.font_path, 30)
        self.body_font = load_font(self.font_path, 22)

        self.content: Dict[Screen, List[Card]] = {}
        self.notices: List[Notice] = []
        self.notices_offset = 0.0
        self.notices_opacity = 1.0
        self.cctv: List[SlotDirective] = []
        self.current: Optional[Screen] = None
        self.last_frame: Optional[Image.Image] = None

    def hide_all(self, screens: Iterable[Screen]):
        self.current = None

    def reveal(self, screen: Screen):
        self.current = screen
        self._write_frame(self.render_screen(screen))

    def hide(self, screen: Screen):
        if self.current is screen:
            self.current = None

    def play_exit(self, screen: Screen, animation: Animation):
        # A still frame cannot fade; the entrance replaces it
        pass

    def play_entrance(self, screen: Screen, animation: Animation):
        self.reveal(screen)

    def render_notices(self, notices: Sequence[Notice], schedule: Optional[MarqueeSchedule]):
        self.notices = list(notices)
        self.notices_offset = 0.0
        self.notices_opacity = 1.0

    def scroll_notices(self, step: ScrollStep):
        # A still frame cannot tween, so each step lands on its target at once
        if step.kind in ("scroll", "snap"):
            self.notices_offset = step.offset
        elif step.kind == "fade":
            self.notices_opacity = step.opacity
        else:
            return

        if self.current is Screen.NOTICES:
            self._write_frame(self.render_screen(Screen.NOTICES))

    def render_events(self, events: Sequence[Event]):
        self.content[Screen.EVENTS] = [
            (event.title, [event.description] if event.description else [], event.date, False)
            for event in events
        ]

    def render_birthdays(self, birthdays: Sequence[Birthday]):
        self.content[Screen.BIRTHDAYS] = [
            (f"Happy Birthday {b.name}!", [f"Department: {b.department}"], "", False)
            for b in birthdays
        ]

    def render_cctv(self, directives: Sequence[SlotDirective]):
        self.cctv = list(directives)

    def clear(self):
        self.current = None
        self._write_frame(Image.new('RGB', (self.width, self.height), color='black'))

    def render_screen(self, screen: Screen) -> Image.Image:
        """
        Draw a screen with its current content.

        Args:
            screen: Screen to draw

        Returns:
            PIL Image (RGB mode) of the full frame
        """
        img = Image.new('RGB', (self.width, self.height), color=BACKGROUND)
        draw = ImageDraw.Draw(img)

        title = SCREEN_TITLES[screen]
        draw.text((center_text_x(title, self.title_font, self.width), self.MARGIN),
                  title, fill=ACCENT, font=self.title_font)

        if screen is Screen.CCTV:
            self._draw_cctv(draw)
        elif screen is Screen.NOTICES:
            self._draw_notices(img)
        else:
            self._draw_cards(draw, self.content.get(screen, []))

        return img

    def notices_origin(self) -> Tuple[int, int]:
        """Top-left corner of the notices viewport within the frame."""
        return (self.width - self.notices_layout.width) // 2, self.MARGIN + self.HEADER_HEIGHT

    def _draw_notices(self, img: Image.Image):
        layout = self.notices_layout
        if layout.width <= 0 or layout.viewport_height <= 0:
            return
        viewport = Image.new('RGB', (layout.width, layout.viewport_height), color=BACKGROUND)
        draw = ImageDraw.Draw(viewport)

        try:
            title_font, body_font = layout.fonts
            y = round(self.notices_offset)
            for notice in self.notices:
                if y >= layout.viewport_height:
                    break
                card_height = layout.card_height(notice)
                if y + card_height > 0:
                    self._draw_notice_card(draw, notice, y, card_height, title_font, body_font)
                y += card_height + layout.gap
        except UnmeasurableLayout as e:
            print(f"[BitmapRenderer] Cannot lay out notices: {e}")

        if self.notices_opacity < 1:
            blank = Image.new('RGB', viewport.size, color=BACKGROUND)
            viewport = Image.blend(blank, viewport, max(0.0, self.notices_opacity))

        img.paste(viewport, self.notices_origin())

    def _draw_notice_card(self, draw: ImageDraw.ImageDraw, notice: Notice, y: int,
                          card_height: int, title_font, body_font):
        layout = self.notices_layout
        title_lines, body_lines, footer = layout.card_lines(notice)

        draw.rectangle([(0, y), (layout.width - 1, y + card_height)],
                       fill=CARD_HIGHLIGHT if notice.urgent else CARD)
        text_y = y + layout.padding
        for line in title_lines:
            draw.text((layout.padding, text_y), line, fill=TEXT, font=title_font)
            text_y += line_height(title_font)
        for line in body_lines:
            draw.text((layout.padding, text_y), line, fill=TEXT, font=body_font)
            text_y += line_height(body_font)
        if footer:
            draw.text((layout.padding, text_y), footer, fill=MUTED, font=body_font)

    def _draw_cards(self, draw: ImageDraw.ImageDraw, cards: List[Card]):
        x = self.MARGIN
        y = self.MARGIN + self.HEADER_HEIGHT
        card_width = self.width - 2 * self.MARGIN
        text_width = card_width - 2 * self.PADDING
        heading_step = line_height(self.heading_font)
        body_step = line_height(self.body_font)

        for heading, body, footer, highlighted in cards:
            lines = []
            for paragraph in body:
                lines.extend(wrap_text(paragraph, text_width, self.body_font))
            card_height = (2 * self.PADDING + heading_step
                           + (len(lines) + (1 if footer else 0)) * body_step)

            # Stop at the bottom edge; overflowing cards are what the marquee is for
            if y + card_height > self.height - self.MARGIN:
                break

            draw.rectangle([(x, y), (x + card_width, y + card_height)],
                           fill=CARD_HIGHLIGHT if highlighted else CARD)
            text_y = y + self.PADDING
            draw.text((x + self.PADDING, text_y),
                      truncate_text(heading, text_width, self.heading_font),
                      fill=TEXT, font=self.heading_font)
            text_y += heading_step
            for line in lines:
                draw.text((x + self.PADDING, text_y), line, fill=TEXT, font=self.body_font)
                text_y += body_step
            if footer:
                draw.text((x + self.PADDING, text_y), footer, fill=MUTED, font=self.body_font)

            y += card_height + self.GAP

    def _draw_cctv(self, draw: ImageDraw.ImageDraw):
        top = self.MARGIN + self.HEADER_HEIGHT
        tile_width = (self.width - 2 * self.MARGIN - self.GAP) // 2
        tile_height = (self.height - top - self.MARGIN - self.GAP) // 2

        for index, directive in enumerate(self.cctv[:4]):
            col, row = index % 2, index // 2
            x = self.MARGIN + col * (tile_width + self.GAP)
            y = top + row * (tile_height + self.GAP)
            draw.rectangle([(x, y), (x + tile_width, y + tile_height)], fill=CARD, outline=MUTED)

            if directive.mode is SlotMode.PLACEHOLDER:
                source = "NO SIGNAL"
            else:
                source = truncate_text(f"{directive.mode.value.upper()}  {slot_source(directive)}",
                                       tile_width - 2 * self.PADDING, self.body_font)
            draw.text((x + self.PADDING, y + self.PADDING),
                      truncate_text(directive.label, tile_width - 2 * self.PADDING, self.heading_font),
                      fill=TEXT, font=self.heading_font)
            draw.text((x + self.PADDING, y + tile_height - self.PADDING - line_height(self.body_font)),
                      source, fill=MUTED, font=self.body_font)

    def _write_frame(self, image: Image.Image):
        self.last_frame = image
        path = os.path.join(self.output_dir, "current.png")
        try:
            if not os.path.exists(self.output_dir):
                os.makedirs(self.output_dir)
            image.save(path, format='PNG')
            if self.save_debug_files:
                timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
                image.save(os.path.join(self.output_dir, f"frame_{timestamp}.png"), format='PNG')
        except OSError as e:
            print(f"[BitmapRenderer] Could not write frame to {path}: {e}")
