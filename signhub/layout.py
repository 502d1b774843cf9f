"""
Notices layout measurement.

Lays out notice cards the way the notices screen stacks them (one card per
notice, fixed gap between cards) and measures the result, so the marquee
sizer knows whether the block overflows its viewport.
"""

from typing import List, Optional, Sequence, Tuple

from signhub.errors import UnmeasurableLayout
from signhub.marquee import NoticesMetrics
from signhub.models import Notice
from signhub.utils.text_helpers import find_font_path, line_height, load_font, wrap_text


class NoticeLayout:
    """
    Measures a stack of notice cards.

    Each card holds the wrapped title, the wrapped content and, when the
    notice is dated or urgent, a footer line.
    """

    def __init__(self, width: int, viewport_height: int, font_path: Optional[str] = None,
                 font_size: int = 22, padding: int = 24, gap: int = 16):
        """
        Initialize notice layout.

        Args:
            width: Card width in pixels
            viewport_height: Visible height of the notices viewport in pixels
            font_path: TrueType font (default: DejaVuSans if installed, else Pillow's default)
            font_size: Body font size in points
            padding: Inner card padding in pixels
            gap: Vertical gap between cards in pixels
        """
        self.width = width
        self.viewport_height = viewport_height
        self.font_path = find_font_path(font_path)
        self.font_size = font_size
        self.padding = padding
        self.gap = gap
        self._fonts = None

    def _load_fonts(self):
        if self._fonts is None:
            try:
                title_font = load_font(self.font_path, round(self.font_size * 1.3))
                body_font = load_font(self.font_path, self.font_size)
            except OSError as e:
                raise UnmeasurableLayout(f"Cannot load font {self.font_path}: {e}") from e
            self._fonts = (title_font, body_font)
        return self._fonts

    @property
    def fonts(self):
        """(title font, body font)"""
        return self._load_fonts()

    def card_lines(self, notice: Notice) -> Tuple[List[str], List[str], str]:
        """
        Break one notice card into lines.

        Args:
            notice: Notice to lay out

        Returns:
            (title lines, body lines, footer text); footer is "" when the
            notice is neither dated nor urgent
        """
        title_font, body_font = self._load_fonts()
        text_width = self.width - 2 * self.padding
        if text_width <= 0:
            raise UnmeasurableLayout(f"Card width {self.width}px leaves no room for text")

        title_lines = wrap_text(notice.title, text_width, title_font)
        body_lines = wrap_text(notice.content, text_width, body_font) if notice.content else []

        footer_parts = []
        if notice.urgent:
            footer_parts.append("URGENT")
        if notice.date:
            footer_parts.append(f"Date: {notice.date}")

        return title_lines, body_lines, "   ".join(footer_parts)

    def card_height(self, notice: Notice) -> int:
        """Rendered height of one notice card in pixels."""
        title_font, body_font = self._load_fonts()
        title_lines, body_lines, footer = self.card_lines(notice)

        return (2 * self.padding
                + len(title_lines) * line_height(title_font)
                + (len(body_lines) + (1 if footer else 0)) * line_height(body_font))

    def measure(self, notices: Sequence[Notice]) -> NoticesMetrics:
        """
        Measure the notices block.

        Args:
            notices: Notices in display order

        Returns:
            NoticesMetrics; row_height is the first card plus one gap,
            None when there are no notices

        Raises:
            UnmeasurableLayout: If the viewport or fonts cannot be measured
        """
        if self.viewport_height <= 0:
            raise UnmeasurableLayout(f"Viewport height {self.viewport_height}px")

        if not notices:
            return NoticesMetrics(content_height=0, viewport_height=self.viewport_height)

        heights = [self.card_height(n) for n in notices]
        content_height = sum(heights) + self.gap * (len(heights) - 1)

        return NoticesMetrics(
            content_height=content_height,
            viewport_height=self.viewport_height,
            row_height=heights[0] + self.gap,
        )
