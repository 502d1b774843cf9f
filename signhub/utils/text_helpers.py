"""
Text rendering helper utilities.

Provides common text operations for layout measurement and renderers:
font loading, wrapping, truncation, and bounding box calculations.
"""

import os
from typing import Optional
from PIL import Image, ImageDraw, ImageFont


FONT_CANDIDATES = (
    "/app/fonts/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
)


def find_font_path(font_path: Optional[str] = None) -> Optional[str]:
    """
    Resolve the font to use.

    Args:
        font_path: Explicit TrueType font path (returned as-is when given)

    Returns:
        Path to a TrueType font, or None to use Pillow's default font
    """
    if font_path:
        return font_path
    for candidate in FONT_CANDIDATES:
        if os.path.exists(candidate):
            return candidate
    return None


def load_font(font_path: Optional[str], size: int) -> ImageFont.ImageFont:
    """
    Load a font at the given size.

    Raises:
        OSError: If font_path is set but cannot be read
    """
    if font_path:
        return ImageFont.truetype(font_path, size)
    return ImageFont.load_default(size=size)


def get_text_bbox(text: str, font: ImageFont.FreeTypeFont) -> tuple[int, int]:
    """
    Get the bounding box size of text.

    Args:
        text: Text to measure
        font: Font to use for measurement

    Returns:
        Tuple of (width, height) in pixels
    """
    # Create a temporary draw object for measurement
    temp_img = Image.new('RGB', (1, 1))
    draw = ImageDraw.Draw(temp_img)

    bbox = draw.textbbox((0, 0), text, font=font)
    width = bbox[2] - bbox[0]
    height = bbox[3] - bbox[1]

    return (width, height)


def line_height(font: ImageFont.FreeTypeFont, spacing: int = 4) -> int:
    """Height of one line of text including spacing below it."""
    _, height = get_text_bbox("Ag", font)
    return height + spacing


def center_text_x(text: str, font: ImageFont.FreeTypeFont, container_width: int) -> int:
    """
    Calculate x coordinate to center text horizontally.

    Args:
        text: Text to center
        font: Font to use
        container_width: Width of container in pixels

    Returns:
        X coordinate for left edge of text
    """
    text_width, _ = get_text_bbox(text, font)
    return (container_width - text_width) // 2


def wrap_text(text: str, max_width: int, font: ImageFont.FreeTypeFont) -> list[str]:
    """
    Wrap text to fit within a maximum width.

    Uses word-based wrapping - splits on whitespace and wraps whole words.
    Explicit newlines start a new paragraph; blank paragraphs are kept as
    empty lines.

    Args:
        text: Text to wrap
        max_width: Maximum width in pixels
        font: Font to use for measurement

    Returns:
        List of wrapped lines
    """
    lines = []

    for paragraph in text.splitlines() or [""]:
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current_line = ""
        for word in words:
            # Try adding word to current line
            test_line = current_line + (" " if current_line else "") + word
            test_width, _ = get_text_bbox(test_line, font)

            if test_width <= max_width:
                # Word fits, add to current line
                current_line = test_line
            else:
                # Word doesn't fit
                if current_line:
                    # Save current line and start new one
                    lines.append(current_line)
                    current_line = word
                else:
                    # Single word is too long, add it anyway
                    lines.append(word)

        # Add final line if not empty
        if current_line:
            lines.append(current_line)

    return lines


def truncate_text(text: str, max_width: int, font: ImageFont.FreeTypeFont,
                  ellipsis: str = "...") -> str:
    """
    Truncate text with ellipsis to fit within maximum width.

    Args:
        text: Text to truncate
        max_width: Maximum width in pixels
        font: Font to use
        ellipsis: Ellipsis string to append (default: "...")

    Returns:
        Truncated text with ellipsis if needed
    """
    text_width, _ = get_text_bbox(text, font)

    if text_width <= max_width:
        return text

    # Binary search for the right length
    left, right = 0, len(text)
    result = ""

    while left <= right:
        mid = (left + right) // 2
        test_text = text[:mid] + ellipsis
        test_width, _ = get_text_bbox(test_text, font)

        if test_width <= max_width:
            result = test_text
            left = mid + 1
        else:
            right = mid - 1

    return result if result else ellipsis
