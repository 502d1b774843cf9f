"""
Utility functions for signhub.

Helper functions for text measurement and other common operations.
"""

from signhub.utils.text_helpers import (
    find_font_path,
    load_font,
    get_text_bbox,
    line_height,
    center_text_x,
    wrap_text,
    truncate_text,
)

__all__ = [
    "find_font_path",
    "load_font",
    "get_text_bbox",
    "line_height",
    "center_text_x",
    "wrap_text",
    "truncate_text",
]
