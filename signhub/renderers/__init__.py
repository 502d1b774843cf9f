"""
Renderers for signhub.

Renderers are the presentation layer the rotation scheduler drives.
"""

from signhub.renderers.base import Animation, Renderer
from signhub.renderers.bitmap import BitmapRenderer
from signhub.renderers.console import ConsoleRenderer

__all__ = [
    "Animation",
    "Renderer",
    "BitmapRenderer",
    "ConsoleRenderer",
]
