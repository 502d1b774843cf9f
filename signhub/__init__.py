"""
signhub: Display orchestration for unattended digital signage.

Rotates notices, events, birthdays and camera feed screens from a shared
dataset served over HTTP, refreshing the data in the background.
"""

__version__ = "0.1.0"

# Import main classes for convenience
from signhub.models import Dataset, Screen
from signhub.renderers.base import Renderer

__all__ = [
    "Dataset",
    "Screen",
    "Renderer",
]
