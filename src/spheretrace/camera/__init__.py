"""Camera module for primary ray generation.

Components:
    screen: Fixed camera looking through the z = 0 screen plane

Pixel (col, row) maps linearly onto the screen plane; there is exactly one
ray per pixel and no jitter.
"""

from .screen import DEFAULT_HEIGHT, DEFAULT_WIDTH, ScreenCamera, ScreenSampler

__all__ = [
    "ScreenCamera",
    "ScreenSampler",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
]
