"""Fixed-position camera looking through a screen plane at z = 0.

The screen spans x in [-1, 1] and y in [-1/aspect, 1/aspect], where
aspect = width / height. Pixel (col, row) maps to the screen point

    upper_left + col * x_step + row * y_step

with upper_left = (-1, 1/aspect, 0), x_step = (2/width, 0, 0) and
y_step = (0, -2/aspect/height, 0). The primary ray starts at the camera
position and points at that screen point. There is one ray per pixel and no
jitter, so rendering is fully deterministic.

Example:
    >>> from spheretrace.camera.screen import ScreenCamera
    >>> camera = ScreenCamera(width=4, height=2)
    >>> camera.upper_left
    (-1.0, 0.5, 0.0)
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from spheretrace.core.vector import Ray, normalized
from spheretrace.scene.model import DEFAULT_CAMERA_POSITION

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080


@dataclass(frozen=True)
class ScreenCamera:
    """Camera position plus raster resolution.

    Attributes:
        width: Raster width in pixels.
        height: Raster height in pixels.
        position: Camera position in world space.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    position: tuple[float, float, float] = DEFAULT_CAMERA_POSITION

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) must be positive"
            )

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @property
    def upper_left(self) -> tuple[float, float, float]:
        """Screen point of pixel (0, 0)."""
        return (-1.0, 1.0 / self.aspect_ratio, 0.0)

    @property
    def x_step(self) -> tuple[float, float, float]:
        """Screen-space offset between horizontally adjacent pixels."""
        return (2.0 / self.width, 0.0, 0.0)

    @property
    def y_step(self) -> tuple[float, float, float]:
        """Screen-space offset between vertically adjacent pixels."""
        return (0.0, -2.0 / self.aspect_ratio / self.height, 0.0)

    def screen_point(self, col: int, row: int) -> tuple[float, float, float]:
        """Screen point of a pixel, computed in Python.

        Args:
            col: Pixel column (0 = left).
            row: Pixel row (0 = top).
        """
        ul, xs, ys = self.upper_left, self.x_step, self.y_step
        return (
            ul[0] + col * xs[0] + row * ys[0],
            ul[1] + col * xs[1] + row * ys[1],
            ul[2] + col * xs[2] + row * ys[2],
        )

    def ray_direction(self, col: int, row: int) -> tuple[float, float, float]:
        """Unit direction of the primary ray through a pixel, computed in Python."""
        point = self.screen_point(col, row)
        d = tuple(p - c for p, c in zip(point, self.position))
        n = math.sqrt(d[0] * d[0] + d[1] * d[1] + d[2] * d[2])
        if n == 0.0:
            return (0.0, 0.0, 0.0)
        return (d[0] / n, d[1] / n, d[2] / n)


@ti.data_oriented
class ScreenSampler:
    """Taichi-side copy of a ScreenCamera that builds primary rays in kernels."""

    def __init__(self, camera: ScreenCamera) -> None:
        """Upload the camera geometry into Taichi fields.

        Args:
            camera: The camera configuration.
        """
        self.camera = camera
        self._origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._upper_left = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._x_step = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._y_step = ti.Vector.field(3, dtype=ti.f32, shape=())

        self._origin[None] = list(camera.position)
        self._upper_left[None] = list(camera.upper_left)
        self._x_step[None] = list(camera.x_step)
        self._y_step[None] = list(camera.y_step)

        self._result_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._result_direction = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.func
    def primary_ray(self, col: ti.i32, row: ti.i32) -> Ray:
        """Generate the ray through pixel (col, row).

        Args:
            col: Pixel column (0 = left).
            row: Pixel row (0 = top).

        Returns:
            A Ray from the camera position toward the pixel's screen point.
        """
        pixel = (
            self._upper_left[None]
            + ti.cast(col, ti.f32) * self._x_step[None]
            + ti.cast(row, ti.f32) * self._y_step[None]
        )
        origin = self._origin[None]
        return Ray(origin=origin, direction=normalized(pixel - origin))

    @ti.kernel
    def _ray_kernel(self, col: ti.i32, row: ti.i32):
        ray = self.primary_ray(col, row)
        self._result_origin[None] = ray.origin
        self._result_direction[None] = ray.direction

    def ray_for_pixel(
        self, col: int, row: int
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Generate the primary ray for one pixel from Python.

        Useful for verifying camera setup.

        Returns:
            Tuple of (origin, direction).
        """
        self._ray_kernel(col, row)
        o = self._result_origin[None]
        d = self._result_direction[None]
        return (
            (float(o[0]), float(o[1]), float(o[2])),
            (float(d[0]), float(d[1]), float(d[2])),
        )
