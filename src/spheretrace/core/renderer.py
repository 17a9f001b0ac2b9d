"""Renderer owning the color raster and driving the tracing kernels.

The raster is a Taichi vector field of shape (height, width), addressed as
(row, col). Pixels are independent, so each kernel launch traces a block of
columns in parallel. The host walks the columns left to right in batches,
which gives the same column-by-column progress as a sequential renderer
while the per-pixel results stay identical.

The class supports:
- Full renders with an optional progress callback
- Generator-based rendering that yields after each column batch
- Export of the raster as a NumPy array or a P6 pixmap

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.renderer import Renderer, RenderSettings
    >>> from spheretrace.scene.reference import create_reference_scene
    >>>
    >>> renderer = Renderer(create_reference_scene(), RenderSettings(width=320, height=180))
    >>> renderer.render()
    >>> renderer.save_image("out.ppm")
"""

from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from spheretrace.camera.screen import DEFAULT_HEIGHT, DEFAULT_WIDTH, ScreenCamera, ScreenSampler
from spheretrace.core.tracer import MAX_DEPTH, Tracer
from spheretrace.scene.model import Scene

# Type alias for 3D vectors
vec3 = tm.vec3

# Type alias for progress callback
# Callback receives (columns_done, total_columns)
ProgressCallback = Callable[[int, int], None]

# Columns traced per kernel launch when reporting progress
DEFAULT_COLUMNS_PER_UPDATE = 16


@dataclass(frozen=True)
class RenderSettings:
    """Configuration for a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of shaded bounces per primary ray.
        columns_per_update: Columns traced between progress reports.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    max_depth: int = MAX_DEPTH
    columns_per_update: int = DEFAULT_COLUMNS_PER_UPDATE

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) must be positive"
            )
        if self.max_depth < 1:
            raise ValueError(f"max_depth = {self.max_depth} must be at least 1")
        if self.columns_per_update < 1:
            raise ValueError(
                f"columns_per_update = {self.columns_per_update} must be at least 1"
            )


@ti.data_oriented
class Renderer:
    """Renders one scene into a (row, col) color raster.

    Attributes:
        settings: The render configuration.
        camera: The camera derived from the scene and settings.
    """

    def __init__(self, scene: Scene, settings: RenderSettings | None = None) -> None:
        """Upload the scene and allocate the raster.

        Args:
            scene: The scene to render.
            settings: Render configuration. Defaults to RenderSettings().
        """
        self.settings = settings if settings is not None else RenderSettings()
        self.camera = ScreenCamera(
            width=self.settings.width,
            height=self.settings.height,
            position=scene.camera,
        )
        self.sampler = ScreenSampler(self.camera)
        self.tracer = Tracer(scene, max_depth=self.settings.max_depth)

        self.raster = ti.Vector.field(3, dtype=ti.f32, shape=(self.height, self.width))
        self._columns_done = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    @property
    def columns_done(self) -> int:
        """Number of columns traced since the last reset."""
        return self._columns_done

    @property
    def is_complete(self) -> bool:
        """Whether every column has been traced."""
        return self._columns_done >= self.width

    @ti.kernel
    def _render_columns(self, start: ti.i32, stop: ti.i32):
        """Trace every pixel in columns [start, stop)."""
        for col, row in ti.ndrange((start, stop), self.height):
            ray = self.sampler.primary_ray(col, row)
            rec = self.tracer.trace(ray.origin, ray.direction)
            self.raster[row, col] = rec.color

    def reset(self) -> None:
        """Clear the raster to black for a fresh render."""
        self.raster.fill(0.0)
        self._columns_done = 0

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render the remaining columns, yielding progress after each batch.

        Yields:
            Tuple of (columns_done, total_columns).

        Example:
            >>> for done, total in renderer.render_progressive():
            ...     print(f"{100 * done // total}%")
        """
        total = self.width
        while self._columns_done < total:
            start = self._columns_done
            stop = min(start + self.settings.columns_per_update, total)
            self._render_columns(start, stop)
            self._columns_done = stop
            yield (stop, total)

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render the whole image.

        Starts over if a previous render completed.

        Args:
            callback: Optional function called after each column batch with
                (columns_done, total_columns).
        """
        if self.is_complete:
            self.reset()
        for done, total in self.render_progressive():
            if callback is not None:
                callback(done, total)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the raster as a NumPy array.

        Returns:
            Array of shape (height, width, 3), dtype float32, row 0 at the top,
            every component in [0, 1].
        """
        return self.raster.to_numpy().astype(np.float32)

    def get_pixel(self, col: int, row: int) -> tuple[float, float, float]:
        """Get one pixel color from the raster."""
        c = self.raster[row, col]
        return (float(c[0]), float(c[1]), float(c[2]))

    def save_image(self, filepath: str | Path) -> Path:
        """Write the raster to a binary P6 pixmap.

        Args:
            filepath: Output path.

        Returns:
            The path written.
        """
        from spheretrace.output.pixmap import save_ppm

        return save_ppm(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self.settings.max_depth}, columns_done={self.columns_done})"
        )
