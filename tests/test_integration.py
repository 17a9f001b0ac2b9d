"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from the reference scene through the
written pixmap. It verifies that all components work together and that the
output file has the expected layout.

Tests are designed to be fast (low resolution) while still exercising the
full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Reference image directory
REFERENCE_DIR = Path(__file__).parent / "reference"

# Reference scene at 4x3, row by row from the top
REFERENCE_4X3_PIXELS = [
    [(0, 0, 0), (0, 0, 0), (0, 0, 0), (0, 0, 0)],
    [(0, 0, 0), (0, 0, 0), (230, 45, 45), (0, 0, 0)],
    [(89, 89, 89), (0, 0, 0), (133, 54, 54), (106, 106, 106)],
]


class TestReferenceSceneIntegration:
    """Integration tests for rendering the reference scene."""

    def test_end_to_end_writes_pixmap(self, tmp_path: Path) -> None:
        """Test that a 4x3 render produces a 47-byte P6 file."""
        from spheretrace.core.renderer import Renderer, RenderSettings
        from spheretrace.scene.reference import create_reference_scene

        renderer = Renderer(create_reference_scene(), RenderSettings(width=4, height=3))
        renderer.render()
        output = renderer.save_image(tmp_path / "out.ppm")

        data = output.read_bytes()
        assert data.startswith(b"P6\n4 3\n255\n")
        assert len(data) == 11 + 4 * 3 * 3

    def test_matches_pinned_reference_pixels(self, tmp_path: Path) -> None:
        """Test the 4x3 payload against known-good bytes."""
        from spheretrace.core.renderer import Renderer, RenderSettings
        from spheretrace.scene.reference import create_reference_scene

        renderer = Renderer(create_reference_scene(), RenderSettings(width=4, height=3))
        renderer.render()
        data = renderer.save_image(tmp_path / "out.ppm").read_bytes()

        header = b"P6\n4 3\n255\n"
        expected = bytes(
            component
            for row in REFERENCE_4X3_PIXELS
            for pixel in row
            for component in pixel
        )
        assert data == header + expected

    def test_output_is_deterministic(self, tmp_path: Path) -> None:
        """Test that two independent renders write identical files."""
        from spheretrace.core.renderer import Renderer, RenderSettings
        from spheretrace.scene.reference import create_reference_scene

        settings = RenderSettings(width=24, height=16, columns_per_update=5)
        first = Renderer(create_reference_scene(), settings)
        second = Renderer(create_reference_scene(), settings)
        first.render()
        second.render()

        a = first.save_image(tmp_path / "a.ppm").read_bytes()
        b = second.save_image(tmp_path / "b.ppm").read_bytes()
        assert a == b

    def test_file_matches_raster(self, tmp_path: Path) -> None:
        """Test that the written bytes are the truncated raster values."""
        from spheretrace.core.renderer import Renderer, RenderSettings
        from spheretrace.scene.reference import create_reference_scene

        renderer = Renderer(create_reference_scene(), RenderSettings(width=16, height=9))
        renderer.render()
        path = renderer.save_image(tmp_path / "out.ppm")

        expected = (renderer.get_image_numpy() * 255).astype(np.uint8)
        with Image.open(path) as img:
            written = np.asarray(img)
        np.testing.assert_array_equal(written, expected)

    def test_red_sphere_at_screen_center(self) -> None:
        """Test that the center pixel sees the red sphere."""
        from spheretrace.core.renderer import Renderer, RenderSettings
        from spheretrace.scene.reference import create_reference_scene

        renderer = Renderer(create_reference_scene(), RenderSettings(width=16, height=9))
        renderer.render()

        hit = renderer.tracer.scene.find_nearest(*renderer.sampler.ray_for_pixel(8, 4))
        assert hit is not None
        assert hit.sphere_index == 0

        r, g, b = renderer.get_pixel(8, 4)
        assert r > g
        assert r > 0.0

    def test_sky_pixels_are_black(self) -> None:
        """Test that rays escaping the scene at the top edge stay black."""
        from spheretrace.core.renderer import Renderer, RenderSettings
        from spheretrace.scene.reference import create_reference_scene

        renderer = Renderer(create_reference_scene(), RenderSettings(width=16, height=9))
        renderer.render()

        # Top-right corner looks up and away from every sphere
        assert renderer.tracer.scene.find_nearest(*renderer.sampler.ray_for_pixel(15, 0)) is None
        assert renderer.get_pixel(15, 0) == (0.0, 0.0, 0.0)

    def test_floor_visible_at_bottom(self) -> None:
        """Test that the bottom row sees the floor sphere somewhere."""
        from spheretrace.core.renderer import Renderer, RenderSettings
        from spheretrace.scene.reference import create_reference_scene

        renderer = Renderer(create_reference_scene(), RenderSettings(width=16, height=9))
        hits = [
            renderer.tracer.scene.find_nearest(*renderer.sampler.ray_for_pixel(col, 8))
            for col in range(16)
        ]

        assert any(h is not None and h.sphere_index == 3 for h in hits)


@pytest.mark.slow
class TestHighQualityRender:
    """Higher resolution render tests (marked slow for optional execution)."""

    def test_reference_render(self) -> None:
        """Render a reference image for visual inspection.

        This test renders at a higher resolution and saves to the reference
        directory. Run with: pytest -m slow tests/test_integration.py
        """
        from spheretrace.core.renderer import Renderer, RenderSettings
        from spheretrace.scene.reference import create_reference_scene

        renderer = Renderer(create_reference_scene(), RenderSettings(width=320, height=180))
        renderer.render()

        REFERENCE_DIR.mkdir(parents=True, exist_ok=True)
        output_path = renderer.save_image(REFERENCE_DIR / "reference_scene.ppm")

        assert output_path.exists()
        image = renderer.get_image_numpy()
        assert not np.any(np.isnan(image))
        assert np.sum(image) > 0
