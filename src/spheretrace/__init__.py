"""Whitted-style sphere ray tracer built on Taichi.

This package renders a small scene of spheres lit by one point light and
writes the result as a binary P6 pixmap. It provides:
- Ray-sphere intersection with self-intersection avoidance
- Blinn-Phong shading with binary shadows
- Iterative mirror reflections up to a fixed depth
- Deterministic one-ray-per-pixel rendering

Subpackages:
    core: Vector utilities, the tracer and the renderer
    geometry: Sphere intersection
    scene: Immutable scene model, reference scene and Taichi scene buffers
    camera: Screen-plane camera and primary ray generation
    output: P6 pixmap export
"""

__version__ = "0.1.0"
