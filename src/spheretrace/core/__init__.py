"""Core rendering module.

Components:
    vector: Ray dataclass and vector utilities (Taichi functions)
    tracer: Blinn-Phong shading and the reflection bounce loop
    renderer: Raster ownership, kernel dispatch and progress reporting

All compute-intensive operations use Taichi kernels.
"""

from .vector import (
    Ray,
    cross,
    dot,
    element_wise_product,
    length,
    length_squared,
    normalized,
    ray_at,
    reflected,
    vec3,
)

# Note: tracer and renderer are NOT imported here to avoid circular imports.
# Import directly from spheretrace.core.tracer or spheretrace.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "vec3",
    "dot",
    "cross",
    "element_wise_product",
    "length",
    "length_squared",
    "normalized",
    "reflected",
]
