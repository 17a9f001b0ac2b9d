"""Sphere primitive with ray-sphere intersection.

The intersection solves |origin + t * direction - center|^2 = radius^2 for a
unit-length direction:

    b = dot(direction, 2 * (origin - center))
    c = |origin - center|^2 - radius^2
    delta = b^2 - 4c

Only the smaller root is kept, and only when both roots lie in front of the
origin: t = min(max(0, t1), max(0, t2)) must be strictly positive. Hits behind
the origin or exactly at it are ignored, which is what keeps shadow and
reflection rays leaving a surface from hitting that surface again. This is
not a general ray-sphere solver: a ray starting inside a sphere never hits it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.geometry.sphere import intersect_sphere, vec3
    >>> @ti.kernel
    ... def distance() -> ti.f32:
    ...     rec = intersect_sphere(vec3(0, 0, 5), vec3(0, 0, -1), vec3(0, 0, 0), 1.0)
    ...     return rec.t
"""

import taichi as ti
import taichi.math as tm

from spheretrace.core.vector import dot, length_squared, normalized

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SphereHit:
    """Result of a ray-sphere intersection query.

    Attributes:
        hit: 1 if the ray hit the sphere in front of its origin, 0 otherwise.
        t: Distance along the ray to the hit point. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32


@ti.func
def intersect_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
) -> SphereHit:
    """Test a ray against a single sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (unit length).
        center: The center of the sphere.
        radius: The radius of the sphere.

    Returns:
        A SphereHit; check the hit field before reading t.
    """
    oc = ray_origin - center
    b = dot(ray_direction, 2.0 * oc)
    c = length_squared(oc) - radius * radius
    delta = b * b - 4.0 * c

    did_hit = 0
    hit_t = 0.0

    if delta > 0.0:
        sqrt_delta = ti.sqrt(delta)
        t1 = (-b + sqrt_delta) / 2.0
        t2 = (-b - sqrt_delta) / 2.0
        t = ti.min(ti.max(0.0, t1), ti.max(0.0, t2))
        if t > 0.0:
            did_hit = 1
            hit_t = t

    return SphereHit(hit=did_hit, t=hit_t)


@ti.func
def sphere_normal(point: vec3, center: vec3) -> vec3:
    """Outward unit normal of a sphere at a surface point."""
    return normalized(point - center)
