"""Ray data structure and vector utilities for the sphere tracer.

This module provides the Ray dataclass and the small set of vector helpers
used by the intersection and shading code. Vectors are Taichi's
``ti.math.vec3``, which already supplies ``+``, ``-``, scalar ``*`` in both
orders and element-wise ``*`` between two vectors. All helpers are Taichi
functions and must be called from inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.vector import normalized, reflected, vec3
    >>> @ti.kernel
    ... def bounce() -> vec3:
    ...     return reflected(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Expected to be
            normalized by the caller; this is not checked.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the right-handed cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def element_wise_product(a: vec3, b: vec3) -> vec3:
    """Multiply two vectors component by component.

    Used to tint a material color by a light intensity.
    """
    return vec3(a.x * b.x, a.y * b.y, a.z * b.z)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(dot(v, v))


@ti.func
def normalized(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Unlike ``tm.normalize`` this never divides by zero: a zero-length input
    returns the zero vector.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or (0, 0, 0) if v has zero length.
    """
    result = vec3(0.0, 0.0, 0.0)
    n = length(v)
    if n > 0.0:
        result = v / n
    return result


@ti.func
def reflected(v: vec3, axis: vec3) -> vec3:
    """Mirror a vector about an axis.

    Computes v - 2 * dot(v, axis) * axis. The axis must be unit length for
    the result to be a true reflection.

    Args:
        v: The incoming direction vector.
        axis: The mirror axis, usually a surface normal.

    Returns:
        The reflected vector.
    """
    return v - 2.0 * dot(v, axis) * axis
