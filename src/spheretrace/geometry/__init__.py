"""Geometry module for the sphere primitive.

Components:
    sphere: SphereHit record, ray-sphere intersection and surface normals

Intersection routines are Taichi functions (@ti.func) meant to be called
from kernels.
"""

from .sphere import SphereHit, intersect_sphere, sphere_normal

__all__ = [
    "SphereHit",
    "intersect_sphere",
    "sphere_normal",
]
