"""Scene module: scene description and ray-scene queries.

Components:
    model: Immutable Sphere, Light and Scene dataclasses
    reference: The hard-coded four-sphere reference scene
    buffers: Taichi fields holding an uploaded scene, with nearest-hit and
        shadow queries
"""

from .buffers import HitInfo, SceneBuffers, SceneHit
from .model import AMBIENT_FACTOR, DEFAULT_CAMERA_POSITION, Light, Scene, Sphere
from .reference import LIGHT_POSITION, create_reference_scene

__all__ = [
    # Model
    "Sphere",
    "Light",
    "Scene",
    "AMBIENT_FACTOR",
    "DEFAULT_CAMERA_POSITION",
    # Reference scene
    "create_reference_scene",
    "LIGHT_POSITION",
    # Buffers
    "SceneBuffers",
    "SceneHit",
    "HitInfo",
]
