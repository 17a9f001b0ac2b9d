"""Immutable scene description: spheres, one point light and a camera position.

The scene is plain Python data. It is built once, never mutated, and handed
to ``SceneBuffers`` which copies it into Taichi fields for the kernels. Keeping
it a value (rather than module-level state) lets tests build small scenes of
their own and render several scenes side by side.

Example:
    >>> from spheretrace.scene.model import Light, Scene, Sphere
    >>> ball = Sphere(center=(0.0, 0.0, -1.0), radius=0.5, diffuse=(0.7, 0.0, 0.0))
    >>> scene = Scene(spheres=(ball,), light=Light(position=(5.0, 5.0, 5.0)))
    >>> ball.specular
    (1.0, 1.0, 1.0)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

Color = tuple[float, float, float]
Point = tuple[float, float, float]

WHITE: Color = (1.0, 1.0, 1.0)

# Ambient color is this fraction of the diffuse color
AMBIENT_FACTOR = 0.1

DEFAULT_CAMERA_POSITION: Point = (0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Sphere:
    """A sphere with a Blinn-Phong material.

    Attributes:
        center: The center of the sphere as (x, y, z).
        radius: The radius of the sphere. Must be positive.
        diffuse: The diffuse color as (R, G, B).
        shininess: Specular exponent. Must be positive; the shading model
            raises the half-vector cosine to shininess / 4.
        reflectivity: Fraction of reflected light carried to the next bounce,
            in [0, 1].
    """

    center: Point
    radius: float
    diffuse: Color
    shininess: float = 100.0
    reflectivity: float = 0.5

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius = {self.radius} must be positive.")
        if self.shininess <= 0.0:
            raise ValueError(f"Shininess = {self.shininess} must be positive.")
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"Reflectivity = {self.reflectivity} is outside [0, 1].")

    @property
    def ambient(self) -> Color:
        """Ambient color, derived from the diffuse color."""
        r, g, b = self.diffuse
        return (AMBIENT_FACTOR * r, AMBIENT_FACTOR * g, AMBIENT_FACTOR * b)

    @property
    def specular(self) -> Color:
        """Specular color, always white."""
        return WHITE


@dataclass(frozen=True)
class Light:
    """A point light.

    Attributes:
        position: World-space position of the light.
        ambient: Ambient intensity (RGB).
        diffuse: Diffuse intensity (RGB).
        specular: Specular intensity (RGB).
    """

    position: Point
    ambient: Color = WHITE
    diffuse: Color = WHITE
    specular: Color = WHITE


@dataclass(frozen=True)
class Scene:
    """An ordered collection of spheres, a single light and the camera position.

    Sphere order matters only for ties: when two spheres are hit at exactly
    the same distance the earlier one wins.

    Attributes:
        spheres: The spheres in the scene.
        light: The point light.
        camera: The camera (eye) position, also used as the viewer position
            for specular highlights on every bounce.
    """

    spheres: tuple[Sphere, ...] = field(default_factory=tuple)
    light: Light = field(default_factory=lambda: Light(position=(5.0, 5.0, 5.0)))
    camera: Point = DEFAULT_CAMERA_POSITION

    def __post_init__(self) -> None:
        # Accept any iterable of spheres but store a tuple
        object.__setattr__(self, "spheres", tuple(self.spheres))

    @property
    def sphere_count(self) -> int:
        """Number of spheres in the scene."""
        return len(self.spheres)

    def without(self, index: int) -> Scene:
        """Return a copy of the scene with the sphere at ``index`` removed."""
        if not 0 <= index < len(self.spheres):
            raise IndexError(f"Sphere index {index} out of range")
        spheres = self.spheres[:index] + self.spheres[index + 1 :]
        return replace(self, spheres=spheres)
