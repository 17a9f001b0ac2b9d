"""Whitted-style tracer: local Blinn-Phong shading plus mirror bounces.

For each bounce the tracer finds the nearest sphere, offsets the hit point
along the normal, casts a shadow ray toward the light and, when the point is
lit, adds the attenuated local color and follows the mirror reflection.

The bounce loop is a small state machine:

    TRACING          keep bouncing
    MISSED           the ray left the scene
    SHADOWED         the hit point cannot see the light
    DEPTH_EXHAUSTED  max_depth bounces were shaded

MISSED and SHADOWED stop the whole trace and keep only the color gathered on
earlier bounces. A shadowed point adds no ambient term either.

Shading keeps the raw dot products: a negative diffuse cosine subtracts
color, and the specular cosine is raised to shininess / 4 without clamping.
Non-finite components are replaced with zero before the final [0, 1] clamp.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.tracer import Tracer
    >>> from spheretrace.scene.reference import create_reference_scene
    >>> tracer = Tracer(create_reference_scene())
    >>> result = tracer.trace_ray((0.0, 0.0, 1.0), (0.0, 0.0, -1.0))
"""

from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from spheretrace.core.vector import Ray, dot, element_wise_product, normalized, ray_at, reflected
from spheretrace.geometry.sphere import sphere_normal
from spheretrace.scene.buffers import SceneBuffers
from spheretrace.scene.model import Scene

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Tracing Constants
# =============================================================================

# Maximum number of shaded bounces per primary ray
MAX_DEPTH = 5

# Offset along the normal applied to hit points before casting new rays
SHADOW_EPSILON = 0.001


class TraceState(IntEnum):
    """State of the bounce loop."""

    TRACING = 0
    MISSED = 1
    SHADOWED = 2
    DEPTH_EXHAUSTED = 3


# Plain ints for use inside Taichi functions
TRACING = int(TraceState.TRACING)
MISSED = int(TraceState.MISSED)
SHADOWED = int(TraceState.SHADOWED)
DEPTH_EXHAUSTED = int(TraceState.DEPTH_EXHAUSTED)


@ti.dataclass
class TraceRecord:
    """Kernel-side result of tracing one ray.

    Attributes:
        color: Final color, clamped to [0, 1].
        state: Terminal state (MISSED, SHADOWED or DEPTH_EXHAUSTED).
        bounces: Number of bounces that contributed a local color.
    """

    color: vec3
    state: ti.i32
    bounces: ti.i32


@dataclass(frozen=True)
class TraceResult:
    """Python-side view of a TraceRecord.

    Attributes:
        color: Final (R, G, B) color in [0, 1].
        state: Why tracing stopped.
        bounces: Number of bounces that contributed a local color.
    """

    color: tuple[float, float, float]
    state: TraceState
    bounces: int


# =============================================================================
# Local Illumination
# =============================================================================


@ti.func
def blinn_phong(
    ambient: vec3,
    diffuse: vec3,
    specular: vec3,
    shininess: ti.f32,
    light_ambient: vec3,
    light_diffuse: vec3,
    light_specular: vec3,
    normal: vec3,
    to_light: vec3,
    to_camera: vec3,
) -> vec3:
    """Evaluate ambient + diffuse + specular for one lit surface point.

    Args:
        ambient: Material ambient color.
        diffuse: Material diffuse color.
        specular: Material specular color.
        shininess: Material shininess; the exponent used is shininess / 4.
        light_ambient: Light ambient intensity.
        light_diffuse: Light diffuse intensity.
        light_specular: Light specular intensity.
        normal: Unit surface normal.
        to_light: Unit direction from the point to the light.
        to_camera: Unit direction from the point to the camera.

    Returns:
        The unclamped local color.
    """
    color = element_wise_product(ambient, light_ambient)

    diffuse_factor = dot(to_light, normal)
    color += diffuse_factor * element_wise_product(diffuse, light_diffuse)

    half_vector = normalized(to_camera + to_light)
    specular_factor = dot(half_vector, normal) ** (shininess / 4.0)
    color += specular_factor * element_wise_product(specular, light_specular)

    return color


@ti.func
def finalize_color(color: vec3) -> vec3:
    """Replace NaN/Inf components with zero, then clamp to [0, 1]."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return tm.clamp(result, 0.0, 1.0)


# =============================================================================
# Tracer
# =============================================================================


@ti.data_oriented
class Tracer:
    """Traces rays through one scene.

    Attributes:
        scene: The SceneBuffers holding the uploaded scene.
        max_depth: Maximum number of shaded bounces per ray.
    """

    def __init__(self, scene: Scene | SceneBuffers, max_depth: int = MAX_DEPTH) -> None:
        """Create a tracer.

        Args:
            scene: A Scene (uploaded here) or already uploaded SceneBuffers.
            max_depth: Maximum number of shaded bounces per ray.

        Raises:
            ValueError: If max_depth is less than 1.
        """
        if max_depth < 1:
            raise ValueError(f"max_depth = {max_depth} must be at least 1")
        if not isinstance(scene, SceneBuffers):
            scene = SceneBuffers(scene)
        self.scene = scene
        self.max_depth = max_depth

        self._result_color = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._result_state = ti.field(dtype=ti.i32, shape=())
        self._result_bounces = ti.field(dtype=ti.i32, shape=())

    @ti.func
    def shade(self, index: ti.i32, normal: vec3, to_light: vec3, to_camera: vec3) -> vec3:
        """Local color of sphere ``index`` at a lit point."""
        return blinn_phong(
            self.scene.ambients[index],
            self.scene.diffuses[index],
            self.scene.speculars[index],
            self.scene.shininesses[index],
            self.scene.light_ambient[None],
            self.scene.light_diffuse[None],
            self.scene.light_specular[None],
            normal,
            to_light,
            to_camera,
        )

    @ti.func
    def trace(self, ray_origin: vec3, ray_direction: vec3) -> TraceRecord:
        """Trace one ray through the scene.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The direction of the ray (unit length).

        Returns:
            A TraceRecord with the clamped color and the terminal state.
        """
        origin = ray_origin
        direction = ray_direction
        color = vec3(0.0, 0.0, 0.0)
        attenuation = 1.0
        state = TRACING
        bounces = 0

        light_position = self.scene.light_position[None]
        camera_position = self.scene.camera_position[None]

        for _ in range(self.max_depth):
            if state == TRACING:
                rec = self.scene.nearest_hit(origin, direction)
                if rec.hit == 0:
                    state = MISSED
                else:
                    point = ray_at(Ray(origin=origin, direction=direction), rec.t)
                    normal = sphere_normal(point, self.scene.centers[rec.index])
                    shifted = point + SHADOW_EPSILON * normal
                    to_light = normalized(light_position - shifted)

                    if self.scene.occluded(shifted, to_light) == 1:
                        state = SHADOWED
                    else:
                        to_camera = normalized(camera_position - shifted)
                        color += attenuation * self.shade(rec.index, normal, to_light, to_camera)
                        attenuation *= self.scene.reflectivities[rec.index]
                        bounces += 1

                        origin = shifted
                        direction = reflected(direction, normal)

        if state == TRACING:
            state = DEPTH_EXHAUSTED

        return TraceRecord(color=finalize_color(color), state=state, bounces=bounces)

    @ti.kernel
    def _trace_kernel(self, ray_origin: vec3, ray_direction: vec3):
        # Single-iteration outer loop keeps the bounce loop serial
        for _ in range(1):
            rec = self.trace(ray_origin, ray_direction)
            self._result_color[None] = rec.color
            self._result_state[None] = rec.state
            self._result_bounces[None] = rec.bounces

    def trace_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> TraceResult:
        """Trace a single ray from Python.

        Useful for testing and debugging individual rays. For images use
        ``Renderer``, which traces every pixel in parallel.

        Args:
            origin: The ray origin.
            direction: The ray direction (unit length).

        Returns:
            The clamped color, terminal state and bounce count.
        """
        self._trace_kernel(vec3(*origin), vec3(*direction))
        c = self._result_color[None]
        return TraceResult(
            color=(float(c[0]), float(c[1]), float(c[2])),
            state=TraceState(int(self._result_state[None])),
            bounces=int(self._result_bounces[None]),
        )
