"""Taichi-side copy of a scene and the ray-scene queries that read it.

``SceneBuffers`` takes an immutable ``Scene`` and uploads it into Taichi
fields using a Structure-of-Arrays layout, one field per sphere attribute.
The fields belong to the instance rather than the module, so several scenes
can live side by side (for example an occluded and an unoccluded variant in
the same test).

Two queries run inside kernels:
    - ``nearest_hit``: closest sphere in front of the ray origin
    - ``occluded``: whether any sphere is hit at all (shadow rays)

``find_nearest`` and ``is_occluded`` wrap them for calls from Python.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.scene.buffers import SceneBuffers
    >>> from spheretrace.scene.reference import create_reference_scene
    >>> buffers = SceneBuffers(create_reference_scene())
    >>> hit = buffers.find_nearest((0.0, 0.0, 1.0), (0.0, 0.0, -1.0))
    >>> hit.sphere_index
    0
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from spheretrace.geometry.sphere import intersect_sphere
from spheretrace.scene.model import Scene

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHit:
    """Closest intersection of a ray with the scene.

    Attributes:
        hit: 1 if any sphere was hit, 0 otherwise.
        t: Distance along the ray to the hit point. Only valid if hit == 1.
        index: Index of the hit sphere in the scene. -1 if nothing was hit.
    """

    hit: ti.i32
    t: ti.f32
    index: ti.i32


@dataclass(frozen=True)
class HitInfo:
    """Python-side view of a scene hit.

    Attributes:
        t: Distance along the ray to the hit point.
        sphere_index: Index of the hit sphere in ``Scene.spheres``.
    """

    t: float
    sphere_index: int


@ti.data_oriented
class SceneBuffers:
    """A scene uploaded into Taichi fields.

    Attributes:
        scene: The immutable scene the buffers were built from.
    """

    def __init__(self, scene: Scene) -> None:
        """Allocate fields for the scene and copy its data in.

        Args:
            scene: The scene to upload. It may contain no spheres.
        """
        self.scene = scene
        # Taichi fields cannot be empty
        capacity = max(scene.sphere_count, 1)

        # Sphere storage: Structure of Arrays layout
        self.centers = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.radii = ti.field(dtype=ti.f32, shape=capacity)
        self.ambients = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.diffuses = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.speculars = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.shininesses = ti.field(dtype=ti.f32, shape=capacity)
        self.reflectivities = ti.field(dtype=ti.f32, shape=capacity)
        self.num_spheres = ti.field(dtype=ti.i32, shape=())

        # Light and camera
        self.light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.light_ambient = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.light_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.light_specular = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())

        # Results of the Python-callable query kernels
        self._query_hit = ti.field(dtype=ti.i32, shape=())
        self._query_t = ti.field(dtype=ti.f32, shape=())
        self._query_index = ti.field(dtype=ti.i32, shape=())

        self._upload(scene)

    def _upload(self, scene: Scene) -> None:
        for i, sphere in enumerate(scene.spheres):
            self.centers[i] = list(sphere.center)
            self.radii[i] = sphere.radius
            self.ambients[i] = list(sphere.ambient)
            self.diffuses[i] = list(sphere.diffuse)
            self.speculars[i] = list(sphere.specular)
            self.shininesses[i] = sphere.shininess
            self.reflectivities[i] = sphere.reflectivity
        self.num_spheres[None] = scene.sphere_count

        light = scene.light
        self.light_position[None] = list(light.position)
        self.light_ambient[None] = list(light.ambient)
        self.light_diffuse[None] = list(light.diffuse)
        self.light_specular[None] = list(light.specular)
        self.camera_position[None] = list(scene.camera)

    @property
    def sphere_count(self) -> int:
        """Number of spheres uploaded."""
        return int(self.num_spheres[None])

    # =========================================================================
    # Kernel-side queries
    # =========================================================================

    @ti.func
    def nearest_hit(self, ray_origin: vec3, ray_direction: vec3) -> SceneHit:
        """Find the closest sphere hit by a ray.

        Spheres are scanned in scene order and a later sphere replaces the
        current best only if it is strictly closer.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The direction of the ray (unit length).

        Returns:
            A SceneHit; hit == 0 when the ray escapes the scene.
        """
        result = SceneHit(hit=0, t=0.0, index=-1)
        for i in range(self.num_spheres[None]):
            rec = intersect_sphere(ray_origin, ray_direction, self.centers[i], self.radii[i])
            if rec.hit == 1:
                if result.hit == 0 or rec.t < result.t:
                    result = SceneHit(hit=1, t=rec.t, index=i)
        return result

    @ti.func
    def occluded(self, ray_origin: vec3, ray_direction: vec3) -> ti.i32:
        """Test whether any sphere lies on a ray (shadow ray query).

        There is no upper distance bound: a sphere behind the light still
        blocks it.

        Returns:
            1 if any sphere was hit, 0 otherwise.
        """
        blocked = 0
        for i in range(self.num_spheres[None]):
            if blocked == 0:
                rec = intersect_sphere(ray_origin, ray_direction, self.centers[i], self.radii[i])
                if rec.hit == 1:
                    blocked = 1
        return blocked

    # =========================================================================
    # Python-callable wrappers
    # =========================================================================

    @ti.kernel
    def _nearest_kernel(self, ray_origin: vec3, ray_direction: vec3):
        # Single-iteration outer loop keeps the sphere scan serial
        for _ in range(1):
            rec = self.nearest_hit(ray_origin, ray_direction)
            self._query_hit[None] = rec.hit
            self._query_t[None] = rec.t
            self._query_index[None] = rec.index

    @ti.kernel
    def _occluded_kernel(self, ray_origin: vec3, ray_direction: vec3):
        for _ in range(1):
            self._query_hit[None] = self.occluded(ray_origin, ray_direction)

    def find_nearest(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> HitInfo | None:
        """Find the closest sphere hit by a ray, from Python.

        Args:
            origin: The ray origin.
            direction: The ray direction (unit length).

        Returns:
            HitInfo for the closest hit, or None if the ray misses every sphere.
        """
        self._nearest_kernel(vec3(*origin), vec3(*direction))
        if self._query_hit[None] == 0:
            return None
        return HitInfo(t=float(self._query_t[None]), sphere_index=int(self._query_index[None]))

    def is_occluded(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> bool:
        """Test from Python whether any sphere lies on a ray."""
        self._occluded_kernel(vec3(*origin), vec3(*direction))
        return bool(self._query_hit[None])
