"""Unit tests for the Whitted-style tracer.

Tests cover:
- Blinn-Phong local shading, including the unclamped diffuse term
- Final color clamping
- Bounce-loop termination states (missed, shadowed, depth exhausted)
- Reflection attenuation
- Constructor validation

Note: Imports are done inside test methods so Taichi is initialized by the
conftest.py fixture before any Taichi code is touched.
"""

import pytest
import taichi as ti


def _blinn_phong(ambient, diffuse, shininess, normal, to_light, to_camera):
    """Evaluate blinn_phong in a kernel with white light and white specular."""
    from spheretrace.core.tracer import blinn_phong, vec3

    result = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(amb: vec3, diff: vec3, shin: ti.f32, n: vec3, tl: vec3, tc: vec3):
        white = vec3(1.0, 1.0, 1.0)
        result[None] = blinn_phong(amb, diff, white, shin, white, white, white, n, tl, tc)

    test_kernel(
        vec3(*ambient),
        vec3(*diffuse),
        shininess,
        vec3(*normal),
        vec3(*to_light),
        vec3(*to_camera),
    )
    r = result[None]
    return (r[0], r[1], r[2])


def _single_sphere_scene(light_position=(0.0, 0.0, 5.0), reflectivity=0.5):
    from spheretrace.scene.model import Light, Scene, Sphere

    return Scene(
        spheres=(
            Sphere(
                center=(0.0, 0.0, -2.0),
                radius=1.0,
                diffuse=(0.5, 0.5, 0.5),
                reflectivity=reflectivity,
            ),
        ),
        light=Light(position=light_position),
    )


class TestBlinnPhong:
    """Tests for the local shading model."""

    def test_head_on_light_and_camera(self):
        """Test full ambient + diffuse + specular when everything is aligned."""
        color = _blinn_phong(
            ambient=(0.01, 0.02, 0.03),
            diffuse=(0.1, 0.2, 0.3),
            shininess=100.0,
            normal=(0.0, 0.0, 1.0),
            to_light=(0.0, 0.0, 1.0),
            to_camera=(0.0, 0.0, 1.0),
        )

        assert color == pytest.approx((1.11, 1.22, 1.33), abs=1e-5)

    def test_light_behind_surface_subtracts_diffuse(self):
        """Test that a negative diffuse cosine is not clamped."""
        # to_camera + to_light is the zero vector, so the half vector is zero
        color = _blinn_phong(
            ambient=(0.01, 0.02, 0.03),
            diffuse=(0.1, 0.2, 0.3),
            shininess=100.0,
            normal=(0.0, 0.0, 1.0),
            to_light=(0.0, 0.0, -1.0),
            to_camera=(0.0, 0.0, 1.0),
        )

        assert color == pytest.approx((-0.09, -0.18, -0.27), abs=1e-5)

    def test_specular_exponent_is_quarter_shininess(self):
        """Test that the half-vector cosine is raised to shininess / 4."""
        # Grazing light: no diffuse term, half-vector cosine is 1/sqrt(2)
        color = _blinn_phong(
            ambient=(0.01, 0.02, 0.03),
            diffuse=(0.1, 0.2, 0.3),
            shininess=8.0,
            normal=(0.0, 0.0, 1.0),
            to_light=(1.0, 0.0, 0.0),
            to_camera=(0.0, 0.0, 1.0),
        )

        # (1/sqrt(2)) ** 2 == 0.5
        assert color == pytest.approx((0.51, 0.52, 0.53), abs=1e-5)


class TestFinalizeColor:
    """Tests for the final color clamp."""

    def test_clamps_to_unit_interval(self):
        """Test that out-of-range components are clamped."""
        from spheretrace.core.tracer import finalize_color, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = finalize_color(vec3(1.5, -0.25, 0.4))

        test_kernel()
        r = result[None]
        assert r[0] == 1.0
        assert r[1] == 0.0
        assert abs(r[2] - 0.4) < 1e-6


class TestTracerStates:
    """Tests for how the bounce loop terminates."""

    def test_miss_is_black(self):
        """Test that a ray missing everything returns black and MISSED."""
        from spheretrace.core.tracer import Tracer, TraceState

        tracer = Tracer(_single_sphere_scene())
        result = tracer.trace_ray((0.0, 0.0, 1.0), (0.0, 1.0, 0.0))

        assert result.state == TraceState.MISSED
        assert result.bounces == 0
        assert result.color == (0.0, 0.0, 0.0)

    def test_single_bounce_then_miss(self):
        """Test a lit hit followed by a reflected ray that escapes."""
        from spheretrace.core.tracer import Tracer, TraceState

        tracer = Tracer(_single_sphere_scene())
        result = tracer.trace_ray((0.0, 0.0, 1.0), (0.0, 0.0, -1.0))

        assert result.state == TraceState.MISSED
        assert result.bounces == 1
        # 0.05 ambient + 0.5 diffuse + 1.0 specular, clamped
        assert result.color == pytest.approx((1.0, 1.0, 1.0))

    def test_shadowed_first_hit_is_black(self):
        """Test that a shadowed first hit adds nothing, not even ambient."""
        from spheretrace.core.tracer import Tracer, TraceState
        from spheretrace.scene.model import Light, Scene, Sphere

        target = Sphere(center=(0.0, 0.0, -3.0), radius=1.0, diffuse=(0.8, 0.8, 0.8))
        occluder = Sphere(center=(0.0, 1.5, -1.0), radius=0.3, diffuse=(0.8, 0.8, 0.8))
        scene = Scene(spheres=(target, occluder), light=Light(position=(0.0, 3.0, 0.0)))

        tracer = Tracer(scene)
        result = tracer.trace_ray((0.0, 0.0, 1.0), (0.0, 0.0, -1.0))

        assert result.state == TraceState.SHADOWED
        assert result.bounces == 0
        assert result.color == (0.0, 0.0, 0.0)

    def test_removing_occluder_never_darkens(self):
        """Test that the unoccluded scene is at least as bright per component."""
        from spheretrace.core.tracer import Tracer, TraceState
        from spheretrace.scene.model import Light, Scene, Sphere

        target = Sphere(center=(0.0, 0.0, -3.0), radius=1.0, diffuse=(0.8, 0.8, 0.8))
        occluder = Sphere(center=(0.0, 1.5, -1.0), radius=0.3, diffuse=(0.8, 0.8, 0.8))
        scene = Scene(spheres=(target, occluder), light=Light(position=(0.0, 3.0, 0.0)))

        shadowed = Tracer(scene).trace_ray((0.0, 0.0, 1.0), (0.0, 0.0, -1.0))
        lit = Tracer(scene.without(1)).trace_ray((0.0, 0.0, 1.0), (0.0, 0.0, -1.0))

        assert lit.state == TraceState.MISSED
        assert lit.bounces == 1
        for s, l in zip(shadowed.color, lit.color):
            assert s <= l
        assert sum(lit.color) > 0.0

    @pytest.mark.parametrize("max_depth", [3, 5, 8])
    def test_facing_mirrors_exhaust_depth(self, facing_mirrors_scene, max_depth):
        """Test that a ray trapped between two spheres stops at max_depth."""
        from spheretrace.core.tracer import Tracer, TraceState

        tracer = Tracer(facing_mirrors_scene, max_depth=max_depth)
        result = tracer.trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert result.state == TraceState.DEPTH_EXHAUSTED
        assert result.bounces == max_depth

    def test_reference_scene_never_exceeds_max_depth(self, reference_scene):
        """Test bounce counts and color range for a fan of camera rays."""
        from spheretrace.camera.screen import ScreenCamera
        from spheretrace.core.tracer import MAX_DEPTH, Tracer

        camera = ScreenCamera(width=8, height=5)
        tracer = Tracer(reference_scene)

        for col in range(camera.width):
            for row in range(camera.height):
                result = tracer.trace_ray(camera.position, camera.ray_direction(col, row))
                assert 0 <= result.bounces <= MAX_DEPTH
                for c in result.color:
                    assert 0.0 <= c <= 1.0


class TestAttenuation:
    """Tests for reflectivity-weighted bounce contributions."""

    def test_zero_reflectivity_stops_contributing(self, facing_mirrors_scene):
        """Test that later bounces add nothing when reflectivity is zero."""
        from spheretrace.core.tracer import Tracer
        from spheretrace.scene.model import Scene, Sphere

        matte = Scene(
            spheres=tuple(
                Sphere(center=s.center, radius=s.radius, diffuse=s.diffuse, reflectivity=0.0)
                for s in facing_mirrors_scene.spheres
            ),
            light=facing_mirrors_scene.light,
        )

        one = Tracer(matte, max_depth=1).trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        five = Tracer(matte, max_depth=5).trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert five.color == pytest.approx(one.color, abs=1e-6)
        assert sum(one.color) > 0.0

    def test_reflections_add_color(self, facing_mirrors_scene):
        """Test that extra bounces brighten a partially reflective surface."""
        from spheretrace.core.tracer import Tracer

        one = Tracer(facing_mirrors_scene, max_depth=1).trace_ray(
            (0.0, 0.0, 0.0), (0.0, 0.0, -1.0)
        )
        five = Tracer(facing_mirrors_scene, max_depth=5).trace_ray(
            (0.0, 0.0, 0.0), (0.0, 0.0, -1.0)
        )

        assert five.color[0] > one.color[0]
        assert five.color[0] <= 1.0


class TestTracerConstruction:
    """Tests for Tracer construction."""

    def test_rejects_zero_depth(self, reference_scene):
        """Test that at least one bounce is required."""
        from spheretrace.core.tracer import Tracer

        with pytest.raises(ValueError, match="max_depth"):
            Tracer(reference_scene, max_depth=0)

    def test_accepts_uploaded_buffers(self, reference_scene):
        """Test that a Tracer can share already uploaded SceneBuffers."""
        from spheretrace.core.tracer import Tracer
        from spheretrace.scene.buffers import SceneBuffers

        buffers = SceneBuffers(reference_scene)
        tracer = Tracer(buffers)

        assert tracer.scene is buffers
        result = tracer.trace_ray((0.0, 0.0, 1.0), (0.0, 0.0, -1.0))
        assert result.bounces >= 1

    def test_trace_state_values(self):
        """Test the integer codes of the trace states."""
        from spheretrace.core.tracer import TraceState

        assert [int(s) for s in TraceState] == [0, 1, 2, 3]
