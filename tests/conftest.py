"""Pytest configuration for spheretrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu)
    yield


@pytest.fixture
def reference_scene():
    """The four-sphere reference scene."""
    from spheretrace.scene.reference import create_reference_scene

    return create_reference_scene()


@pytest.fixture
def facing_mirrors_scene():
    """Two spheres facing each other along the z-axis, lit from the side.

    A ray fired from the origin along -z bounces between them forever, so the
    trace only stops when the depth limit is reached.
    """
    from spheretrace.scene.model import Light, Scene, Sphere

    return Scene(
        spheres=(
            Sphere(center=(0.0, 0.0, -3.0), radius=1.0, diffuse=(0.5, 0.5, 0.5)),
            Sphere(center=(0.0, 0.0, 3.0), radius=1.0, diffuse=(0.5, 0.5, 0.5)),
        ),
        light=Light(position=(5.0, 0.0, 0.0)),
    )
