"""The reference scene: four spheres on a huge floor sphere, one white light.

Layout:
- Large red sphere behind the screen plane
- Small magenta and green spheres just in front of it
- A sphere of radius ~9000 whose top sits at y = -0.7, acting as the floor
- Point light up and to the right at (5, 5, 5)
- Camera at (0, 0, 1) looking down -z through the screen plane z = 0

Every sphere uses shininess 100 and reflectivity 0.5.
"""

from spheretrace.scene.model import DEFAULT_CAMERA_POSITION, Light, Scene, Sphere

LIGHT_POSITION = (5.0, 5.0, 5.0)

FLOOR_RADIUS = 9000.0
FLOOR_TOP = -0.7

REFERENCE_SHININESS = 100.0
REFERENCE_REFLECTIVITY = 0.5


def create_reference_scene() -> Scene:
    """Build the hard-coded reference scene.

    Returns:
        A new immutable Scene.
    """
    spheres = (
        Sphere(
            center=(-0.2, 0.0, -1.0),
            radius=0.7,
            diffuse=(0.7, 0.0, 0.0),
            shininess=REFERENCE_SHININESS,
            reflectivity=REFERENCE_REFLECTIVITY,
        ),
        Sphere(
            center=(0.1, -0.3, 0.0),
            radius=0.1,
            diffuse=(0.7, 0.0, 0.7),
            shininess=REFERENCE_SHININESS,
            reflectivity=REFERENCE_REFLECTIVITY,
        ),
        Sphere(
            center=(-0.3, 0.0, 0.0),
            radius=0.15,
            diffuse=(0.0, 0.6, 0.0),
            shininess=REFERENCE_SHININESS,
            reflectivity=REFERENCE_REFLECTIVITY,
        ),
        Sphere(
            center=(0.0, -FLOOR_RADIUS, 0.0),
            radius=FLOOR_RADIUS + FLOOR_TOP,
            diffuse=(0.6, 0.6, 0.6),
            shininess=REFERENCE_SHININESS,
            reflectivity=REFERENCE_REFLECTIVITY,
        ),
    )
    return Scene(
        spheres=spheres,
        light=Light(position=LIGHT_POSITION),
        camera=DEFAULT_CAMERA_POSITION,
    )
