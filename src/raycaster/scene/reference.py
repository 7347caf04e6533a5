"""Reference scene and camera configuration.

This module provides a factory for the reference scene: a grey ground plane
with three spheres lined up in front of a camera at the origin.

The reference scene consists of:
- Ground plane at y = -2 with normal +Y (grey)
- Left sphere at (-4, 0, -7), radius 1 (red)
- Centre sphere at (0, 0, -7), radius 2 (green)
- Right sphere at (4, 0, -7), radius 1 (blue)

The camera sits at the origin with an axis-aligned basis, looking down -Z
through a 0.2 x 0.2 image plane at distance 0.1, rendering 512 x 512 pixels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.scene.reference import create_reference_scene
    >>> from raycaster.core.renderer import render
    >>>
    >>> scene, camera = create_reference_scene()
    >>> buffer = render(scene, camera)
    >>> buffer.shape
    (786432,)
"""

from dataclasses import dataclass

from raycaster.camera.pinhole import PinholeCamera
from raycaster.scene.scene import Scene

# =============================================================================
# Reference Scene Constants
# =============================================================================

GROUND_POINT = (0.0, -2.0, 0.0)
GROUND_NORMAL = (0.0, 1.0, 0.0)
GROUND_COLOR = (0.5, 0.5, 0.5)

# (center, radius, color)
REFERENCE_SPHERES = (
    ((-4.0, 0.0, -7.0), 1.0, (1.0, 0.0, 0.0)),
    ((0.0, 0.0, -7.0), 2.0, (0.0, 1.0, 0.0)),
    ((4.0, 0.0, -7.0), 1.0, (0.0, 0.0, 1.0)),
)

REFERENCE_WIDTH = 512
REFERENCE_HEIGHT = 512


# =============================================================================
# Camera Parameters
# =============================================================================


@dataclass(frozen=True)
class ReferenceCameraParams:
    """Parameters of the reference pinhole camera.

    All defaults match the reference configuration. The resolution can be
    overridden to render the same view at a different size.

    Attributes:
        eye: Camera position.
        u, v, w: Axis-aligned camera basis (right, up, back).
        left, right, bottom, top: Image-plane bounds.
        focal_distance: Eye to image-plane distance.
        width, height: Output resolution in pixels.
    """

    eye: tuple[float, float, float] = (0.0, 0.0, 0.0)
    u: tuple[float, float, float] = (1.0, 0.0, 0.0)
    v: tuple[float, float, float] = (0.0, 1.0, 0.0)
    w: tuple[float, float, float] = (0.0, 0.0, 1.0)
    left: float = -0.1
    right: float = 0.1
    bottom: float = -0.1
    top: float = 0.1
    focal_distance: float = 0.1
    width: int = REFERENCE_WIDTH
    height: int = REFERENCE_HEIGHT


# =============================================================================
# Reference Scene Factory
# =============================================================================


def create_reference_camera(params: ReferenceCameraParams | None = None) -> PinholeCamera:
    """Create the reference pinhole camera.

    Args:
        params: Optional camera parameters. Defaults to ReferenceCameraParams().

    Returns:
        A PinholeCamera configured for the reference view.
    """
    if params is None:
        params = ReferenceCameraParams()

    return PinholeCamera(
        eye=params.eye,
        u=params.u,
        v=params.v,
        w=params.w,
        left=params.left,
        right=params.right,
        bottom=params.bottom,
        top=params.top,
        focal_distance=params.focal_distance,
        nx=params.width,
        ny=params.height,
    )


def populate_reference_scene(scene: Scene) -> Scene:
    """Add the reference ground plane and spheres to a scene.

    Args:
        scene: The scene to fill. Existing primitives are kept.

    Returns:
        The same scene, for chaining.
    """
    scene.add_plane(GROUND_POINT, GROUND_NORMAL, color=GROUND_COLOR)
    for center, radius, color in REFERENCE_SPHERES:
        scene.add_sphere(center, radius, color=color)
    return scene


def create_reference_scene(
    width: int = REFERENCE_WIDTH,
    height: int = REFERENCE_HEIGHT,
) -> tuple[Scene, PinholeCamera]:
    """Create the reference scene and camera.

    Args:
        width: Output width in pixels. Default is 512.
        height: Output height in pixels. Default is 512.

    Returns:
        A tuple of (Scene, PinholeCamera) where:
        - Scene holds one ground plane and three spheres
        - PinholeCamera is the reference camera at the requested resolution

    Example:
        >>> scene, camera = create_reference_scene()
        >>> scene.plane_count, scene.sphere_count
        (1, 3)
    """
    scene = populate_reference_scene(Scene())
    camera = create_reference_camera(ReferenceCameraParams(width=width, height=height))
    return scene, camera
