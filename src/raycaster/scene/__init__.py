"""Scene module for primitive storage and ray traversal.

Components:
    scene: Scene container with closest-hit traversal and JSON serialization
    reference: Factory for the reference ground-plane-and-spheres scene

The scene module manages:
    - Plane and sphere storage in per-scene Taichi fields
    - Closest-hit queries from kernels (Scene.trace) and Python (Scene.cast)
    - Export and import of scene descriptions as dictionaries or JSON files
"""

from .reference import (
    REFERENCE_HEIGHT,
    REFERENCE_SPHERES,
    REFERENCE_WIDTH,
    ReferenceCameraParams,
    create_reference_camera,
    create_reference_scene,
    populate_reference_scene,
)
from .scene import (
    MAX_PLANES,
    MAX_SPHERES,
    HitInfo,
    PlaneInfo,
    Scene,
    SceneConfig,
    SphereInfo,
    load_scene,
    save_scene,
)

__all__ = [
    # Scene module
    "Scene",
    "SceneConfig",
    "PlaneInfo",
    "SphereInfo",
    "HitInfo",
    "MAX_PLANES",
    "MAX_SPHERES",
    "load_scene",
    "save_scene",
    # Reference scene module
    "create_reference_scene",
    "create_reference_camera",
    "populate_reference_scene",
    "ReferenceCameraParams",
    "REFERENCE_SPHERES",
    "REFERENCE_WIDTH",
    "REFERENCE_HEIGHT",
]
