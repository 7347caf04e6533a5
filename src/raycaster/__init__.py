"""Taichi-based ray caster.

This package renders scenes of planes and spheres by casting one primary ray
per pixel from a pinhole camera, with support for:
- Plane and sphere primitives with flat colors
- Closest-hit scene traversal
- Hit/miss rendering into a flat row-major RGB buffer
- PNG export and on-screen preview

Subpackages:
    core: Ray and intersection structures and the render loop
    geometry: Shape primitives and intersection algorithms
    scene: Scene storage, traversal and the reference scene
    camera: Pinhole camera with per-pixel ray generation
    preview: Image export and preview utilities
"""

__version__ = "0.1.0"
