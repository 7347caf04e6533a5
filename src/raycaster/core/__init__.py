"""Core rendering module.

This module contains the fundamental building blocks for ray casting:

Components:
    ray: Ray and Intersection data structures
    renderer: Per-pixel render loop producing the flat RGB output buffer

Every pixel is resolved by a single primary ray: a hit on any primitive is
written as white, a miss as black. The render loop runs as a Taichi kernel,
so pixels are processed in parallel while each pixel writes its own slots of
the output buffer.
"""

from .ray import Intersection, Ray, as_vec3_tuple, make_ray, miss_intersection, ray_at, vec3

# Note: renderer is NOT imported here to avoid circular imports.
# Import directly from raycaster.core.renderer when needed.

__all__ = [
    "Ray",
    "Intersection",
    "ray_at",
    "make_ray",
    "miss_intersection",
    "vec3",
    "as_vec3_tuple",
]
