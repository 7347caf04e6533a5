"""Geometry module for analytic shape primitives.

Components:
    plane: Infinite plane with ray-plane intersection
    sphere: Sphere with near-root ray-sphere intersection

Every primitive carries a flat color and exposes one intersection routine
with the same contract, implemented as a Taichi function (@ti.func):

    record = intersect_shape(ray, shape)

The returned Intersection has hit == 0 on a miss; distance, point, normal and
color are only meaningful when hit == 1.
"""

from .plane import Plane, intersect_plane
from .sphere import Sphere, intersect_sphere

__all__ = [
    "Plane",
    "intersect_plane",
    "Sphere",
    "intersect_sphere",
]
