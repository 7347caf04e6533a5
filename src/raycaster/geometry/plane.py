"""Infinite plane primitive with ray-plane intersection.

A plane is defined by:
- point: Any point lying on the plane
- normal: The unit normal of the plane
- color: A flat RGB color

The normal is taken as given. It is neither renormalized nor flipped to face
the incoming ray; callers that need a front-facing normal flip it themselves
when dot(normal, direction) > 0.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.geometry.plane import Plane, intersect_plane
    >>> # Ground plane at y=-2
    >>> ground = Plane(
    ...     point=ti.math.vec3(0, -2, 0),
    ...     normal=ti.math.vec3(0, 1, 0),
    ...     color=ti.math.vec3(0.5, 0.5, 0.5),
    ... )
    >>> # Use intersect_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from raycaster.core.ray import Intersection, Ray, miss_intersection, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Rays with |dot(normal, direction)| at or below this are treated as parallel
PARALLEL_EPSILON = 1e-6


@ti.dataclass
class Plane:
    """An infinite plane defined by a point, a unit normal and a flat color.

    Attributes:
        point: A point on the plane (vec3).
        normal: Unit normal of the plane (vec3).
        color: Flat RGB color in [0, 1] (vec3).
    """

    point: vec3
    normal: vec3
    color: vec3


@ti.func
def intersect_plane(ray: Ray, plane: Plane) -> Intersection:
    """Test a ray against a plane.

    The ray-plane intersection is found by solving:
        dot(origin + t * direction - point, normal) = 0
    which gives:
        t = dot(point - origin, normal) / dot(normal, direction)

    Args:
        ray: The ray to test (direction need not be normalized).
        plane: The plane to test against.

    Returns:
        An Intersection carrying the plane's own normal on a hit. Parallel
        rays and hits at t <= 0 produce a miss record.
    """
    result = miss_intersection(0.0)

    denom = tm.dot(plane.normal, ray.direction)

    # Ray not parallel to plane
    if ti.abs(denom) > PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray.origin, plane.normal) / denom

        # Only hits in front of the ray origin count
        if t > 0.0:
            result = Intersection(
                hit=1,
                distance=t,
                point=ray_at(ray, t),
                normal=plane.normal,
                color=plane.color,
            )

    return result
