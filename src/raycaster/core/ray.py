"""Ray and intersection record data structures.

This module provides the fundamental Ray dataclass and the Intersection record
shared by every primitive and by scene traversal. All structures are Taichi
dataclasses so they can be built and passed around inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

from typing import Any

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Rays built by the
            camera are normalized; primitives accept any non-zero length.
    """

    origin: vec3
    direction: vec3


@ti.dataclass
class Intersection:
    """Result of testing a ray against a primitive or a whole scene.

    Attributes:
        hit: 1 if the ray struck a surface, 0 otherwise. The remaining fields
            are only meaningful when hit == 1.
        distance: Ray parameter of the hit point (>= 0 along the ray).
        point: World-space hit point.
        normal: Unit surface normal at the hit point.
        color: Flat RGB color of the primitive that was hit, in [0, 1].
    """

    hit: ti.i32
    distance: ti.f32
    point: vec3
    normal: vec3
    color: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


@ti.func
def miss_intersection(distance: ti.f32) -> Intersection:
    """Create an Intersection indicating no hit.

    Args:
        distance: Value stored in the distance field. Primitives pass 0; the
            scene passes its t_max so the record doubles as the closest-hit
            sentinel.

    Returns:
        An Intersection with hit=0 and zeroed vectors.
    """
    return Intersection(
        hit=0,
        distance=distance,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        color=vec3(0.0, 0.0, 0.0),
    )


def as_vec3_tuple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a Python 3-component sequence to a tuple of floats.

    Raises:
        ValueError: If values does not hold exactly three numbers.
    """
    try:
        x, y, z = values
        return (float(x), float(y), float(z))
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must have exactly 3 numeric components, got {values!r}") from e
