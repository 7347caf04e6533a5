"""Sphere primitive with near-root ray-sphere intersection.

The ray-sphere intersection is found by solving the classic quadratic
    |origin + t * direction - center|^2 = radius^2

Only the near root is ever reported. A ray whose near root lies behind its
origin misses the sphere even when the far root is ahead, which means a ray
starting inside a sphere never sees it. Scenes are expected to keep the
camera outside every sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -7), radius=2.0,
    ...                 color=ti.math.vec3(0, 1, 0))
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from raycaster.core.ray import Intersection, Ray, miss_intersection, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and flat color.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        color: Flat RGB color in [0, 1] (vec3).
    """

    center: vec3
    radius: ti.f32
    color: vec3


@ti.func
def intersect_sphere(ray: Ray, sphere: Sphere) -> Intersection:
    """Test a ray against a sphere.

    Computes:
        oc = origin - center
        a = dot(direction, direction)
        b = 2 * dot(oc, direction)
        c = dot(oc, oc) - radius^2
        discriminant = b^2 - 4ac

    A discriminant <= 0 is a miss, so tangent rays do not count as hits.
    Otherwise t = (-b - sqrt(discriminant)) / 2a must be positive.

    Args:
        ray: The ray to test (direction need not be normalized).
        sphere: The sphere to test against.

    Returns:
        An Intersection with the outward unit normal on a hit, or a miss
        record with all fields zeroed.
    """
    result = miss_intersection(0.0)

    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    b = 2.0 * tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * a * c

    if discriminant > 0.0:
        t = (-b - ti.sqrt(discriminant)) / (2.0 * a)
        if t > 0.0:
            point = ray_at(ray, t)
            result = Intersection(
                hit=1,
                distance=t,
                point=point,
                normal=tm.normalize(point - sphere.center),
                color=sphere.color,
            )

    return result
