"""Unit tests for plane intersection.

Tests cover:
- Ray hitting the plane from either side
- Ray parallel to the plane
- Plane behind the ray
- Normal is never flipped toward the ray
"""

import taichi as ti


def _intersect(origin, direction, point, normal, color=(0.5, 0.5, 0.5)):
    """Run intersect_plane in a kernel and return the record as Python values."""
    from raycaster.core.ray import Ray, vec3
    from raycaster.geometry.plane import Plane, intersect_plane

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f32, shape=())
    hit_point = ti.Vector.field(3, dtype=ti.f32, shape=())
    hit_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
    hit_color = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        px: ti.f32, py: ti.f32, pz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
        red: ti.f32, green: ti.f32, blue: ti.f32,
    ):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        plane = Plane(
            point=vec3(px, py, pz),
            normal=vec3(nx, ny, nz),
            color=vec3(red, green, blue),
        )
        rec = intersect_plane(ray, plane)
        hit[None] = rec.hit
        distance[None] = rec.distance
        hit_point[None] = rec.point
        hit_normal[None] = rec.normal
        hit_color[None] = rec.color

    test_kernel(*origin, *direction, *point, *normal, *color)
    return (
        hit[None],
        distance[None],
        tuple(hit_point[None]),
        tuple(hit_normal[None]),
        tuple(hit_color[None]),
    )


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    def test_hit_from_above(self):
        """Test ray pointing down onto a ground plane."""
        hit, t, p, n, color = _intersect((0, 0, 0), (0, -1, 0), (0, -2, 0), (0, 1, 0))

        assert hit == 1
        assert abs(t - 2.0) < 1e-6
        assert abs(p[1] - (-2.0)) < 1e-6
        assert abs(n[1] - 1.0) < 1e-6
        assert all(abs(c - 0.5) < 1e-6 for c in color)

    def test_hit_from_below_keeps_normal(self):
        """Test that the normal is not flipped toward the incoming ray."""
        hit, t, _, n, _ = _intersect((0, -5, 0), (0, 1, 0), (0, -2, 0), (0, 1, 0))

        assert hit == 1
        assert abs(t - 3.0) < 1e-6
        # Normal still points +Y even though the ray travels +Y
        assert abs(n[1] - 1.0) < 1e-6

    def test_oblique_hit(self):
        """Test an oblique ray and its hit point."""
        hit, t, p, _, _ = _intersect((0, 0, 0), (1, -1, 0), (0, -2, 0), (0, 1, 0))

        assert hit == 1
        assert abs(t - 2.0) < 1e-6
        assert abs(p[0] - 2.0) < 1e-5
        assert abs(p[1] - (-2.0)) < 1e-5

    def test_parallel_ray_misses(self):
        """Test that a ray parallel to the plane misses."""
        hit, _, _, _, _ = _intersect((0, 0, 0), (0, 0, -1), (0, -2, 0), (0, 1, 0))
        assert hit == 0

    def test_nearly_parallel_ray_misses(self):
        """Test that |dot(normal, direction)| <= 1e-6 counts as parallel."""
        hit, _, _, _, _ = _intersect((0, 0, 0), (1, -1e-7, 0), (0, -2, 0), (0, 1, 0))
        assert hit == 0

    def test_plane_behind_ray_misses(self):
        """Test that intersections at negative t are rejected."""
        hit, _, _, _, _ = _intersect((0, 0, 0), (0, 1, 0), (0, -2, 0), (0, 1, 0))
        assert hit == 0

    def test_origin_on_plane_misses(self):
        """Test that t == 0 is not a hit."""
        hit, _, _, _, _ = _intersect((0, -2, 0), (0, -1, 0), (0, -2, 0), (0, 1, 0))
        assert hit == 0
