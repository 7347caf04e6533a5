"""Pinhole camera model for perspective projection ray generation.

This module implements a pinhole camera that generates one primary ray per
pixel. The camera is described by:
- An eye position
- An orthonormal basis (u, v, w): u points right, v points up, and w points
  backward, so the camera looks down -w
- Image-plane bounds l, r, b, t in camera space
- The distance d from the eye to the image plane
- The pixel resolution nx x ny

A pixel (ix, iy) is sampled at its centre:
    u_s = l + (r - l) * (ix + 0.5) / nx
    v_s = b + (t - b) * (iy + 0.5) / ny
    direction = normalize(u_s * u + v_s * v - d * w)

Row iy = 0 is the bottom of the image plane.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.camera.pinhole import PinholeCamera
    >>>
    >>> camera = PinholeCamera(
    ...     eye=(0.0, 0.0, 0.0),
    ...     u=(1.0, 0.0, 0.0),
    ...     v=(0.0, 1.0, 0.0),
    ...     w=(0.0, 0.0, 1.0),
    ...     left=-0.1, right=0.1, bottom=-0.1, top=0.1,
    ...     focal_distance=0.1,
    ...     nx=512, ny=512,
    ... )
    >>>
    >>> @ti.kernel
    ... def render(camera: ti.template()):
    ...     ray = camera.get_ray(256, 256)  # Ray through the image centre
"""

from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from raycaster.core.ray import Ray, as_vec3_tuple, make_ray, vec3

Vec3Tuple = tuple[float, float, float]

# =============================================================================
# Camera
# =============================================================================


@ti.data_oriented
class PinholeCamera:
    """A pinhole (perspective) camera with an explicit image plane.

    All parameters are fixed at construction and exposed read-only. The
    values are mirrored into Taichi fields owned by the instance so kernels
    can call get_ray() on the camera.

    Attributes:
        eye: Camera position in world space.
        u: Right direction of the camera basis.
        v: Up direction of the camera basis.
        w: Backward direction of the camera basis (camera looks down -w).
        left, right, bottom, top: Image-plane bounds in camera space.
        focal_distance: Distance from the eye to the image plane.
        nx, ny: Image resolution in pixels.
    """

    def __init__(
        self,
        eye: tuple[float, float, float],
        u: tuple[float, float, float],
        v: tuple[float, float, float],
        w: tuple[float, float, float],
        left: float,
        right: float,
        bottom: float,
        top: float,
        focal_distance: float,
        nx: int,
        ny: int,
    ) -> None:
        """Create a camera and upload its parameters to Taichi fields.

        The basis vectors are expected to be orthonormal; they are stored as
        given.

        Raises:
            ValueError: If the resolution is not positive, the image plane
                has zero width or height, or the focal distance is not
                positive.
        """
        if int(nx) <= 0 or int(ny) <= 0:
            raise ValueError(f"Resolution must be positive, got {nx}x{ny}")
        if left == right or bottom == top:
            raise ValueError(
                f"Image plane is degenerate: l={left}, r={right}, b={bottom}, t={top}"
            )
        if not focal_distance > 0.0:
            raise ValueError(f"focal_distance must be positive, got {focal_distance}")

        self._eye = as_vec3_tuple(eye, "eye")
        self._basis = (as_vec3_tuple(u, "u"), as_vec3_tuple(v, "v"), as_vec3_tuple(w, "w"))
        self._bounds = (float(left), float(right), float(bottom), float(top))
        self._focal_distance = float(focal_distance)
        self._resolution = (int(nx), int(ny))

        # Camera state (GPU-accessible)
        self._eye_field = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._u_field = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
        self._v_field = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
        self._w_field = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward
        self._bounds_field = ti.Vector.field(4, dtype=ti.f32, shape=())  # l, r, b, t
        self._focal_field = ti.field(dtype=ti.f32, shape=())
        self._resolution_field = ti.Vector.field(2, dtype=ti.i32, shape=())

        self._eye_field[None] = list(self._eye)
        self._u_field[None] = list(self._basis[0])
        self._v_field[None] = list(self._basis[1])
        self._w_field[None] = list(self._basis[2])
        self._bounds_field[None] = list(self._bounds)
        self._focal_field[None] = self._focal_distance
        self._resolution_field[None] = list(self._resolution)

        # Result slots for Python-scope ray queries (see ray_for_pixel)
        self._query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())

    @classmethod
    def from_look_at(
        cls,
        lookfrom: tuple[float, float, float],
        lookat: tuple[float, float, float],
        vup: tuple[float, float, float],
        left: float,
        right: float,
        bottom: float,
        top: float,
        focal_distance: float,
        nx: int,
        ny: int,
    ) -> "PinholeCamera":
        """Create a camera positioned with look-at parameters.

        Builds the orthonormal basis from the view parameters:
        - w points from lookat toward lookfrom (opposite view direction)
        - u points right, perpendicular to w and vup
        - v points up in the camera's frame

        Args:
            lookfrom: Camera position in world space.
            lookat: Point the camera is looking at.
            vup: Approximate up direction (must not be parallel to the view).
            left, right, bottom, top: Image-plane bounds in camera space.
            focal_distance: Distance from the eye to the image plane.
            nx, ny: Image resolution in pixels.

        Raises:
            ValueError: If lookfrom equals lookat or vup is parallel to the
                view direction.
        """
        # Build orthonormal basis using NumPy (Python-side computation)
        eye = np.array(as_vec3_tuple(lookfrom, "lookfrom"), dtype=np.float64)
        target = np.array(as_vec3_tuple(lookat, "lookat"), dtype=np.float64)
        up = np.array(as_vec3_tuple(vup, "vup"), dtype=np.float64)

        w = eye - target
        w_len = np.linalg.norm(w)
        if w_len == 0.0:
            raise ValueError("lookfrom and lookat must differ")
        w = w / w_len

        u = np.cross(up, w)
        u_len = np.linalg.norm(u)
        if u_len < 1e-12:
            raise ValueError("vup must not be parallel to the view direction")
        u = u / u_len

        v = np.cross(w, u)

        return cls(
            eye=tuple(eye.tolist()),
            u=tuple(u.tolist()),
            v=tuple(v.tolist()),
            w=tuple(w.tolist()),
            left=left,
            right=right,
            bottom=bottom,
            top=top,
            focal_distance=focal_distance,
            nx=nx,
            ny=ny,
        )

    # =========================================================================
    # Read-only parameters
    # =========================================================================

    @property
    def eye(self) -> Vec3Tuple:
        return self._eye

    @property
    def u(self) -> Vec3Tuple:
        return self._basis[0]

    @property
    def v(self) -> Vec3Tuple:
        return self._basis[1]

    @property
    def w(self) -> Vec3Tuple:
        return self._basis[2]

    @property
    def left(self) -> float:
        return self._bounds[0]

    @property
    def right(self) -> float:
        return self._bounds[1]

    @property
    def bottom(self) -> float:
        return self._bounds[2]

    @property
    def top(self) -> float:
        return self._bounds[3]

    @property
    def focal_distance(self) -> float:
        return self._focal_distance

    @property
    def nx(self) -> int:
        """Image width in pixels."""
        return self._resolution[0]

    @property
    def ny(self) -> int:
        """Image height in pixels."""
        return self._resolution[1]

    @property
    def resolution(self) -> tuple[int, int]:
        """Image resolution as (nx, ny)."""
        return self._resolution

    # =========================================================================
    # Ray Generation (Taichi-compatible, GPU-callable)
    # =========================================================================

    @ti.func
    def get_ray(self, ix: ti.i32, iy: ti.i32) -> Ray:
        """Generate the ray through the centre of pixel (ix, iy).

        This function is designed to be called from within Taichi kernels.

        Args:
            ix: Pixel column in [0, nx), 0 = left.
            iy: Pixel row in [0, ny), 0 = bottom.

        Returns:
            A Ray with origin at the eye and a normalized direction.
        """
        bounds = self._bounds_field[None]
        res = self._resolution_field[None]

        u_s = bounds[0] + (bounds[1] - bounds[0]) * (ti.cast(ix, ti.f32) + 0.5) / ti.cast(
            res[0], ti.f32
        )
        v_s = bounds[2] + (bounds[3] - bounds[2]) * (ti.cast(iy, ti.f32) + 0.5) / ti.cast(
            res[1], ti.f32
        )

        direction = tm.normalize(
            u_s * self._u_field[None]
            + v_s * self._v_field[None]
            - self._focal_field[None] * self._w_field[None]
        )
        return make_ray(self._eye_field[None], direction)

    @ti.kernel
    def _ray_for_pixel_kernel(self, ix: ti.i32, iy: ti.i32):
        ray = self.get_ray(ix, iy)
        self._query_origin[None] = ray.origin
        self._query_direction[None] = ray.direction

    def ray_for_pixel(self, ix: int, iy: int) -> tuple[Vec3Tuple, Vec3Tuple]:
        """Compute the ray through pixel (ix, iy) from Python.

        Useful for inspecting the camera setup. Rendering calls get_ray()
        directly from its kernel.

        Args:
            ix: Pixel column in [0, nx).
            iy: Pixel row in [0, ny).

        Returns:
            A tuple (origin, direction) of 3-tuples.

        Raises:
            IndexError: If the pixel lies outside the image.
        """
        if not (0 <= ix < self.nx and 0 <= iy < self.ny):
            raise IndexError(f"Pixel ({ix}, {iy}) outside {self.nx}x{self.ny} image")

        self._ray_for_pixel_kernel(ix, iy)
        origin = self._query_origin[None]
        direction = self._query_direction[None]
        return (
            (float(origin[0]), float(origin[1]), float(origin[2])),
            (float(direction[0]), float(direction[1]), float(direction[2])),
        )

    # =========================================================================
    # Utility Functions
    # =========================================================================

    def info(self) -> dict[str, Any]:
        """Get the camera parameters for debugging.

        Returns:
            Dictionary with eye, u, v, w, bounds (l, r, b, t),
            focal_distance and resolution (nx, ny).
        """
        return {
            "eye": self.eye,
            "u": self.u,
            "v": self.v,
            "w": self.w,
            "bounds": self._bounds,
            "focal_distance": self.focal_distance,
            "resolution": self.resolution,
        }

    def __repr__(self) -> str:
        return (
            f"PinholeCamera(eye={self.eye}, resolution={self.nx}x{self.ny}, "
            f"d={self.focal_distance})"
        )
