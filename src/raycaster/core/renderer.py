"""Hit/miss renderer producing a flat RGB buffer.

This module implements the render loop: one primary ray per pixel from the
camera is traced against the scene, and the pixel is written white on a hit
and black on a miss. There is no shading, gamma or clamping.

The output is a flat float32 array of RGB triples in row-major order, where
row 0 is the bottom row of the image plane. Pixel (i, j) occupies the slots
3 * (j * width + i) to 3 * (j * width + i) + 2.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raycaster.core.renderer import render, buffer_to_image
    >>> from raycaster.scene.reference import create_reference_scene
    >>>
    >>> scene, camera = create_reference_scene()
    >>> buffer = render(scene, camera)
    >>> image = buffer_to_image(buffer, camera.nx, camera.ny)  # (512, 512, 3)
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Distance window for primary rays
T_MIN = 0.0
T_MAX = math.inf

HIT_COLOR = vec3(1.0, 1.0, 1.0)
MISS_COLOR = vec3(0.0, 0.0, 0.0)


@ti.func
def shade(hit: ti.i32) -> vec3:
    """Map a hit flag to the output color (white on hit, black on miss)."""
    color = MISS_COLOR
    if hit == 1:
        color = HIT_COLOR
    return color


# =============================================================================
# Renderer
# =============================================================================


@ti.data_oriented
class Renderer:
    """Renders a scene through a camera into a flat RGB buffer.

    The renderer owns a flat Taichi field of 3 * width * height floats. Each
    call to render() clears it, fills every pixel and returns a NumPy copy,
    so the caller owns the result and later renders never alias it.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate the output buffer.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

        self._width = int(width)
        self._height = int(height)
        self._buffer = ti.field(dtype=ti.f32, shape=3 * self._width * self._height)
        self._pixel_color = ti.Vector.field(3, dtype=ti.f32, shape=())

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    # =========================================================================
    # Kernels
    # =========================================================================

    @ti.kernel
    def _render_kernel(self, scene: ti.template(), camera: ti.template()):
        """Trace one primary ray per pixel and write its color.

        The pixel loop is the outermost loop, so pixels run in parallel.
        Each pixel writes only its own three slots.
        """
        for j, i in ti.ndrange(self._height, self._width):
            ray = camera.get_ray(i, j)
            rec = scene.trace(ray, T_MIN, T_MAX)
            color = shade(rec.hit)

            offset = 3 * (j * self._width + i)
            for c in ti.static(range(3)):
                self._buffer[offset + c] = color[c]

    @ti.kernel
    def _render_pixel_kernel(
        self, scene: ti.template(), camera: ti.template(), i: ti.i32, j: ti.i32
    ):
        for _ in range(1):
            ray = camera.get_ray(i, j)
            rec = scene.trace(ray, T_MIN, T_MAX)
            self._pixel_color[None] = shade(rec.hit)

    # =========================================================================
    # Public Rendering API
    # =========================================================================

    def _check_camera(self, camera) -> None:
        if (camera.nx, camera.ny) != (self._width, self._height):
            raise ValueError(
                f"Camera resolution {camera.nx}x{camera.ny} does not match "
                f"renderer resolution {self._width}x{self._height}"
            )

    def render(self, scene, camera) -> npt.NDArray[np.float32]:
        """Render the scene and return the flat RGB buffer.

        Args:
            scene: The Scene to trace against.
            camera: A PinholeCamera with the renderer's resolution.

        Returns:
            A new float32 array of length 3 * width * height.

        Raises:
            ValueError: If the camera resolution differs from the renderer's.
        """
        self._check_camera(camera)

        self._buffer.fill(0.0)
        self._render_kernel(scene, camera)
        return self._buffer.to_numpy()

    def render_pixel(self, scene, camera, i: int, j: int) -> tuple[float, float, float]:
        """Render a single pixel.

        This is a Python-callable function for testing and debugging. For
        full images use render(), which processes all pixels in parallel.

        Args:
            scene: The Scene to trace against.
            camera: A PinholeCamera with the renderer's resolution.
            i: Pixel column (0 = left).
            j: Pixel row (0 = bottom).

        Returns:
            Tuple of (R, G, B) color values.

        Raises:
            ValueError: If the camera resolution differs from the renderer's.
            IndexError: If the pixel lies outside the image.
        """
        self._check_camera(camera)
        if not (0 <= i < self._width and 0 <= j < self._height):
            raise IndexError(f"Pixel ({i}, {j}) outside {self._width}x{self._height} image")

        self._render_pixel_kernel(scene, camera, i, j)
        color = self._pixel_color[None]
        return (float(color[0]), float(color[1]), float(color[2]))

    def __repr__(self) -> str:
        """Return a string representation of the renderer."""
        return f"Renderer(width={self.width}, height={self.height})"


# Renderers reused by render(), keyed by (width, height). Taichi fields are
# never freed, so each resolution allocates its buffer once.
_renderers: dict[tuple[int, int], Renderer] = {}


def get_renderer(width: int, height: int) -> Renderer:
    """Get the shared Renderer for a resolution, creating it on first use.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The Renderer cached for (width, height).
    """
    key = (int(width), int(height))
    renderer = _renderers.get(key)
    if renderer is None:
        renderer = Renderer(*key)
        _renderers[key] = renderer
    return renderer


def render(scene, camera) -> npt.NDArray[np.float32]:
    """Render a scene through a camera at the camera's resolution.

    Repeated calls at the same resolution reuse one output field; the
    returned array is always a fresh copy.

    Args:
        scene: The Scene to trace against.
        camera: The PinholeCamera providing rays and resolution.

    Returns:
        A flat float32 array of length 3 * nx * ny, row 0 at the bottom.
    """
    return get_renderer(camera.nx, camera.ny).render(scene, camera)


def buffer_to_image(
    buffer: npt.ArrayLike, width: int, height: int
) -> npt.NDArray[np.float32]:
    """Reshape a flat render buffer into a top-down image array.

    Args:
        buffer: Flat RGB buffer of length 3 * width * height, row 0 at the
            bottom.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Array of shape (height, width, 3) with row 0 at the top.

    Raises:
        ValueError: If the buffer length does not match the dimensions.
    """
    flat = np.asarray(buffer, dtype=np.float32).reshape(-1)
    expected = 3 * width * height
    if flat.size != expected:
        raise ValueError(
            f"Buffer has {flat.size} values, expected {expected} for {width}x{height}"
        )

    # Flip vertically (buffer rows start at the bottom, images at the top)
    return np.flipud(flat.reshape(height, width, 3))
