"""Unit tests for the hit/miss renderer.

Tests cover:
- Buffer length, dtype and value set
- Row-major layout with row 0 at the bottom
- Known pixels of the reference scene
- Idempotent rendering
- Resolution checks and buffer reshaping
"""

import numpy as np
import pytest

WHITE = (1.0, 1.0, 1.0)
BLACK = (0.0, 0.0, 0.0)


def pixel(buffer, i, j, width=512):
    """Read pixel (i, j) from a flat RGB buffer."""
    offset = 3 * (j * width + i)
    return tuple(float(c) for c in buffer[offset : offset + 3])


@pytest.fixture(scope="module")
def reference_buffer():
    """Render the 512x512 reference scene once for this module."""
    from raycaster.core.renderer import render
    from raycaster.scene.reference import create_reference_scene

    scene, camera = create_reference_scene()
    return render(scene, camera)


class TestRenderOutput:
    """Tests for the shape and content of the render buffer."""

    def test_buffer_length(self, reference_buffer):
        assert reference_buffer.shape == (3 * 512 * 512,)

    def test_buffer_dtype(self, reference_buffer):
        assert reference_buffer.dtype == np.float32

    def test_buffer_is_black_or_white(self, reference_buffer):
        """Test every pixel is exactly white or exactly black."""
        pixels = reference_buffer.reshape(-1, 3)
        white = np.all(pixels == 1.0, axis=1)
        black = np.all(pixels == 0.0, axis=1)
        assert np.all(white | black)
        assert white.any()
        assert black.any()

    def test_non_square_buffer_length(self):
        from raycaster.core.renderer import render
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=40, height=30)
        buffer = render(scene, camera)
        assert buffer.shape == (3 * 40 * 30,)

    def test_empty_scene_is_black(self):
        from raycaster.core.renderer import render
        from raycaster.scene.reference import ReferenceCameraParams, create_reference_camera
        from raycaster.scene.scene import Scene

        camera = create_reference_camera(ReferenceCameraParams(width=16, height=16))
        buffer = render(Scene(), camera)
        assert np.all(buffer == 0.0)


class TestReferencePixels:
    """Tests for known pixels of the reference scene."""

    @pytest.mark.parametrize(
        "i, j, expected",
        [
            (256, 256, WHITE),  # central sphere
            (0, 0, WHITE),  # ground plane, bottom-left corner
            (256, 0, WHITE),  # ground plane below the central sphere
            (402, 256, WHITE),  # right sphere
            (109, 256, WHITE),  # left sphere
            (346, 255, WHITE),  # ground plane far away, just below the horizon
            (346, 256, BLACK),  # gap between spheres, just above the horizon
            (0, 511, BLACK),  # top-left corner
            (256, 511, BLACK),  # above the central sphere
        ],
    )
    def test_pixel(self, reference_buffer, i, j, expected):
        assert pixel(reference_buffer, i, j) == expected

    def test_top_row_is_black(self, reference_buffer):
        """Test the top row only sees sky."""
        top = reference_buffer.reshape(512, 512, 3)[511]
        assert np.all(top == 0.0)

    def test_bottom_row_is_white(self, reference_buffer):
        """Test the bottom row only sees the ground plane."""
        bottom = reference_buffer.reshape(512, 512, 3)[0]
        assert np.all(bottom == 1.0)


class TestRenderer:
    """Tests for the Renderer class."""

    def test_render_is_idempotent(self):
        from raycaster.core.renderer import Renderer
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=64, height=64)
        renderer = Renderer(64, 64)

        first = renderer.render(scene, camera)
        second = renderer.render(scene, camera)

        assert np.array_equal(first, second)
        # Each render returns a new array owned by the caller
        assert first is not second

    def test_render_pixel_matches_buffer(self):
        from raycaster.core.renderer import Renderer
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=64, height=64)
        renderer = Renderer(64, 64)
        buffer = renderer.render(scene, camera)

        for i, j in [(0, 0), (32, 32), (0, 63), (50, 32)]:
            assert renderer.render_pixel(scene, camera, i, j) == pixel(buffer, i, j, width=64)

    def test_render_pixel_out_of_range(self):
        from raycaster.core.renderer import Renderer
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=8, height=8)
        with pytest.raises(IndexError):
            Renderer(8, 8).render_pixel(scene, camera, 8, 0)

    def test_repeated_render_reuses_fields(self):
        """Test that render() at one resolution allocates its buffer only once."""
        from taichi.lang import impl

        from raycaster.core.renderer import get_renderer, render
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=64, height=64)
        first = render(scene, camera)

        prog = impl.get_runtime().prog
        trees_before = prog.get_snode_tree_size()
        for _ in range(20):
            assert np.array_equal(render(scene, camera), first)

        assert prog.get_snode_tree_size() == trees_before
        assert get_renderer(64, 64) is get_renderer(64, 64)
        assert get_renderer(64, 64) is not get_renderer(32, 64)

    def test_resolution_mismatch_raises(self):
        from raycaster.core.renderer import Renderer
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=32, height=32)
        with pytest.raises(ValueError, match="does not match"):
            Renderer(16, 32).render(scene, camera)

    def test_invalid_dimensions_raise(self):
        from raycaster.core.renderer import Renderer

        with pytest.raises(ValueError, match="positive"):
            Renderer(0, 10)

    def test_properties_and_repr(self):
        from raycaster.core.renderer import Renderer

        renderer = Renderer(20, 10)
        assert renderer.width == 20
        assert renderer.height == 10
        assert repr(renderer) == "Renderer(width=20, height=10)"


class TestBufferToImage:
    """Tests for reshaping the flat buffer into an image."""

    def test_bottom_row_becomes_last_image_row(self):
        from raycaster.core.renderer import buffer_to_image

        # 2x2 image with only pixel (0, 0) (bottom-left) white
        buffer = np.zeros(12, dtype=np.float32)
        buffer[0:3] = 1.0

        image = buffer_to_image(buffer, 2, 2)
        assert image.shape == (2, 2, 3)
        assert np.all(image[1, 0] == 1.0)
        assert np.all(image[0] == 0.0)
        assert np.all(image[1, 1] == 0.0)

    def test_row_major_columns(self):
        from raycaster.core.renderer import buffer_to_image

        # 3x1 image: pixel i holds value i
        buffer = np.repeat(np.arange(3, dtype=np.float32), 3)
        image = buffer_to_image(buffer, 3, 1)
        assert list(image[0, :, 0]) == [0.0, 1.0, 2.0]

    def test_wrong_length_raises(self):
        from raycaster.core.renderer import buffer_to_image

        with pytest.raises(ValueError, match="expected 12"):
            buffer_to_image(np.zeros(10, dtype=np.float32), 2, 2)
