"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through the flat
render buffer to PNG output.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pytest

if TYPE_CHECKING:
    import numpy.typing as npt

# Reference image directory
REFERENCE_DIR = Path(__file__).parent / "reference"
REFERENCE_IMAGE = REFERENCE_DIR / "reference_scene.png"


class TestReferenceSceneIntegration:
    """Integration tests for reference scene rendering."""

    def test_render_and_save_png(self, tmp_path: Path) -> None:
        """Test that a low-resolution render can be written and read back."""
        from raycaster.core.renderer import render
        from raycaster.preview.export import load_png, save_png
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=64, height=48)
        buffer = render(scene, camera)

        output_path = tmp_path / "reference.png"
        save_png(buffer, camera.nx, camera.ny, output_path)

        image = load_png(output_path)
        assert image.shape == (48, 64, 3)
        # Top-left of the image is sky, bottom-left is ground
        assert np.all(image[0, 0] == 0)
        assert np.all(image[-1, 0] == 255)

    def test_json_scene_matches_builtin(self, tmp_path: Path) -> None:
        """Test that a saved and reloaded scene renders identically."""
        from raycaster.core.renderer import render
        from raycaster.scene.reference import create_reference_scene
        from raycaster.scene.scene import load_scene, save_scene

        scene, camera = create_reference_scene(width=32, height=32)
        path = tmp_path / "scene.json"
        save_scene(scene, path)

        original = render(scene, camera)
        reloaded = render(load_scene(path), camera)
        assert np.array_equal(original, reloaded)

    def test_look_at_camera_matches_reference(self) -> None:
        """Test that an equivalent look-at camera renders the same image."""
        from raycaster.camera.pinhole import PinholeCamera
        from raycaster.core.renderer import render
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=32, height=32)
        look_at = PinholeCamera.from_look_at(
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 0.0, -1.0),
            vup=(0.0, 1.0, 0.0),
            left=-0.1, right=0.1, bottom=-0.1, top=0.1,
            focal_distance=0.1,
            nx=32, ny=32,
        )
        assert np.array_equal(render(scene, camera), render(scene, look_at))

    def test_moving_sphere_changes_image(self) -> None:
        """Test that removing the central sphere uncovers the background."""
        from raycaster.core.renderer import render
        from raycaster.scene.reference import create_reference_scene

        scene, camera = create_reference_scene(width=32, height=32)
        data = scene.to_dict()
        data["spheres"] = [s for s in data["spheres"] if s["radius"] != 2.0]

        full = render(scene, camera)
        scene.from_dict(data)
        without_center = render(scene, camera)

        # The pixel straight ahead hit the central sphere and now looks past it
        offset = 3 * (16 * 32 + 16)
        assert full[offset] == 1.0
        assert without_center[offset] == 0.0


class TestReferenceImageFile:
    """Tests for the stored reference image."""

    def test_reference_image_is_present(self) -> None:
        """Test the reference PNG ships with the tests at 512x512."""
        from raycaster.preview.export import load_png

        assert REFERENCE_IMAGE.exists()
        image = load_png(REFERENCE_IMAGE)
        assert image.shape == (512, 512, 3)
        # Hit/miss mask: only pure black and pure white
        assert set(np.unique(image).tolist()) == {0, 255}


@pytest.mark.slow
class TestReferenceImage:
    """Full-resolution comparison against the stored reference image."""

    @staticmethod
    def _load_reference() -> npt.NDArray[np.uint8]:
        from raycaster.preview.export import load_png

        if not REFERENCE_IMAGE.exists():
            pytest.fail(f"Reference image missing: {REFERENCE_IMAGE}")
        return load_png(REFERENCE_IMAGE)

    def test_reference_render_matches_stored_image(self) -> None:
        """Render the 512x512 reference scene and compare it per pixel.

        Run with: pytest -m slow tests/test_integration.py
        """
        from raycaster.core.renderer import render
        from raycaster.preview.export import buffer_to_uint8, count_mismatched_pixels
        from raycaster.scene.reference import create_reference_scene

        reference = self._load_reference()
        scene, camera = create_reference_scene()
        image = buffer_to_uint8(render(scene, camera), camera.nx, camera.ny)

        assert count_mismatched_pixels(image, reference) == 0

    def test_altered_scene_differs_from_stored_image(self) -> None:
        """Test that shrinking the central sphere is caught by the comparison."""
        from raycaster.core.renderer import render
        from raycaster.preview.export import buffer_to_uint8, count_mismatched_pixels
        from raycaster.scene.reference import create_reference_scene

        reference = self._load_reference()
        scene, camera = create_reference_scene()
        data = scene.to_dict()
        data["spheres"][1]["radius"] = 1.5
        scene.from_dict(data)
        image = buffer_to_uint8(render(scene, camera), camera.nx, camera.ny)

        assert count_mismatched_pixels(image, reference) > 0
