"""Image export utilities for rendered buffers.

This module converts the renderer's flat RGB buffer to 8-bit images and
saves them with Pillow. It also provides helpers for comparing a render
against a stored reference image.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from raycaster.core.renderer import render
    >>> from raycaster.preview.export import save_png
    >>> from raycaster.scene.reference import create_reference_scene
    >>>
    >>> scene, camera = create_reference_scene()
    >>> buffer = render(scene, camera)
    >>> save_png(buffer, camera.nx, camera.ny, "output.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from raycaster.core.renderer import buffer_to_image


def buffer_to_uint8(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Convert a flat float buffer to a top-down 8-bit image.

    Values are clipped to [0, 1] and scaled to [0, 255] with rounding. No
    gamma correction is applied.

    Args:
        buffer: Flat RGB buffer of length 3 * width * height, row 0 at the
            bottom.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        8-bit image array of shape (height, width, 3) with row 0 at the top.

    Raises:
        ValueError: If the buffer length does not match the dimensions.
    """
    image = np.clip(buffer_to_image(buffer, width, height), 0.0, 1.0)
    return np.round(image * 255.0).astype(np.uint8)


def save_png(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
    filepath: str | Path,
) -> None:
    """Save a flat render buffer as a PNG file.

    Args:
        buffer: Flat RGB buffer of length 3 * width * height.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the buffer length does not match the dimensions.
    """
    image_uint8 = buffer_to_uint8(buffer, width, height)

    # Save using Pillow
    pil_image = PILImage.fromarray(image_uint8, mode="RGB")
    pil_image.save(filepath)


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load a PNG file as an RGB array.

    Args:
        filepath: Path to the image file.

    Returns:
        8-bit image array of shape (height, width, 3) with row 0 at the top.
    """
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)


def count_mismatched_pixels(
    image_a: npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.uint8],
) -> int:
    """Count pixels whose RGB values differ between two images.

    Args:
        image_a: First image array of shape (H, W, 3).
        image_b: Second image array (must have same shape as image_a).

    Returns:
        Number of pixels with at least one differing channel.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    return int(np.count_nonzero(np.any(image_a != image_b, axis=-1)))
