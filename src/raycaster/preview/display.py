"""Matplotlib-based preview display for rendered buffers.

Example:
    >>> from raycaster.core.renderer import render
    >>> from raycaster.preview.display import show_preview
    >>> from raycaster.scene.reference import create_reference_scene
    >>>
    >>> scene, camera = create_reference_scene()
    >>> buffer = render(scene, camera)
    >>> show_preview(buffer, camera.nx, camera.ny)
"""

from __future__ import annotations

import numpy.typing as npt

from raycaster.core.renderer import buffer_to_image


def show_preview(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display a flat render buffer as a Matplotlib figure.

    Args:
        buffer: Flat RGB buffer of length 3 * width * height, row 0 at the
            bottom.
        width: Image width in pixels.
        height: Image height in pixels.
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.

    Raises:
        ValueError: If the buffer length does not match the dimensions.
    """
    import matplotlib.pyplot as plt

    image = buffer_to_image(buffer, width, height)

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    # Values are exactly 0 or 1, so no normalization is needed
    ax.imshow(image, vmin=0.0, vmax=1.0, interpolation="nearest")
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)
