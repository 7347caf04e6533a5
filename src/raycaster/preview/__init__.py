"""Preview module for output and visualization.

This module reads the renderer's flat RGB buffer and presents it:

Components:
    display: Matplotlib-based static preview
    export: PNG export and reference-image comparison
    interactive: Taichi GGUI window closed with Esc or Q

Example:
    >>> from raycaster.preview import save_png, show_preview
    >>> save_png(buffer, 512, 512, "output.png")
    >>> show_preview(buffer, 512, 512)

For the interactive GGUI preview:
    >>> from raycaster.preview import InteractivePreview
    >>> preview = InteractivePreview(512, 512)
    >>> preview.update_buffer(buffer)
    >>> preview.run()
"""

from raycaster.preview.display import show_preview
from raycaster.preview.export import (
    buffer_to_uint8,
    count_mismatched_pixels,
    load_png,
    save_png,
)
from raycaster.preview.interactive import InteractivePreview

__all__ = [
    # Interactive preview
    "InteractivePreview",
    # Display functions
    "show_preview",
    # Export functions
    "save_png",
    "load_png",
    "buffer_to_uint8",
    "count_mismatched_pixels",
]
