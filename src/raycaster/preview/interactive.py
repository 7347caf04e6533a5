"""Interactive preview window using Taichi GGUI.

This module shows a rendered buffer in a ti.ui.Window. The window only reads
the buffer; it never re-renders. Pressing Esc or Q closes the window and P
exports the displayed buffer to a timestamped PNG.

Example:
    >>> from raycaster.core.renderer import render
    >>> from raycaster.preview.interactive import InteractivePreview
    >>> from raycaster.scene.reference import create_reference_scene
    >>>
    >>> scene, camera = create_reference_scene()
    >>> preview = InteractivePreview(camera.nx, camera.ny)
    >>> preview.update_buffer(render(scene, camera))
    >>> preview.run()
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti

# Keys that close the window
EXIT_KEYS = (ti.ui.ESCAPE, "q")
# Key that saves the displayed buffer
EXPORT_KEY = "p"


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    Wraps ti.ui.Window to display the renderer's flat RGB buffer. The window
    is created lazily so the object can be constructed in headless
    environments.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        title: str = "Ray Caster - Preview",
    ) -> None:
        """Initialize the preview.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.

        Note:
            Taichi must already be initialized. The window is created but
            not shown until run() or show_frame() is called.
        """
        self.width = width
        self.height = height
        self._title = title
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None
        self._buffer: npt.NDArray[np.float32] | None = None

        # Shape is (width, height) for the canvas; index (0, 0) is bottom-left
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )

    def _initialize_window(self) -> None:
        if self._window is not None:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_buffer(self, buffer: npt.ArrayLike) -> None:
        """Update the display image from a flat render buffer.

        Args:
            buffer: Flat RGB buffer of length 3 * width * height, row 0 at
                the bottom.

        Raises:
            ValueError: If the buffer length doesn't match the window size.
        """
        flat = np.asarray(buffer, dtype=np.float32).reshape(-1)
        expected = 3 * self.width * self.height
        if flat.size != expected:
            raise ValueError(
                f"Buffer has {flat.size} values, expected {expected} "
                f"for {self.width}x{self.height}"
            )

        self._buffer = flat.copy()
        # Buffer rows are (j, i); the field is indexed (i, j)
        image = flat.reshape(self.height, self.width, 3).transpose(1, 0, 2)
        self.display_image.from_numpy(np.ascontiguousarray(image))

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def handle_events(self) -> list[Path]:
        """Process pending key presses.

        Esc or Q closes the window. P exports the displayed buffer to a
        timestamped PNG in the current directory, and is ignored until a
        buffer has been set.

        Returns:
            Paths of the PNG files exported by this call.
        """
        exported = []
        for event in self.window.get_events(ti.ui.PRESS):
            if event.key in EXIT_KEYS:
                self.close()
            elif event.key == EXPORT_KEY and self._buffer is not None:
                exported.append(self.export_png())
        return exported

    def show_frame(self) -> None:
        """Display a single frame.

        Call this in a loop for continuous updates.
        """
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self, on_export: Callable[[Path], None] | None = None) -> None:
        """Run the window event loop until the window is closed.

        Args:
            on_export: Optional callback receiving the path of each PNG
                exported with the P key.
        """
        self._initialize_window()

        while self.is_running():
            for path in self.handle_events():
                if on_export is not None:
                    on_export(path)
            if not self.is_running():
                break
            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    def export_png(self, filepath: str | Path | None = None) -> Path:
        """Save the displayed buffer to a PNG file.

        Args:
            filepath: Output path. Defaults to a timestamped file name in
                the current directory.

        Returns:
            The path that was written.

        Raises:
            RuntimeError: If no buffer has been set with update_buffer().
        """
        from raycaster.preview.export import save_png

        if self._buffer is None:
            raise RuntimeError("No buffer to export. Call update_buffer() first.")

        if filepath is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filepath = f"render_{timestamp}.png"

        path = Path(filepath)
        save_png(self._buffer, self.width, self.height, path)
        return path

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # Windows generally always has display
        if os.name == "nt":
            return True

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            if ssh_connection and not display:
                return False
            return True

        # On Linux, check for X11 or Wayland
        return bool(display or wayland)
