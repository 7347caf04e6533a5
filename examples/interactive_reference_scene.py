#!/usr/bin/env python3
"""Show the reference scene in an interactive window.

The scene is rendered once and the resulting buffer is displayed in a Taichi
GGUI window until it is closed.

Usage:
    python -m examples.interactive_reference_scene

Controls:
    - Esc or Q: Close the window
    - P: Export the current image to a timestamped PNG
"""

from __future__ import annotations

import platform
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    system = platform.system()

    if system == "Darwin":
        # macOS: prefer Metal
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    # Try generic GPU (CUDA on Linux/Windows, Vulkan as fallback)
    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    # Fall back to CPU
    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive preview.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    # Initialize Taichi first (before creating fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from raycaster.core.renderer import render
    from raycaster.preview.interactive import InteractivePreview
    from raycaster.scene.reference import create_reference_scene

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    scene, camera = create_reference_scene()
    print(f"Rendering reference scene ({camera.nx}x{camera.ny})...")
    buffer = render(scene, camera)

    preview = InteractivePreview(camera.nx, camera.ny, title="Reference Scene")
    preview.update_buffer(buffer)

    print("Press Esc or Q to exit, P to export a PNG.")

    try:
        preview.run(on_export=lambda path: print(f"Exported: {path}"))
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
