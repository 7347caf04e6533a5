#!/usr/bin/env python3
"""Render the reference scene to a PNG file.

This script casts one ray per pixel through the reference ground plane and
three spheres (or a scene loaded from JSON) and writes the black/white hit
mask as a PNG.

Usage:
    python -m examples.render_reference_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 512)
    --height HEIGHT     Image height in pixels (default: 512)
    --scene SCENE       JSON scene file to render instead of the reference scene
    --output OUTPUT     Output file path (default: reference_scene.png)
    --show              Show a Matplotlib preview after rendering
    --quiet             Suppress progress output

Example:
    python -m examples.render_reference_scene --width 256 --height 256
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the reference scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=512,
        help="Image width in pixels (default: 512)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=512,
        help="Image height in pixels (default: 512)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in reference scene)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="reference_scene.png",
        help="Output file path (default: reference_scene.png)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show a Matplotlib preview after rendering",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_reference_scene(
    width: int = 512,
    height: int = 512,
    scene_path: str | None = None,
    output_path: str = "reference_scene.png",
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        scene_path: Optional JSON scene file replacing the reference scene.
        output_path: Output file path (PNG).
        show: If True, display the result with Matplotlib.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raycaster.core.renderer import Renderer
    from raycaster.preview.export import save_png
    from raycaster.scene.reference import create_reference_scene
    from raycaster.scene.scene import load_scene

    scene, camera = create_reference_scene(width, height)
    if scene_path is not None:
        scene = load_scene(scene_path)
        if not quiet:
            print(f"Loaded scene from {scene_path}: {scene}")
    elif not quiet:
        print(f"Creating reference scene ({width}x{height})...")

    renderer = Renderer(width, height)

    start_time = time.time()
    buffer = renderer.render(scene, camera)
    render_time = time.time() - start_time

    if not quiet:
        hits = int((buffer[0::3] > 0.0).sum())
        print(f"Rendered {width * height} pixels ({hits} hits) in {render_time:.3f}s")

    output_file = Path(output_path)
    save_png(buffer, width, height, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    if show:
        from raycaster.preview.display import show_preview

        show_preview(buffer, width, height)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_reference_scene(
            width=args.width,
            height=args.height,
            scene_path=args.scene,
            output_path=args.output,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
