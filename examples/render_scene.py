#!/usr/bin/env python3
"""Render the default scene or a JSON scene file.

This script builds a scene (the default three spheres over a mirror floor,
or one loaded from a JSON file), then ray traces a still image or, with
--animate, one image per animation frame.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene FILE        JSON scene file with "options", "camera", "objects"
                        and "lights" (default: built-in scene)
    --width WIDTH       Image width in pixels (default: 1200)
    --height HEIGHT     Image height in pixels (default: 800)
    --output OUTPUT     Output file path (default: RayTraced.jpg)
    --no-aa             Disable 3x3 supersampling
    --animate           Render frames 0..total-frames as RayTraced.<n>.jpg
    --total-frames N    Animation length (default: 50)
    --preview           Show the still image in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --width 600 --height 400 --no-aa
    python -m examples.render_scene --animate --total-frames 10 --width 300 --height 200
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Ray trace a scene of spheres, planes and point lights.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in scene)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: 800)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file path (default: RayTraced.jpg)",
    )
    parser.add_argument(
        "--no-aa",
        action="store_true",
        help="Disable 3x3 supersampling anti-aliasing",
    )
    parser.add_argument(
        "--animate",
        action="store_true",
        help="Render every animation frame instead of a single image",
    )
    parser.add_argument(
        "--total-frames",
        type=int,
        default=None,
        help="Animation length in frames (default: 50)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered still image in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def load_scene_file(path: str) -> dict[str, Any]:
    """Read a JSON scene file.

    Raises:
        ValueError: If the top level of the file is not a JSON object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Scene file {path} must contain a JSON object")
    return data


def render_scene(args: argparse.Namespace) -> list[Path]:
    """Build the scene and render it as requested by the arguments.

    Returns:
        Paths of the saved images.
    """
    # Lazy imports to allow Taichi initialization first
    from phongtrace.camera.render_camera import RenderCamera
    from phongtrace.core.config import options_from_dict
    from phongtrace.core.renderer import RayTracer
    from phongtrace.preview.display import show_preview
    from phongtrace.preview.export import save_image
    from phongtrace.scene.default_scene import DefaultSceneParams, create_default_scene
    from phongtrace.scene.manager import SceneManager

    if args.scene is not None:
        data = load_scene_file(args.scene)
        options = dict(data.get("options", {}))
        scene = SceneManager()
        scene.from_dict(data)
        camera = RenderCamera.from_dict(data.get("camera", {}))
    else:
        options = {}
        scene, camera = create_default_scene(DefaultSceneParams(roll_green_sphere=args.animate))

    # Command-line values override the scene file
    if args.width is not None:
        options["width"] = args.width
    if args.height is not None:
        options["height"] = args.height
    if args.output is not None:
        options["output"] = args.output
    if args.total_frames is not None:
        options["totalFrames"] = args.total_frames
    if args.no_aa:
        options["antiAliasing"] = False

    shading, settings = options_from_dict(options)
    tracer = RayTracer(scene, camera, shading, settings)

    if not args.quiet:
        print(
            f"Scene: {scene.get_object_count()} objects, {scene.get_light_count()} lights "
            f"({settings.width}x{settings.height})"
        )

    start_time = time.time()
    saved: list[Path] = []

    if args.animate:

        def progress_callback(frame: int, total: int) -> None:
            if not args.quiet:
                print(f"\r  Frame {frame}/{total}", end="", flush=True)

        for _, path in tracer.render_sequence(callback=progress_callback):
            saved.append(path)
        if not args.quiet:
            print()  # Newline after progress
    else:
        image = tracer.render()
        saved.append(save_image(image, settings.output))
        if args.preview:
            show_preview(image)

    if not args.quiet:
        print(f"Saved {len(saved)} image(s), last: {saved[-1].absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return saved


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

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
        render_scene(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
