#!/usr/bin/env python3
"""Render three spheres resting on a floor in front of a wall.

This script builds the demo scene, a green floor plane, a grey wall plane
ten units behind the origin and three colored spheres lit by a single white
point light, then renders it with Phong shading and hard shadows.

Usage:
    python -m examples.draw_planes [options]

Options:
    --width WIDTH       Image width in pixels (default: 1000)
    --height HEIGHT     Image height in pixels (default: 500)
    --output OUTPUT     Output file path, .png or .ppm (default: draw_planes.png)
    --quiet             Suppress progress output

Example:
    python -m examples.draw_planes --width 400 --height 200 --output planes.ppm
"""

from __future__ import annotations

import argparse
import math
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render spheres on a floor in front of a wall.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1000,
        help="Image width in pixels (default: 1000)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=500,
        help="Image height in pixels (default: 500)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="draw_planes.png",
        help="Output file path, .png or .ppm (default: draw_planes.png)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def create_draw_planes_scene(width: int = 1000, height: int = 500):
    """Build the floor, wall and spheres scene and its camera.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Tuple of (world, camera).
    """
    from src.raytracer.camera.camera import Camera
    from src.raytracer.core.transform import (
        chain,
        rotation_x,
        scaling,
        translation,
        view_transform,
    )
    from src.raytracer.core.tuples import point, vector
    from src.raytracer.geometry.shape import Shape
    from src.raytracer.materials.phong import Material, PointLight
    from src.raytracer.scene.world import World

    floor = Shape.plane(material=Material(color=(0.2, 0.8, 0.2)))

    # Stand a plane up and push it back to make the wall
    wall = Shape.plane(
        transform=chain(rotation_x(math.pi / 2), translation(0, 0, 10)),
        material=Material(color=(0.8, 0.8, 0.8)),
    )

    middle = Shape.sphere(
        transform=translation(-0.5, 1, 0.5),
        material=Material(color=(0.1, 1.0, 0.5), diffuse=0.7, specular=0.3),
    )
    right = Shape.sphere(
        transform=chain(scaling(0.5, 0.5, 0.5), translation(1.5, 0.5, -0.5)),
        material=Material(color=(0.5, 1.0, 0.1), diffuse=0.7, specular=0.3),
    )
    left = Shape.sphere(
        transform=chain(scaling(0.33, 0.33, 0.33), translation(-1.5, 0.33, -0.75)),
        material=Material(color=(1.0, 0.8, 0.1), diffuse=0.7, specular=0.3),
    )

    world = World(
        light=PointLight((1.0, 1.0, 1.0), point(5, 5, -10)),
        shapes=[floor, wall, middle, right, left],
    )

    camera = Camera(width, height, math.pi / 3)
    camera.transform = view_transform(point(0, 1, -5), point(0, 1, 0), vector(0, 1, 0))

    return world, camera


def render_draw_planes(
    width: int = 1000,
    height: int = 500,
    output_path: str = "draw_planes.png",
    quiet: bool = False,
) -> Path:
    """Render the scene and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        output_path: Output file path (.png or .ppm).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.raytracer.preview.export import save_image

    if not quiet:
        print(f"Creating scene ({width}x{height})...")

    world, camera = create_draw_planes_scene(width, height)

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    canvas = camera.render(world, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = save_image(canvas, output_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Shading offsets need double precision
    ti.init(arch=ti.cpu, default_fp=ti.f64)

    try:
        render_draw_planes(
            width=args.width,
            height=args.height,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
