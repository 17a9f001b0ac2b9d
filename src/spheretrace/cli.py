"""Render the reference sphere scene to a P6 pixmap.

With no arguments this renders the four-sphere reference scene at 1920x1080
with up to 5 reflection bounces and writes ``out.ppm`` to the working
directory.

Usage:
    spheretrace [options]
    python -m spheretrace [options]

Options:
    --width WIDTH           Image width in pixels (default: 1920)
    --height HEIGHT         Image height in pixels (default: 1080)
    --max-depth DEPTH       Maximum reflection bounces (default: 5)
    --output OUTPUT         Output file path (default: out.ppm)
    --columns-per-update N  Columns traced per progress update (default: 16)
    --arch {cpu,gpu}        Taichi backend (default: gpu, falling back to cpu)
    --quiet                 Suppress progress output

Example:
    spheretrace --width 320 --height 180 --output preview.ppm
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti

from spheretrace.camera.screen import DEFAULT_HEIGHT, DEFAULT_WIDTH
from spheretrace.core.renderer import DEFAULT_COLUMNS_PER_UPDATE
from spheretrace.core.tracer import MAX_DEPTH

DEFAULT_OUTPUT = "out.ppm"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="spheretrace",
        description="Render the reference sphere scene to a P6 pixmap.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=MAX_DEPTH,
        help=f"Maximum reflection bounces (default: {MAX_DEPTH})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=DEFAULT_OUTPUT,
        help=f"Output file path (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--columns-per-update",
        type=int,
        default=DEFAULT_COLUMNS_PER_UPDATE,
        help=f"Columns traced per progress update (default: {DEFAULT_COLUMNS_PER_UPDATE})",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default=None,
        help="Taichi backend (default: gpu, falling back to cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def backend_name() -> str:
    """Name of the backend Taichi is currently running on (e.g. "cuda", "x64")."""
    return ti.lang.impl.current_cfg().arch.name


def init_taichi(arch: str | None = None, quiet: bool = False) -> str:
    """Initialize Taichi on the requested backend.

    Without an explicit arch, the GPU is tried first with CPU as fallback.
    Taichi itself may also fall back to the CPU when no GPU is found, so the
    reported backend is read back after initialization.

    Returns:
        The name of the backend actually in use.
    """
    if arch == "cpu":
        ti.init(arch=ti.cpu)
    else:
        try:
            ti.init(arch=ti.gpu)
        except Exception:
            if arch == "gpu":
                raise
            ti.init(arch=ti.cpu)

    backend = backend_name()
    if not quiet:
        print(f"Using {backend} backend")
    return backend


def render_reference_scene(
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    max_depth: int = MAX_DEPTH,
    output_path: str = DEFAULT_OUTPUT,
    columns_per_update: int = DEFAULT_COLUMNS_PER_UPDATE,
    quiet: bool = False,
) -> Path:
    """Render the reference scene and save it as a P6 pixmap.

    Taichi must already be initialized.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum reflection bounces.
        output_path: Output file path.
        columns_per_update: Columns traced between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.

    Raises:
        ValueError: If a setting is out of range.
        OSError: If the output file cannot be written.
    """
    from spheretrace.core.renderer import Renderer, RenderSettings
    from spheretrace.scene.reference import create_reference_scene

    settings = RenderSettings(
        width=width,
        height=height,
        max_depth=max_depth,
        columns_per_update=columns_per_update,
    )
    renderer = Renderer(create_reference_scene(), settings)

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            print(f"\r{100 * done // total:3d}%", end="", flush=True)

    start_time = time.time()
    renderer.render(callback=progress_callback)

    if not quiet:
        print()
        print("writing image...", end="", flush=True)

    output_file = renderer.save_image(output_path)

    if not quiet:
        print("done.")
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        init_taichi(args.arch, quiet=args.quiet)
        render_reference_scene(
            width=args.width,
            height=args.height,
            max_depth=args.max_depth,
            output_path=args.output,
            columns_per_update=args.columns_per_update,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
