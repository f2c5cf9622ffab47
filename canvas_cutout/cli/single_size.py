"""
Single-size mode: every image in a folder → one WIDTHxHEIGHT canvas.

    canvas-cutout-single <folder> <width> <height>

Outputs go to <folder>/<base>_processed.{png,webp}.
"""
from __future__ import annotations

import argparse
import sys

from ..config import single_canvas_target
from ..services.output_layout_service import SingleSizeLayout
from .common import (
    add_common_arguments, build_config, configure_logging, fail_usage, run_batch,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="canvas-cutout-single",
        description="Remove uniform backgrounds and render every image at one canvas size.",
    )
    parser.add_argument("folder", help="folder holding .jpg .jpeg .png .bmp .tiff images")
    parser.add_argument("width", help="canvas width in pixels (positive integer)")
    parser.add_argument("height", help="canvas height in pixels (positive integer)")
    add_common_arguments(parser)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        configure_logging(args.log_level)
        targets = single_canvas_target(args.width, args.height)
        config = build_config(args)
    except ValueError as err:
        # GeometryError is a ValueError: width/height of 0 stop here
        return fail_usage(parser, err)

    return run_batch(args.folder, targets, config, SingleSizeLayout())


if __name__ == "__main__":
    sys.exit(main())
