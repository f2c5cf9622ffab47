"""
Fixed multi-size mode: every image in a folder → xs/sm/md/lg canvases.

    canvas-cutout <folder>

Outputs go to <folder>/<base>/<label>_<base>.{png,webp}, next to an
unmodified <base>.{png,webp} copy.
"""
from __future__ import annotations

import argparse
import sys

from ..config import default_canvas_targets
from ..services.output_layout_service import MultiSizeLayout
from .common import (
    add_common_arguments, build_config, configure_logging, fail_usage, run_batch,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="canvas-cutout",
        description="Remove uniform backgrounds and render every image at a fixed list of canvas sizes.",
    )
    parser.add_argument("folder", help="folder holding .jpg .jpeg .png .bmp .tiff images")
    add_common_arguments(parser)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        configure_logging(args.log_level)
        config = build_config(args)
        targets = default_canvas_targets()
    except ValueError as err:
        return fail_usage(parser, err)

    return run_batch(args.folder, targets, config, MultiSizeLayout())


if __name__ == "__main__":
    sys.exit(main())
