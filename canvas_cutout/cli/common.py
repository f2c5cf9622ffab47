"""
Shared bootstrap for the command-line front-ends.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from ..config import ProcessingConfig, parse_formats, parse_mode, parse_tolerance
from ..errors import BatchAborted
from ..models.canvas_target import CanvasTarget
from ..pipeline.batch_processor import process_batch
from ..services.output_layout_service import OutputLayoutService

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

logger = logging.getLogger("canvas_cutout.cli")


def configure_logging(level: str | None = None) -> None:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S',
    )


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--tolerance", default=None,
                        help="flood fill tolerance, one value or R,G,B (default: FLOOD_TOLERANCE or 10)")
    parser.add_argument("--formats", default=None,
                        help="comma-separated output formats: png, webp (default: OUTPUT_FORMATS or both)")
    parser.add_argument("--workers", type=int, default=None,
                        help="worker threads (default: MAX_WORKERS or CPU count)")
    parser.add_argument("--file-mode", default=None,
                        help="octal permissions applied to written files, e.g. 666")
    parser.add_argument("--dir-mode", default=None,
                        help="octal permissions applied to created folders, e.g. 777")
    parser.add_argument("--log-level", default=None,
                        help="DEBUG, INFO, WARNING, ERROR (default: LOG_LEVEL or INFO)")
    parser.add_argument("--no-progress", action="store_true",
                        help="hide the progress bar")


def build_config(args: argparse.Namespace) -> ProcessingConfig:
    """Environment first, then command-line overrides."""
    if args.workers is not None and args.workers <= 0:
        raise ValueError(f"--workers must be positive, got {args.workers}")
    return ProcessingConfig.from_env().override(
        tolerance=parse_tolerance(args.tolerance) if args.tolerance is not None else None,
        formats=parse_formats(args.formats) if args.formats is not None else None,
        file_mode=parse_mode(args.file_mode),
        dir_mode=parse_mode(args.dir_mode),
        max_workers=args.workers,
        show_progress=False if args.no_progress else None,
    )


def run_batch(
    folder: str | Path,
    targets: Sequence[CanvasTarget],
    config: ProcessingConfig,
    layout: OutputLayoutService,
) -> int:
    """
    Per-file failures never change the exit status; only an unreadable
    folder or a fatal write failure does.
    """
    try:
        process_batch(folder, targets, config=config, layout=layout)
    except NotADirectoryError:
        logger.error("Input folder does not exist or is not a directory: %s", folder)
        return EXIT_FAILURE
    except BatchAborted as err:
        logger.error("%s", err)
        return EXIT_FAILURE
    except OSError as err:
        logger.error("Cannot read input folder %s: %s", folder, err)
        return EXIT_FAILURE
    return EXIT_OK


def fail_usage(parser: argparse.ArgumentParser, err: Exception) -> int:
    parser.print_usage(sys.stderr)
    print(f"{parser.prog}: error: {err}", file=sys.stderr)
    return EXIT_USAGE
