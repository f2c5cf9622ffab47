# pipeline/batch_processor.py
"""
Batch driver: every candidate source in a folder × every canvas target.

Work runs on a thread pool. Each source is decoded once; as soon as its
decode finishes, one render-and-write task per target is queued. Only
max_workers sources are held in memory at a time: the next decode is queued
when a source finishes. A failure in one source never stops the others,
except for a fatal write failure (disk full), which aborts the batch. Outputs
have unique paths per (source, target, format), so no locking is needed.
"""
from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple, Union

import numpy as np
from tqdm import tqdm

from ..config import ProcessingConfig
from ..errors import BatchAborted, DecodeFailure, EncodeFailure, GeometryError, WriteFailure
from ..models.canvas_target import CanvasTarget
from ..models.image import Image
from ..services.image_service import ImageService
from ..services.matte_service import MatteService
from ..services.output_layout_service import MultiSizeLayout, OutputLayoutService
from ..services.scaling_service import ScalingService
from .canvas_renderer import render_canvas

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    sources_found: int = 0
    sources_processed: int = 0
    decode_failures: int = 0
    files_written: int = 0
    outputs_skipped: int = 0
    geometry_errors: int = 0
    unexpected_errors: int = 0
    aborted: bool = False
    failed_sources: List[Path] = field(default_factory=list)

    def add(self, written: int, skipped: int) -> None:
        self.files_written += written
        self.outputs_skipped += skipped

    def summary(self) -> str:
        return (
            f"{self.sources_processed}/{self.sources_found} sources processed, "
            f"{self.files_written} files written, {self.outputs_skipped} outputs skipped, "
            f"{self.decode_failures} decode failures, {self.geometry_errors} geometry errors, "
            f"{self.unexpected_errors} unexpected errors"
        )


class _BatchRun:
    """State of one process_batch call. Counters are only touched on the calling thread."""

    def __init__(
        self,
        targets: Sequence[CanvasTarget],
        config: ProcessingConfig,
        layout: OutputLayoutService,
        image_service: ImageService,
    ):
        self.targets = tuple(targets)
        self.config = config
        self.layout = layout
        self.image_service = image_service
        self.scaling_service = ScalingService()
        self.matte_service = MatteService(tolerance=config.tolerance)
        self.abort = threading.Event()
        self.report = BatchReport()

    # ── worker tasks ────────────────────────────────────────────────
    def _write_all(self, pixels: np.ndarray, paths: Iterable[Path]) -> Tuple[int, int]:
        """
        Encode and write *pixels* once per path. A failed file does not stop
        its siblings; a fatal write failure propagates.
        """
        written = skipped = 0
        for path in paths:
            if self.abort.is_set():
                break
            try:
                self.image_service.save(
                    pixels, path, mode=self.config.file_mode, webp_quality=self.config.webp_quality
                )
                written += 1
            except EncodeFailure as err:
                logger.warning("Skipping output: %s", err)
                skipped += 1
            except WriteFailure as err:
                if err.fatal:
                    raise
                logger.warning("Skipping output: %s", err)
                skipped += 1
        return written, skipped

    def prepare_source(self, path: Path) -> Tuple[Image, int, int]:
        """Decode, create the output folder, save the unmodified copy."""
        img = self.image_service.load(path)
        if self.layout.needs_own_dir():
            self.image_service.ensure_dir(self.layout.output_dir(path), self.config.dir_mode)

        written = skipped = 0
        if self.layout.writes_original:
            written, skipped = self._write_all(
                img.pixels, self.layout.original_paths(path, self.config.formats)
            )
        return img, written, skipped

    def render_target(self, img: Image, target: CanvasTarget) -> Tuple[int, int]:
        if self.abort.is_set():
            return 0, 0
        canvas = render_canvas(
            img, target, scaling_service=self.scaling_service, matte_service=self.matte_service
        )
        return self._write_all(
            canvas.pixels, self.layout.canvas_paths(img.path, target, self.config.formats)
        )

    # ── driver ──────────────────────────────────────────────────────
    def run(self, sources: List[Path]) -> BatchReport:
        """
        At most ``max_workers`` sources are decoded or rendering at any time;
        the next decode is queued only once a source has finished.
        """
        report = self.report
        report.sources_found = len(sources)
        self._queue = iter(sources)
        self._remaining: Dict[Path, int] = {}

        max_workers = self.config.max_workers or os.cpu_count() or 1
        self._window = max_workers
        self._in_flight = 0
        self._progress = tqdm(
            total=len(sources) * len(self.targets),
            desc="Rendering",
            unit="canvas",
            disable=not self.config.show_progress,
        )

        with self._progress, ThreadPoolExecutor(max_workers=max_workers) as pool:
            pending: Dict[Future, Tuple[Path, CanvasTarget | None]] = {}
            self._fill_window(pool, pending)

            while pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    path, target = pending.pop(future)
                    if future.cancelled():
                        continue
                    if target is None:
                        self._source_ready(pool, pending, path, future)
                    else:
                        self._target_done(pending, path, target, future)
                self._fill_window(pool, pending)

        if report.aborted:
            raise BatchAborted(f"Batch aborted after fatal write failure; {report.summary()}", report)
        return report

    def _fill_window(self, pool: ThreadPoolExecutor, pending: Dict[Future, tuple]) -> None:
        while self._in_flight < self._window and not self.abort.is_set():
            path = next(self._queue, None)
            if path is None:
                return
            pending[pool.submit(self.prepare_source, path)] = (path, None)
            self._in_flight += 1

    def _finish_source(self, path: Path) -> None:
        self._in_flight -= 1
        self._remaining.pop(path, None)

    def _drop_source(self, path: Path) -> None:
        """The source produced no canvases; shrink the progress bar accordingly."""
        self.report.failed_sources.append(path)
        self._progress.total -= len(self.targets)
        self._progress.refresh()
        self._finish_source(path)

    def _source_ready(self, pool: ThreadPoolExecutor, pending: Dict[Future, tuple],
                      path: Path, future: Future) -> None:
        report = self.report
        try:
            img, written, skipped = future.result()
        except DecodeFailure as err:
            logger.warning("Skipping source: %s", err)
            report.decode_failures += 1
            self._drop_source(path)
            return
        except WriteFailure as err:
            if err.fatal:
                self._finish_source(path)
                self._abort(pending, err)
                return
            # Output folder could not be created: nothing for this source can land.
            logger.warning("Skipping source %s: %s", path.name, err)
            self._drop_source(path)
            return
        except Exception as err:
            logger.exception("Unexpected failure preparing %s: %r", path.name, err)
            report.unexpected_errors += 1
            self._drop_source(path)
            return

        report.add(written, skipped)
        if not self.targets:
            report.sources_processed += 1
            self._finish_source(path)
            return
        if self.abort.is_set():
            self._finish_source(path)
            return
        self._remaining[path] = len(self.targets)
        for target in self.targets:
            pending[pool.submit(self.render_target, img, target)] = (path, target)

    def _target_done(self, pending: Dict[Future, tuple], path: Path,
                     target: CanvasTarget, future: Future) -> None:
        report = self.report
        try:
            report.add(*future.result())
        except GeometryError as err:
            logger.error("Geometry defect for %s, target %s: %s", path.name, target, err)
            report.geometry_errors += 1
        except WriteFailure as err:
            # Non-fatal write failures are absorbed per file in _write_all.
            self._abort(pending, err)
        except Exception as err:
            logger.exception("Unexpected failure rendering %s, target %s: %r", path.name, target, err)
            report.unexpected_errors += 1
            if path not in report.failed_sources:
                report.failed_sources.append(path)
        self._progress.update(1)

        self._remaining[path] -= 1
        if self._remaining[path] == 0:
            if not self.abort.is_set() and path not in report.failed_sources:
                report.sources_processed += 1
                logger.info("Processed: %s", path)
            self._finish_source(path)

    def _abort(self, pending: Dict[Future, tuple], err: WriteFailure) -> None:
        if not self.report.aborted:
            logger.error("Fatal write failure, cancelling queued work: %s", err)
        self.report.aborted = True
        self.abort.set()
        for future in pending:
            future.cancel()


def process_batch(
    folder: Union[str, Path],
    targets: Sequence[CanvasTarget],
    *,
    config: ProcessingConfig | None = None,
    layout: OutputLayoutService | None = None,
    image_service: ImageService | None = None,
) -> BatchReport:
    """
    For every candidate image in *folder* (non-recursive):
        • decode once (failures are logged and the source skipped)
        • for every target: scale, matte, crop, write each configured format
    Returns a BatchReport. Raises NotADirectoryError / OSError when the folder
    cannot be listed, and BatchAborted after a fatal write failure.
    """
    config = config or ProcessingConfig()
    layout = layout or MultiSizeLayout()
    image_service = image_service or ImageService()

    sources = image_service.list_sources(folder, exts=config.extensions)
    logger.info("Found %d candidate images in %s, %d targets each",
                len(sources), folder, len(targets))

    for out, owners in sorted(layout.duplicate_paths(sources, targets, config.formats).items()):
        logger.warning("Output %s is produced by %d sources (%s); the last one written wins",
                       out, len(owners), ", ".join(p.name for p in owners))

    report = _BatchRun(targets, config, layout, image_service).run(sources)
    logger.info("Batch complete: %s", report.summary())
    return report
