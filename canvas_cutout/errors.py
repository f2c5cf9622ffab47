from __future__ import annotations
import errno
from pathlib import Path


class CanvasCutoutError(Exception):
    """Base class for every error raised by canvas_cutout."""


class DecodeFailure(CanvasCutoutError):
    """Source bytes could not be decoded into a non-empty pixel buffer."""

    def __init__(self, path, reason: str = "unreadable or unsupported image"):
        self.path = Path(path) if path is not None else None
        self.reason = reason
        super().__init__(f"Could not read image: {path} ({reason})")


class GeometryError(CanvasCutoutError, ValueError):
    """
    Invalid canvas geometry. Raised for non-positive canvas sizes, and for a
    crop rectangle that leaves the resized buffer (a Scaler/Extractor defect).
    """


class EncodeFailure(CanvasCutoutError):
    """Pillow refused to encode a buffer into the requested format."""

    def __init__(self, path, fmt: str, cause: Exception | None = None):
        self.path = Path(path)
        self.fmt = fmt
        super().__init__(f"Could not encode {path} as {fmt}: {cause}")


class WriteFailure(CanvasCutoutError):
    """The filesystem refused an output write."""

    FATAL_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}

    def __init__(self, path, cause: OSError):
        self.path = Path(path)
        self.errno = cause.errno
        super().__init__(f"Could not write {path}: {cause}")

    @property
    def fatal(self) -> bool:
        """Resource exhaustion aborts the remaining batch."""
        return self.errno in self.FATAL_ERRNOS


class BatchAborted(CanvasCutoutError):
    """Queued work was cancelled after a fatal write failure."""

    def __init__(self, message: str, report=None):
        self.report = report
        super().__init__(message)
