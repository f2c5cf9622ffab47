"""
Processing configuration.

Values come from the environment (a local ``.env`` is loaded through
python-dotenv) and can be overridden field by field by the CLI front-ends.
The resolved ``ProcessingConfig`` is passed explicitly into the pipeline.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Iterable, Tuple

from dotenv import load_dotenv

from .errors import GeometryError
from .models.canvas_target import CanvasTarget, ColorTolerance

# Load environment variables
load_dotenv()

DEFAULT_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".tiff")
DEFAULT_FORMATS = ("png", "webp")
SUPPORTED_FORMATS = {"png": "PNG", "webp": "WEBP"}
DEFAULT_CANVAS_SIZES = "120x120:xs,300x300:sm,600x600:md,800x800:lg"


def _split(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_tolerance(raw: str) -> ColorTolerance:
    """
    "10" → (10, 10, 10); "10,5,20" → (10, 5, 20).
    """
    parts = _split(raw)
    try:
        values = [int(p) for p in parts]
    except ValueError:
        raise ValueError(f"Tolerance must be integers, got {raw!r}") from None
    if len(values) == 1:
        return ColorTolerance.uniform(values[0])
    if len(values) == 3:
        return ColorTolerance(*values)
    raise ValueError(f"Tolerance needs 1 or 3 components, got {raw!r}")


def parse_formats(raw: str | Iterable[str]) -> Tuple[str, ...]:
    parts = _split(raw) if isinstance(raw, str) else list(raw)
    formats = tuple(p.lower().lstrip(".") for p in parts)
    unknown = [f for f in formats if f not in SUPPORTED_FORMATS]
    if unknown or not formats:
        raise ValueError(
            f"Output formats must be a non-empty subset of {sorted(SUPPORTED_FORMATS)}, got {raw!r}"
        )
    return formats


def parse_extensions(raw: str) -> Tuple[str, ...]:
    return tuple(
        (e if e.startswith(".") else f".{e}").lower() for e in _split(raw)
    )


def parse_mode(raw: str | None) -> int | None:
    """Octal permission string ("666", "0o777") → int, empty → None."""
    if raw is None or not str(raw).strip():
        return None
    text = str(raw).strip().lower().removeprefix("0o")
    try:
        mode = int(text, 8)
    except ValueError:
        raise ValueError(f"Permission mode must be octal, got {raw!r}") from None
    if not 0 <= mode <= 0o7777:
        raise ValueError(f"Permission mode out of range: {raw!r}")
    return mode


def parse_dimension(raw) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise GeometryError(f"Canvas dimension must be an integer, got {raw!r}") from None
    if value <= 0:
        raise GeometryError(f"Canvas dimension must be positive, got {value}")
    return value


def parse_canvas_sizes(raw: str) -> Tuple[CanvasTarget, ...]:
    """
    "120x120:xs,300x300:sm" → (CanvasTarget(120, 120, "xs"), CanvasTarget(300, 300, "sm"))
    """
    targets = []
    for entry in _split(raw):
        size, sep, label = entry.partition(":")
        width, x, height = size.lower().partition("x")
        if not sep or not x or not label.strip():
            raise ValueError(f"Canvas size must look like WIDTHxHEIGHT:label, got {entry!r}")
        targets.append(
            CanvasTarget(parse_dimension(width), parse_dimension(height), label.strip())
        )
    return validate_targets(targets)


def validate_targets(targets: Iterable[CanvasTarget]) -> Tuple[CanvasTarget, ...]:
    targets = tuple(targets)
    if not targets:
        raise ValueError("At least one canvas target is required")
    labels = [t.label for t in targets]
    if any(not label for label in labels):
        raise ValueError("Canvas labels must be non-empty")
    if len(set(labels)) != len(labels):
        raise ValueError(f"Canvas labels must be unique, got {labels}")
    return targets


@dataclass(frozen=True)
class ProcessingConfig:
    """
    Everything the batch needs besides the input directory and targets.
    """
    tolerance: ColorTolerance = field(default_factory=ColorTolerance)
    formats: Tuple[str, ...] = DEFAULT_FORMATS
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    webp_quality: int = 95
    file_mode: int | None = None  # e.g. 0o666, applied after every write
    dir_mode: int | None = None   # e.g. 0o777, applied to created directories
    max_workers: int | None = None
    show_progress: bool = True

    @classmethod
    def from_env(cls) -> "ProcessingConfig":
        return cls(
            tolerance=parse_tolerance(os.getenv("FLOOD_TOLERANCE", "10,10,10")),
            formats=parse_formats(os.getenv("OUTPUT_FORMATS", ",".join(DEFAULT_FORMATS))),
            extensions=parse_extensions(
                os.getenv("VALID_IMAGE_EXTENSIONS", ",".join(DEFAULT_EXTENSIONS))
            ),
            webp_quality=int(os.getenv("WEBP_QUALITY", "95")),
            file_mode=parse_mode(os.getenv("OUTPUT_FILE_MODE")),
            dir_mode=parse_mode(os.getenv("OUTPUT_DIR_MODE")),
            max_workers=int(os.getenv("MAX_WORKERS")) if os.getenv("MAX_WORKERS") else None,
        )

    def override(self, **changes) -> "ProcessingConfig":
        """Return a copy with every non-None change applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def default_canvas_targets() -> Tuple[CanvasTarget, ...]:
    """Mode A target list: CANVAS_SIZES from the environment, or xs/sm/md/lg."""
    return parse_canvas_sizes(os.getenv("CANVAS_SIZES", DEFAULT_CANVAS_SIZES))


def single_canvas_target(width, height, label: str = "processed") -> Tuple[CanvasTarget, ...]:
    """Mode B target list built from two command-line integers."""
    return (CanvasTarget(parse_dimension(width), parse_dimension(height), label),)
