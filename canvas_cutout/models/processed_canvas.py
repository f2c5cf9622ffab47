from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .canvas_target import CanvasTarget


@dataclass
class ProcessedCanvas:
    """
    Result of one (source, target) pass: an RGBA buffer of exactly
    target.height x target.width, ready to hand to the encoder.
    """
    pixels: np.ndarray          # Shape (Ch, Cw, 4), dtype uint8, RGBA order.
    target: CanvasTarget
    source_path: Path | None = None
    scale: float = 1.0          # Cover-fit scale applied to the source
    transparent_ratio: float = 0.0  # Fraction of pixels classified as background
