from __future__ import annotations

from typing import List, Tuple
import logging

import cv2
import numpy as np

from ..errors import GeometryError
from ..models.canvas_target import CanvasTarget, ColorTolerance
from ..repositories.flood_fill_repository import FloodFillRepository
from .image_service import ImageService

logger = logging.getLogger(__name__)

TRANSPARENT = 0
OPAQUE = 255


class MatteService:
    """
    Business-level matte extraction on an already cover-scaled buffer.

    • Flood fills from the four corners into a (H+2, W+2) mask.
    • Turns the mask into a hard binary alpha channel.
    • Crops the RGBA result to the canvas, centred.
    """

    def __init__(
        self,
        tolerance: ColorTolerance | None = None,
        flood_fill_repository: FloodFillRepository | None = None,
        image_service: ImageService | None = None,
    ):
        self.tolerance = tolerance or ColorTolerance()
        self.flood_fill = flood_fill_repository or FloodFillRepository()
        self.image_service = image_service or ImageService()

    @staticmethod
    def corner_seeds(width: int, height: int) -> List[Tuple[int, int]]:
        """(x, y) of the four corners: top-left, top-right, bottom-left, bottom-right."""
        return [
            (0, 0),
            (width - 1, 0),
            (0, height - 1),
            (width - 1, height - 1),
        ]

    @staticmethod
    def _color_channels(pixels: np.ndarray) -> np.ndarray:
        """cv2.floodFill only takes 1- or 3-channel input; alpha is ignored."""
        if pixels.ndim == 3 and pixels.shape[2] == 4:
            pixels = pixels[:, :, :3]
        return np.ascontiguousarray(pixels)

    def background_mask(self, pixels: np.ndarray) -> np.ndarray:
        """
        Returns uint8 mask (H+2, W+2); non-zero where a corner fill reached.
        mask[y + 1, x + 1] corresponds to pixels[y, x].
        """
        h, w = pixels.shape[:2]
        return self.flood_fill.fill_from_seeds(
            self._color_channels(pixels), self.corner_seeds(w, h), self.tolerance
        )

    @staticmethod
    def alpha_from_mask(mask: np.ndarray) -> np.ndarray:
        """Hard matte: background → 0, subject → 255. No feathering."""
        inner = mask[1:-1, 1:-1]
        return np.where(inner != 0, TRANSPARENT, OPAQUE).astype(np.uint8)

    @staticmethod
    def to_rgba(pixels: np.ndarray, alpha: np.ndarray) -> np.ndarray:
        if pixels.ndim == 2:
            rgb = cv2.cvtColor(pixels, cv2.COLOR_GRAY2RGB)
        else:
            rgb = pixels[:, :, :3]
        return np.dstack([rgb, alpha])

    @staticmethod
    def crop_origin(resized_w: int, resized_h: int, target: CanvasTarget) -> Tuple[int, int]:
        """
        Top-left of the centred crop. Odd differences truncate toward zero.
        """
        crop_x = int((resized_w - target.width) / 2)
        crop_y = int((resized_h - target.height) / 2)
        if crop_x < 0 or crop_y < 0:
            raise GeometryError(
                f"Resized buffer {resized_w}x{resized_h} is smaller than canvas {target}"
            )
        return crop_x, crop_y

    def extract(self, resized: np.ndarray, target: CanvasTarget) -> Tuple[np.ndarray, float]:
        """
        Args
        ----
        resized : np.ndarray  (Rh, Rw, 3|4)  uint8  RGB(A) order, cover-scaled for *target*

        Returns
        -------
        canvas : np.ndarray  (Ch, Cw, 4)  uint8  RGBA order
        transparent_ratio : float  fraction of canvas pixels classified as background
        """
        rh, rw = resized.shape[:2]
        mask = self.background_mask(resized)
        alpha = self.alpha_from_mask(mask)
        rgba = self.to_rgba(resized, alpha)

        crop_x, crop_y = self.crop_origin(rw, rh, target)
        canvas = self.image_service.crop_pixels(
            rgba,
            bound_r=crop_x + target.width,
            bound_l=crop_x,
            bound_t=crop_y,
            bound_b=crop_y + target.height,
        )

        transparent_ratio = float(np.count_nonzero(canvas[:, :, 3] == TRANSPARENT)) / canvas[:, :, 3].size
        logger.debug("%s: crop at (%d,%d) from %dx%d, %.1f%% background",
                     target, crop_x, crop_y, rw, rh, transparent_ratio * 100)
        return canvas, transparent_ratio
