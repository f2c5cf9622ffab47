from __future__ import annotations

from typing import Tuple
import logging

import cv2
import numpy as np

from ..errors import GeometryError
from ..models.canvas_target import CanvasTarget
from ..models.image import Image

logger = logging.getLogger(__name__)


class ScalingService:
    """
    Cover-fit scaling: the resized buffer is never smaller than the canvas
    in either axis, so the later centred crop always fits.
    """

    def __init__(self, interpolation: int = cv2.INTER_LINEAR):
        self.interpolation = interpolation

    @staticmethod
    def cover_scale(width: int, height: int, target: CanvasTarget) -> float:
        if width <= 0 or height <= 0:
            raise GeometryError(f"Cannot scale a {width}x{height} source")
        return max(target.width / width, target.height / height)

    @classmethod
    def cover_size(cls, width: int, height: int, target: CanvasTarget) -> Tuple[int, int, float]:
        """
        (resized_w, resized_h, scale). Rounding is clamped to the canvas so
        float error can never put one axis a pixel short.
        """
        scale = cls.cover_scale(width, height, target)
        new_w = max(int(round(width * scale)), target.width)
        new_h = max(int(round(height * scale)), target.height)
        return new_w, new_h, scale

    def resize_to_cover(self, img: Image, target: CanvasTarget) -> Tuple[np.ndarray, float]:
        """
        Returns a freshly allocated resized buffer and the scale used.
        The source pixels are left untouched.
        """
        new_w, new_h, scale = self.cover_size(img.width, img.height, target)
        logger.debug("%s: scale %.4f → %dx%d for %s", img.stem, scale, new_w, new_h, target)

        if (new_w, new_h) == (img.width, img.height):
            return np.array(img.pixels, copy=True), scale

        resized = cv2.resize(img.pixels, (new_w, new_h), interpolation=self.interpolation)
        return resized, scale
