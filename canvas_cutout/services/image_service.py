from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union
import logging

import numpy as np

from ..errors import GeometryError
from ..models.image import Image
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O helpers and pixel bookkeeping. No matte logic here."""
    def __init__(self, image_repository: ImageRepository | None = None):
        self.image_repository = image_repository or ImageRepository()

    def load(self, path: str | Path) -> Image:
        """Load a single image from disk into an Image object."""
        return self.image_repository.load(path)

    def decode(self, data: bytes, path: str | Path | None = None) -> Image:
        return self.image_repository.decode(data, path)

    def list_sources(
        self,
        folder: Union[str, Path],
        *,
        exts: Iterable[str] | None = None,
    ) -> List[Path]:
        """
        Candidate source files of *folder*. Enumeration errors propagate.
        """
        return self.image_repository.list_dir(folder, exts=exts)

    def save(self, pixels: np.ndarray, path: Union[str, Path], *, mode: int | None = None,
             webp_quality: int = 95) -> Path:
        """
        Business-level method to encode and save pixels; the format follows the suffix.
        """
        return self.image_repository.save(pixels, path, mode=mode, webp_quality=webp_quality)

    def ensure_dir(self, folder: Union[str, Path], mode: int | None = None) -> bool:
        return self.image_repository.ensure_dir(folder, mode)

    @staticmethod
    def crop_pixels(pixels: np.ndarray, bound_r, bound_l, bound_t, bound_b) -> np.ndarray:
        """
        Copy of pixels[bound_t:bound_b, bound_l:bound_r]. The rectangle must lie
        fully inside the buffer; anything else is a geometry defect.
        """
        img_h, img_w = pixels.shape[:2]
        width = bound_r - bound_l
        height = bound_b - bound_t
        logger.debug("Crop bounds=(%d,%d,%d,%d) → %dx%d", bound_l, bound_t, bound_r, bound_b,
                     width, height)

        if bound_l < 0 or bound_t < 0 or bound_r > img_w or bound_b > img_h \
                or width <= 0 or height <= 0:
            raise GeometryError(
                f"Crop rectangle ({bound_l},{bound_t})-({bound_r},{bound_b}) "
                f"exceeds {img_w}x{img_h} buffer"
            )

        return pixels[bound_t:bound_b, bound_l:bound_r].copy()
