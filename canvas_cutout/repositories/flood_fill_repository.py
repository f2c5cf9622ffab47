# repositories/flood_fill_repository.py
from typing import Iterable, Tuple

import cv2
import numpy as np

from ..models.canvas_target import ColorTolerance

MASK_FILL_VALUE = 255


class FloodFillRepository:
    """
    Raw OpenCV flood fill, mask-only.

    • Never mutates the pixels it is given.
    • Each seed compares against its own colour (fixed range), not its neighbours.
    """

    @staticmethod
    def empty_mask(height: int, width: int) -> np.ndarray:
        """(H+2, W+2) mask: one guard pixel on every side, as cv2.floodFill requires."""
        return np.zeros((height + 2, width + 2), dtype=np.uint8)

    @staticmethod
    def _flags(connectivity: int) -> int:
        return (
            connectivity
            | (MASK_FILL_VALUE << 8)
            | cv2.FLOODFILL_MASK_ONLY
            | cv2.FLOODFILL_FIXED_RANGE
        )

    def _fill_into(
        self,
        pixels: np.ndarray,
        mask: np.ndarray,
        seed: Tuple[int, int],
        tolerance: ColorTolerance,
        connectivity: int,
    ) -> None:
        """Fill from *seed* (x, y) into *mask*; already-set mask pixels act as walls."""
        diff = tolerance.as_scalar()
        cv2.floodFill(
            pixels, mask, seedPoint=(int(seed[0]), int(seed[1])), newVal=(0, 0, 0),
            loDiff=diff, upDiff=diff, flags=self._flags(connectivity),
        )

    @staticmethod
    def _clear_guard(mask: np.ndarray) -> np.ndarray:
        # cv2 paints the guard border with 1; only fill hits count
        mask[0, :] = mask[-1, :] = 0
        mask[:, 0] = mask[:, -1] = 0
        return mask

    def fill_from_seed(
        self,
        pixels: np.ndarray,
        seed: Tuple[int, int],
        tolerance: ColorTolerance,
        connectivity: int = 8,
    ) -> np.ndarray:
        """
        Flood fill from *seed* (x, y) into a fresh mask and return it.
        """
        h, w = pixels.shape[:2]
        mask = self.empty_mask(h, w)
        self._fill_into(pixels, mask, seed, tolerance, connectivity)
        return self._clear_guard(mask)

    def fill_from_seeds(
        self,
        pixels: np.ndarray,
        seeds: Iterable[Tuple[int, int]],
        tolerance: ColorTolerance,
        connectivity: int = 8,
    ) -> np.ndarray:
        """
        Fills run in seed order into one shared mask. Pixels marked by an
        earlier seed are walls for later fills, so a later seed only grows
        through unmarked pixels next to it.
        """
        h, w = pixels.shape[:2]
        mask = self.empty_mask(h, w)
        for seed in seeds:
            self._fill_into(pixels, mask, seed, tolerance, connectivity)
        return self._clear_guard(mask)
