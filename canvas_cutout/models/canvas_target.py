from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from ..errors import GeometryError


@dataclass(frozen=True)
class CanvasTarget:
    """
    One named output size. Immutable; one processing pass per target per source.
    """
    width: int
    height: int
    label: str

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise GeometryError(
                f"Canvas dimensions must be positive, got {self.width}x{self.height}"
            )

    def __str__(self) -> str:
        return f"{self.label}({self.width}x{self.height})"


@dataclass(frozen=True)
class ColorTolerance:
    """
    Symmetric per-channel threshold for the flood fill, in 0-255 units.
    Applied both below and above the seed colour.
    """
    c0: int = 10
    c1: int = 10
    c2: int = 10

    def __post_init__(self):
        for value in self.as_tuple():
            if not 0 <= value <= 255:
                raise ValueError(f"Tolerance values must be within 0-255, got {self.as_tuple()}")

    @classmethod
    def uniform(cls, value: int) -> "ColorTolerance":
        return cls(value, value, value)

    def as_tuple(self) -> Tuple[int, int, int]:
        return self.c0, self.c1, self.c2

    def as_scalar(self) -> Tuple[int, int, int, int]:
        """cv2 expects a 4-component Scalar for loDiff / upDiff."""
        return self.c0, self.c1, self.c2, 0
