"""RGBA raster container shared by every pipeline stage.

A Raster wraps an H×W×4 uint8 numpy array in RGBA order. Stages either
mutate the array in place (the classifier) or build a new Raster (the
compositor); none of them ever changes the dimensions.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

Pixel = Tuple[int, int, int, int]


class Raster:
    """Owned, bounds-checked RGBA pixel grid."""

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Raster expects an H×W×4 array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Raster expects uint8 pixels, got {pixels.dtype}")
        self.pixels = pixels

    @classmethod
    def filled(cls, width: int, height: int, color: Pixel) -> "Raster":
        """Create a raster of the given size filled with one RGBA value."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = color
        return cls(pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width), matching numpy's image shape convention."""
        return self.pixels.shape[:2]

    @property
    def rgb(self) -> np.ndarray:
        """View of the colour channels (H×W×3)."""
        return self.pixels[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        """View of the alpha channel (H×W)."""
        return self.pixels[..., 3]

    def pixel_at(self, x: int, y: int) -> Pixel:
        """Return the (r, g, b, a) value at column x, row y.

        Raises:
            IndexError: If (x, y) falls outside the raster
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}×{self.height} raster")
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def copy(self) -> "Raster":
        return Raster(self.pixels.copy())

    def same_size(self, other: "Raster") -> bool:
        return self.shape == other.shape

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self.pixels, other.pixels)

    def __repr__(self) -> str:
        return f"Raster({self.width}×{self.height})"
