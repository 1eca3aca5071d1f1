from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class PixelBuffer:
    """
    Decoded raster: RGB or RGBA pixels, shape (H, W, 3|4), dtype uint8.
    Holds its own read-only copy of the samples.
    """
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.pixels.shape[:2] != (self.height, self.width) or self.pixels.ndim != 3 \
                or self.pixels.shape[2] not in (3, 4):
            raise ValueError(f"Pixel array of shape {self.pixels.shape} does not match {self.width}x{self.height}")
        object.__setattr__(self, "pixels", _frozen(self.pixels.astype(np.uint8, copy=False)))

    @property
    def has_alpha(self) -> bool:
        return self.pixels.shape[2] == 4


@dataclass(frozen=True)
class LuminancePlane:
    """One intensity byte per pixel, shape (H, W)."""
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.data.shape != (self.height, self.width):
            raise ValueError(f"Luminance array of shape {self.data.shape} does not match {self.width}x{self.height}")
        object.__setattr__(self, "data", _frozen(self.data.astype(np.uint8, copy=False)))

    def to_bytes(self) -> bytes:
        return self.data.tobytes(order="C")


@dataclass(frozen=True)
class BinaryMatrix:
    """Black/white matrix, True = black."""
    width: int
    height: int
    bits: np.ndarray

    def __post_init__(self):
        if self.bits.shape != (self.height, self.width):
            raise ValueError(f"Bit array of shape {self.bits.shape} does not match {self.width}x{self.height}")
        object.__setattr__(self, "bits", _frozen(self.bits.astype(bool, copy=False)))

    def to_image(self) -> np.ndarray:
        """Render as 8-bit grayscale: black = 0, white = 255."""
        return np.where(self.bits, 0, 255).astype(np.uint8)
