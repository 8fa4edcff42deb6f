from __future__ import annotations

from typing import Tuple

import numpy as np
from PIL import Image


RGBA = Tuple[int, int, int, int]


class PixelSurface:
    """
    Mutable RGBA pixel buffer stored as an HxWx4 uint8 array (row-major).

    Point writes happen in place; flip/rotate return a new surface.
    `version` increases on every in-place write so renderers can cache
    converted images.
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError("pixels must be HxWx4 uint8")
        self.pixels = pixels
        self.version = 0

    @classmethod
    def blank(cls, width: int, height: int, rgba: RGBA = (0, 0, 0, 0)) -> "PixelSurface":
        arr = np.empty((int(height), int(width), 4), dtype=np.uint8)
        arr[...] = rgba
        return cls(arr)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "PixelSurface":
        if len(data) != 4 * width * height:
            raise ValueError(f"expected {4 * width * height} bytes for {width}x{height} RGBA, got {len(data)}")
        arr = np.frombuffer(data, dtype=np.uint8).reshape((height, width, 4)).copy()
        return cls(arr)

    @classmethod
    def from_pil(cls, img: Image.Image) -> "PixelSurface":
        arr = np.array(img.convert("RGBA"), dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError("Expected RGBA image")
        return cls(arr)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels, mode="RGBA")

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> RGBA:
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return (r, g, b, a)

    def set_pixel(self, x: int, y: int, rgba: RGBA) -> bool:
        # Out-of-bounds writes are ignored.
        if not self.contains(x, y):
            return False
        self.pixels[y, x] = rgba
        self.touch()
        return True

    def touch(self) -> None:
        self.version += 1

    def copy(self) -> "PixelSurface":
        return PixelSurface(self.pixels.copy())

    def flipped_horizontal(self) -> "PixelSurface":
        return PixelSurface(np.ascontiguousarray(np.fliplr(self.pixels)))

    def flipped_vertical(self) -> "PixelSurface":
        return PixelSurface(np.ascontiguousarray(np.flipud(self.pixels)))

    def rotated_cw(self) -> "PixelSurface":
        # Exact 90 degree turn: no resampling, W x H becomes H x W.
        return PixelSurface(np.ascontiguousarray(np.rot90(self.pixels, k=-1)))

    def same_pixels(self, other: "PixelSurface") -> bool:
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))

    def __repr__(self) -> str:
        return f"PixelSurface({self.width}x{self.height})"
