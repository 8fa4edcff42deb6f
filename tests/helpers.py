from __future__ import annotations

import numpy as np

from core.surface import PixelSurface


def gradient_surface(width: int, height: int) -> PixelSurface:
    """Opaque surface where every pixel has distinct RGB values."""
    ys, xs = np.mgrid[0:height, 0:width]
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[..., 0] = xs % 256
    arr[..., 1] = ys % 256
    arr[..., 2] = (xs * 7 + ys * 13) % 256
    arr[..., 3] = 255
    return PixelSurface(arr)
