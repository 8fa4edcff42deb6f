from __future__ import annotations

from functools import lru_cache
from typing import Tuple

import numpy as np

from core.surface import PixelSurface


Point = Tuple[int, int]


@lru_cache(maxsize=256)
def disc_offsets(radius: int) -> np.ndarray:
    """Nx2 array of (dx, dy) with dx*dx + dy*dy <= radius*radius."""
    r = max(0, int(radius))
    dy, dx = np.mgrid[-r:r + 1, -r:r + 1]
    inside = dx * dx + dy * dy <= r * r
    out = np.stack([dx[inside], dy[inside]], axis=1).astype(np.int32)
    out.setflags(write=False)
    return out


def erase_disc(surface: PixelSurface, center: Point, radius: int) -> int:
    offsets = disc_offsets(radius)
    xs = offsets[:, 0] + int(center[0])
    ys = offsets[:, 1] + int(center[1])
    keep = (xs >= 0) & (ys >= 0) & (xs < surface.width) & (ys < surface.height)
    if not np.any(keep):
        return 0
    # RGB cleared too so erased pixels are fully (0, 0, 0, 0).
    surface.pixels[ys[keep], xs[keep]] = 0
    surface.touch()
    return int(np.count_nonzero(keep))


def _clip_box(surface: PixelSurface, start: Point, end: Point, radius: int) -> Tuple[int, int, int, int]:
    x0 = max(0, min(start[0], end[0]) - radius)
    y0 = max(0, min(start[1], end[1]) - radius)
    x1 = min(surface.width, max(start[0], end[0]) + radius + 1)
    y1 = min(surface.height, max(start[1], end[1]) + radius + 1)
    return x0, y0, x1, y1


def segment_mask(box: Tuple[int, int, int, int], start: Point, end: Point, radius: int) -> np.ndarray:
    """Pixels of `box` whose distance to the segment start-end is <= radius."""
    x0, y0, x1, y1 = box
    ys, xs = np.mgrid[y0:y1, x0:x1]
    ax, ay = float(start[0]), float(start[1])
    vx, vy = float(end[0] - start[0]), float(end[1] - start[1])
    length2 = vx * vx + vy * vy
    qx = xs - ax
    qy = ys - ay
    if length2 == 0.0:
        t = np.zeros_like(qx, dtype=np.float64)
    else:
        t = np.clip((qx * vx + qy * vy) / length2, 0.0, 1.0)
    ex = qx - t * vx
    ey = qy - t * vy
    return ex * ex + ey * ey <= float(radius * radius) + 1e-9


def erase_segment(surface: PixelSurface, start: Point, end: Point, radius: int) -> int:
    """
    Erase a thick line of the given radius between two surface pixels.

    The covered area is the capsule around the segment: both end discs plus
    everything in between, so fast pointer moves leave no gaps.
    """
    if tuple(start) == tuple(end):
        return erase_disc(surface, start, radius)

    r = max(0, int(radius))
    box = _clip_box(surface, start, end, r)
    x0, y0, x1, y1 = box
    if x1 <= x0 or y1 <= y0:
        return 0

    mask = segment_mask(box, start, end, r)
    if not np.any(mask):
        return 0
    region = surface.pixels[y0:y1, x0:x1]
    region[mask] = 0
    surface.touch()
    return int(np.count_nonzero(mask))


def erase_stroke(surface: PixelSurface, previous: Point | None, current: Point, radius: int) -> int:
    # First sample of a stroke has nothing to connect to.
    if previous is None:
        return erase_disc(surface, current, radius)
    return erase_segment(surface, previous, current, radius)
