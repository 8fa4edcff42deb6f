from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from core.surface import PixelSurface


class Handle(Enum):
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"


# Hit-test order for corner handles; first match wins.
HANDLE_ORDER = (Handle.TOP_LEFT, Handle.TOP_RIGHT, Handle.BOTTOM_LEFT, Handle.BOTTOM_RIGHT)


@dataclass(eq=False)
class Visage:
    x: int
    y: int
    w: int
    h: int
    surface: PixelSurface

    @classmethod
    def at_natural_size(cls, surface: PixelSurface, x: int, y: int) -> "Visage":
        return cls(x=int(x), y=int(y), w=surface.width, h=surface.height, surface=surface)

    def rect(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.w, self.h)

    def normalized_rect(self) -> Tuple[int, int, int, int]:
        # w/h can be negative mid-resize; callers hit-testing want left/top first.
        x0 = min(self.x, self.x + self.w)
        y0 = min(self.y, self.y + self.h)
        return (x0, y0, abs(self.w), abs(self.h))

    def contains(self, px: int, py: int) -> bool:
        x0, y0, w, h = self.normalized_rect()
        return x0 <= px <= x0 + w and y0 <= py <= y0 + h

    def corner(self, handle: Handle) -> Tuple[int, int]:
        if handle is Handle.TOP_LEFT:
            return (self.x, self.y)
        if handle is Handle.TOP_RIGHT:
            return (self.x + self.w, self.y)
        if handle is Handle.BOTTOM_LEFT:
            return (self.x, self.y + self.h)
        return (self.x + self.w, self.y + self.h)

    def handle_at(self, px: int, py: int, area: int) -> Optional[Handle]:
        for handle in HANDLE_ORDER:
            cx, cy = self.corner(handle)
            if cx - area <= px <= cx + area and cy - area <= py <= cy + area:
                return handle
        return None

    def within_reach(self, px: int, py: int, reach: int) -> bool:
        x0, y0, w, h = self.normalized_rect()
        return x0 - reach <= px <= x0 + w + reach and y0 - reach <= py <= y0 + h + reach

    def move_to(self, x: int, y: int) -> None:
        self.x = int(x)
        self.y = int(y)

    def move_by(self, dx: int, dy: int) -> None:
        self.x += int(dx)
        self.y += int(dy)

    def scale(self) -> Tuple[float, float]:
        """Screen pixels per surface pixel on each axis (0.0 when degenerate)."""
        sx = self.w / float(self.surface.width) if self.surface.width else 0.0
        sy = self.h / float(self.surface.height) if self.surface.height else 0.0
        return (sx, sy)

    def screen_to_surface(self, sx: int, sy: int) -> Optional[Tuple[int, int]]:
        """
        Map a screen point to surface pixel coordinates.

        The displayed size may differ from the surface size; the mapping is a
        linear scale floored to whole pixels. Returns None when the visage is
        degenerate (w or h is zero) since no mapping exists.
        """
        if self.w == 0 or self.h == 0:
            return None
        px = math.floor((sx - self.x) * self.surface.width / self.w)
        py = math.floor((sy - self.y) * self.surface.height / self.h)
        return (px, py)

    def resize_with(self, handle: Handle, px: int, py: int) -> None:
        # Incremental against the live rectangle; w/h may go negative here.
        x0, y0 = self.x, self.y
        if handle is Handle.TOP_LEFT:
            self.w += x0 - px
            self.h += y0 - py
            self.x = px
            self.y = py
        elif handle is Handle.TOP_RIGHT:
            self.w = px - x0
            self.h += y0 - py
            self.y = py
        elif handle is Handle.BOTTOM_LEFT:
            self.w += x0 - px
            self.h = py - y0
            self.x = px
        else:
            self.w = px - x0
            self.h = py - y0

    def finalize_resize(self) -> Tuple[bool, bool]:
        """Turn an inverted rectangle back into a positive one, mirroring the surface."""
        flipped_x = flipped_y = False
        if self.w < 0:
            self.surface = self.surface.flipped_horizontal()
            self.x += self.w
            self.w = -self.w
            flipped_x = True
        if self.h < 0:
            self.surface = self.surface.flipped_vertical()
            self.y += self.h
            self.h = -self.h
            flipped_y = True
        # Keep the at-rest invariant w > 0 and h > 0.
        self.w = max(1, self.w)
        self.h = max(1, self.h)
        return (flipped_x, flipped_y)

    def duplicate(self, offset: int) -> "Visage":
        return Visage(
            x=self.x + offset,
            y=self.y + offset,
            w=self.w,
            h=self.h,
            surface=self.surface.copy(),
        )
