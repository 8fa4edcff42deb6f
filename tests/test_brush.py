from __future__ import annotations

import unittest

import numpy as np

from core.brush import disc_offsets, erase_disc, erase_segment, erase_stroke
from core.surface import PixelSurface


def _opaque(w: int, h: int) -> PixelSurface:
    return PixelSurface.blank(w, h, (200, 100, 50, 255))


def _segment_dist2(px: float, py: float, a: tuple[int, int], b: tuple[int, int]) -> float:
    vx, vy = b[0] - a[0], b[1] - a[1]
    qx, qy = px - a[0], py - a[1]
    length2 = vx * vx + vy * vy
    t = 0.0 if length2 == 0 else max(0.0, min(1.0, (qx * vx + qy * vy) / length2))
    ex, ey = qx - t * vx, qy - t * vy
    return ex * ex + ey * ey


class DiscOffsetsTests(unittest.TestCase):
    def test_offsets_match_inclusive_disc(self) -> None:
        r = 5
        expected = {(dx, dy) for dx in range(-r, r + 1) for dy in range(-r, r + 1) if dx * dx + dy * dy <= r * r}
        got = {(int(dx), int(dy)) for dx, dy in disc_offsets(r)}
        self.assertEqual(got, expected)

    def test_radius_zero_is_single_pixel(self) -> None:
        self.assertEqual([tuple(o) for o in disc_offsets(0)], [(0, 0)])


class EraseDiscTests(unittest.TestCase):
    def test_erases_exactly_the_disc(self) -> None:
        s = _opaque(40, 40)
        r = 6
        erase_disc(s, (20, 17), r)
        for y in range(40):
            for x in range(40):
                inside = (x - 20) ** 2 + (y - 17) ** 2 <= r * r
                self.assertEqual(s.get_pixel(x, y)[3] == 0, inside, (x, y))

    def test_erased_pixels_clear_rgb(self) -> None:
        s = _opaque(10, 10)
        erase_disc(s, (5, 5), 2)
        self.assertEqual(s.get_pixel(5, 5), (0, 0, 0, 0))

    def test_disc_is_clipped_to_bounds(self) -> None:
        s = _opaque(10, 8)
        count = erase_disc(s, (0, 0), 3)
        expected = sum(1 for x in range(10) for y in range(8) if x * x + y * y <= 9)
        self.assertEqual(count, expected)
        self.assertEqual(int(np.count_nonzero(s.pixels[..., 3] == 0)), expected)

    def test_disc_fully_outside_changes_nothing(self) -> None:
        s = _opaque(10, 10)
        before = s.version
        self.assertEqual(erase_disc(s, (-50, 5), 5), 0)
        self.assertEqual(s.version, before)
        self.assertTrue(np.all(s.pixels[..., 3] == 255))


class EraseSegmentTests(unittest.TestCase):
    def test_capsule_has_no_gaps(self) -> None:
        s = _opaque(60, 40)
        a, b, r = (5, 5), (50, 30), 3
        erase_segment(s, a, b, r)
        for y in range(40):
            for x in range(60):
                d2 = _segment_dist2(x, y, a, b)
                alpha = s.get_pixel(x, y)[3]
                if d2 <= r * r - 1e-6:
                    self.assertEqual(alpha, 0, (x, y))
                elif d2 > r * r + 1e-6:
                    self.assertEqual(alpha, 255, (x, y))

    def test_fast_move_between_far_points(self) -> None:
        s = _opaque(200, 20)
        erase_segment(s, (0, 10), (199, 10), 1)
        self.assertTrue(np.all(s.pixels[9:12, :, 3] == 0))
        self.assertTrue(np.all(s.pixels[:9, :, 3] == 255))
        self.assertTrue(np.all(s.pixels[12:, :, 3] == 255))

    def test_same_point_is_a_disc(self) -> None:
        a = _opaque(20, 20)
        b = _opaque(20, 20)
        erase_segment(a, (10, 10), (10, 10), 4)
        erase_disc(b, (10, 10), 4)
        self.assertTrue(a.same_pixels(b))

    def test_segment_partially_outside_surface(self) -> None:
        s = _opaque(20, 20)
        erase_segment(s, (-10, 10), (5, 10), 2)
        self.assertEqual(s.get_pixel(0, 10)[3], 0)
        self.assertEqual(s.get_pixel(5, 12)[3], 0)
        self.assertEqual(s.get_pixel(8, 10)[3], 255)

    def test_stroke_without_predecessor_paints_end_disc_only(self) -> None:
        s = _opaque(30, 30)
        erase_stroke(s, None, (20, 20), 2)
        self.assertEqual(s.get_pixel(20, 20)[3], 0)
        self.assertEqual(s.get_pixel(10, 10)[3], 255)
        erase_stroke(s, (20, 20), (10, 10), 2)
        self.assertEqual(s.get_pixel(15, 15)[3], 0)
        self.assertEqual(s.get_pixel(10, 10)[3], 0)


if __name__ == "__main__":
    unittest.main()
