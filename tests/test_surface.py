from __future__ import annotations

import unittest

from core.surface import PixelSurface
from helpers import gradient_surface


class PixelSurfaceTests(unittest.TestCase):
    def test_from_bytes_rejects_wrong_length(self) -> None:
        with self.assertRaises(ValueError):
            PixelSurface.from_bytes(2, 2, b"\x00" * 15)

    def test_from_bytes_is_row_major_rgba(self) -> None:
        data = bytes(range(4 * 3 * 2))
        s = PixelSurface.from_bytes(3, 2, data)
        self.assertEqual(s.size, (3, 2))
        self.assertEqual(s.get_pixel(1, 0), (4, 5, 6, 7))
        self.assertEqual(s.get_pixel(0, 1), (12, 13, 14, 15))
        self.assertEqual(s.to_bytes(), data)

    def test_set_pixel_ignores_out_of_bounds(self) -> None:
        s = PixelSurface.blank(4, 4, (1, 2, 3, 255))
        before = s.version
        self.assertFalse(s.set_pixel(4, 0, (0, 0, 0, 0)))
        self.assertFalse(s.set_pixel(-1, 2, (0, 0, 0, 0)))
        self.assertEqual(s.version, before)
        self.assertTrue(s.set_pixel(3, 3, (9, 9, 9, 0)))
        self.assertEqual(s.get_pixel(3, 3), (9, 9, 9, 0))
        self.assertGreater(s.version, before)

    def test_flip_horizontal_returns_new_mirrored_surface(self) -> None:
        s = gradient_surface(5, 3)
        flipped = s.flipped_horizontal()
        self.assertIsNot(flipped, s)
        for y in range(3):
            for x in range(5):
                self.assertEqual(flipped.get_pixel(x, y), s.get_pixel(4 - x, y))

    def test_flip_vertical(self) -> None:
        s = gradient_surface(3, 4)
        flipped = s.flipped_vertical()
        self.assertEqual(flipped.get_pixel(1, 0), s.get_pixel(1, 3))
        self.assertEqual(flipped.get_pixel(2, 3), s.get_pixel(2, 0))

    def test_rotate_clockwise_swaps_dimensions(self) -> None:
        s = gradient_surface(3, 2)
        r = s.rotated_cw()
        self.assertEqual(r.size, (2, 3))
        # Clockwise: old bottom-left lands top-left, old top-left lands top-right.
        self.assertEqual(r.get_pixel(0, 0), s.get_pixel(0, 1))
        self.assertEqual(r.get_pixel(1, 0), s.get_pixel(0, 0))
        self.assertEqual(r.get_pixel(1, 2), s.get_pixel(2, 0))

    def test_four_rotations_restore_pixels(self) -> None:
        s = gradient_surface(7, 4)
        r = s
        for _ in range(4):
            r = r.rotated_cw()
        self.assertTrue(r.same_pixels(s))

    def test_copy_is_independent(self) -> None:
        s = gradient_surface(2, 2)
        c = s.copy()
        c.set_pixel(0, 0, (0, 0, 0, 0))
        self.assertEqual(s.get_pixel(0, 0)[3], 255)

    def test_pil_round_trip_keeps_alpha(self) -> None:
        s = PixelSurface.blank(2, 1, (10, 20, 30, 40))
        back = PixelSurface.from_pil(s.to_pil())
        self.assertTrue(back.same_pixels(s))


if __name__ == "__main__":
    unittest.main()
