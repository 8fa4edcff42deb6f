from __future__ import annotations

import unittest

from core.collection import VisageCollection
from core.surface import PixelSurface
from core.visage import Visage


def _visage(x: int, y: int, w: int = 50, h: int = 50) -> Visage:
    return Visage(x=x, y=y, w=w, h=h, surface=PixelSurface.blank(w, h, (255, 255, 255, 255)))


class VisageCollectionTests(unittest.TestCase):
    def test_hit_test_front_most_wins(self) -> None:
        c = VisageCollection()
        c.insert_front(_visage(0, 0))
        c.insert_front(_visage(25, 25))
        self.assertEqual(c.hit_test(30, 30), 1)
        self.assertEqual(c.hit_test(5, 5), 0)
        self.assertIsNone(c.hit_test(200, 200))

    def test_remove_sole_visage_clears_selection(self) -> None:
        c = VisageCollection([_visage(0, 0)])
        c.select(0)
        c.remove_at(0)
        self.assertEqual(len(c), 0)
        self.assertFalse(c.has_selection)
        self.assertIsNone(c.selected)

    def test_remove_selects_new_front_most(self) -> None:
        a, b, d = _visage(0, 0), _visage(10, 0), _visage(20, 0)
        c = VisageCollection([a, b, d])
        c.select(0)
        c.remove_at(0)
        self.assertEqual(c.selected_index, 1)
        self.assertIs(c.selected, d)

    def test_move_to_front_and_back_follow_selection(self) -> None:
        a, b, d = _visage(0, 0), _visage(10, 0), _visage(20, 0)
        c = VisageCollection([a, b, d])
        c.select(0)
        self.assertEqual(c.move_to_front(0), 2)
        self.assertEqual(list(c), [b, d, a])
        self.assertIs(c.selected, a)
        self.assertEqual(c.move_to_back(2), 0)
        self.assertEqual(list(c), [a, b, d])
        self.assertIs(c.selected, a)

    def test_moving_other_visage_keeps_selected_object(self) -> None:
        a, b, d = _visage(0, 0), _visage(10, 0), _visage(20, 0)
        c = VisageCollection([a, b, d])
        c.select(2)
        c.move_to_back(2 - 1)
        self.assertIs(c.selected, d)
        c.move_to_front(0)
        self.assertIs(c.selected, d)

    def test_select_out_of_range(self) -> None:
        c = VisageCollection([_visage(0, 0)])
        with self.assertRaises(IndexError):
            c.select(1)

    def test_translate_all(self) -> None:
        a, b = _visage(0, 0), _visage(10, 20)
        c = VisageCollection([a, b])
        c.translate_all(5, -3)
        self.assertEqual((a.x, a.y, b.x, b.y), (5, -3, 15, 17))

    def test_membership_is_by_identity(self) -> None:
        a = _visage(0, 0)
        twin = _visage(0, 0)
        c = VisageCollection([a])
        self.assertIn(a, c)
        self.assertNotIn(twin, c)


if __name__ == "__main__":
    unittest.main()
