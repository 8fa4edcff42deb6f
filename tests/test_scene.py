from __future__ import annotations

import unittest

from core.collection import VisageCollection
from core.gesture import FrameInput, GestureController
from core.scene import (
    DrawBorder,
    DrawBrushPreview,
    DrawButton,
    DrawDebugText,
    DrawHandle,
    DrawImage,
    DrawSlider,
    build_draw_list,
)
from core.state import CanvasSettings
from core.surface import PixelSurface
from core.visage import Visage


def _of(ops: list, kind: type) -> list:
    return [op for op in ops if isinstance(op, kind)]


class DrawListTests(unittest.TestCase):
    def setUp(self) -> None:
        self.c = VisageCollection()
        self.back = Visage(x=100, y=100, w=200, h=160, surface=PixelSurface.blank(100, 80))
        self.front = Visage(x=400, y=400, w=50, h=50, surface=PixelSurface.blank(50, 50))
        self.c.insert_front(self.back)
        self.c.insert_front(self.front)
        self.ctl = GestureController(self.c)

    def test_images_back_to_front_without_chrome(self) -> None:
        ops = build_draw_list(self.c, self.ctl)
        images = _of(ops, DrawImage)
        self.assertEqual([op.surface for op in images], [self.back.surface, self.front.surface])
        self.assertEqual(images[0].rect, (100, 100, 200, 160))
        self.assertEqual(len(ops), 2)

    def test_selection_chrome(self) -> None:
        self.c.select(0)
        ops = build_draw_list(self.c, self.ctl)
        self.assertEqual(_of(ops, DrawBorder)[0].rect, (100, 100, 200, 160))
        self.assertEqual(
            {op.center for op in _of(ops, DrawHandle)},
            {(100, 100), (300, 100), (100, 260), (300, 260)},
        )
        buttons = _of(ops, DrawButton)
        self.assertEqual(len(buttons), 6)
        self.assertEqual(buttons[0].rect, (62, 110, 32, 32))
        self.assertEqual(buttons[5].rect, (62, 270, 32, 32))
        self.assertFalse(any(b.disabled for b in buttons))
        self.assertEqual(_of(ops, DrawSlider), [])

    def test_erase_tool_adds_preview_and_slider(self) -> None:
        self.c.select(0)
        self.ctl.tools.erase_active = True
        self.ctl.brush.set_radius(20)
        ops = build_draw_list(self.c, self.ctl, pointer=(150, 150))

        preview = _of(ops, DrawBrushPreview)[0]
        self.assertEqual(preview.center, (150, 150))
        # Visage is shown at 2x, so the 20px surface disc looks 40px wide on screen.
        self.assertAlmostEqual(preview.radius, 40.0)

        slider = _of(ops, DrawSlider)[0]
        self.assertEqual(slider.track, (125, 278, 150, 8))
        self.assertEqual(slider.knob_x, 145)
        self.assertEqual(slider.value, 20)

        disabled = {b.action.label for b in _of(ops, DrawButton) if b.disabled}
        self.assertEqual(disabled, {"Move", "Delete", "Copy"})

    def test_no_preview_when_pointer_is_far(self) -> None:
        self.c.select(0)
        self.ctl.tools.erase_active = True
        ops = build_draw_list(self.c, self.ctl, pointer=(900, 900))
        self.assertEqual(_of(ops, DrawBrushPreview), [])

    def test_debug_text(self) -> None:
        ctl = GestureController(self.c, CanvasSettings(show_debug=True))
        ctl.update(FrameInput(x=410, y=410, primary=True))
        ops = build_draw_list(self.c, ctl)
        self.assertEqual(_of(ops, DrawDebugText)[0].text, "Action: Dragging")


if __name__ == "__main__":
    unittest.main()
