from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from core.actions import TOOLBAR, ToolbarAction
from core.collection import VisageCollection
from core.gesture import GestureController, button_rect, slider_track
from core.surface import PixelSurface
from core.visage import HANDLE_ORDER, Visage


Rect = Tuple[int, int, int, int]


@dataclass
class DrawImage:
    surface: PixelSurface
    # Destination rectangle; w/h are negative while a resize is inverted.
    rect: Rect


@dataclass
class DrawBorder:
    rect: Rect
    thickness: int = 2


@dataclass
class DrawHandle:
    center: Tuple[int, int]
    radius: int


@dataclass
class DrawButton:
    action: ToolbarAction
    rect: Rect
    icon_size: int
    # Blocked while the erase tool is on.
    disabled: bool = False


@dataclass
class DrawBrushPreview:
    center: Tuple[int, int]
    radius: float


@dataclass
class DrawSlider:
    track: Rect
    knob_x: int
    value: int


@dataclass
class DrawDebugText:
    text: str


DrawOp = Union[DrawImage, DrawBorder, DrawHandle, DrawButton, DrawBrushPreview, DrawSlider, DrawDebugText]


def brush_preview_radius(v: Visage, radius: int) -> float:
    # The erased disc is `radius` surface pixels; show it at the visage's display scale.
    sx, _ = v.scale()
    return abs(sx) * radius


def build_draw_list(
    collection: VisageCollection,
    controller: GestureController,
    pointer: Optional[Tuple[int, int]] = None,
) -> List[DrawOp]:
    """Back-to-front draw operations for one frame."""
    settings = controller.settings
    ops: List[DrawOp] = []

    for v in collection:
        ops.append(DrawImage(surface=v.surface, rect=v.rect()))

    v = collection.selected
    if v is not None:
        ops.append(DrawBorder(rect=v.rect()))
        for handle in HANDLE_ORDER:
            ops.append(DrawHandle(center=v.corner(handle), radius=settings.handle_display_size))
        for i, entry in enumerate(TOOLBAR):
            ops.append(
                DrawButton(
                    action=entry,
                    rect=button_rect(v, settings, i),
                    icon_size=settings.button_icon_size,
                    disabled=not controller.button_enabled(entry),
                )
            )

        px, py = pointer if pointer is not None else controller.pointer
        if controller.erase_active and v.within_reach(px, py, settings.erase_reach):
            radius = controller.brush.radius
            ops.append(DrawBrushPreview(center=(px, py), radius=brush_preview_radius(v, radius)))
            track = slider_track(v, settings)
            ops.append(DrawSlider(track=track, knob_x=track[0] + radius, value=radius))

    if settings.show_debug:
        ops.append(DrawDebugText(text=f"Action: {controller.action_name}"))

    return ops
