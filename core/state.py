from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


def _default_key_bindings() -> Dict[str, str]:
    # key name -> action id (see core.actions.ActionKind values)
    return {
        "W": "reorder",
        "F": "flip",
        "R": "rotate",
        "E": "toggle_erase",
        "D": "delete",
        "C": "duplicate",
    }


@dataclass
class CanvasSettings:
    # Selection chrome
    handle_area: int = 8
    handle_display_size: int = 4

    # Toolbar (one column to the left of the selected visage)
    button_size: int = 32
    button_x_offset: int = -38
    button_y_offset: int = 10
    button_icon_size: int = 28

    # Brush-size slider under the selected visage
    slider_min: int = 5
    slider_max: int = 145
    slider_default: int = 30
    slider_width: int = 150
    slider_height: int = 8
    slider_y_offset: int = 18
    slider_hit_margin: int = 14

    # Pointer tolerance around the visage while the erase tool is on
    erase_reach: int = 80

    duplicate_offset: int = 30
    ingest_origin: Tuple[int, int] = (40, 40)

    frame_interval_ms: int = 16
    show_debug: bool = False

    key_bindings: Dict[str, str] = field(default_factory=_default_key_bindings)


@dataclass
class BrushConfig:
    radius: int = 30
    min_radius: int = 5
    max_radius: int = 145

    def set_radius(self, value: int) -> int:
        self.radius = max(self.min_radius, min(self.max_radius, int(value)))
        return self.radius

    @classmethod
    def from_settings(cls, settings: CanvasSettings) -> "BrushConfig":
        brush = cls(min_radius=settings.slider_min, max_radius=settings.slider_max)
        brush.set_radius(settings.slider_default)
        return brush


@dataclass
class ToolState:
    brush: BrushConfig = field(default_factory=BrushConfig)
    # Sticky across gestures; only actions flip it.
    erase_active: bool = False
