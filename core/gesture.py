from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Set, Tuple, Union

from core.actions import TOOLBAR, ActionKind, ToolbarAction, is_blocked, resolve_key_bindings, run_action
from core.brush import erase_stroke
from core.collection import VisageCollection
from core.state import BrushConfig, CanvasSettings, ToolState
from core.visage import Handle, Visage


logger = logging.getLogger(__name__)

Rect = Tuple[int, int, int, int]


class CursorHint(Enum):
    DEFAULT = "default"
    POINTER = "pointer"
    MOVE = "move"
    CROSSHAIR = "crosshair"
    RESIZE_NWSE = "resize_nwse"
    RESIZE_NESW = "resize_nesw"
    NOT_ALLOWED = "not_allowed"


@dataclass(frozen=True)
class FrameInput:
    """Level state sampled once per frame."""
    x: int
    y: int
    primary: bool = False
    secondary: bool = False
    keys_down: FrozenSet[str] = frozenset()


# ---- Gesture states ----

@dataclass
class Idle:
    label = "None"


@dataclass
class Dragging:
    target: Visage
    offset_x: int
    offset_y: int
    label = "Dragging"


@dataclass
class Resizing:
    target: Visage
    handle: Handle
    label = "Resizing"


@dataclass
class Panning:
    start_x: int
    start_y: int
    label = "Panning"


@dataclass
class ClickingButton:
    kind: ActionKind
    label = "Clicking"


@dataclass
class Erasing:
    target: Visage
    slider_dragging: bool = False
    last_pixel: Optional[Tuple[int, int]] = None
    label = "Erasing"


GestureState = Union[Idle, Dragging, Resizing, Panning, ClickingButton, Erasing]


# ---- Selection chrome layout (shared with the draw-list builder) ----

def button_rect(v: Visage, settings: CanvasSettings, index: int) -> Rect:
    size = settings.button_size
    return (v.x + settings.button_x_offset, v.y + settings.button_y_offset + size * index, size, size)


def slider_track(v: Visage, settings: CanvasSettings) -> Rect:
    x0 = v.x + v.w // 2 - settings.slider_width // 2
    y0 = v.y + v.h + settings.slider_y_offset
    return (x0, y0, settings.slider_width, settings.slider_height)


def _in_rect(rect: Rect, px: int, py: int, margin: int = 0) -> bool:
    x, y, w, h = rect
    return x - margin <= px <= x + w + margin and y - margin <= py <= y + h + margin


class GestureController:
    """
    Frame-driven interaction state machine.

    Each frame `update()` receives the pointer position, button levels and
    held keys. A press is classified once (resize handle, toolbar button,
    erase tool, visage drag / reselect) and that choice holds until the
    primary button is released. Right-button panning is tracked separately
    and moves the whole scene incrementally.
    """

    def __init__(
        self,
        collection: VisageCollection,
        settings: Optional[CanvasSettings] = None,
        tools: Optional[ToolState] = None,
    ):
        self.collection = collection
        self.settings = settings or CanvasSettings()
        self.tools = tools or ToolState(brush=BrushConfig.from_settings(self.settings))
        self.key_bindings = resolve_key_bindings(self.settings.key_bindings)

        self.gesture: GestureState = Idle()
        self.pointer: Tuple[int, int] = (0, 0)
        self.cursor: CursorHint = CursorHint.DEFAULT
        self._cursor_changed = False
        self._press_handled = False
        self._keys_were_down: Set[str] = set()

    # ---- Public API ----

    @property
    def brush(self) -> BrushConfig:
        return self.tools.brush

    @property
    def erase_active(self) -> bool:
        return self.tools.erase_active

    @property
    def action_name(self) -> str:
        if isinstance(self.gesture, Idle) and self.tools.erase_active:
            return Erasing.label
        return self.gesture.label

    def update(self, frame: FrameInput) -> None:
        self._handle_keys(frame.keys_down)
        self._handle_pointer(frame)
        self._update_cursor(frame.x, frame.y)
        self.pointer = (frame.x, frame.y)

    def dispatch(self, kind: ActionKind) -> bool:
        done = run_action(kind, self.collection, self.tools, duplicate_offset=self.settings.duplicate_offset)
        if not self.tools.erase_active and isinstance(self.gesture, Erasing):
            # Turning the tool off cancels the stroke or slider drag in progress.
            self.gesture = Idle()
        return done

    def poll_cursor(self) -> Optional[CursorHint]:
        """Return the cursor hint if it changed since the last poll."""
        if not self._cursor_changed:
            return None
        self._cursor_changed = False
        return self.cursor

    def button_enabled(self, entry: ToolbarAction) -> bool:
        return not is_blocked(entry.kind, self.tools)

    # ---- Keyboard ----

    def _handle_keys(self, keys_down: FrozenSet[str]) -> None:
        held = {k.upper() for k in keys_down}
        for key, kind in self.key_bindings.items():
            if key in held:
                if key not in self._keys_were_down:
                    self.dispatch(kind)
                self._keys_were_down.add(key)
            else:
                self._keys_were_down.discard(key)

    # ---- Pointer ----

    def _handle_pointer(self, frame: FrameInput) -> None:
        x, y = frame.x, frame.y
        if frame.primary:
            if isinstance(self.gesture, Panning):
                self.gesture = Idle()
            if isinstance(self.gesture, Idle):
                if not self._press_handled:
                    self._press_handled = True
                    self._classify_press(x, y)
            else:
                self._continue_gesture(x, y)
            return

        if not isinstance(self.gesture, Panning):
            self._release()
        if frame.secondary:
            self._pan(x, y)
        elif isinstance(self.gesture, Panning):
            self.gesture = Idle()

    def _classify_press(self, x: int, y: int) -> None:
        v = self.collection.selected
        if v is not None:
            handle = v.handle_at(x, y, self.settings.handle_area)
            if handle is not None:
                self.gesture = Resizing(target=v, handle=handle)
                return

            entry = self._button_at(v, x, y, enabled_only=True)
            if entry is not None:
                self.gesture = ClickingButton(kind=entry.kind)
                self.dispatch(entry.kind)
                return

            if self.tools.erase_active:
                if self._in_slider_band(v, x, y):
                    self.gesture = Erasing(target=v, slider_dragging=True)
                    self._set_radius_from_pointer(v, x)
                    return
                if v.within_reach(x, y, self.settings.erase_reach):
                    stroke = Erasing(target=v)
                    self.gesture = stroke
                    self._erase_at(stroke, x, y)
                    return
                # Far outside the visage: switch the tool off and treat as a normal press.
                self.dispatch(ActionKind.TOGGLE_ERASE)

        self._begin_drag(x, y)

    def _begin_drag(self, x: int, y: int) -> None:
        hit = self.collection.hit_test(x, y)
        if hit is None:
            self.collection.deselect()
            if self.tools.erase_active:
                self.dispatch(ActionKind.TOGGLE_ERASE)
            return
        self.collection.select(hit)
        v = self.collection[hit]
        self.gesture = Dragging(target=v, offset_x=x - v.x, offset_y=y - v.y)

    def _continue_gesture(self, x: int, y: int) -> None:
        g = self.gesture
        if isinstance(g, ClickingButton):
            return
        if g.target not in self.collection:
            # Target was deleted mid-gesture; stay inert until release.
            return
        if isinstance(g, Dragging):
            g.target.move_to(x - g.offset_x, y - g.offset_y)
        elif isinstance(g, Resizing):
            g.target.resize_with(g.handle, x, y)
        elif isinstance(g, Erasing):
            if g.slider_dragging:
                self._set_radius_from_pointer(g.target, x)
            elif g.target.within_reach(x, y, self.settings.erase_reach):
                self._erase_at(g, x, y)

    def _release(self) -> None:
        g = self.gesture
        if isinstance(g, Resizing) and g.target in self.collection:
            flipped_x, flipped_y = g.target.finalize_resize()
            if flipped_x or flipped_y:
                logger.debug("Resize finalized with flip x=%s y=%s", flipped_x, flipped_y)
        self.gesture = Idle()
        self._press_handled = False

    def _pan(self, x: int, y: int) -> None:
        g = self.gesture
        if not isinstance(g, Panning):
            self.gesture = Panning(start_x=x, start_y=y)
            return
        dx = x - g.start_x
        dy = y - g.start_y
        if dx or dy:
            self.collection.translate_all(dx, dy)
        g.start_x = x
        g.start_y = y

    # ---- Erase tool ----

    def _in_slider_band(self, v: Visage, x: int, y: int) -> bool:
        return _in_rect(slider_track(v, self.settings), x, y, margin=self.settings.slider_hit_margin)

    def _set_radius_from_pointer(self, v: Visage, x: int) -> None:
        track_x = slider_track(v, self.settings)[0]
        self.tools.brush.set_radius(x - track_x)

    def _erase_at(self, stroke: Erasing, x: int, y: int) -> None:
        pixel = stroke.target.screen_to_surface(x, y)
        if pixel is None:
            return
        if pixel == stroke.last_pixel:
            return
        erase_stroke(stroke.target.surface, stroke.last_pixel, pixel, self.tools.brush.radius)
        stroke.last_pixel = pixel

    # ---- Hover / cursor ----

    def _button_at(self, v: Visage, x: int, y: int, enabled_only: bool) -> Optional[ToolbarAction]:
        for i, entry in enumerate(TOOLBAR):
            if enabled_only and not self.button_enabled(entry):
                continue
            if _in_rect(button_rect(v, self.settings, i), x, y):
                return entry
        return None

    def _update_cursor(self, x: int, y: int) -> None:
        cursor = CursorHint.DEFAULT
        v = self.collection.selected
        if v is not None:
            if self.tools.erase_active:
                if v.within_reach(x, y, self.settings.erase_reach):
                    cursor = CursorHint.CROSSHAIR
                else:
                    cursor = CursorHint.POINTER

            entry = self._button_at(v, x, y, enabled_only=False)
            if entry is not None:
                cursor = CursorHint.POINTER if self.button_enabled(entry) else CursorHint.NOT_ALLOWED

            if isinstance(self.gesture, Dragging):
                cursor = CursorHint.MOVE

            handle = v.handle_at(x, y, self.settings.handle_area)
            if handle in (Handle.TOP_LEFT, Handle.BOTTOM_RIGHT):
                cursor = CursorHint.RESIZE_NWSE
            elif handle in (Handle.TOP_RIGHT, Handle.BOTTOM_LEFT):
                cursor = CursorHint.RESIZE_NESW

        if isinstance(self.gesture, Panning):
            cursor = CursorHint.MOVE

        if cursor is not self.cursor:
            self.cursor = cursor
            self._cursor_changed = True
