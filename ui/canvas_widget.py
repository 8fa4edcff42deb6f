from __future__ import annotations
import time
from collections import deque
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from PySide6.QtCore import Qt, QPointF, QRectF, QTimer
from PySide6.QtGui import (
    QPainter, QImage, QPixmap, QColor, QPen, QCursor, QGuiApplication, QKeySequence
)
from PySide6.QtWidgets import QWidget

from core.actions import TOOLBAR
from core.collection import VisageCollection
from core.gesture import CursorHint, FrameInput, GestureController
from core.ingest import ImageIngest, IngestError
from core.scene import (
    DrawBorder, DrawBrushPreview, DrawButton, DrawDebugText, DrawHandle, DrawImage, DrawSlider,
    build_draw_list,
)
from core.state import CanvasSettings
from core.surface import PixelSurface


COLOR_BACKGROUND = QColor(120, 120, 120)
COLOR_ERASER = QColor(255, 32, 78, 200)

_CURSOR_SHAPES = {
    CursorHint.DEFAULT: Qt.ArrowCursor,
    CursorHint.POINTER: Qt.PointingHandCursor,
    CursorHint.MOVE: Qt.SizeAllCursor,
    CursorHint.CROSSHAIR: Qt.CrossCursor,
    CursorHint.RESIZE_NWSE: Qt.SizeFDiagCursor,
    CursorHint.RESIZE_NESW: Qt.SizeBDiagCursor,
    CursorHint.NOT_ALLOWED: Qt.ForbiddenCursor,
}


def surface_to_qimage(surface: PixelSurface) -> QImage:
    w, h = surface.size
    data = surface.to_bytes()
    qimg = QImage(data, w, h, 4 * w, QImage.Format_RGBA8888)
    # Important: keep a copy because Python-owned bytes may be freed
    return qimg.copy()


class CanvasWidget(QWidget):
    """
    Infinite canvas of visages driven by a fixed-rate frame loop.
    Every tick samples pointer position, mouse buttons and held keys and
    feeds them to the GestureController:
      - left press/drag: resize handles, toolbar buttons, erase tool, move visage
      - right-drag: pan the whole scene
      - W/F/R/E/D/C: toolbar actions
      - drop image files or folders: decoded in the background into new visages
    """
    def __init__(
        self,
        settings: Optional[CanvasSettings] = None,
        on_fatal_error: Optional[Callable[[Exception], None]] = None,
        icon_dir: Optional[Path] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setAcceptDrops(True)

        self.settings = settings or CanvasSettings()
        self.collection = VisageCollection()
        self.controller = GestureController(self.collection, self.settings)
        self.ingest = ImageIngest(origin=self.settings.ingest_origin)

        self._on_fatal_error = on_fatal_error
        self._failed = False
        self._keys_down: set[str] = set()
        self._qimage_cache: Dict[int, Tuple[PixelSurface, int, QImage]] = {}
        self._icons = self._load_icons(icon_dir)
        self._frame_times: deque[float] = deque(maxlen=60)

        self._timer = QTimer(self)
        self._timer.setInterval(self.settings.frame_interval_ms)
        self._timer.timeout.connect(self._tick)
        self._timer.start()

    def shutdown(self) -> None:
        self._timer.stop()
        self.ingest.shutdown()

    def submit_paths(self, paths: list[str]) -> None:
        if paths:
            self.ingest.submit(paths)

    def set_debug_overlay(self, on: bool) -> None:
        self.settings.show_debug = bool(on)
        self.update()

    def _load_icons(self, icon_dir: Optional[Path]) -> Dict[str, QPixmap]:
        icons: Dict[str, QPixmap] = {}
        if icon_dir is None:
            return icons
        for entry in TOOLBAR:
            path = icon_dir / entry.icon
            if path.exists():
                pm = QPixmap(str(path))
                if not pm.isNull():
                    icons[entry.icon] = pm
        return icons

    # ---------------------------
    # Frame loop
    # ---------------------------
    def _tick(self) -> None:
        if self._failed:
            return
        try:
            self.ingest.raise_pending_error()
        except IngestError as e:
            self._failed = True
            self._timer.stop()
            if self._on_fatal_error is not None:
                self._on_fatal_error(e)
            return

        self.ingest.drain_into(self.collection)

        pos = self.mapFromGlobal(QCursor.pos())
        buttons = QGuiApplication.mouseButtons()
        frame = FrameInput(
            x=pos.x(),
            y=pos.y(),
            primary=bool(buttons & Qt.LeftButton),
            secondary=bool(buttons & Qt.RightButton),
            keys_down=frozenset(self._keys_down),
        )
        self.controller.update(frame)

        hint = self.controller.poll_cursor()
        if hint is not None:
            self.setCursor(_CURSOR_SHAPES[hint])

        self._frame_times.append(time.monotonic())
        self.update()

    def _fps(self) -> float:
        if len(self._frame_times) < 2:
            return 0.0
        span = self._frame_times[-1] - self._frame_times[0]
        return (len(self._frame_times) - 1) / span if span > 0 else 0.0

    # ---------------------------
    # Painting
    # ---------------------------
    def paintEvent(self, _) -> None:
        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing, True)
        p.setRenderHint(QPainter.SmoothPixmapTransform, True)
        p.fillRect(self.rect(), COLOR_BACKGROUND)

        if len(self.collection) == 0:
            p.setPen(QPen(QColor(220, 220, 220)))
            p.drawText(self.rect(), Qt.AlignCenter, "Drop images or folders here")

        live: Dict[int, Tuple[PixelSurface, int, QImage]] = {}
        for op in build_draw_list(self.collection, self.controller):
            if isinstance(op, DrawImage):
                self._draw_image(p, op, live)
            elif isinstance(op, DrawBorder):
                self._draw_border(p, op)
            elif isinstance(op, DrawHandle):
                self._draw_handle(p, op)
            elif isinstance(op, DrawButton):
                self._draw_button(p, op)
            elif isinstance(op, DrawBrushPreview):
                p.setPen(Qt.NoPen)
                p.setBrush(COLOR_ERASER)
                p.drawEllipse(QPointF(*op.center), op.radius, op.radius)
            elif isinstance(op, DrawSlider):
                self._draw_slider(p, op)
            elif isinstance(op, DrawDebugText):
                p.fillRect(QRectF(0, 0, 260, 20), QColor(100, 100, 100, 200))
                p.setPen(QPen(QColor(255, 255, 255)))
                p.drawText(6, 14, f"FPS: {self._fps():.2f}  {op.text}")
        self._qimage_cache = live
        p.end()

    def _qimage_for(self, surface: PixelSurface, live: Dict[int, Tuple[PixelSurface, int, QImage]]) -> QImage:
        cached = self._qimage_cache.get(id(surface))
        if cached is not None and cached[0] is surface and cached[1] == surface.version:
            qimg = cached[2]
        else:
            qimg = surface_to_qimage(surface)
        live[id(surface)] = (surface, surface.version, qimg)
        return qimg

    def _draw_image(self, p: QPainter, op: DrawImage, live: Dict[int, Tuple[PixelSurface, int, QImage]]) -> None:
        x, y, w, h = op.rect
        sw, sh = op.surface.size
        if w == 0 or h == 0 or sw == 0 or sh == 0:
            return
        qimg = self._qimage_for(op.surface, live)
        p.save()
        p.translate(x, y)
        # Negative scale mirrors while a resize is inverted.
        p.scale(w / float(sw), h / float(sh))
        p.drawImage(0, 0, qimg)
        p.restore()

    def _draw_border(self, p: QPainter, op: DrawBorder) -> None:
        x, y, w, h = op.rect
        t = op.thickness
        black = QColor(0, 0, 0)
        p.fillRect(QRectF(x, y, w, t).normalized(), black)
        p.fillRect(QRectF(x, y + h, w + t, t).normalized(), black)
        p.fillRect(QRectF(x, y, t, h).normalized(), black)
        p.fillRect(QRectF(x + w, y, t, h + t).normalized(), black)

    def _draw_handle(self, p: QPainter, op: DrawHandle) -> None:
        center = QPointF(*op.center)
        p.setPen(Qt.NoPen)
        p.setBrush(QColor(255, 255, 255))
        p.drawEllipse(center, op.radius + 1, op.radius + 1)
        p.setBrush(QColor(0, 0, 0))
        p.drawEllipse(center, op.radius, op.radius)

    def _draw_button(self, p: QPainter, op: DrawButton) -> None:
        x, y, w, h = op.rect
        padding = 2
        p.fillRect(QRectF(x, y, w, h), QColor(0, 0, 0))

        icon = self._icons.get(op.action.icon)
        if icon is not None:
            p.drawPixmap(x + padding, y + padding, op.icon_size, op.icon_size, icon)
        else:
            p.setPen(QPen(QColor(255, 255, 255)))
            p.drawText(QRectF(x, y, w, h), Qt.AlignCenter, op.action.label[:2])

        if op.disabled:
            p.fillRect(QRectF(x, y, w, h), COLOR_ERASER)

    def _draw_slider(self, p: QPainter, op: DrawSlider) -> None:
        x, y, w, h = op.track
        p.fillRect(QRectF(x, y, w, h), QColor(0, 0, 0))
        knob = QPointF(op.knob_x, y + h / 2.0)
        p.setPen(Qt.NoPen)
        p.setBrush(QColor(0, 0, 0))
        p.drawEllipse(knob, 12, 12)
        p.setBrush(QColor(255, 255, 255))
        p.drawEllipse(knob, 10, 10)

    # ---------------------------
    # Keyboard (level state; the controller does edge detection)
    # ---------------------------
    def keyPressEvent(self, e) -> None:
        if e.isAutoRepeat():
            return
        name = QKeySequence(e.key()).toString().upper()
        if name:
            self._keys_down.add(name)

    def keyReleaseEvent(self, e) -> None:
        if e.isAutoRepeat():
            return
        self._keys_down.discard(QKeySequence(e.key()).toString().upper())

    def focusOutEvent(self, e) -> None:
        self._keys_down.clear()
        super().focusOutEvent(e)

    # ---------------------------
    # Drag & drop support
    # ---------------------------
    def dragEnterEvent(self, e) -> None:
        if e.mimeData().hasUrls():
            e.acceptProposedAction()

    def dropEvent(self, e) -> None:
        paths = [u.toLocalFile() for u in e.mimeData().urls() if u.toLocalFile()]
        self.submit_paths(paths)
        e.acceptProposedAction()
