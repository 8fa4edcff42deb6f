from __future__ import annotations
from pathlib import Path
from typing import Optional

from PySide6.QtGui import QAction, QKeySequence, QIcon
from PySide6.QtWidgets import QMainWindow, QWidget, QFileDialog, QVBoxLayout, QMessageBox

from core.actions import TOOLBAR, ActionKind
from core.io import save_surface_png
from core.state import CanvasSettings
from ui.canvas_widget import CanvasWidget


_MENU_TEXT = {
    ActionKind.REORDER: "Move to Front/Back",
    ActionKind.FLIP: "Flip Horizontally",
    ActionKind.ROTATE: "Rotate 90°",
    ActionKind.TOGGLE_ERASE: "Toggle Eraser",
    ActionKind.DELETE: "Delete",
    ActionKind.DUPLICATE: "Duplicate",
}

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp *.tif *.tiff);;All files (*)"


class MainWindow(QMainWindow):
    def __init__(
        self,
        settings: Optional[CanvasSettings] = None,
        logo_path: Optional[Path] = None,
        icon_dir: Optional[Path] = None,
    ):
        super().__init__()
        if logo_path is not None and logo_path.exists():
            self.setWindowIcon(QIcon(str(logo_path)))
        self.setWindowTitle("visage")

        self.settings = settings or CanvasSettings()

        # Central
        self.canvas = CanvasWidget(
            settings=self.settings,
            on_fatal_error=self._on_fatal_error,
            icon_dir=icon_dir,
        )

        central = QWidget()
        lay = QVBoxLayout()
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.canvas)
        central.setLayout(lay)
        self.setCentralWidget(central)

        self._build_menu()

        self.resize(1200, 800)
        self.canvas.setFocus()

    # ---------------------------
    # Menu / Actions
    # ---------------------------
    def _build_menu(self) -> None:
        open_act = QAction("Open Images…", self)
        open_act.setShortcut(QKeySequence.StandardKey.Open)
        open_act.triggered.connect(self.open_files)

        export_act = QAction("Export Selected Visage…", self)
        export_act.triggered.connect(self.export_selected)

        quit_act = QAction("Quit", self)
        quit_act.setShortcut(QKeySequence.StandardKey.Quit)
        quit_act.triggered.connect(self.close)

        mfile = self.menuBar().addMenu("File")
        mfile.addAction(open_act)
        mfile.addAction(export_act)
        mfile.addSeparator()
        mfile.addAction(quit_act)

        # Hotkeys are handled by the canvas frame loop; the menu only shows them.
        key_for = {kind: key for key, kind in self.canvas.controller.key_bindings.items()}
        medit = self.menuBar().addMenu("Edit")
        for entry in TOOLBAR:
            text = _MENU_TEXT[entry.kind]
            if entry.kind in key_for:
                text = f"{text}\t{key_for[entry.kind]}"
            act = QAction(text, self)
            act.triggered.connect(lambda _=False, kind=entry.kind: self.canvas.controller.dispatch(kind))
            medit.addAction(act)

        debug_act = QAction("Debug Overlay", self)
        debug_act.setCheckable(True)
        debug_act.setChecked(self.settings.show_debug)
        debug_act.toggled.connect(self.canvas.set_debug_overlay)

        mview = self.menuBar().addMenu("View")
        mview.addAction(debug_act)

    def open_files(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(self, "Open Images", "", IMAGE_FILTER)
        self.canvas.submit_paths(paths)

    def export_selected(self) -> None:
        v = self.canvas.collection.selected
        if v is None:
            QMessageBox.information(self, "Nothing to export", "Select a visage first.")
            return
        path, _ = QFileDialog.getSaveFileName(self, "Export Visage", "", "PNG (*.png)")
        if not path:
            return
        if not path.lower().endswith(".png"):
            path += ".png"
        try:
            save_surface_png(path, v.surface)
        except Exception as e:
            QMessageBox.critical(self, "Export failed", str(e))

    def _on_fatal_error(self, err: Exception) -> None:
        QMessageBox.critical(self, "Import failed", str(err))
        self.close()

    def closeEvent(self, e) -> None:
        self.canvas.shutdown()
        super().closeEvent(e)
