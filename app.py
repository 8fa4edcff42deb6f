import logging
import os
import sys
from pathlib import Path

from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication

from core.settings_io import load_settings
from core.state import CanvasSettings
from ui.main_window import MainWindow


logger = logging.getLogger(__name__)


def _asset_path(*parts: str) -> Path:
    # PyInstaller onefile extracts bundled files under sys._MEIPASS.
    if getattr(sys, "frozen", False):
        return Path(getattr(sys, "_MEIPASS")) / Path(*parts)
    return Path(__file__).resolve().parent / Path(*parts)


def _load_settings() -> CanvasSettings:
    path = os.environ.get("VISAGE_SETTINGS")
    if path and Path(path).exists():
        logger.info("Loading settings from %s", path)
        return load_settings(path)
    return CanvasSettings()


def main() -> int:
    logging.basicConfig(
        level=os.environ.get("VISAGE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName("visage")
    app.setOrganizationName("visage")

    logo_path = _asset_path("assets", "Logo.png")
    if logo_path.exists():
        app.setWindowIcon(QIcon(str(logo_path)))

    w = MainWindow(settings=_load_settings(), logo_path=logo_path, icon_dir=_asset_path("assets"))
    w.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
