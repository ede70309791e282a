# -*- coding: utf-8 -*-
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    """Exit with a helpful message when the Qt bindings cannot be imported."""

    details = str(exc)
    message_lines = [
        "Unable to start Glowfield: importing PyQt5 failed.",
        "Check that PyQt5 is installed and that the system OpenGL libraries are available.",
    ]
    if "libGL.so.1" in details:
        message_lines.append(
            "Hint: the system library libGL.so.1 is missing. Install the Mesa/OpenGL packages for your platform."
        )
    message_lines.append(f"Original error: {details}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtGui, QtWidgets
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - environment dependent
    _handle_qt_import_error(exc)

from .view.view_widget import GlowFieldViewWidget

ROOT = Path(__file__).resolve().parents[1]
LOG_FORMAT = "[Glowfield][%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("glowfield")


def configure_logging(debug: Optional[bool] = None) -> None:
    """Send ``glowfield`` logs to stderr; ``GLOWFIELD_DEBUG`` enables debug output."""
    if debug is None:
        debug = os.environ.get("GLOWFIELD_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}
    level = logging.DEBUG if debug else logging.INFO
    if not any(getattr(h, "_glowfield", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._glowfield = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


class ViewWindow(QtWidgets.QMainWindow):
    def __init__(self, screen: Optional[QtGui.QScreen] = None):
        super().__init__(None)
        self.setWindowTitle("Glowfield")
        self.view = GlowFieldViewWidget(self)
        self.setCentralWidget(self.view)
        self.view.navigationTriggered.connect(self._on_navigation)
        if screen is not None:
            self._apply_screen_geometry(screen)
        QtWidgets.QShortcut(Qt.Key_Escape, self, activated=self.close)

    def _apply_screen_geometry(self, screen: QtGui.QScreen) -> None:
        geometry = screen.availableGeometry()
        width = int(geometry.width() * 0.8)
        height = int(geometry.height() * 0.8)
        left = geometry.left() + (geometry.width() - width) // 2
        top = geometry.top() + (geometry.height() - height) // 2
        self.setGeometry(left, top, width, height)

    def _on_navigation(self, index: int, payload: dict) -> None:
        logger.info("navigation button %d triggered (%s -> %s)", index, payload.get("text"), payload.get("href"))

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.view.stop()
        super().closeEvent(event)


def main(headless: bool = False) -> int:
    """Start the application and return the exit code.

    With ``headless`` the window is built and torn down without entering the
    Qt event loop, which is enough to check the wiring on a CI machine.
    """
    configure_logging()

    def _write_unhandled(exc_type, exc_value, exc_tb):
        try:
            import traceback as _tb

            with (ROOT / "run_exception.txt").open("w", encoding="utf-8") as f:
                _tb.print_exception(exc_type, exc_value, exc_tb, file=f)
        except OSError:
            logger.warning("could not write run_exception.txt")
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    if headless:
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    else:
        sys.excepthook = _write_unhandled
        QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
        QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
    window = ViewWindow(QtGui.QGuiApplication.primaryScreen())
    if headless:
        window.close()
        return 0
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
