"""PyQt5 host for the particle engine.

The web build drew on an HTML5 canvas that was never cleared: every frame
painted a translucent black rectangle so older discs faded into trails. This
module keeps that model with a persistent :class:`QtGui.QImage` which the
frame loop paints into; ``paintEvent`` only blits the image and overlays the
navigation button labels.

Only a small API is used by the window:

* :func:`GlowFieldViewWidget` builds the widget.
* ``navigationTriggered`` is emitted when a navigation button is clicked.
* ``start()``/``stop()`` are also driven automatically by show/hide/close.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Dict, List, Mapping, Optional, Set, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets

from ..colors import parse_hsla
from ..config import _coerce_float, build_state, sanitize_nav_buttons
from ..frame_loop import FrameLoop
from ..registry import GroupRegistry
from ..shapes import button_at

logger = logging.getLogger(__name__)

__all__ = ["GlowFieldViewWidget", "QImageSurface", "QtFrameScheduler"]


class QtFrameScheduler(QtCore.QObject):
    """Single-shot ``QTimer``s recycled between requests.

    A steady frame loop therefore re-arms one timer, and the resize debouncer
    a second one. Handles are plain ids so a stale handle can never cancel a
    timer that has since been handed to another callback.
    """

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._ids = itertools.count()
        self._active: Dict[int, Tuple[QtCore.QTimer, Callable[[], None]]] = {}
        self._owner: Dict[QtCore.QTimer, int] = {}
        self._idle: List[QtCore.QTimer] = []

    @property
    def active(self) -> int:
        return len(self._active)

    @property
    def timer_count(self) -> int:
        return len(self._active) + len(self._idle)

    def _acquire(self) -> QtCore.QTimer:
        if self._idle:
            return self._idle.pop()
        timer = QtCore.QTimer(self)
        timer.setSingleShot(True)
        timer.setTimerType(QtCore.Qt.PreciseTimer)
        timer.timeout.connect(lambda t=timer: self._fire(t))
        return timer

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> object:
        timer = self._acquire()
        handle = next(self._ids)
        self._active[handle] = (timer, callback)
        self._owner[timer] = handle
        timer.start(max(0, int(delay_ms)))
        return handle

    def cancel(self, handle: object) -> None:
        entry = self._active.pop(handle, None)  # type: ignore[arg-type]
        if entry is not None:
            timer = entry[0]
            timer.stop()
            self._park(timer)

    def cancel_all(self) -> None:
        for handle in list(self._active):
            self.cancel(handle)

    def _park(self, timer: QtCore.QTimer) -> None:
        self._owner.pop(timer, None)
        self._idle.append(timer)

    def _fire(self, timer: QtCore.QTimer) -> None:
        handle = self._owner.get(timer)
        entry = self._active.pop(handle, None) if handle is not None else None
        if entry is None:
            return
        self._park(timer)
        entry[1]()


class QImageSurface:
    """Persistent ARGB image the particles are painted into."""

    def __init__(self) -> None:
        self.image: Optional[QtGui.QImage] = None
        self._painter: Optional[QtGui.QPainter] = None
        self._colors: Dict[str, QtGui.QColor] = {}

    def resize(self, width: int, height: int) -> bool:
        if self._painter is not None:
            self.end()
        width = max(1, int(width))
        height = max(1, int(height))
        image = QtGui.QImage(width, height, QtGui.QImage.Format_ARGB32_Premultiplied)
        if image.isNull():
            self.image = None
            return False
        image.fill(QtGui.QColor(0, 0, 0))
        self.image = image
        return True

    def begin(self) -> bool:
        if self.image is None or self.image.isNull():
            return False
        painter = QtGui.QPainter()
        if not painter.begin(self.image):
            return False
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.setCompositionMode(QtGui.QPainter.CompositionMode_SourceOver)
        painter.setPen(QtCore.Qt.NoPen)
        self._painter = painter
        return True

    def fade(self, opacity: float) -> None:
        if self._painter is None or self.image is None:
            return
        color = QtGui.QColor(0, 0, 0)
        color.setAlphaF(max(0.0, min(1.0, opacity)))
        self._painter.fillRect(self.image.rect(), color)

    def _qcolor(self, color: str) -> QtGui.QColor:
        cached = self._colors.get(color)
        if cached is None:
            cached = QtGui.QColor.fromHslF(*parse_hsla(color))
            self._colors[color] = cached
        return cached

    def disc(self, x: float, y: float, radius: float, color: str) -> None:
        if self._painter is None:
            return
        self._painter.setBrush(self._qcolor(color))
        self._painter.drawEllipse(QtCore.QPointF(x, y), radius, radius)

    def end(self) -> None:
        if self._painter is not None:
            self._painter.end()
            self._painter = None


class _GlowFieldView(QtWidgets.QWidget):
    """Raster widget hosting one registry and one frame loop."""

    navigationTriggered = QtCore.pyqtSignal(int, dict)

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget] = None,
        state: Optional[Mapping[str, object]] = None,
    ) -> None:
        super().__init__(parent)
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, True)
        self.setAutoFillBackground(False)
        self.setMouseTracking(True)
        self.state = build_state(state)
        self.buttons = sanitize_nav_buttons(self.state.get("navigation"))
        self.state["navigation"] = self.buttons
        self.surface = QImageSurface()
        self.scheduler = QtFrameScheduler(self)
        self._hovered: Set[int] = set()
        self.registry = GroupRegistry(self.state)
        self.loop = FrameLoop.from_state(self.registry, self.surface, self.scheduler, self.hovered_indices)

    # ------------------------------------------------------------------ API
    def hovered_indices(self) -> frozenset:
        return frozenset(self._hovered)

    def set_hovered(self, indices) -> None:
        self._hovered = {int(i) for i in indices}

    def start(self) -> bool:
        if self.loop.running:
            return True
        width, height = self.width(), self.height()
        if width <= 0 or height <= 0:
            return False
        started = self.loop.start(width, height)
        if started:
            # the loop clears its listeners on stop
            self.loop.add_listener(self.update)
        return started

    def stop(self) -> None:
        self.loop.stop()
        self.scheduler.cancel_all()
        self._hovered.clear()

    def _button_size(self) -> tuple:
        cfg = self.state.get("navButton")
        if not isinstance(cfg, Mapping):
            cfg = {}
        return _coerce_float(cfg.get("width"), 200.0), _coerce_float(cfg.get("height"), 90.0)

    def button_index_at(self, pos: QtCore.QPoint) -> Optional[int]:
        width, height = self._button_size()
        centers = self.registry.button_centers()
        return button_at(float(pos.x()), float(pos.y()), centers, width, height)

    # ------------------------------------------------------------------ Qt events
    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        QtCore.QTimer.singleShot(0, self.start)

    def hideEvent(self, event: QtGui.QHideEvent) -> None:  # type: ignore[override]
        self.stop()
        super().hideEvent(event)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.stop()
        super().closeEvent(event)

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        size = event.size()
        if self.loop.running:
            self.loop.notify_resize(size.width(), size.height())
        elif self.isVisible():
            self.start()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        index = self.button_index_at(event.pos())
        self._hovered = {index} if index is not None else set()
        self.setCursor(QtCore.Qt.PointingHandCursor if index is not None else QtCore.Qt.ArrowCursor)
        super().mouseMoveEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        self._hovered.clear()
        super().leaveEvent(event)

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        if event.button() == QtCore.Qt.LeftButton:
            index = self.button_index_at(event.pos())
            if index is not None and index < len(self.buttons):
                button = self.buttons[index]
                payload = {"index": index, "name": button["name"], "text": button["text"], "href": button["href"]}
                self.navigationTriggered.emit(index, payload)
                event.accept()
                return
        super().mousePressEvent(event)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        try:
            image = self.surface.image
            if image is not None and self.loop.running:
                painter.drawImage(0, 0, image)
            else:
                painter.fillRect(self.rect(), QtGui.QColor("black"))
            self._paint_labels(painter)
        finally:
            painter.end()

    def _paint_labels(self, painter: QtGui.QPainter) -> None:
        width, height = self._button_size()
        painter.setRenderHint(QtGui.QPainter.TextAntialiasing, True)
        painter.setPen(QtGui.QColor(255, 255, 255, 220))
        for button, (cx, cy) in zip(self.buttons, self.registry.button_centers()):
            rect = QtCore.QRectF(cx - width / 2.0, cy - height / 2.0, width, height)
            painter.drawText(rect, QtCore.Qt.AlignCenter, button["text"])


def GlowFieldViewWidget(
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    state: Optional[Mapping[str, object]] = None,
) -> QtWidgets.QWidget:
    """Factory returning the particle view.

    Parameters
    ----------
    parent:
        Parent widget used by Qt for ownership.
    state:
        Optional partial configuration merged over the defaults.
    """

    widget = _GlowFieldView(parent, state)
    setattr(widget, "backend_name", "raster")
    return widget
