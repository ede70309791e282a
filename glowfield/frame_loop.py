"""Cooperative frame loop driving the particle groups.

The loop never owns a thread. A :class:`FrameScheduler` hands it one callback
per display refresh; hover and resize input arrive between frames and are
read once at the top of :meth:`FrameLoop.tick`.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import AbstractSet, Callable, List, Optional, Protocol, Tuple

from .config import _coerce_float
from .motion import MotionParams, update_chains
from .registry import GroupRegistry, _section

logger = logging.getLogger(__name__)

__all__ = [
    "CancelToken",
    "Debouncer",
    "FrameLoop",
    "FrameScheduler",
    "ManualScheduler",
    "NullSurface",
    "Surface",
]


def _dimension(value: object) -> int:
    """Canvas extent as a non-negative int; NaN, infinities and junk become 0."""
    return max(0, int(_coerce_float(value, 0.0)))


class FrameScheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> object: ...

    def cancel(self, handle: object) -> None: ...


class Surface(Protocol):
    """Drawing target used by :class:`FrameLoop`."""

    def resize(self, width: int, height: int) -> bool: ...

    def begin(self) -> bool: ...

    def fade(self, opacity: float) -> None: ...

    def disc(self, x: float, y: float, radius: float, color: str) -> None: ...

    def end(self) -> None: ...


class NullSurface:
    """Surface that only counts draw calls, for headless runs."""

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.frames = 0
        self.discs = 0

    def resize(self, width: int, height: int) -> bool:
        self.width = width
        self.height = height
        return True

    def begin(self) -> bool:
        return True

    def fade(self, opacity: float) -> None:
        self.frames += 1

    def disc(self, x: float, y: float, radius: float, color: str) -> None:
        self.discs += 1

    def end(self) -> None:
        pass


class CancelToken:
    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler; callbacks run only when :meth:`advance` is called."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: List[Tuple[int, int, Callable[[], None]]] = []
        self._counter = itertools.count()
        self._cancelled: set = set()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> object:
        handle = next(self._counter)
        heapq.heappush(self._queue, (self.now_ms + max(0, int(delay_ms)), handle, callback))
        return handle

    def cancel(self, handle: object) -> None:
        self._cancelled.add(handle)

    @property
    def pending(self) -> int:
        return sum(1 for _, handle, _ in self._queue if handle not in self._cancelled)

    def advance(self, ms: int) -> int:
        """Move the clock forward ``ms`` and run every callback due; returns the count run."""
        deadline = self.now_ms + ms
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, handle, callback = heapq.heappop(self._queue)
            self.now_ms = max(self.now_ms, due)
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            callback()
            ran += 1
        self.now_ms = deadline
        return ran


class Debouncer:
    """Collapse bursts of calls into one, fired ``delay_ms`` after the last."""

    def __init__(self, scheduler: FrameScheduler, delay_ms: int) -> None:
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._handle: Optional[object] = None

    def __call__(self, callback: Callable[[], None]) -> None:
        self.cancel()

        def _fire() -> None:
            self._handle = None
            callback()

        self._handle = self._scheduler.call_later(self.delay_ms, _fire)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None


class FrameLoop:
    """Fade the surface, move every live group, schedule the next frame."""

    def __init__(
        self,
        registry: GroupRegistry,
        surface: Optional[Surface],
        scheduler: FrameScheduler,
        hovered: Callable[[], AbstractSet[int]] = frozenset,
        *,
        frame_interval_ms: int = 16,
        fade_opacity: float = 0.2,
        resize_debounce_ms: int = 100,
        motion: Optional[MotionParams] = None,
        on_frame: Optional[Callable[[], None]] = None,
    ) -> None:
        self.registry = registry
        self.surface = surface
        self.scheduler = scheduler
        self.hovered = hovered
        self.frame_interval_ms = max(1, int(frame_interval_ms))
        self.fade_opacity = fade_opacity
        self.motion = motion or MotionParams()
        self._listeners: List[Callable[[], None]] = [on_frame] if on_frame is not None else []
        self._debounce = Debouncer(scheduler, resize_debounce_ms)
        self._token: Optional[CancelToken] = None
        self._handle: Optional[object] = None
        self.frame_count = 0

    @classmethod
    def from_state(cls, registry: GroupRegistry, surface, scheduler, hovered=frozenset, **kwargs) -> "FrameLoop":
        layout = _section(registry.state, "layout")
        system = _section(registry.state, "system")
        kwargs.setdefault("frame_interval_ms", int(_coerce_float(system.get("frameIntervalMs"), 16)))
        kwargs.setdefault("fade_opacity", _coerce_float(layout.get("fadeOpacity"), 0.2))
        kwargs.setdefault("resize_debounce_ms", int(_coerce_float(layout.get("resizeDebounceMs"), 100)))
        kwargs.setdefault("motion", MotionParams.from_state(_section(registry.state, "particles")))
        return cls(registry, surface, scheduler, hovered, **kwargs)

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def add_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------ lifecycle
    def start(self, width: int, height: int) -> bool:
        """Lay out the groups and schedule the first frame.

        Returns False without scheduling anything when there is no usable
        drawing surface.
        """
        if self.running:
            return True
        width, height = _dimension(width), _dimension(height)
        if self.surface is None or not self.surface.resize(width, height):
            logger.error("drawing surface unavailable, particle loop not started")
            return False
        self.registry.resize(width, height)
        self._token = CancelToken()
        self._schedule(self._token, 0)
        logger.info("particle loop started at %sx%s", width, height)
        return True

    def stop(self) -> None:
        """Cancel pending work and release every particle. Safe to call twice."""
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
        self._debounce.cancel()
        self._listeners.clear()
        self.registry.clear()
        logger.info("particle loop stopped after %d frames", self.frame_count)

    def notify_resize(self, width: int, height: int) -> None:
        if not self.running:
            return

        width, height = _dimension(width), _dimension(height)

        def _apply() -> None:
            if self.surface is not None and self.surface.resize(width, height):
                self.registry.resize(width, height)
            else:
                logger.warning("surface resize to %sx%s failed, keeping previous layout", width, height)

        self._debounce(_apply)

    # ------------------------------------------------------------------ frames
    def _schedule(self, token: CancelToken, delay_ms: int) -> None:
        def _run() -> None:
            self._handle = None
            if token.cancelled:
                return
            self.tick()
            if not token.cancelled:
                self._schedule(token, self.frame_interval_ms)

        self._handle = self.scheduler.call_later(delay_ms, _run)

    def tick(self) -> None:
        """Render exactly one frame."""
        registry = self.registry
        registry.sync_hover(frozenset(self.hovered()))
        if registry.width <= 0 or registry.height <= 0 or self.surface is None:
            return
        if not self.surface.begin():
            return
        try:
            self.surface.fade(self.fade_opacity)
            draw = self.surface.disc
            for group in registry.live_groups():
                update_chains(group.chains, group.targets, draw, group.follow_steps, self.motion, registry.rng)
        finally:
            self.surface.end()
        self.frame_count += 1
        for listener in list(self._listeners):
            listener()
