"""Glyph polygons and navigation button outlines in canvas coordinates.

Shapes are authored in an abstract coordinate system centred on the canvas;
:func:`to_canvas_targets` places them for a given viewport. Button outlines
are traced clockwise so that neighbouring indices are neighbouring points,
which the particle patrol relies on.
"""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

Point = Tuple[float, float]

__all__ = [
    "LETTER_SHAPES",
    "Point",
    "button_at",
    "button_outline",
    "compute_scale",
    "letter_layout",
    "nav_button_centers",
    "to_canvas_targets",
]


LETTER_SHAPES: Dict[str, Tuple[Point, ...]] = {
    "V": (
        (-60, -120), (-25, -120), (0, 20), (25, -120),
        (60, -120), (25, 75), (-25, 75),
    ),
    "E": (
        (-60, -120), (-60, 75), (60, 75), (60, 45), (-20, 45),
        (-20, 0), (40, 0), (40, -30), (-20, -30), (-20, -100),
        (60, -100), (60, -120),
    ),
    "J": (
        (60, -120), (60, 45), (40, 65), (0, 75), (-40, 65),
        (-60, 45), (-60, 25), (-20, 25), (-20, 55), (0, 60),
        (20, 55), (20, -120), (60, -120),
    ),
    "A": (
        (-60, 75), (-25, 75), (-10, 15), (10, 15), (25, 75),
        (60, 75), (15, -120), (-15, -120), (-60, 75),
    ),
    "Y": (
        (-60, -120), (-25, -120), (0, -15), (25, -120), (60, -120),
        (20, 0), (20, 75), (-20, 75), (-20, 0), (-60, -120),
    ),
}


def to_canvas_targets(
    points: Sequence[Sequence[float]],
    offset_x: float,
    offset_y: float,
    scale: float,
    canvas_w: float,
    canvas_h: float,
) -> List[Point]:
    """Map abstract shape points to absolute canvas coordinates."""
    cx = canvas_w / 2.0
    cy = canvas_h / 2.0
    return [
        (cx + x * scale + offset_x * scale, cy + y * scale + offset_y * scale)
        for x, y in points
    ]


def compute_scale(
    canvas_w: float,
    canvas_h: float,
    base_w: float = 1920.0,
    base_h: float = 1080.0,
    multiplier: float = 1.5,
) -> float:
    """Return the glyph scale for a viewport, never enlarging past ``multiplier``."""
    if base_w <= 0 or base_h <= 0:
        return multiplier
    return min(canvas_w / base_w, canvas_h / base_h, 1.0) * multiplier


def letter_layout(letters: Sequence[Mapping[str, object]]) -> List[Tuple[str, Tuple[Point, ...], float]]:
    """Resolve ``[{"letter": "V", "offset": -375}, ...]`` into shape tuples.

    Letters without a known polygon are skipped.
    """
    layout: List[Tuple[str, Tuple[Point, ...], float]] = []
    for entry in letters:
        letter = str(entry.get("letter") or "").upper()
        shape = LETTER_SHAPES.get(letter)
        if shape is None:
            continue
        try:
            offset = float(entry.get("offset", 0.0))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            offset = 0.0
        layout.append((letter, shape, offset))
    return layout


def _linear_steps(start: float, stop: float, step: float) -> List[float]:
    """Values ``start, start+step, ...`` up to and including ``stop``.

    ``step`` may be negative to walk downwards. Counting steps up front keeps
    float accumulation from dropping the final sample.
    """
    if step == 0:
        return [start]
    span = (stop - start) / step
    if span < -1e-9:
        return []
    count = int(math.floor(span + 1e-9)) + 1
    return [start + i * step for i in range(count)]


def button_outline(
    center: Point,
    width: float,
    height: float,
    corner_radius: float,
    density: float = 4.0,
) -> List[Point]:
    """Trace a rounded rectangle clockwise, starting on the top edge.

    Straight edges are sampled every ``density`` pixels and each quarter arc
    every ``pi / (radius / 2)`` radians. ``corner_radius`` is clamped into
    ``[0, min(width, height) / 2]``.
    """
    cx, cy = center
    hw = width / 2.0
    hh = height / 2.0
    r = max(0.0, min(corner_radius, hw, hh))
    density = density if density > 0 else 4.0
    points: List[Point] = []

    def _arc(ox: float, oy: float, start: float, stop: float) -> None:
        if r <= 0:
            return
        for angle in _linear_steps(start, stop, math.pi / (r / 2.0)):
            points.append((ox + math.cos(angle) * r, oy + math.sin(angle) * r))

    for x in _linear_steps(-hw + r, hw - r, density):
        points.append((cx + x, cy - hh))
    _arc(cx + hw - r, cy - hh + r, -math.pi / 2, 0.0)
    for y in _linear_steps(-hh + r, hh - r, density):
        points.append((cx + hw, cy + y))
    _arc(cx + hw - r, cy + hh - r, 0.0, math.pi / 2)
    for x in _linear_steps(hw - r, -hw + r, -density):
        points.append((cx + x, cy + hh))
    _arc(cx - hw + r, cy + hh - r, math.pi / 2, math.pi)
    for y in _linear_steps(hh - r, -hh + r, -density):
        points.append((cx - hw, cy + y))
    _arc(cx - hw + r, cy - hh + r, math.pi, 3 * math.pi / 2)
    return points


def nav_button_centers(
    canvas_w: float,
    canvas_h: float,
    count: int,
    button_w: float,
    button_h: float,
    gap: float,
    bottom_margin: float,
) -> List[Point]:
    """Centres of ``count`` equal buttons in a row above the bottom edge."""
    if count <= 0:
        return []
    total = button_w * count + gap * (count - 1)
    start_x = canvas_w / 2.0 - total / 2.0
    y = canvas_h - bottom_margin - button_h / 2.0
    return [(start_x + button_w / 2.0 + i * (button_w + gap), y) for i in range(count)]


def button_at(
    x: float,
    y: float,
    centers: Sequence[Point],
    button_w: float,
    button_h: float,
) -> Optional[int]:
    """Return the index of the button rectangle containing ``(x, y)``."""
    hw = button_w / 2.0
    hh = button_h / 2.0
    for idx, (bx, by) in enumerate(centers):
        if abs(x - bx) <= hw and abs(y - by) <= hh:
            return idx
    return None
