"""Translucent particle colours expressed as CSS ``hsla()`` strings."""

from __future__ import annotations

import math
import random
import re
from typing import Callable, Tuple

__all__ = ["generate_particle_color", "parse_hsla"]

_HSLA_RE = re.compile(
    r"^\s*hsla?\(\s*([-+0-9.eE]+)\s*,\s*([-+0-9.eE]+)%?\s*,\s*([-+0-9.eE]+)%?\s*(?:,\s*([-+0-9.eE]+)\s*)?\)\s*$"
)


def generate_particle_color(
    index: int,
    total: int,
    opacity: float = 0.1,
    *,
    hue_multiplier: float = 80.0,
    hue_random: float = 100.0,
    saturation: Tuple[float, float] = (60.0, 40.0),
    lightness: Tuple[float, float] = (20.0, 60.0),
    rand: Callable[[], float] = random.random,
) -> str:
    """Return a colour whose hue sweeps across a group as ``index`` grows.

    ``saturation`` and ``lightness`` are ``(base, span)`` pairs. Every call is
    independently jittered; there is no seeding contract.
    """

    total = total if total > 0 else 1
    h = hue_multiplier * (index / total) + rand() * hue_random
    s = saturation[1] * rand() + saturation[0]
    l = lightness[1] * rand() + lightness[0]
    return f"hsla({int(h)},{int(s)}%,{int(l)}%,{opacity})"


_WHITE = (0.0, 0.0, 1.0, 1.0)


def parse_hsla(text: str) -> Tuple[float, float, float, float]:
    """Parse ``hsl()``/``hsla()`` notation into unit ``(hue, sat, light, alpha)``.

    The tuple feeds ``QColor.fromHslF`` directly. Unparseable input yields
    opaque white so a bad colour never stops a frame.
    """

    match = _HSLA_RE.match(text or "")
    if match is None:
        return _WHITE
    try:
        values = [float(g) if g is not None else 1.0 for g in match.groups()]
    except ValueError:
        return _WHITE
    if not all(math.isfinite(v) for v in values):
        return _WHITE
    h, s, l, a = values
    return (
        (h % 360.0) / 360.0,
        max(0.0, min(100.0, s)) / 100.0,
        max(0.0, min(100.0, l)) / 100.0,
        max(0.0, min(1.0, a)),
    )
