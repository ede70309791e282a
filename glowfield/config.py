"""Default parameters shared by the particle engine and the Qt view.

The layout mirrors the historical web build: every tunable lives in a nested
dictionary grouped by concern so the view can be reconfigured by merging a
partial payload on top of :data:`DEFAULTS`.
"""

from __future__ import annotations

import copy
import math
import os
from typing import Dict, List, Mapping, Optional, Sequence

# (32 + 16 + 8) * 4, shared by particle counts, trail lengths and link radii.
BASE_PARTICLE_VALUE = 224

DEFAULTS = dict(
    particles=dict(
        base=BASE_PARTICLE_VALUE,
        letterCountDivisor=12, navCountDivisor=40,
        letterTrailDivisor=5, navTrailDivisor=5,
        letterFollowDivisor=5, navFollowDivisor=8,
        speedMin=1.0, speedSpan=1.0,
        frictionBase=0.7, frictionSpan=0.2,
        hueMultiplier=80.0, hueRandom=100.0,
        saturationBase=60.0, saturationSpan=40.0,
        lightnessBase=20.0, lightnessSpan=60.0,
        opacity=0.1,
        proximity=10.0, jumpProbability=0.05, reverseProbability=0.01,
        followFactor=0.7,
    ),
    layout=dict(
        baseWidth=1920, baseHeight=1080, scaleMultiplier=1.5,
        navSpawnRadius=60.0, outlineDensity=4.0,
        fadeOpacity=0.2, resizeDebounceMs=100,
    ),
    navButton=dict(width=200.0, height=90.0, radius=45.0, gap=60.0, bottom=50.0),
    letters=[
        dict(letter="V", offset=-375.0),
        dict(letter="E", offset=-225.0),
        dict(letter="E", offset=-75.0),
        dict(letter="J", offset=100.0),
        dict(letter="A", offset=250.0),
        dict(letter="Y", offset=375.0),
    ],
    navigation=[
        dict(name="about", text="About me", href="#about", color="hsla(120, 70%, 50%, 0.3)"),
        dict(name="projects", text="Projects", href="#projects", color="hsla(0, 70%, 50%, 0.3)"),
        dict(name="skills", text="Skills", href="#skills", color="hsla(240, 70%, 50%, 0.3)"),
        dict(name="contact", text="Contact", href="#contact", color="hsla(300, 70%, 50%, 0.3)"),
    ],
    system=dict(frameIntervalMs=16, debug=False),
)


def _coerce_float(value: object, default: float = 0.0) -> float:
    """Return ``value`` converted to a finite ``float`` when possible."""

    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _coerce_int(value: object, default: int = 0) -> int:
    number = _coerce_float(value, float(default))
    return int(number)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _make_button(idx: int, entry: Optional[Mapping[str, object]] = None) -> dict:
    """Return a normalised navigation button descriptor."""
    entry = entry or {}
    name = str(entry.get("name") or f"button{idx + 1}").strip()
    text = str(entry.get("text") or entry.get("label") or name).strip()
    href = str(entry.get("href") or f"#{name}").strip()
    color = entry.get("color")
    clean_color = color.strip() if isinstance(color, str) and color.strip() else None
    return {"name": name, "text": text, "href": href, "color": clean_color}


def sanitize_nav_buttons(buttons: object) -> List[dict]:
    """Normalise a user supplied list of navigation buttons.

    Strings are treated as labels, mappings may carry ``name``, ``text``,
    ``href`` and ``color``. Anything that is not a sequence falls back to the
    default button set.
    """
    if isinstance(buttons, (str, bytes)) or not isinstance(buttons, Sequence):
        return [dict(b) for b in DEFAULTS["navigation"]]
    sanitized: List[dict] = []
    for idx, entry in enumerate(buttons):
        if isinstance(entry, Mapping):
            sanitized.append(_make_button(idx, entry))
        elif isinstance(entry, str) and entry.strip():
            sanitized.append(_make_button(idx, {"text": entry, "name": entry.strip().lower()}))
        elif entry is None:
            sanitized.append(_make_button(idx))
    return sanitized


def default_state() -> Dict[str, object]:
    """Return a fresh copy of :data:`DEFAULTS` with environment overrides applied."""
    state = copy.deepcopy(DEFAULTS)
    system = state["system"]
    raw_interval = os.environ.get("GLOWFIELD_FRAME_MS")
    if raw_interval:
        system["frameIntervalMs"] = max(1, _coerce_int(raw_interval, system["frameIntervalMs"]))
    if _env_flag("GLOWFIELD_DEBUG"):
        system["debug"] = True
    return state


def merge_state(state: Dict[str, object], payload: Mapping[str, object]) -> Dict[str, object]:
    """Merge ``payload`` into ``state`` section by section and return ``state``."""
    for key, value in payload.items():
        if key == "navigation":
            state["navigation"] = sanitize_nav_buttons(value)
            continue
        if key == "letters":
            if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
                state["letters"] = [dict(v) for v in value if isinstance(v, Mapping) and v.get("letter")]
            continue
        current = state.get(key)
        if not isinstance(current, dict) or not isinstance(value, Mapping):
            state[key] = value
            continue
        for sub_key, sub_value in value.items():
            state[key][sub_key] = sub_value  # type: ignore[index]
    return state


def build_state(payload: Optional[Mapping[str, object]] = None) -> Dict[str, object]:
    state = default_state()
    if payload:
        merge_state(state, payload)
    return state


__all__ = [
    "BASE_PARTICLE_VALUE",
    "DEFAULTS",
    "build_state",
    "default_state",
    "merge_state",
    "sanitize_nav_buttons",
]
