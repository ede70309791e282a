"""Ownership of particle groups: glyph letters and hover-activated outlines.

Glyph groups are created once and retargeted in place on resize so particles
already in flight glide to the relocated letters. Hover groups start empty;
their outline and chains are built when the button becomes hovered and thrown
away when the pointer leaves.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .colors import generate_particle_color
from .config import _coerce_float, build_state
from .particles import ParticleChain, count_from_divisor, create_chain, follow_steps_from_divisor
from .shapes import Point, button_outline, compute_scale, letter_layout, nav_button_centers, to_canvas_targets

logger = logging.getLogger(__name__)

GLYPH = "glyph"
HOVER = "hover"

__all__ = ["GLYPH", "HOVER", "Group", "GroupRegistry"]


@dataclass
class Group:
    """A bundle of chains sharing one target set."""

    name: str
    kind: str
    follow_steps: int
    chains: List[ParticleChain] = field(default_factory=list)
    targets: List[Point] = field(default_factory=list)
    color: Optional[str] = None
    shape: Tuple[Point, ...] = ()
    offset_x: float = 0.0
    offset_y: float = 0.0
    index: Optional[int] = None
    anchor: Optional[Point] = None

    @property
    def has_particles(self) -> bool:
        return bool(self.chains)

    def release(self) -> None:
        self.chains.clear()
        self.targets.clear()


def _section(state: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = state.get(key)
    return value if isinstance(value, Mapping) else {}


def _sane_dimension(value: object) -> float:
    number = _coerce_float(value, 0.0)
    return number if number > 0 else 0.0


class GroupRegistry:
    """Holds every particle group of one view and their lifecycle."""

    def __init__(
        self,
        state: Optional[Mapping[str, object]] = None,
        letters: Optional[Sequence[Mapping[str, object]]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.state = dict(state) if state is not None else build_state()
        self.rng = rng or random.Random()
        self.width = 0.0
        self.height = 0.0
        self.scale = 1.0
        self._particles = _section(self.state, "particles")
        self._layout = _section(self.state, "layout")
        self._button = _section(self.state, "navButton")
        self._letters = list(letters if letters is not None else self.state.get("letters", []))  # type: ignore[arg-type]
        self._glyphs_ready = False
        self.glyphs: List[Group] = []
        self.hover_groups: List[Group] = []
        navigation = self.state.get("navigation", [])
        hover_follow = follow_steps_from_divisor(self._p("base", 224), self._p("navFollowDivisor", 8))
        for idx, button in enumerate(navigation if isinstance(navigation, list) else []):
            self.hover_groups.append(
                Group(
                    name=f"{button.get('name', idx)}-border",
                    kind=HOVER,
                    follow_steps=hover_follow,
                    color=button.get("color") or None,
                    index=idx,
                )
            )

    # ------------------------------------------------------------------ config helpers
    def _p(self, key: str, fallback: float = 0.0) -> float:
        return _coerce_float(self._particles.get(key), fallback)

    def _l(self, key: str, fallback: float = 0.0) -> float:
        return _coerce_float(self._layout.get(key), fallback)

    def _b(self, key: str, fallback: float = 0.0) -> float:
        return _coerce_float(self._button.get(key), fallback)

    @property
    def trail_length(self) -> int:
        return count_from_divisor(self._p("base", 224), self._p("letterTrailDivisor", 5))

    @property
    def hover_trail_length(self) -> int:
        return count_from_divisor(self._p("base", 224), self._p("navTrailDivisor", 5))

    def _new_chain(self, x: float, y: float, trail_length: int, target_count: int, color: str) -> ParticleChain:
        return create_chain(
            x,
            y,
            trail_length,
            target_count,
            color,
            base=self._p("base", 224),
            speed_range=(self._p("speedMin", 1.0), self._p("speedSpan", 1.0)),
            friction_range=(self._p("frictionBase", 0.7), self._p("frictionSpan", 0.2)),
            rng=self.rng,
        )

    def _color(self, index: int, total: int) -> str:
        return generate_particle_color(
            index,
            total,
            self._p("opacity", 0.1),
            hue_multiplier=self._p("hueMultiplier", 80.0),
            hue_random=self._p("hueRandom", 100.0),
            saturation=(self._p("saturationBase", 60.0), self._p("saturationSpan", 40.0)),
            lightness=(self._p("lightnessBase", 20.0), self._p("lightnessSpan", 60.0)),
            rand=self.rng.random,
        )

    # ------------------------------------------------------------------ glyphs
    def add_glyph_group(
        self,
        name: str,
        shape: Sequence[Point],
        offset_x: float = 0.0,
        offset_y: float = 0.0,
        count: Optional[int] = None,
    ) -> Group:
        """Register an always-active group and scatter its chains over the canvas."""
        group = Group(
            name=name,
            kind=GLYPH,
            follow_steps=follow_steps_from_divisor(self._p("base", 224), self._p("letterFollowDivisor", 5)),
            shape=tuple((float(x), float(y)) for x, y in shape),
            offset_x=offset_x,
            offset_y=offset_y,
        )
        group.targets = self._glyph_targets(group)
        if count is None:
            count = count_from_divisor(self._p("base", 224), self._p("letterCountDivisor", 12))
        for i in range(count):
            x = self.rng.random() * self.width
            y = self.rng.random() * self.height
            group.chains.append(self._new_chain(x, y, self.trail_length, len(group.targets), self._color(i, count)))
        self.glyphs.append(group)
        return group

    def _glyph_targets(self, group: Group) -> List[Point]:
        return to_canvas_targets(group.shape, group.offset_x, group.offset_y, self.scale, self.width, self.height)

    # ------------------------------------------------------------------ hover groups
    def button_centers(self) -> List[Point]:
        return nav_button_centers(
            self.width,
            self.height,
            len(self.hover_groups),
            self._b("width", 200.0),
            self._b("height", 90.0),
            self._b("gap", 60.0),
            self._b("bottom", 50.0),
        )

    def _outline(self, anchor: Point) -> List[Point]:
        return button_outline(
            anchor,
            self._b("width", 200.0),
            self._b("height", 90.0),
            self._b("radius", 45.0),
            self._l("outlineDensity", 4.0),
        )

    def hover_group(self, index: int) -> Optional[Group]:
        if 0 <= index < len(self.hover_groups):
            return self.hover_groups[index]
        return None

    def spawn_hover(self, index: int) -> bool:
        """Populate hover group ``index``; returns False when nothing changed."""
        group = self.hover_group(index)
        if group is None or group.has_particles:
            return False
        centers = self.button_centers()
        if index >= len(centers):
            return False
        anchor = centers[index]
        group.anchor = anchor
        group.targets = self._outline(anchor)
        if not group.targets:
            return False
        count = count_from_divisor(self._p("base", 224), self._p("navCountDivisor", 40))
        spread = self._l("navSpawnRadius", 60.0) * 2
        for i in range(count):
            x = anchor[0] + (self.rng.random() - 0.5) * spread
            y = anchor[1] + (self.rng.random() - 0.5) * spread
            color = group.color or self._color(i, count)
            group.chains.append(self._new_chain(x, y, self.hover_trail_length, len(group.targets), color))
        logger.debug("spawned %d chains on %s (%d targets)", count, group.name, len(group.targets))
        return True

    def despawn_hover(self, index: int) -> bool:
        group = self.hover_group(index)
        if group is None or not group.has_particles:
            return False
        group.release()
        logger.debug("cleared %s", group.name)
        return True

    def sync_hover(self, hovered: AbstractSet[int]) -> None:
        """Apply hover transitions from a snapshot of hovered button indices."""
        for idx, group in enumerate(self.hover_groups):
            if idx in hovered:
                if not group.has_particles:
                    self.spawn_hover(idx)
            elif group.has_particles:
                self.despawn_hover(idx)

    # ------------------------------------------------------------------ lifecycle
    def resize(self, width: object, height: object) -> None:
        """Recompute every target set for a new canvas size."""
        self.width = _sane_dimension(width)
        self.height = _sane_dimension(height)
        self.scale = compute_scale(
            self.width,
            self.height,
            self._l("baseWidth", 1920.0),
            self._l("baseHeight", 1080.0),
            self._l("scaleMultiplier", 1.5),
        )
        if not self._glyphs_ready:
            self._glyphs_ready = True
            for letter, shape, offset in letter_layout(self._letters):
                self.add_glyph_group(letter, shape, offset)
        else:
            for group in self.glyphs:
                group.targets = self._glyph_targets(group)
        centers = self.button_centers()
        for group, anchor in zip(self.hover_groups, centers):
            if group.has_particles:
                group.anchor = anchor
                group.targets = self._outline(anchor)
        logger.debug("resized to %sx%s (scale %.3f)", self.width, self.height, self.scale)

    def groups(self) -> Iterator[Group]:
        yield from self.glyphs
        yield from self.hover_groups

    def live_groups(self) -> List[Group]:
        return [group for group in self.groups() if group.has_particles]

    def chain_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for group in self.groups():
            counts[group.name] = counts.get(group.name, 0) + len(group.chains)
        return counts

    def clear(self) -> None:
        for group in self.groups():
            group.release()
        self.glyphs.clear()
        self._glyphs_ready = False
