"""Particle chain records and the factory that builds them."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .config import BASE_PARTICLE_VALUE

__all__ = [
    "ParticleChain",
    "TrailLink",
    "count_from_divisor",
    "create_chain",
    "follow_steps_from_divisor",
]


@dataclass
class TrailLink:
    """One disc of a particle chain.

    ``vx``/``vy``, ``target_index`` and ``direction`` only drive motion on the
    lead link; followers are moved by positional relaxation.
    """

    x: float
    y: float
    radius: float
    speed: float
    friction: float
    target_index: int = 0
    direction: int = 1
    vx: float = 0.0
    vy: float = 0.0


@dataclass
class ParticleChain:
    """A lead link followed by its trailing links, drawn in one colour."""

    links: List[TrailLink] = field(default_factory=list)
    color: str = "hsla(0,0%,100%,0.1)"

    @property
    def lead(self) -> TrailLink:
        return self.links[0]

    @property
    def followers(self) -> List[TrailLink]:
        return self.links[1:]

    def __len__(self) -> int:
        return len(self.links)

    def positions(self) -> List[Tuple[float, float]]:
        return [(link.x, link.y) for link in self.links]


def count_from_divisor(base: float, divisor: float) -> int:
    """Number of iterations of ``for (i = 0; i < base / divisor; i++)``."""
    if divisor <= 0:
        return 0
    return max(0, int(math.ceil(base / divisor)))


def follow_steps_from_divisor(base: float, divisor: float) -> int:
    """Follower updates performed for a trail bound of ``base / divisor - 1``."""
    if divisor <= 0:
        return 0
    return max(0, int(math.ceil(base / divisor - 1)))


def create_chain(
    x0: float,
    y0: float,
    trail_length: int,
    target_count: int,
    color: str,
    *,
    base: float = BASE_PARTICLE_VALUE,
    speed_range: Sequence[float] = (1.0, 1.0),
    friction_range: Sequence[float] = (0.7, 0.2),
    rng: Optional[random.Random] = None,
) -> ParticleChain:
    """Build a chain of ``trail_length`` links stacked at ``(x0, y0)``.

    ``speed_range`` and ``friction_range`` are ``(base, span)`` pairs; each
    link draws its own values. The radius taper ``1 - k / base + 1`` is kept
    as-is even though it barely varies at the default ``base``.
    """
    rand = (rng or random).random
    speed_min, speed_span = speed_range
    friction_base, friction_span = friction_range
    links: List[TrailLink] = []
    for k in range(max(1, int(trail_length))):
        links.append(
            TrailLink(
                x=x0,
                y=y0,
                radius=1 - k / base + 1,
                speed=rand() * speed_span + speed_min,
                target_index=int(rand() * target_count) if target_count > 0 else 0,
                direction=1 if rand() > 0.5 else -1,
                friction=friction_span * rand() + friction_base,
            )
        )
    return ParticleChain(links=links, color=color)
