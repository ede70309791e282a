"""Per-frame update of particle chains.

A chain's lead link patrols its target set: it steers towards the current
target point and, once within ``proximity`` pixels, steps to the neighbouring
index, occasionally jumping to a random point or reversing direction. The
follower links ease towards their predecessor to form the glowing tail.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, Sequence, Tuple

from .particles import ParticleChain, TrailLink

DrawCallback = Callable[[float, float, float, str], None]

__all__ = ["DrawCallback", "MotionParams", "step_chain", "update_chains"]


@dataclass(frozen=True)
class MotionParams:
    proximity: float = 10.0
    jump_probability: float = 0.05
    reverse_probability: float = 0.01
    follow_factor: float = 0.7

    @classmethod
    def from_state(cls, particles: Mapping[str, object]) -> "MotionParams":
        def _get(key: str, fallback: float) -> float:
            try:
                value = float(particles.get(key, fallback))  # type: ignore[arg-type]
            except (TypeError, ValueError):
                return fallback
            return value if math.isfinite(value) else fallback

        return cls(
            proximity=_get("proximity", cls.proximity),
            jump_probability=_get("jumpProbability", cls.jump_probability),
            reverse_probability=_get("reverseProbability", cls.reverse_probability),
            follow_factor=_get("followFactor", cls.follow_factor),
        )


_DEFAULT_PARAMS = MotionParams()


def _patrol(lead: TrailLink, count: int, params: MotionParams, rand: Callable[[], float]) -> None:
    if rand() < params.jump_probability:
        lead.target_index = int(rand() * count)
    elif rand() < params.reverse_probability:
        lead.direction = -lead.direction
    lead.target_index = (lead.target_index + lead.direction) % count


def _advance_lead(
    lead: TrailLink,
    targets: Sequence[Tuple[float, float]],
    params: MotionParams,
    rand: Callable[[], float],
) -> None:
    count = len(targets)
    if count:
        # target sets can shrink between frames (resize, respawn)
        lead.target_index %= count
        tx, ty = targets[lead.target_index]
        dx = lead.x - tx
        dy = lead.y - ty
        distance = math.hypot(dx, dy)
        if distance < params.proximity:
            _patrol(lead, count, params, rand)
        if distance > 0 and math.isfinite(distance):
            lead.vx += -dx / distance * lead.speed
            lead.vy += -dy / distance * lead.speed
    lead.x += lead.vx
    lead.y += lead.vy


def _relax_followers(chain: ParticleChain, follow_steps: int, factor: float, draw: DrawCallback) -> None:
    links = chain.links
    steps = min(follow_steps, len(links) - 1)
    for k in range(steps):
        prev = links[k]
        nxt = links[k + 1]
        nxt.x -= factor * (nxt.x - prev.x)
        nxt.y -= factor * (nxt.y - prev.y)
        draw(nxt.x, nxt.y, nxt.radius, chain.color)


def step_chain(
    chain: ParticleChain,
    targets: Sequence[Tuple[float, float]],
    draw: DrawCallback,
    follow_steps: int,
    params: MotionParams = _DEFAULT_PARAMS,
    rng: Optional[random.Random] = None,
) -> None:
    """Advance ``chain`` by one frame and draw each link that moved."""
    if not chain.links:
        return
    rand = (rng or random).random
    lead = chain.lead
    _advance_lead(lead, targets, params, rand)
    draw(lead.x, lead.y, lead.radius, chain.color)
    lead.vx *= lead.friction
    lead.vy *= lead.friction
    _relax_followers(chain, follow_steps, params.follow_factor, draw)


def update_chains(
    chains: Iterable[ParticleChain],
    targets: Sequence[Tuple[float, float]],
    draw: DrawCallback,
    follow_steps: int,
    params: MotionParams = _DEFAULT_PARAMS,
    rng: Optional[random.Random] = None,
) -> None:
    for chain in chains:
        step_chain(chain, targets, draw, follow_steps, params, rng)
