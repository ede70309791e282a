"""Tests for the per-frame chain update."""

import math
import random

import pytest

from glowfield.motion import MotionParams, step_chain, update_chains
from glowfield.particles import create_chain
from glowfield.shapes import LETTER_SHAPES, button_outline, to_canvas_targets


class ScriptedRandom:
    """Replays fixed values for ``random()``."""

    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


def _draws():
    calls = []

    def draw(x, y, radius, color):
        calls.append((x, y, radius, color))

    return calls, draw


def _still_chain(x, y, length=5, targets=7):
    chain = create_chain(x, y, length, targets, "c", rng=random.Random(3))
    for link in chain.links:
        link.target_index = 0
        link.direction = 1
    return chain


@pytest.mark.parametrize(
    "targets",
    [
        to_canvas_targets(LETTER_SHAPES["V"], 0, 0, 1.0, 1000, 800),
        button_outline((500.0, 400.0), 200, 90, 45),
        [(500.0, 400.0)],
        [(100.0, 100.0), (104.0, 100.0)],
    ],
)
def test_target_index_stays_in_range(targets, rng):
    chains = [create_chain(rng.random() * 1000, rng.random() * 800, 12, len(targets), "c", rng=rng) for _ in range(6)]
    _calls, draw = _draws()
    for _ in range(600):
        update_chains(chains, targets, draw, 11, rng=rng)
        for chain in chains:
            assert 0 <= chain.lead.target_index < len(targets)


def test_steering_moves_lead_towards_target(rng):
    targets = [(500.0, 400.0)]
    for _ in range(100):
        x, y = rng.uniform(0, 1000), rng.uniform(0, 800)
        if math.hypot(x - 500, y - 400) < 11:
            continue
        chain = create_chain(x, y, 3, 1, "c", rng=rng)
        _calls, draw = _draws()
        step_chain(chain, targets, draw, 2, rng=rng)
        moved = (chain.lead.x - x, chain.lead.y - y)
        wanted = (500 - x, 400 - y)
        assert moved[0] * wanted[0] + moved[1] * wanted[1] > 0


def test_lead_exactly_on_target_stays_finite():
    chain = _still_chain(500.0, 400.0, targets=1)
    _calls, draw = _draws()
    step_chain(chain, [(500.0, 400.0)], draw, 4, rng=ScriptedRandom([0.5, 0.5]))
    assert (chain.lead.x, chain.lead.y) == (500.0, 400.0)
    assert (chain.lead.vx, chain.lead.vy) == (0.0, 0.0)


def test_empty_target_set_still_draws_and_relaxes():
    chain = _still_chain(0.0, 0.0)
    chain.links[1].x = 10.0
    calls, draw = _draws()
    step_chain(chain, [], draw, 4)
    assert len(calls) == 5
    assert chain.links[1].x == pytest.approx(3.0)


def test_followers_ease_seventy_percent_towards_predecessor():
    chain = _still_chain(0.0, 0.0, length=3)
    chain.links[1].x = 10.0
    chain.links[2].x = 10.0
    _calls, draw = _draws()
    step_chain(chain, [], draw, 2, MotionParams(follow_factor=0.7))
    assert chain.links[1].x == pytest.approx(3.0)
    assert chain.links[2].x == pytest.approx(10.0 - 0.7 * (10.0 - 3.0))


def test_follow_steps_limit_drawn_links():
    chain = _still_chain(0.0, 0.0, length=45)
    calls, draw = _draws()
    step_chain(chain, [(50.0, 50.0)], draw, 27)
    assert len(calls) == 28
    calls, draw = _draws()
    step_chain(chain, [(50.0, 50.0)], draw, 500)
    assert len(calls) == 45
    assert all(color == "c" for *_rest, color in calls)


def test_out_of_range_index_is_wrapped():
    targets = [(float(i * 50), 0.0) for i in range(7)]
    chain = _still_chain(1000.0, 1000.0)
    chain.lead.target_index = 99
    _calls, draw = _draws()
    step_chain(chain, targets, draw, 4)
    assert chain.lead.target_index == 99 % 7


def test_patrol_steps_by_direction_when_close():
    targets = [(float(i * 50), 0.0) for i in range(7)]
    chain = _still_chain(1.0, 0.0)
    _calls, draw = _draws()
    step_chain(chain, targets, draw, 4, rng=ScriptedRandom([0.5, 0.5]))
    assert chain.lead.target_index == 1
    assert chain.lead.direction == 1


def test_patrol_reverses_and_wraps_negative():
    targets = [(float(i * 50), 0.0) for i in range(7)]
    chain = _still_chain(1.0, 0.0)
    _calls, draw = _draws()
    step_chain(chain, targets, draw, 4, rng=ScriptedRandom([0.5, 0.001]))
    assert chain.lead.direction == -1
    assert chain.lead.target_index == 6


def test_patrol_random_jump():
    targets = [(float(i * 50), 0.0) for i in range(7)]
    chain = _still_chain(1.0, 0.0)
    _calls, draw = _draws()
    step_chain(chain, targets, draw, 4, rng=ScriptedRandom([0.01, 0.3]))
    assert chain.lead.target_index == (int(0.3 * 7) + 1) % 7


def test_friction_damps_velocity():
    chain = _still_chain(1000.0, 0.0, length=2)
    lead = chain.lead
    lead.friction = 0.5
    lead.speed = 2.0
    _calls, draw = _draws()
    step_chain(chain, [(0.0, 0.0)], draw, 1)
    assert lead.vx == pytest.approx(-1.0)
    assert lead.x == pytest.approx(998.0)


def test_params_from_state():
    params = MotionParams.from_state({"proximity": "12", "followFactor": float("nan")})
    assert params.proximity == 12.0
    assert params.follow_factor == 0.7
    assert params.jump_probability == 0.05
