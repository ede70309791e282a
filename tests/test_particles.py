"""Tests for the particle chain factory."""

import pytest

from glowfield.particles import (
    ParticleChain,
    count_from_divisor,
    create_chain,
    follow_steps_from_divisor,
)


def test_chain_links_start_stacked_and_still(rng):
    chain = create_chain(12.5, 40.0, 45, 7, "hsla(10,70%,40%,0.1)", rng=rng)
    assert isinstance(chain, ParticleChain)
    assert len(chain) == 45
    assert chain.color == "hsla(10,70%,40%,0.1)"
    for link in chain.links:
        assert (link.x, link.y) == (12.5, 40.0)
        assert (link.vx, link.vy) == (0.0, 0.0)


def test_chain_kinematic_ranges(rng):
    chain = create_chain(0, 0, 45, 7, "c", speed_range=(1.0, 1.0), friction_range=(0.7, 0.2), rng=rng)
    for link in chain.links:
        assert 1.0 <= link.speed < 2.0
        assert 0.7 <= link.friction < 0.9
        assert 0 <= link.target_index < 7
        assert link.direction in (-1, 1)


def test_radius_keeps_taper_formula(rng):
    chain = create_chain(0, 0, 45, 7, "c", base=224, rng=rng)
    for k, link in enumerate(chain.links):
        assert link.radius == pytest.approx(1 - k / 224 + 1)
    assert chain.links[0].radius > chain.links[-1].radius


def test_lead_and_followers(rng):
    chain = create_chain(0, 0, 5, 3, "c", rng=rng)
    assert chain.lead is chain.links[0]
    assert chain.followers == chain.links[1:]
    assert chain.positions() == [(0, 0)] * 5


def test_zero_targets_and_degenerate_length(rng):
    chain = create_chain(0, 0, 0, 0, "c", rng=rng)
    assert len(chain) == 1
    assert chain.lead.target_index == 0


def test_counts_reproduce_fractional_loop_bounds():
    assert count_from_divisor(224, 12) == 19
    assert count_from_divisor(224, 40) == 6
    assert count_from_divisor(224, 5) == 45
    assert follow_steps_from_divisor(224, 5) == 44
    assert follow_steps_from_divisor(224, 8) == 27
    assert count_from_divisor(224, 0) == 0
