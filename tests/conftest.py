"""Shared test fixtures for glowfield tests."""

import math
import os
import random

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from glowfield.config import build_state
from glowfield.frame_loop import ManualScheduler
from glowfield.registry import GroupRegistry


class RecordingSurface:
    """Surface double that remembers what each frame asked for."""

    def __init__(self, resize_ok=True, begin_ok=True):
        self.resize_ok = resize_ok
        self.begin_ok = begin_ok
        self.sizes = []
        self.fades = []
        self.discs = []
        self.open = False

    def resize(self, width, height):
        self.sizes.append((width, height))
        return self.resize_ok

    def begin(self):
        self.open = self.begin_ok
        return self.begin_ok

    def fade(self, opacity):
        assert self.open
        self.fades.append(opacity)

    def disc(self, x, y, radius, color):
        assert self.open
        self.discs.append((x, y, radius, color))

    def end(self):
        self.open = False


def all_link_positions(registry):
    return [
        (link.x, link.y)
        for group in registry.groups()
        for chain in group.chains
        for link in chain.links
    ]


def is_finite_point(point):
    return math.isfinite(point[0]) and math.isfinite(point[1])


@pytest.fixture()
def rng():
    return random.Random(20240611)


@pytest.fixture()
def state():
    return build_state()


@pytest.fixture()
def registry(state, rng):
    """Default VEEJAY registry laid out on a 1000x800 canvas."""
    reg = GroupRegistry(state, rng=rng)
    reg.resize(1000, 800)
    return reg


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def surface():
    return RecordingSurface()
