"""Tests for glyph placement, button outlines and navigation layout."""

import math

import pytest

from glowfield.shapes import (
    LETTER_SHAPES,
    button_at,
    button_outline,
    compute_scale,
    letter_layout,
    nav_button_centers,
    to_canvas_targets,
)


def _signed_area(points):
    total = 0.0
    for (x1, y1), (x2, y2) in zip(points, points[1:] + points[:1]):
        total += x1 * y2 - x2 * y1
    return total / 2.0


def test_canvas_targets_are_centred_and_scaled():
    targets = to_canvas_targets([(0, 0), (10, -20)], 5, 0, 2.0, 1000, 800)
    assert targets == [(510.0, 400.0), (530.0, 360.0)]


@pytest.mark.parametrize("k", [0.5, 2.0, 3.0])
def test_canvas_targets_are_linear_in_scale(k):
    shape = LETTER_SHAPES["J"]
    base = to_canvas_targets(shape, -75, 10, 1.2, 1000, 800)
    scaled = to_canvas_targets(shape, -75, 10, 1.2 * k, 1000, 800)
    for (bx, by), (sx, sy) in zip(base, scaled):
        assert sx - 500 == pytest.approx(k * (bx - 500))
        assert sy - 400 == pytest.approx(k * (by - 400))


def test_compute_scale():
    assert compute_scale(1920, 1080) == pytest.approx(1.5)
    assert compute_scale(960, 1080) == pytest.approx(0.75)
    assert compute_scale(4000, 4000) == pytest.approx(1.5)
    assert compute_scale(0, 600) == 0.0


def test_letter_layout_spells_veejay_and_skips_unknown():
    layout = letter_layout(
        [{"letter": "V", "offset": -375}, {"letter": "e", "offset": -225}, {"letter": "Q", "offset": 0}]
    )
    assert [letter for letter, _shape, _offset in layout] == ["V", "E"]
    assert layout[1][1] is LETTER_SHAPES["E"]
    assert layout[0][2] == -375.0


@pytest.mark.parametrize(
    "width,height,radius",
    [(200, 90, 45), (200, 90, 20), (120, 120, 30), (300, 60, 10)],
)
def test_button_outline_is_spatially_ordered(width, height, radius):
    density = 4.0
    points = button_outline((500.0, 700.0), width, height, radius, density)
    assert len(points) > 8
    bound = max(density, 2 * math.pi) * 1.01
    for (x1, y1), (x2, y2) in zip(points, points[1:] + points[:1]):
        assert math.hypot(x2 - x1, y2 - y1) <= bound


def test_button_outline_starts_on_top_edge_and_runs_clockwise():
    points = button_outline((0.0, 0.0), 200, 90, 20)
    assert points[0] == (-80.0, -45.0)
    assert _signed_area(points) > 0


def test_button_outline_stays_inside_box():
    for radius in (0, 10, 45, 500):
        points = button_outline((100.0, 50.0), 200, 90, radius)
        assert points
        for x, y in points:
            assert 0.0 - 1e-9 <= x <= 200.0 + 1e-9
            assert 5.0 - 1e-9 <= y <= 95.0 + 1e-9


def test_default_button_outline_length():
    points = button_outline((0.0, 0.0), 200, 90, 45)
    # pill shape: two edges plus four sampled quarter arcs
    assert 70 <= len(points) <= 150


def test_nav_button_centers_row():
    centers = nav_button_centers(1000, 800, 4, 200, 90, 60, 50)
    assert centers == [(110.0, 705.0), (370.0, 705.0), (630.0, 705.0), (890.0, 705.0)]
    assert nav_button_centers(1000, 800, 0, 200, 90, 60, 50) == []


def test_button_at_hits_and_misses():
    centers = nav_button_centers(1000, 800, 4, 200, 90, 60, 50)
    assert button_at(370, 705, centers, 200, 90) == 1
    assert button_at(890 + 99, 705 - 44, centers, 200, 90) == 3
    assert button_at(240, 705, centers, 200, 90) is None
    assert button_at(500, 100, centers, 200, 90) is None
