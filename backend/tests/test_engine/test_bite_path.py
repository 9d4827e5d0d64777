"""Tests for procedural bite outlines."""

import numpy as np
import pytest
from shapely.geometry import Point

from yumyum.engine.bite_path import BITE_VERTICES, WIDTH_FACTOR, generate_bite_path
from yumyum.engine.records import Bite


def test_smooth_outline_uses_quadratics(rng):
    outline = generate_bite_path(40, roundness=0.9, depth_variance=0.2, rng=rng)
    assert outline.smooth
    assert outline.d.startswith("M ")
    assert outline.d.endswith("Z")
    assert outline.d.count("Q ") == BITE_VERTICES
    assert "L " not in outline.d


def test_jagged_outline_is_polygon(rng):
    outline = generate_bite_path(40, roundness=0.2, depth_variance=0.2, rng=rng)
    assert not outline.smooth
    assert outline.d.count("L ") == BITE_VERTICES - 1
    assert "Q " not in outline.d


def test_roundness_threshold(rng):
    assert not generate_bite_path(40, 0.4, 0.0, rng).smooth
    assert generate_bite_path(40, 0.41, 0.0, rng).smooth


def test_perfectly_round_outline_is_symmetric(rng):
    # roundness 1 and no depth variance remove all noise
    outline = generate_bite_path(40, roundness=1.0, depth_variance=0.0, rng=rng)
    v = outline.vertices
    assert v.shape == (BITE_VERTICES, 2)
    # Vertex 0 is the top (y = -radius), vertex 12 the bottom
    assert v[0] == pytest.approx([0.0, -40.0], abs=1e-9)
    assert v[12][1] == pytest.approx(40.0)
    # Wider than deep; the top is narrower than the bottom
    widest = np.max(np.abs(v[:, 0]))
    assert widest > 40
    assert widest <= 40 * WIDTH_FACTOR * 1.3 + 1e-9
    assert abs(v[3][0]) < abs(v[9][0])


def test_outlines_differ_between_calls(rng):
    a = generate_bite_path(40, 0.5, 0.5, rng)
    b = generate_bite_path(40, 0.5, 0.5, rng)
    assert not np.allclose(a.vertices, b.vertices)


def test_depth_variance_bounds(rng):
    for _ in range(50):
        outline = generate_bite_path(40, roundness=1.0, depth_variance=1.0, rng=rng)
        depth = -outline.vertices[0][1]
        # 1 + (u - 0.5) * 1.5 lies in [0.25, 1.75)
        assert 40 * 0.25 <= depth < 40 * 1.75


def test_polygon_is_valid_and_sized(rng):
    outline = generate_bite_path(40, roundness=0.9, depth_variance=0.2, rng=rng)
    poly = outline.polygon
    assert poly.is_valid
    assert poly.area > 0
    minx, miny, maxx, maxy = poly.bounds
    assert minx < 0 < maxx and miny < 0 < maxy


def test_placed_rotates_and_translates(rng):
    outline = generate_bite_path(40, roundness=1.0, depth_variance=0.0, rng=rng)
    pts = outline.placed(100, 50, 0)
    assert pts.mean(axis=0) == pytest.approx([100, 50], abs=5)
    turned = outline.placed(0, 0, 90)
    raw = outline.points()
    # 90°: (x, y) -> (-y, x)
    assert turned == pytest.approx(np.column_stack([-raw[:, 1], raw[:, 0]]))


def test_placed_polygon_keeps_area(rng):
    outline = generate_bite_path(40, roundness=0.2, depth_variance=0.5, rng=rng)
    placed = outline.placed_polygon(300, 200, 45)
    assert placed.is_valid
    assert placed.area == pytest.approx(outline.polygon.area)
    assert placed.centroid.distance(Point(300, 200)) < 40


def test_bite_footprint_sits_on_bite(rng):
    outline = generate_bite_path(20, roundness=0.9, depth_variance=0.2, rng=rng)
    bite = Bite(id=1, x=150, y=80, outline=outline, rotation=30.0, radius=20)
    minx, miny, maxx, maxy = bite.footprint.bounds
    assert minx < 150 < maxx and miny < 80 < maxy
    assert bite.area == pytest.approx(bite.footprint.area)
    assert bite.area > 0
