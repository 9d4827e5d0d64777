"""Tests for colour parsing, similarity and dominance detection."""

import numpy as np
import pytest

from yumyum.engine.colors import (
    color_matches,
    color_similarity,
    detect_dominant_colors,
    parse_hex,
    to_hex,
    vary_color,
)
from yumyum.engine.grid import ColorSampleGrid
from tests.conftest import filled_grid


@pytest.mark.parametrize("text,expected", [
    ("#ff0000", (255, 0, 0)),
    ("#F00", (255, 0, 0)),
    ("#4ECDC480", (0x4E, 0xCD, 0xC4)),
    ("blue", (0, 0, 255)),
    ("  #123456 ", (0x12, 0x34, 0x56)),
])
def test_parse_hex(text, expected):
    assert parse_hex(text) == expected


@pytest.mark.parametrize("text", [None, "", "none", "transparent", "#12", "#zzzzzz", "rgb(1,2,3)", "url(#grad)"])
def test_parse_hex_rejects(text):
    assert parse_hex(text) is None


def test_to_hex_clips_and_rounds():
    assert to_hex((255.4, -3, 300)) == "#ff00ff"
    assert to_hex(np.array([16, 32, 48, 255], dtype=np.uint8)) == "#102030"


def test_similarity_extremes():
    samples = np.array([[255, 0, 0, 255], [0, 255, 255, 255]], dtype=np.uint8)
    sim = color_similarity(samples, (255, 0, 0))
    assert sim[0] == pytest.approx(1.0)
    assert sim[1] < 0.01


def test_matches_tolerance():
    samples = np.array([[250, 5, 5, 255], [128, 128, 128, 255]], dtype=np.uint8)
    assert color_matches(samples, (255, 0, 0), 0.05).tolist() == [True, False]
    assert color_matches(samples, (255, 0, 0), 1.0).tolist() == [True, True]


def test_vary_color_stays_close(rng):
    for _ in range(50):
        r, g, b = parse_hex(vary_color("#808080", rng))
        assert all(108 <= c <= 147 for c in (r, g, b))
    assert vary_color("not-a-colour", rng) == "not-a-colour"


def test_dominant_colors_ranked_by_coverage():
    grid = filled_grid(10, 10)
    samples = ColorSampleGrid.blank(grid.size)
    samples.rgba[:] = [0, 0, 255, 255]
    samples.rgba[:30] = [255, 0, 0, 255]
    # 3% green is below the reporting floor
    samples.rgba[30:33] = [0, 255, 0, 255]
    result = detect_dominant_colors(grid, samples.rgba)
    assert [d.color for d in result.dominant_colors] == ["#0000ff", "#ff0000"]
    assert result.dominant_colors[0].percentage == pytest.approx(67.0)
    assert result.dominant_colors[1].percentage == pytest.approx(30.0)
    assert result.top_rgb == (0, 0, 255)
    assert len(result.regions[1].points) == 30


def test_dominant_colors_ignore_empty_and_transparent_cells():
    grid = filled_grid(4, 4)
    grid.cells[8:] = False
    samples = ColorSampleGrid.blank(grid.size)
    samples.rgba[:] = [255, 0, 0, 255]
    samples.rgba[:4, 3] = 0
    result = detect_dominant_colors(grid, samples.rgba)
    assert result.dominant_colors[0].percentage == pytest.approx(100.0)
    assert len(result.regions[0].points) == 4


def test_dominant_colors_empty_grid():
    grid = filled_grid(3, 3)
    grid.cells[:] = False
    result = detect_dominant_colors(grid, ColorSampleGrid.blank(9).rgba)
    assert result.dominant_colors == []
    assert result.top_rgb is None
