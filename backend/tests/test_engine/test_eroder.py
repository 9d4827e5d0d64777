"""Tests for committing and simulating bites."""

import numpy as np

from yumyum.engine.config import EaterConfig
from yumyum.engine.eroder import commit, simulate
from yumyum.engine.grid import ColorSampleGrid
from yumyum.engine.rasterizer import build_grid
from yumyum.engine.topology import analyze
from yumyum.svg.parser import parse_svg
from tests.conftest import LOPSIDED_ROWS, SQUARE_48_SVG, filled_grid, make_grid

CONFIG = EaterConfig()


def test_clears_within_radius_times_1_2(rng):
    grid = filled_grid(9, 9)
    # r = 10 -> clearing radius 12: centre plus its four neighbours
    result = commit(grid, 45, 45, 10, (45, 45), CONFIG, rng)
    assert result.removed_count == 5
    assert grid.count() == 81 - 5
    assert not result.fragmented


def test_whole_square_in_one_commit(rng):
    """48x48 square on a 5x5 grid, one centred bite covering everything."""
    parsed = parse_svg(SQUARE_48_SVG)
    grid = build_grid(parsed.silhouette, parsed.width, parsed.height, (24, 24)).grid
    result = commit(grid, 24, 24, 40, (24, 24), CONFIG, rng)
    assert result.removed_count == 25
    assert grid.count() == 0
    assert analyze(grid) is None


def test_miss_leaves_grid_untouched(rng):
    grid = make_grid([
        "###.....",
        "###.....",
    ])
    before = grid.cells.copy()
    result = commit(grid, 75, 15, 5, (40, 10), CONFIG, rng)
    assert result.removed_count == 0
    assert result.crumbs == []
    assert np.array_equal(before, grid.cells)


def test_bridge_bite_crumbles_smaller_lobe(rng):
    grid = make_grid(LOPSIDED_ROWS)
    left_lobe = {r * 13 + c for r in range(5) for c in range(5)}
    # Bridge runs along row 2, columns 5-9; bite its middle
    result = commit(grid, 75, 25, 10, (65, 25), CONFIG, rng)
    assert result.fragmented
    analysis = analyze(grid)
    assert len(analysis.clusters) == 1
    # The 5x5 lobe and the bridge stub on its side survive; the 3x3 lobe is gone
    assert set(analysis.main_cluster) == left_lobe | {2 * 13 + 5}
    assert len(result.crumbled) == 10
    assert len(result.crumbs) == len(result.crumbled)


def test_dumbbell_never_leaves_two_clusters(dumbbell_grid, rng):
    result = commit(dumbbell_grid, 65, 25, 5, (65, 25), CONFIG, rng)
    assert result.removed_count == 1
    assert result.fragmented
    assert len(analyze(dumbbell_grid).clusters) == 1
    # Equal halves: one 26-cell side is kept
    assert dumbbell_grid.count() == 26


def test_crumble_crumbs_fly_outward(rng):
    grid = make_grid(LOPSIDED_ROWS)
    pivot = (25.0, 25.0)
    result = commit(grid, 75, 25, 10, pivot, CONFIG, rng)
    for crumb in result.crumbs:
        speed = np.hypot(crumb.vx, crumb.vy)
        assert 5 <= speed <= 20
        away = np.array([crumb.x - pivot[0], crumb.y - pivot[1]])
        # Within ±0.5 rad of the outward direction -> positive dot product
        assert away @ np.array([crumb.vx, crumb.vy]) > 0
        assert 0 < crumb.life <= 1


def test_crumble_crumbs_use_sampled_colors(rng):
    grid = make_grid(LOPSIDED_ROWS)
    colors = ColorSampleGrid.blank(grid.size)
    colors.rgba[:] = [0, 0, 0, 255]
    result = commit(grid, 75, 25, 10, (25, 25), CONFIG, rng, colors)
    for crumb in result.crumbs:
        r, g, b = (int(crumb.color[i:i + 2], 16) for i in (1, 3, 5))
        # Black plus at most ±20 jitter, clipped at 0
        assert max(r, g, b) <= 20


def test_no_crumbs_when_disabled(rng):
    grid = make_grid(LOPSIDED_ROWS)
    result = commit(grid, 75, 25, 10, (25, 25), EaterConfig(show_crumbs=False), rng)
    assert result.fragmented
    assert result.crumbs == []


def test_monotonic_consumption(rng):
    grid = filled_grid(20, 20)
    counts = [grid.count()]
    for _ in range(30):
        x, y = rng.random(2) * 200
        commit(grid, x, y, 15, (100, 100), CONFIG, rng)
        counts.append(grid.count())
        analysis = analyze(grid)
        assert analysis is None or len(analysis.clusters) == 1
    assert all(a >= b for a, b in zip(counts, counts[1:]))


def test_simulate_does_not_mutate(dumbbell_grid):
    before = dumbbell_grid.cells.copy()
    sim = simulate(dumbbell_grid, 65, 25, 5, (65, 25))
    assert sim.fragmented
    assert sim.removed_count == 1
    assert np.array_equal(before, dumbbell_grid.cells)


def test_simulate_safe_bite():
    grid = filled_grid(10, 10)
    sim = simulate(grid, 5, 5, 10, (50, 50))
    assert not sim.fragmented
    assert sim.removed_count > 0


def test_simulate_restricted_to_body():
    grid = make_grid([
        "#.#####",
        "#.#####",
    ])
    body = np.zeros(grid.size, dtype=bool)
    analysis = analyze(grid)
    body[analysis.main_cluster] = True
    # The small column on the left is not part of the body, so it can't count as a split
    sim = simulate(grid, 65, 10, 3, (40, 10), body=body)
    assert not sim.fragmented
    assert simulate(grid, 65, 10, 3, (40, 10)).fragmented


def test_simulate_depth_points_inward():
    grid = filled_grid(10, 1)
    # Bite at the right end, pivot far left: clearing radius 24 reaches two cells inward
    sim = simulate(grid, 95, 5, 20, (5, 5))
    assert sim.depth == 20.0
    # Pivot at the bite itself: no inward direction
    assert simulate(grid, 95, 5, 20, (95, 5)).depth == 0.0
