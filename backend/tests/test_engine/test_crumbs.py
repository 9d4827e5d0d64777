"""Tests for crumb spawn batches."""

import math

import numpy as np

from yumyum.engine.config import EaterConfig
from yumyum.engine.crumbs import bite_crumbs, crumble_crumbs, explosion_crumbs
from yumyum.engine.grid import ColorSampleGrid
from tests.conftest import filled_grid


def test_small_bite_burst(rng):
    crumbs = bite_crumbs(50, 60, 5, EaterConfig(), rng)
    assert len(crumbs) == 8
    for crumb in crumbs:
        assert (crumb.x, crumb.y) == (50, 60)
        assert crumb.shape in ("triangle", "circle", "rect")
        assert 0.6 <= crumb.life <= 1.0
        assert 4 <= crumb.size < 10


def test_big_bite_burst_is_larger(rng):
    crumbs = bite_crumbs(0, 0, 21, EaterConfig(), rng)
    assert len(crumbs) == 16
    assert all(crumb.size >= 4 * 1.4 for crumb in crumbs)


def test_bite_crumbs_scale_with_bite_size(rng):
    crumbs = bite_crumbs(0, 0, 5, EaterConfig(bite_size_scale=2.0), rng)
    assert all(crumb.size >= 8 for crumb in crumbs)


def test_crumb_ids_unique(rng):
    crumbs = bite_crumbs(0, 0, 30, EaterConfig(), rng) + bite_crumbs(0, 0, 30, EaterConfig(), rng)
    assert len({c.id for c in crumbs}) == len(crumbs)


def test_crumble_one_per_cell(rng):
    grid = filled_grid(5, 5)
    crumbs = crumble_crumbs([0, 4, 24], grid, (25, 25), EaterConfig(), rng)
    assert [(c.x, c.y) for c in crumbs] == [(5, 5), (45, 5), (45, 45)]
    for crumb in crumbs:
        assert 5 <= math.hypot(crumb.vx, crumb.vy) <= 20


def test_explosion_pops_every_small_leftover(rng):
    grid = filled_grid(5, 5)
    crumbs = explosion_crumbs(grid, EaterConfig(), rng)
    assert len(crumbs) == 25
    assert all(c.shape in ("circle", "rect") and c.life <= 1.0 for c in crumbs)


def test_explosion_is_sampled_down(rng):
    grid = filled_grid(40, 40)
    crumbs = explosion_crumbs(grid, EaterConfig(), rng)
    # ~100 expected out of 1600
    assert 50 < len(crumbs) < 160


def test_explosion_uses_cell_colours(rng):
    grid = filled_grid(3, 3)
    colors = ColorSampleGrid.blank(grid.size)
    colors.rgba[:] = [255, 255, 255, 255]
    for crumb in explosion_crumbs(grid, EaterConfig(), rng, colors):
        rgb = [int(crumb.color[i:i + 2], 16) for i in (1, 3, 5)]
        assert min(rgb) >= 235


def test_palette_used_without_samples(rng):
    config = EaterConfig(crumb_colors=("#000000",))
    for crumb in bite_crumbs(0, 0, 5, config, rng):
        rgb = [int(crumb.color[i:i + 2], 16) for i in (1, 3, 5)]
        assert max(rgb) <= 20


def test_disabled_crumbs(rng):
    config = EaterConfig(show_crumbs=False)
    grid = filled_grid(3, 3)
    assert bite_crumbs(0, 0, 50, config, rng) == []
    assert crumble_crumbs(np.arange(9), grid, (0, 0), config, rng) == []
    assert explosion_crumbs(grid, config, rng) == []
