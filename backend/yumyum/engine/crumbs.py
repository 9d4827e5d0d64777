"""Crumb spawning: decorative debris batches for bites, crumbles and the final explosion.

The engine only emits spawn batches; moving and fading crumbs is up to the
renderer (gravity and drag are forwarded in the config for that purpose).
"""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np

from yumyum.engine.colors import to_hex, vary_color
from yumyum.engine.config import EaterConfig
from yumyum.engine.grid import ColorSampleGrid, OccupancyGrid
from yumyum.engine.records import Crumb, CrumbShape, next_crumb_id

_BITE_SHAPES: tuple[CrumbShape, ...] = ("triangle", "circle", "rect")
# A bite removing more cells than this gets the bigger burst.
_BIG_BITE_CELLS = 20
# Explosions above this many cells are sampled down to roughly this many crumbs.
_EXPLOSION_BUDGET = 100
# Initial upward kick for bite and explosion crumbs.
_POP_VY = 5.0


def bite_crumbs(
    x: float,
    y: float,
    removed: int,
    config: EaterConfig,
    rng: np.random.Generator,
) -> list[Crumb]:
    """Burst at the bite centre; bigger and faster when the bite removed a lot."""
    if not config.show_crumbs:
        return []
    big = removed > _BIG_BITE_CELLS
    count = 16 if big else 8
    speed_base = 18.0 if big else 10.0
    size_boost = 1.4 if big else 1.0

    crumbs: list[Crumb] = []
    for _ in range(count):
        angle = rng.random() * 2 * math.pi
        speed = speed_base * 0.5 + rng.random() * speed_base
        crumbs.append(Crumb(
            id=next_crumb_id(),
            x=x,
            y=y,
            vx=math.cos(angle) * speed,
            vy=math.sin(angle) * speed - _POP_VY,
            size=(4 + rng.random() * 6) * size_boost * config.bite_size_scale,
            color=vary_color(_pick(config.crumb_colors, rng), rng),
            shape=_pick(_BITE_SHAPES, rng),
            rotation=rng.random() * 360,
            rotation_speed=(rng.random() - 0.5) * 60,
            life=0.6 + rng.random() * 0.4,
        ))
    return crumbs


def crumble_crumbs(
    indices: Iterable[int],
    grid: OccupancyGrid,
    pivot: tuple[float, float],
    config: EaterConfig,
    rng: np.random.Generator,
    colors: ColorSampleGrid | None = None,
) -> list[Crumb]:
    """One crumb per detached cell, flung outward from the pivot.

    Direction is pivot -> cell with up to ±0.5 rad of spread, speed 5-20.
    Cells with a colour sample keep their own colour.
    """
    if not config.show_crumbs:
        return []
    cx, cy = pivot
    crumbs: list[Crumb] = []
    for idx in indices:
        x, y = grid.center(int(idx))
        angle = math.atan2(y - cy, x - cx) + (rng.random() - 0.5)
        speed = 5 + rng.random() * 15
        crumbs.append(Crumb(
            id=next_crumb_id(),
            x=x,
            y=y,
            vx=math.cos(angle) * speed,
            vy=math.sin(angle) * speed,
            size=(4 + rng.random() * 7) * config.bite_size_scale,
            color=vary_color(_cell_color(int(idx), config, rng, colors), rng),
            shape="triangle" if rng.random() > 0.5 else "rect",
            rotation=rng.random() * 360,
            rotation_speed=(rng.random() - 0.5) * 80,
            life=min(1.0, 0.9 + rng.random() * 0.4),
        ))
    return crumbs


def explosion_crumbs(
    grid: OccupancyGrid,
    config: EaterConfig,
    rng: np.random.Generator,
    colors: ColorSampleGrid | None = None,
) -> list[Crumb]:
    """Pop every remaining cell; large leftovers are sampled down."""
    if not config.show_crumbs:
        return []
    occupied = np.flatnonzero(grid.cells)
    if len(occupied) == 0:
        return []
    probability = 1.0 if len(occupied) < _EXPLOSION_BUDGET else _EXPLOSION_BUDGET / len(occupied)

    crumbs: list[Crumb] = []
    for idx in occupied.tolist():
        if rng.random() > probability:
            continue
        x, y = grid.center(idx)
        angle = rng.random() * 2 * math.pi
        speed = 3 + rng.random() * 15
        crumbs.append(Crumb(
            id=next_crumb_id(),
            x=x,
            y=y,
            vx=math.cos(angle) * speed,
            vy=math.sin(angle) * speed - _POP_VY,
            size=(4 + rng.random() * 6) * config.bite_size_scale,
            color=vary_color(_cell_color(idx, config, rng, colors), rng),
            shape="circle" if rng.random() > 0.5 else "rect",
            rotation=rng.random() * 360,
            rotation_speed=(rng.random() - 0.5) * 60,
            life=min(1.0, 0.8 + rng.random() * 0.5),
        ))
    return crumbs


def _pick(options: tuple, rng: np.random.Generator):
    return options[int(rng.integers(len(options)))]


def _cell_color(
    idx: int,
    config: EaterConfig,
    rng: np.random.Generator,
    colors: ColorSampleGrid | None,
) -> str:
    if colors is not None and colors.rgba[idx, 3] > 0:
        return to_hex(colors.rgba[idx])
    return _pick(config.crumb_colors, rng)
