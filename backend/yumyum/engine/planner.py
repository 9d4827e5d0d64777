"""Bite planner — pick where the next bite lands and how big it is.

Candidates are the tip and edge cells of the main body. Each one gets a
radius search (what-if erosion, largest size that keeps the body in one
piece) and a score; the lowest score wins.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from yumyum.engine.bite_path import generate_bite_path
from yumyum.engine.colors import color_matches
from yumyum.engine.config import BITE_MAX_FACTOR, BITE_MIN_FACTOR, EaterConfig
from yumyum.engine.eroder import simulate
from yumyum.engine.grid import ColorSampleGrid, OccupancyGrid
from yumyum.engine.records import Bite, next_bite_id
from yumyum.engine.topology import Analysis
from yumyum.utils.geometry import angle_from, clockwise_diff

logger = logging.getLogger(__name__)

# Only look this far ahead (clockwise) of the last bite.
WINDOW_ANGLE = math.pi * 0.66
# Below this many candidates in the window, use them all.
MIN_WINDOW_CANDIDATES = 5
# Discrete sizes tried per candidate, largest first.
RADIUS_STEPS = 4
# Probe distance toward the pivot for the empty-interior check.
INWARD_PROBE = 15.0

ANGLE_WEIGHT = 250.0
DEPTH_WEIGHT = 5.0
TIP_BONUS = -100.0
EMPTY_INTERIOR_PENALTY = 2500.0
ISLAND_PENALTY = 5000.0
ISLAND_DEPTH_WEIGHT = 100.0
DEEP_BITE_RATIO = 0.5
DEEP_BITE_WEIGHT = 2000.0
FULL_SIZE_BONUS = -500.0
# The full-size bonus is withheld below this fraction of the base radius.
FULL_SIZE_FRACTION = 0.9
COLOR_WEIGHT = 3000.0
NOISE = 200.0
RANDOM_PLACEMENT_NOISE = 2000.0
TIP_BOOST = 1.1


@dataclass
class Candidate:
    idx: int
    x: float
    y: float
    angle: float
    angle_diff: float
    dist: float
    is_tip: bool


@dataclass
class RadiusChoice:
    radius: float
    would_create_islands: bool
    depth: float


def radius_bounds(base: float) -> tuple[float, float]:
    """(min_r, max_r) for a base bite radius."""
    return base * BITE_MIN_FACTOR, base * BITE_MAX_FACTOR


def collect_candidates(
    grid: OccupancyGrid,
    analysis: Analysis,
    last_angle: float,
    pivot: tuple[float, float],
) -> list[Candidate]:
    """Edge and tip cells of the main body, edges first."""
    main = set(analysis.main_cluster)
    tips = set(analysis.tips)
    cx, cy = pivot
    candidates = []
    for idx in analysis.edges + analysis.tips:
        if idx not in main:
            continue
        x, y = grid.center(idx)
        angle = angle_from(x, y, cx, cy)
        candidates.append(Candidate(
            idx=idx,
            x=x,
            y=y,
            angle=angle,
            angle_diff=clockwise_diff(angle, last_angle),
            dist=math.hypot(x - cx, y - cy),
            is_tip=idx in tips,
        ))
    return candidates


def window(candidates: list[Candidate]) -> list[Candidate]:
    ahead = [c for c in candidates if c.angle_diff < WINDOW_ANGLE]
    return ahead if len(ahead) >= MIN_WINDOW_CANDIDATES else candidates


def find_optimal_radius(
    grid: OccupancyGrid,
    body: NDArray[np.bool_],
    x: float,
    y: float,
    base: float,
    pivot: tuple[float, float],
) -> RadiusChoice:
    """Largest tested radius whose removal keeps the body in one piece.

    Falls back to the smallest radius, flagged as island-creating.
    """
    min_r, max_r = radius_bounds(base)
    fallback = None
    for radius in np.linspace(max_r, min_r, RADIUS_STEPS):
        sim = simulate(grid, x, y, float(radius), pivot, body=body)
        if not sim.fragmented:
            return RadiusChoice(radius=float(radius), would_create_islands=False, depth=sim.depth)
        fallback = sim
    return RadiusChoice(radius=min_r, would_create_islands=True, depth=fallback.depth if fallback else 0.0)


def plan_bite(
    grid: OccupancyGrid | None,
    analysis: Analysis | None,
    last_angle: float,
    pivot: tuple[float, float],
    config: EaterConfig,
    rng: np.random.Generator,
    shape_radius: float,
    colors: ColorSampleGrid | None = None,
    target_rgb: tuple[int, int, int] | None = None,
) -> Bite | None:
    """Plan the next bite, or None when the main body offers no candidates.

    The grid is only read. Colour scoring applies when colour dominance is
    enabled and both samples and a target colour are available.
    """
    if grid is None or analysis is None:
        return None
    candidates = collect_candidates(grid, analysis, last_angle, pivot)
    if not candidates:
        return None

    random_placement = config.random_bite_placement
    active = candidates if random_placement else window(candidates)
    max_dist = max(c.dist for c in active)

    base = config.base_bite_radius_for(shape_radius)
    min_r, max_r = radius_bounds(base)
    depth_weight = DEPTH_WEIGHT * (1 - config.drill_in_bias)
    noise_scale = RANDOM_PLACEMENT_NOISE if random_placement else NOISE

    body = np.zeros(grid.size, dtype=bool)
    body[analysis.main_cluster] = True

    dominance = config.color_dominance
    matches = None
    if dominance.enabled and colors is not None and target_rgb is not None:
        matches = color_matches(colors.rgba, target_rgb, dominance.tolerance)

    best: Candidate | None = None
    best_choice: RadiusChoice | None = None
    best_score = math.inf

    for cand in active:
        choice = find_optimal_radius(grid, body, cand.x, cand.y, base, pivot)

        score = 0.0 if random_placement else cand.angle_diff * ANGLE_WEIGHT
        score += (max_dist - cand.dist) * depth_weight
        if cand.is_tip:
            score += TIP_BONUS
        if _inward_empty(grid, cand, pivot):
            score += EMPTY_INTERIOR_PENALTY
        if choice.would_create_islands:
            score += ISLAND_PENALTY + ISLAND_DEPTH_WEIGHT * choice.depth
        ratio = choice.depth / choice.radius
        if ratio > DEEP_BITE_RATIO:
            score += (ratio - DEEP_BITE_RATIO) * DEEP_BITE_WEIGHT
        if choice.radius >= base * FULL_SIZE_FRACTION:
            score += FULL_SIZE_BONUS
        if matches is not None:
            score -= _match_fraction(grid, matches, cand, choice.radius) * dominance.strength * COLOR_WEIGHT
        score -= rng.random() * noise_scale

        if score < best_score:
            best, best_choice, best_score = cand, choice, score

    radius = best_choice.radius
    if best.is_tip:
        radius = min(radius * TIP_BOOST, max_r)

    logger.debug(
        "Planned bite at (%.1f, %.1f) r=%.1f tip=%s islands=%s score=%.1f",
        best.x, best.y, radius, best.is_tip, best_choice.would_create_islands, best_score,
    )
    return Bite(
        id=next_bite_id(),
        x=best.x,
        y=best.y,
        outline=generate_bite_path(radius, config.bite_roundness, config.bite_depth_variance, rng),
        rotation=math.degrees(best.angle) - 90,
        radius=radius,
    )


def _inward_empty(grid: OccupancyGrid, cand: Candidate, pivot: tuple[float, float]) -> bool:
    """True when the probe point toward the pivot is off-grid or unoccupied."""
    vx, vy = pivot[0] - cand.x, pivot[1] - cand.y
    length = math.hypot(vx, vy) or 1.0
    return not grid.is_occupied_at(
        cand.x + vx / length * INWARD_PROBE,
        cand.y + vy / length * INWARD_PROBE,
    )


def _match_fraction(grid: OccupancyGrid, matches: NDArray[np.bool_], cand: Candidate, radius: float) -> float:
    inside = grid.indices_within(cand.x, cand.y, radius)
    if len(inside) == 0:
        return 0.0
    return float(np.count_nonzero(matches[inside])) / len(inside)
