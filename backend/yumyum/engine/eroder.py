"""Bite executor — commit a bite to the grid, or simulate it on a copy.

A commit is atomic from the caller's point of view: clearing, the
fragmentation check and crumbling all happen inside one call.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from yumyum.engine.config import CLEAR_FACTOR, EaterConfig
from yumyum.engine.crumbs import crumble_crumbs
from yumyum.engine.grid import ColorSampleGrid, OccupancyGrid
from yumyum.engine.records import Crumb
from yumyum.engine.topology import analyze

logger = logging.getLogger(__name__)

# 4-connectivity, matching the topology analyzer.
_FOUR_CONNECTED = ndimage.generate_binary_structure(2, 1)


@dataclass
class CommitResult:
    removed_count: int
    fragmented: bool
    # Cells of detached clusters that were crumbled in the same commit
    crumbled: list[int] = field(default_factory=list)
    crumbs: list[Crumb] = field(default_factory=list)


@dataclass
class Simulation:
    fragmented: bool
    removed_count: int
    # How far the cleared disc reaches inward, toward the pivot
    depth: float


def clear_radius(radius: float) -> float:
    return radius * CLEAR_FACTOR


def commit(
    grid: OccupancyGrid,
    x: float,
    y: float,
    radius: float,
    pivot: tuple[float, float],
    config: EaterConfig,
    rng: np.random.Generator,
    colors: ColorSampleGrid | None = None,
) -> CommitResult:
    """Clear every occupied cell within radius * 1.2, then crumble orphans.

    All clusters except the largest are removed immediately, so the grid
    never holds more than one cluster when this returns. A bite that hits
    nothing leaves the grid untouched and reports removed_count == 0.
    """
    removed = grid.indices_within(x, y, clear_radius(radius))
    if len(removed) == 0:
        logger.debug("Bite at (%.1f, %.1f) r=%.1f missed the shape", x, y, radius)
        return CommitResult(removed_count=0, fragmented=False)

    grid.cells[removed] = False

    crumbled: list[int] = []
    analysis = analyze(grid)
    if analysis is not None and len(analysis.clusters) > 1:
        for cluster in analysis.islands:
            crumbled.extend(cluster)
        grid.cells[crumbled] = False
        logger.debug(
            "Bite at (%.1f, %.1f) detached %d cluster(s), %d cells crumbled",
            x, y, len(analysis.islands), len(crumbled),
        )

    crumbs = crumble_crumbs(crumbled, grid, pivot, config, rng, colors) if crumbled else []
    return CommitResult(
        removed_count=len(removed),
        fragmented=bool(crumbled),
        crumbled=crumbled,
        crumbs=crumbs,
    )


def simulate(
    grid: OccupancyGrid,
    x: float,
    y: float,
    radius: float,
    pivot: tuple[float, float],
    body: NDArray[np.bool_] | None = None,
) -> Simulation:
    """What-if erosion on a throwaway copy; the grid is not touched.

    body restricts the check to one cluster (flat mask over the grid);
    by default the whole occupied set is used. Fragmented means the
    remaining body would fall into more than one 4-connected piece.
    """
    cells = grid.cells if body is None else body
    removed = grid.indices_within(x, y, clear_radius(radius), occupied_only=False)
    removed = removed[cells[removed]]

    trial = cells.copy()
    trial[removed] = False
    _, n_pieces = ndimage.label(trial.reshape(grid.rows, grid.cols), structure=_FOUR_CONNECTED)

    return Simulation(
        fragmented=n_pieces > 1,
        removed_count=len(removed),
        depth=_inward_depth(grid, removed, x, y, pivot),
    )


def _inward_depth(
    grid: OccupancyGrid,
    removed: NDArray[np.intp],
    x: float,
    y: float,
    pivot: tuple[float, float],
) -> float:
    """Deepest projection of a removed cell onto the bite -> pivot direction."""
    if len(removed) == 0:
        return 0.0
    vx, vy = pivot[0] - x, pivot[1] - y
    length = math.hypot(vx, vy)
    if length < 1e-9:
        return 0.0
    half = grid.cell_size / 2
    px = (removed % grid.cols) * grid.cell_size + half
    py = (removed // grid.cols) * grid.cell_size + half
    proj = ((px - x) * vx + (py - y) * vy) / length
    return max(0.0, float(np.max(proj)))
