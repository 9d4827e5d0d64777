"""Rasterizer — silhouette to occupancy grid, colour samples and pivot-sorted cells.

Every cell is decided by its centre point: vector silhouettes use a fill
rule containment test, raster silhouettes an alpha threshold after masking.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from yumyum.engine.colors import parse_hex
from yumyum.engine.config import GRID_CELL_SIZE
from yumyum.engine.grid import ColorSampleGrid, OccupancyGrid
from yumyum.engine.silhouette import LineSilhouette, RasterSilhouette, Silhouette, VectorSilhouette
from yumyum.utils.geometry import points_in_rings

logger = logging.getLogger(__name__)

# Raster pixels at or above this alpha count as solid.
ALPHA_THRESHOLD = 128
# Fill used for colour samples when a vector path has no usable fill.
DEFAULT_FILL = "#000000"


@dataclass
class RasterResult:
    """Everything the session needs from one silhouette build."""

    grid: OccupancyGrid
    colors: ColorSampleGrid | None = None
    # Occupied cell centres, farthest from the pivot first: (x, y, squared distance)
    sorted_cells: list[tuple[float, float, float]] = field(default_factory=list)


def build_grid(
    silhouette: Silhouette,
    width: float,
    height: float,
    pivot: tuple[float, float],
    sample_colors: bool = False,
    cell_size: float = GRID_CELL_SIZE,
) -> RasterResult | None:
    """Discretize a silhouette over a width x height domain.

    Returns None when the domain has no area or the silhouette covers no
    cell (unreadable or zero-area paths); the caller treats that as "not
    ready". Inputs are never mutated.
    """
    if not width or not height or width <= 0 or height <= 0:
        logger.info("Skipping grid build: empty domain %.1fx%.1f", width or 0.0, height or 0.0)
        return None

    grid = OccupancyGrid.empty(width, height, cell_size)
    xs, ys = grid.centers()

    if isinstance(silhouette, VectorSilhouette):
        occupied, rgba = _rasterize_vector(silhouette, xs, ys)
    elif isinstance(silhouette, RasterSilhouette):
        occupied, rgba = _rasterize_raster(silhouette, grid, width, height, xs, ys)
    elif isinstance(silhouette, LineSilhouette):
        occupied, rgba = _rasterize_line(silhouette, grid, height)
    else:
        raise TypeError(f"Unsupported silhouette: {type(silhouette).__name__}")

    if not occupied.any():
        logger.warning("Silhouette covers no cells on a %dx%d grid", grid.cols, grid.rows)
        return None

    grid.cells[:] = occupied
    colors = None
    if sample_colors:
        rgba[~occupied] = 0
        colors = ColorSampleGrid(rgba=rgba)

    sorted_cells = sort_by_pivot_distance(grid, pivot)
    logger.info(
        "Built %dx%d grid: %d/%d cells occupied",
        grid.cols, grid.rows, len(sorted_cells), grid.size,
    )
    return RasterResult(grid=grid, colors=colors, sorted_cells=sorted_cells)


def sort_by_pivot_distance(grid: OccupancyGrid, pivot: tuple[float, float]) -> list[tuple[float, float, float]]:
    """Occupied cell centres sorted by descending squared distance from the pivot."""
    cx, cy = pivot
    idx = np.flatnonzero(grid.cells)
    if len(idx) == 0:
        return []
    xs, ys = grid.centers()
    px, py = xs[idx], ys[idx]
    d = (px - cx) ** 2 + (py - cy) ** 2
    # Stable so equally distant cells keep row-major order.
    order = np.argsort(-d, kind="stable")
    return [(float(px[i]), float(py[i]), float(d[i])) for i in order]


def _rgba_for(fill: str | None) -> NDArray[np.uint8]:
    rgb = parse_hex(fill) or parse_hex(DEFAULT_FILL)
    return np.array([rgb[0], rgb[1], rgb[2], 255], dtype=np.uint8)


def _rasterize_vector(
    silhouette: VectorSilhouette,
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
) -> tuple[NDArray[np.bool_], NDArray[np.uint8]]:
    occupied = np.zeros(len(xs), dtype=bool)
    rgba = np.zeros((len(xs), 4), dtype=np.uint8)
    for shape in silhouette.shapes:
        rings = shape.rings
        if not rings:
            continue
        inside = points_in_rings(xs, ys, rings, shape.fill_rule)
        occupied |= inside
        # Document order: later fills paint over earlier ones.
        rgba[inside] = _rgba_for(shape.fill)
    return occupied, rgba


def _rasterize_raster(
    silhouette: RasterSilhouette,
    grid: OccupancyGrid,
    width: float,
    height: float,
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
) -> tuple[NDArray[np.bool_], NDArray[np.uint8]]:
    pixels = sample_image(silhouette.image, grid, width, height)
    occupied = pixels[:, 3] >= ALPHA_THRESHOLD
    if silhouette.mask is not None:
        mask, _ = _rasterize_vector(silhouette.mask, xs, ys)
        occupied &= mask
    return occupied, pixels.copy()


def sample_image(
    image: Image.Image,
    grid: OccupancyGrid,
    width: float | None = None,
    height: float | None = None,
) -> NDArray[np.uint8]:
    """RGBA of the pixel under every cell centre, image stretched over the domain.

    Cell centres past the domain edge (last partial column or row) read the
    nearest edge pixel.
    """
    w = max(1, math.ceil(width if width is not None else grid.width))
    h = max(1, math.ceil(height if height is not None else grid.height))
    rgba_image = image.convert("RGBA")
    if rgba_image.size != (w, h):
        rgba_image = rgba_image.resize((w, h), Image.Resampling.BILINEAR)
    pixels = np.asarray(rgba_image, dtype=np.uint8)

    xs, ys = grid.centers()
    px = np.clip(np.floor(xs).astype(int), 0, w - 1)
    py = np.clip(np.floor(ys).astype(int), 0, h - 1)
    return pixels[py, px].astype(np.uint8)


def _rasterize_line(
    silhouette: LineSilhouette,
    grid: OccupancyGrid,
    height: float,
) -> tuple[NDArray[np.bool_], NDArray[np.uint8]]:
    occupied = np.zeros(grid.size, dtype=bool)
    rgba = np.zeros((grid.size, 4), dtype=np.uint8)
    y = silhouette.y if silhouette.y is not None else height / 2
    row = math.floor(y / grid.cell_size)
    if 0 <= row < grid.rows:
        start = row * grid.cols
        occupied[start:start + grid.cols] = True
        rgba[start:start + grid.cols] = _rgba_for(silhouette.fill)
    return occupied, rgba
