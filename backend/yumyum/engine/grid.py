"""Occupancy grid: flat row-major boolean cells over a rectangular domain."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from yumyum.engine.config import GRID_CELL_SIZE


def cell_count(width: float, height: float, cell_size: float = GRID_CELL_SIZE) -> int:
    """Number of cells a grid over a width x height domain holds."""
    return math.ceil(width / cell_size) * math.ceil(height / cell_size)


@dataclass
class OccupancyGrid:
    """Boolean cells; cell idx sits at column idx % cols, row idx // cols."""

    cols: int
    rows: int
    cells: NDArray[np.bool_]
    cell_size: float = GRID_CELL_SIZE

    @classmethod
    def empty(cls, width: float, height: float, cell_size: float = GRID_CELL_SIZE) -> OccupancyGrid:
        cols = math.ceil(width / cell_size)
        rows = math.ceil(height / cell_size)
        return cls(cols=cols, rows=rows, cells=np.zeros(cols * rows, dtype=bool), cell_size=cell_size)

    @classmethod
    def from_array(cls, array: NDArray, cell_size: float = GRID_CELL_SIZE) -> OccupancyGrid:
        """Build from a 2D (rows, cols) array; non-zero = occupied."""
        arr = np.asarray(array)
        rows, cols = arr.shape
        return cls(cols=cols, rows=rows, cells=arr.astype(bool).ravel().copy(), cell_size=cell_size)

    @property
    def size(self) -> int:
        return self.cols * self.rows

    @property
    def width(self) -> float:
        return self.cols * self.cell_size

    @property
    def height(self) -> float:
        return self.rows * self.cell_size

    def count(self) -> int:
        return int(np.count_nonzero(self.cells))

    def copy(self) -> OccupancyGrid:
        return OccupancyGrid(cols=self.cols, rows=self.rows, cells=self.cells.copy(), cell_size=self.cell_size)

    def restore_from(self, other: OccupancyGrid) -> None:
        """Overwrite cells in place with another grid of the same shape."""
        if other.size != self.size:
            raise ValueError(f"grid shape mismatch: {other.cols}x{other.rows} vs {self.cols}x{self.rows}")
        self.cells[:] = other.cells

    def as_2d(self) -> NDArray[np.bool_]:
        """(rows, cols) view sharing memory with the flat cells."""
        return self.cells.reshape(self.rows, self.cols)

    def center(self, idx: int) -> tuple[float, float]:
        half = self.cell_size / 2
        return (
            (idx % self.cols) * self.cell_size + half,
            (idx // self.cols) * self.cell_size + half,
        )

    def centers(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """x and y of every cell centre, in cell-index order."""
        idx = np.arange(self.size)
        half = self.cell_size / 2
        xs = (idx % self.cols) * self.cell_size + half
        ys = (idx // self.cols) * self.cell_size + half
        return xs.astype(np.float64), ys.astype(np.float64)

    def cell_at(self, x: float, y: float) -> int | None:
        """Index of the cell containing (x, y), or None outside the grid."""
        col = math.floor(x / self.cell_size)
        row = math.floor(y / self.cell_size)
        if col < 0 or col >= self.cols or row < 0 or row >= self.rows:
            return None
        return row * self.cols + col

    def is_occupied_at(self, x: float, y: float) -> bool:
        idx = self.cell_at(x, y)
        return idx is not None and bool(self.cells[idx])

    def indices_within(self, x: float, y: float, radius: float, occupied_only: bool = True) -> NDArray[np.intp]:
        """Cell indices whose centre lies within radius of (x, y).

        Only the bounding box of the disc is scanned.
        """
        if radius < 0:
            return np.empty(0, dtype=np.intp)
        half = self.cell_size / 2
        c0 = max(0, math.floor((x - radius) / self.cell_size))
        c1 = min(self.cols - 1, math.ceil((x + radius) / self.cell_size))
        r0 = max(0, math.floor((y - radius) / self.cell_size))
        r1 = min(self.rows - 1, math.ceil((y + radius) / self.cell_size))
        if c0 > c1 or r0 > r1:
            return np.empty(0, dtype=np.intp)

        cols = np.arange(c0, c1 + 1)
        rows = np.arange(r0, r1 + 1)
        cc, rr = np.meshgrid(cols, rows)
        px = cc * self.cell_size + half
        py = rr * self.cell_size + half
        inside = (px - x) ** 2 + (py - y) ** 2 <= radius * radius
        idx = (rr * self.cols + cc)[inside]
        if occupied_only:
            idx = idx[self.cells[idx]]
        return idx.astype(np.intp)


@dataclass
class ColorSampleGrid:
    """RGBA sample per occupancy cell, shape (n_cells, 4)."""

    rgba: NDArray[np.uint8]

    @classmethod
    def blank(cls, size: int) -> ColorSampleGrid:
        return cls(rgba=np.zeros((size, 4), dtype=np.uint8))

    def rgb_at(self, idx: int) -> tuple[int, int, int]:
        r, g, b, _ = self.rgba[idx]
        return (int(r), int(g), int(b))
