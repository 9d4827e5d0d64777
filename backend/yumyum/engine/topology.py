"""Topology analysis — connected clusters and tip/edge classification of a grid.

Recomputed on every call; nothing is cached because the grid mutates
between bites.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from yumyum.engine.grid import OccupancyGrid

Point = tuple[float, float]


@dataclass
class Analysis:
    """Clusters sorted ascending by size; the last one is the main body."""

    clusters: list[list[int]]
    tips: list[int] = field(default_factory=list)
    edges: list[int] = field(default_factory=list)

    @property
    def main_cluster(self) -> list[int]:
        return self.clusters[-1] if self.clusters else []

    @property
    def islands(self) -> list[list[int]]:
        return self.clusters[:-1]

    @property
    def occupied_count(self) -> int:
        return sum(len(c) for c in self.clusters)


@dataclass
class StructurePreview:
    islands: list[Point] = field(default_factory=list)
    perimeter: list[Point] = field(default_factory=list)
    tips: list[Point] = field(default_factory=list)


def analyze(grid: OccupancyGrid | None) -> Analysis | None:
    """Label 4-connected clusters and classify every occupied cell.

    A cell with 3+ empty or out-of-bounds neighbours is a tip, 1-2 an
    edge, 0 interior. Returns None when nothing is occupied.
    """
    if grid is None:
        return None
    # Plain lists index faster than numpy scalars in this loop.
    cells = grid.cells.tolist()
    cols, rows = grid.cols, grid.rows
    visited = [False] * grid.size
    clusters: list[list[int]] = []
    tips: list[int] = []
    edges: list[int] = []

    for start in np.flatnonzero(grid.cells).tolist():
        if visited[start]:
            continue
        cluster: list[int] = []
        stack = [start]
        visited[start] = True

        while stack:
            idx = stack.pop()
            cluster.append(idx)
            c = idx % cols
            r = idx // cols

            empty = 0
            neighbors: list[int] = []
            if r > 0:
                neighbors.append(idx - cols)
            else:
                empty += 1
            if r < rows - 1:
                neighbors.append(idx + cols)
            else:
                empty += 1
            if c > 0:
                neighbors.append(idx - 1)
            else:
                empty += 1
            if c < cols - 1:
                neighbors.append(idx + 1)
            else:
                empty += 1

            for n in neighbors:
                if not cells[n]:
                    empty += 1
                elif not visited[n]:
                    visited[n] = True
                    stack.append(n)

            if empty >= 3:
                tips.append(idx)
            elif empty >= 1:
                edges.append(idx)

        clusters.append(cluster)

    if not clusters:
        return None

    # Stable sort keeps discovery order among equal sizes.
    clusters.sort(key=len)
    return Analysis(clusters=clusters, tips=tips, edges=edges)


def structure_preview(grid: OccupancyGrid | None, analysis: Analysis | None) -> StructurePreview:
    """Islands (everything but the main body), perimeter and tips as points."""
    if grid is None or analysis is None:
        return StructurePreview()
    islands = [grid.center(i) for cluster in analysis.islands for i in cluster]
    return StructurePreview(
        islands=islands,
        perimeter=[grid.center(i) for i in analysis.edges],
        tips=[grid.center(i) for i in analysis.tips],
    )
