"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from svgpathtools import Line, Path

# Samples per curved segment when flattening a path into a ring.
_CURVE_SAMPLES = 16
_TWO_PI = 2 * math.pi


def path_to_rings(path: Path, curve_samples: int = _CURVE_SAMPLES) -> list[NDArray[np.float64]]:
    """Flatten an svgpathtools Path into closed rings, one per continuous sub-path.

    Lines contribute their endpoints; curves and arcs are sampled. Open
    sub-paths are closed implicitly, as a fill would close them.
    """
    rings: list[NDArray[np.float64]] = []
    for sub in path.continuous_subpaths():
        pts: list[complex] = []
        for seg in sub:
            if not pts:
                pts.append(seg.start)
            if isinstance(seg, Line):
                pts.append(seg.end)
                continue
            for t in np.linspace(0, 1, curve_samples + 1)[1:]:
                pts.append(seg.point(float(t)))
        if len(pts) < 3:
            continue
        ring = np.array([(p.real, p.imag) for p in pts], dtype=np.float64)
        if np.allclose(ring[0], ring[-1]):
            ring = ring[:-1]
        if len(ring) >= 3:
            rings.append(ring)
    return rings


def winding_numbers(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    ring: NDArray[np.float64],
) -> NDArray[np.int64]:
    """Winding number of every (x, y) with respect to a closed ring.

    Vectorized over the query points; loops over ring edges.
    """
    wn = np.zeros(len(xs), dtype=np.int64)
    x0s = ring[:, 0]
    y0s = ring[:, 1]
    x1s = np.roll(x0s, -1)
    y1s = np.roll(y0s, -1)
    for x0, y0, x1, y1 in zip(x0s, y0s, x1s, y1s):
        cross = (x1 - x0) * (ys - y0) - (xs - x0) * (y1 - y0)
        upward = (y0 <= ys) & (y1 > ys) & (cross > 0)
        downward = (y0 > ys) & (y1 <= ys) & (cross < 0)
        wn += upward.astype(np.int64)
        wn -= downward.astype(np.int64)
    return wn


def points_in_rings(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    rings: list[NDArray[np.float64]],
    fill_rule: str = "nonzero",
) -> NDArray[np.bool_]:
    """Fill containment of points against a set of rings forming one path."""
    if fill_rule not in ("nonzero", "evenodd"):
        raise ValueError(f"Unknown fill rule: {fill_rule}")
    total = np.zeros(len(xs), dtype=np.int64)
    for ring in rings:
        wn = winding_numbers(xs, ys, ring)
        if fill_rule == "evenodd":
            # Crossing parity equals winding parity.
            total += np.abs(wn) % 2
        else:
            total += wn
    if fill_rule == "evenodd":
        return total % 2 == 1
    return total != 0


def clockwise_diff(angle: float | NDArray, from_angle: float) -> float | NDArray:
    """Angular distance going clockwise (increasing screen angle), in [0, 2π)."""
    return np.mod(np.asarray(angle) - from_angle, _TWO_PI)


def angle_from(x: float, y: float, cx: float, cy: float) -> float:
    return math.atan2(y - cy, x - cx)
