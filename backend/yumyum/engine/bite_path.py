"""Procedural bite outlines: a noisy tapered oval, smooth or jagged."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import Polygon

BITE_VERTICES = 24
# Bites are wider than they are deep.
WIDTH_FACTOR = 1.25
# Top of the oval (normalized y = -1) is narrower than the bottom.
TAPER = 0.3
# Above this roundness the outline is drawn as a smooth quadratic loop.
SMOOTH_ROUNDNESS = 0.4
# Points per quadratic segment when flattening a smooth outline.
_CURVE_SAMPLES = 6


@dataclass(frozen=True, eq=False)
class BiteOutline:
    """Closed outline centred on the origin, unrotated.

    Smooth outlines treat every vertex as a quadratic control point with
    segment endpoints at the midpoints between neighbours.
    """

    vertices: NDArray[np.float64]
    smooth: bool

    @property
    def d(self) -> str:
        """Path data in SVG path-command syntax."""
        v = self.vertices
        if self.smooth:
            mids = (v + np.roll(v, -1, axis=0)) / 2
            start = (v[-1] + v[0]) / 2
            parts = [f"M {start[0]:.2f} {start[1]:.2f}"]
            for ctrl, end in zip(v, mids):
                parts.append(f"Q {ctrl[0]:.2f} {ctrl[1]:.2f} {end[0]:.2f} {end[1]:.2f}")
        else:
            parts = [f"M {v[0][0]:.2f} {v[0][1]:.2f}"]
            parts.extend(f"L {x:.2f} {y:.2f}" for x, y in v[1:])
        parts.append("Z")
        return " ".join(parts)

    def points(self) -> NDArray[np.float64]:
        """Flattened outline as an Nx2 ring."""
        v = self.vertices
        if not self.smooth:
            return v.copy()
        mids = (v + np.roll(v, -1, axis=0)) / 2
        starts = np.roll(mids, 1, axis=0)
        t = np.linspace(0, 1, _CURVE_SAMPLES, endpoint=False)[:, None, None]
        # Quadratic Bezier from each previous midpoint through vertex to next midpoint.
        curve = (1 - t) ** 2 * starts + 2 * (1 - t) * t * v + t**2 * mids
        return curve.transpose(1, 0, 2).reshape(-1, 2)

    @property
    def polygon(self) -> Polygon:
        return _as_polygon(self.points())

    def placed(self, x: float, y: float, rotation_deg: float) -> NDArray[np.float64]:
        """Outline points rotated by rotation_deg and moved to (x, y)."""
        theta = math.radians(rotation_deg)
        cos, sin = math.cos(theta), math.sin(theta)
        pts = self.points()
        rx = pts[:, 0] * cos - pts[:, 1] * sin
        ry = pts[:, 0] * sin + pts[:, 1] * cos
        return np.column_stack([rx + x, ry + y])

    def placed_polygon(self, x: float, y: float, rotation_deg: float) -> Polygon:
        return _as_polygon(self.placed(x, y, rotation_deg))


def _as_polygon(points: NDArray[np.float64]) -> Polygon:
    poly = Polygon(points)
    # Heavy jitter can fold a jagged outline over itself.
    if not poly.is_valid:
        poly = poly.buffer(0)
    return poly


def generate_bite_path(
    radius: float,
    roundness: float,
    depth_variance: float,
    rng: np.random.Generator,
) -> BiteOutline:
    """Generate one bite outline for the given radius.

    Depth is scaled once per call by 1 + (u - 0.5) * depth_variance * 1.5;
    every vertex radius gets its own jitter of up to (1 - roundness) * 0.5.
    """
    depth_scale = 1.0 + (rng.random() - 0.5) * depth_variance * 1.5
    h_base = radius * depth_scale
    w_base = radius * WIDTH_FACTOR
    noise = (1 - roundness) * 0.5

    angles = np.arange(BITE_VERTICES) / BITE_VERTICES * 2 * math.pi
    cos = np.cos(angles)
    sin = np.sin(angles)
    normalized_y = -cos
    taper = 1.0 + TAPER * normalized_y
    jitter = 1 + (rng.random(BITE_VERTICES) - 0.5) * noise

    rx = w_base * taper * jitter
    ry = h_base * jitter
    vertices = np.column_stack([sin * rx, -cos * ry])
    return BiteOutline(vertices=vertices, smooth=roundness > SMOOTH_ROUNDNESS)
