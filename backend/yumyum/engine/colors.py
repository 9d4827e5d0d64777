"""Colour helpers: hex parsing, crumb tinting, similarity and dominance detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from yumyum.engine.grid import OccupancyGrid

logger = logging.getLogger(__name__)

# Diagonal of the RGB cube, 255 * sqrt(3), rounded the way similarity is specified.
MAX_RGB_DISTANCE = 441.0

# Per-channel jitter applied to crumb colours.
CRUMB_COLOR_VARIANCE = 40

# Dominance detection buckets each channel into 8 levels (256 / 32).
_QUANT_SHIFT = 5
_DOMINANT_MAX_COLORS = 5
# Colours covering less than this share of the shape are not reported.
_DOMINANT_MIN_FRACTION = 0.05

_NAMED_COLORS = {
    "black": "#000000", "white": "#ffffff", "red": "#ff0000",
    "green": "#008000", "blue": "#0000ff", "yellow": "#ffff00",
    "orange": "#ffa500", "purple": "#800080", "gray": "#808080",
    "grey": "#808080", "brown": "#a52a2a", "pink": "#ffc0cb",
    "none": None, "transparent": None, "currentcolor": "#000000",
}


def parse_hex(color: str | None) -> tuple[int, int, int] | None:
    """Parse '#rgb', '#rrggbb', '#rrggbbaa' or a basic named colour to (r, g, b)."""
    if not color:
        return None
    color = color.strip().lower()
    if color in _NAMED_COLORS:
        mapped = _NAMED_COLORS[color]
        if mapped is None:
            return None
        color = mapped
    if not color.startswith("#"):
        return None
    color = color[1:]
    if len(color) == 3:
        color = color[0] * 2 + color[1] * 2 + color[2] * 2
    if len(color) == 8:
        color = color[:6]
    if len(color) != 6:
        return None
    try:
        return (int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16))
    except ValueError:
        return None


def to_hex(rgb: tuple[int, int, int] | NDArray) -> str:
    r, g, b = (int(np.clip(round(float(c)), 0, 255)) for c in rgb[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def vary_color(color: str, rng: np.random.Generator, variance: int = CRUMB_COLOR_VARIANCE) -> str:
    """Jitter each channel by up to ±variance/2 so crumbs don't look flat."""
    rgb = parse_hex(color)
    if rgb is None:
        return color
    noise = np.floor((rng.random(3) - 0.5) * variance)
    return to_hex(np.clip(np.asarray(rgb, dtype=np.float64) + noise, 0, 255))


def color_similarity(samples: NDArray, target: tuple[int, int, int]) -> NDArray[np.float64]:
    """1 - (Euclidean RGB distance / 441) for every sample row."""
    rgb = np.asarray(samples, dtype=np.float64)[..., :3]
    dist = np.sqrt(np.sum((rgb - np.asarray(target, dtype=np.float64)) ** 2, axis=-1))
    return 1.0 - dist / MAX_RGB_DISTANCE


def color_matches(samples: NDArray, target: tuple[int, int, int], tolerance: float) -> NDArray[np.bool_]:
    """True where a sample is at least (1 - tolerance) similar to the target."""
    return color_similarity(samples, target) >= (1.0 - tolerance)


@dataclass
class DominantColor:
    color: str
    percentage: float


@dataclass
class ColorRegion:
    color: str
    points: list[tuple[float, float]] = field(default_factory=list)


@dataclass
class ColorDominance:
    """Colours ranked by how much of the current shape they cover."""

    dominant_colors: list[DominantColor] = field(default_factory=list)
    regions: list[ColorRegion] = field(default_factory=list)

    @property
    def top_rgb(self) -> tuple[int, int, int] | None:
        if not self.dominant_colors:
            return None
        return parse_hex(self.dominant_colors[0].color)


def detect_dominant_colors(
    grid: OccupancyGrid,
    samples: NDArray[np.uint8],
    max_colors: int = _DOMINANT_MAX_COLORS,
    min_fraction: float = _DOMINANT_MIN_FRACTION,
) -> ColorDominance:
    """Group occupied cells by quantized colour and rank the groups by size.

    Fully transparent samples are ignored. Each reported colour is the mean
    of the samples in its bucket, so a flat fill reports its exact value.
    """
    occupied = np.flatnonzero(grid.cells)
    if len(occupied) == 0:
        return ColorDominance()

    rgba = samples[occupied]
    visible = rgba[:, 3] > 0
    occupied = occupied[visible]
    rgba = rgba[visible]
    if len(occupied) == 0:
        return ColorDominance()

    q = rgba[:, :3].astype(np.int32) >> _QUANT_SHIFT
    keys = (q[:, 0] << 6) | (q[:, 1] << 3) | q[:, 2]
    unique, inverse, counts = np.unique(keys, return_inverse=True, return_counts=True)
    order = np.argsort(-counts, kind="stable")

    total = len(occupied)
    result = ColorDominance()
    for bucket in order[:max_colors]:
        fraction = counts[bucket] / total
        if fraction < min_fraction:
            break
        members = occupied[inverse == bucket]
        mean_rgb = rgba[inverse == bucket, :3].astype(np.float64).mean(axis=0)
        color = to_hex(mean_rgb)
        result.dominant_colors.append(DominantColor(color=color, percentage=round(float(fraction) * 100, 2)))
        result.regions.append(ColorRegion(color=color, points=[grid.center(int(i)) for i in members]))

    logger.debug(
        "Colour dominance: %d buckets, top %s",
        len(unique),
        result.dominant_colors[0].color if result.dominant_colors else "-",
    )
    return result
