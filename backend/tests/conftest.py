"""Shared test fixtures."""

from __future__ import annotations

import base64
import io

import numpy as np
import pytest
from PIL import Image

from yumyum.engine.grid import OccupancyGrid


# Sample SVGs

CIRCLE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="200" height="200" viewBox="0 0 200 200">
  <circle cx="100" cy="100" r="90" fill="#FF4785"/>
</svg>'''

SQUARE_48_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 48 48">
  <rect x="0" y="0" width="48" height="48" fill="#222222"/>
</svg>'''

# Both rings run the same way: evenodd leaves a hole, nonzero fills it.
RING_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <path d="M10 10 H90 V90 H10 Z M30 30 H70 V70 H30 Z" fill="#333333" fill-rule="evenodd"/>
</svg>'''

FILLED_RECT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <rect x="10" y="10" width="80" height="80" fill="#4ECDC4"/>
  <circle cx="50" cy="50" r="20" fill="#FF6B6B"/>
</svg>'''

OFFSET_VIEWBOX_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="100 100 50 50">
  <rect x="100" y="100" width="20" height="20" fill="#000"/>
</svg>'''

STROKE_ONLY_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">
  <circle cx="12" cy="12" r="10" fill="none"/>
</svg>'''

STYLED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="60" height="40">
  <polygon points="0,0 60,0 60,40" style="fill: #00ff00; fill-rule: evenodd"/>
  <ellipse cx="20" cy="20" rx="10" ry="5" fill="#0000ff"/>
</svg>'''

# Two 5x5 lobes joined by a one-cell bridge in the middle row.
DUMBBELL_ROWS = [
    "#####...#####",
    "#####...#####",
    "#############",
    "#####...#####",
    "#####...#####",
]

# Same, with the right lobe smaller so the crumbled side is unambiguous.
LOPSIDED_ROWS = [
    "#####........",
    "#####.....###",
    "#############",
    "#####.....###",
    "#####........",
]


def png_data_uri(image: Image.Image) -> str:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def make_grid(rows: list[str], cell_size: float = 10) -> OccupancyGrid:
    """Grid from ASCII rows, '#' = occupied."""
    array = np.array([[ch == "#" for ch in row] for row in rows], dtype=bool)
    return OccupancyGrid.from_array(array, cell_size)


def filled_grid(cols: int, rows: int, cell_size: float = 10) -> OccupancyGrid:
    return OccupancyGrid.from_array(np.ones((rows, cols), dtype=bool), cell_size)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def dumbbell_grid() -> OccupancyGrid:
    return make_grid(DUMBBELL_ROWS)
