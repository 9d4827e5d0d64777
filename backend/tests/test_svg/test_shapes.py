"""Tests for basic-shape path builders."""

from svgpathtools import parse_path

from yumyum.engine.rasterizer import build_grid
from yumyum.engine.silhouette import LineSilhouette
from yumyum.svg.shapes import circle, circle_path, line, polygon_path, rect_path, rounded_rect


def test_circle_path_bounds():
    xmin, xmax, ymin, ymax = parse_path(circle_path(50, 40, 20)).bbox()
    assert round(xmin) == 30 and round(xmax) == 70
    assert round(ymin) == 20 and round(ymax) == 60


def test_sharp_rect():
    assert rect_path(1, 2, 3, 4) == "M 1 2 H 4 V 6 H 1 Z"


def test_rounded_rect_radius_clamped():
    d = rect_path(0, 0, 10, 20, rx=50)
    assert "A 5 10 " in d
    xmin, xmax, ymin, ymax = parse_path(d).bbox()
    assert (round(xmin), round(xmax), round(ymin), round(ymax)) == (0, 10, 0, 20)


def test_polygon_needs_three_points():
    assert polygon_path("0,0 10,0") is None
    assert polygon_path("0 0, 10 0, 10 10") == "M 0 0 L 10 0 L 10 10 Z"


def test_circle_silhouette_inset():
    sil = circle(100, 100, fill="#abc", inset=10)
    shape = sil.shapes[0]
    assert shape.fill == "#abc"
    xmin, xmax, _, _ = parse_path(shape.d).bbox()
    assert round(xmin) == 10 and round(xmax) == 90


def test_rounded_rect_corners_empty():
    grid = build_grid(rounded_rect(100, 100, 30), 100, 100, (50, 50)).grid
    assert not grid.is_occupied_at(5, 5)
    assert grid.is_occupied_at(50, 5)


def test_line_silhouette():
    sil = line("#f00", y=15)
    assert sil == LineSilhouette(fill="#f00", y=15)
    grid = build_grid(sil, 50, 50, (25, 25)).grid
    assert grid.count() == 5
    assert grid.is_occupied_at(25, 15)
