"""Tests for SVG parsing into silhouettes."""

from yumyum.engine.rasterizer import build_grid
from yumyum.svg.parser import parse_svg
from tests.conftest import (
    CIRCLE_SVG,
    FILLED_RECT_SVG,
    OFFSET_VIEWBOX_SVG,
    RING_SVG,
    STROKE_ONLY_SVG,
    STYLED_SVG,
)


def test_parse_circle():
    parsed = parse_svg(CIRCLE_SVG)
    assert (parsed.width, parsed.height) == (200, 200)
    shapes = parsed.silhouette.shapes
    assert len(shapes) == 1
    assert shapes[0].fill == "#FF4785"
    assert shapes[0].fill_rule == "nonzero"
    assert shapes[0].d.startswith("M 10 100 A 90 90")


def test_document_order_kept():
    shapes = parse_svg(FILLED_RECT_SVG).silhouette.shapes
    assert [s.fill for s in shapes] == ["#4ECDC4", "#FF6B6B"]


def test_fill_rule_attribute():
    assert parse_svg(RING_SVG).silhouette.shapes[0].fill_rule == "evenodd"


def test_style_overrides_and_canvas_from_size_attributes():
    parsed = parse_svg(STYLED_SVG)
    assert (parsed.width, parsed.height) == (60, 40)
    polygon, ellipse = parsed.silhouette.shapes
    assert polygon.fill == "#00ff00"
    assert polygon.fill_rule == "evenodd"
    assert polygon.d == "M 0 0 L 60 0 L 60 40 Z"
    assert ellipse.fill == "#0000ff"


def test_unfilled_shapes_skipped():
    parsed = parse_svg(STROKE_ONLY_SVG)
    assert parsed.silhouette.shapes == ()
    assert parsed.silhouette.is_empty
    assert build_grid(parsed.silhouette, parsed.width, parsed.height, (12, 12)) is None


def test_viewbox_origin_moved_to_zero():
    parsed = parse_svg(OFFSET_VIEWBOX_SVG)
    assert (parsed.width, parsed.height) == (50, 50)
    grid = build_grid(parsed.silhouette, parsed.width, parsed.height, (25, 25)).grid
    assert grid.count() == 4
    assert grid.is_occupied_at(15, 15)
    assert not grid.is_occupied_at(25, 25)


def test_degenerate_elements_skipped():
    svg = '''<svg viewBox="0 0 10 10">
      <circle cx="5" cy="5" r="0" fill="#000"/>
      <rect width="abc" height="4" fill="#000"/>
      <polygon points="1,1 2,2" fill="#000"/>
      <path d="" fill="#000"/>
      <rect x="1" y="1" width="8" height="8" rx="2" fill="#111"/>
    </svg>'''
    shapes = parse_svg(svg).silhouette.shapes
    assert len(shapes) == 1
    assert shapes[0].fill == "#111"
    assert " A 2 2 " in shapes[0].d


def test_unknown_fill_rule_falls_back_to_nonzero():
    svg = '<svg viewBox="0 0 10 10"><path d="M0 0 H10 V10 Z" fill-rule="inherit"/></svg>'
    shape = parse_svg(svg).silhouette.shapes[0]
    assert shape.fill_rule == "nonzero"
    assert shape.fill is None


def test_missing_size_gives_empty_domain():
    parsed = parse_svg('<svg><path d="M0 0 H10 V10 Z"/></svg>')
    assert (parsed.width, parsed.height) == (0, 0)
