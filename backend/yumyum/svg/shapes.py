"""Path data for basic SVG shapes, so everything rasterizes through one path route."""

from __future__ import annotations

import re

from yumyum.engine.silhouette import LineSilhouette, VectorSilhouette

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def circle_path(cx: float, cy: float, r: float) -> str:
    return ellipse_path(cx, cy, r, r)


def ellipse_path(cx: float, cy: float, rx: float, ry: float) -> str:
    """Two half-arcs; a single full-circle arc is degenerate in path syntax."""
    return (
        f"M {cx - rx:g} {cy:g} "
        f"A {rx:g} {ry:g} 0 1 0 {cx + rx:g} {cy:g} "
        f"A {rx:g} {ry:g} 0 1 0 {cx - rx:g} {cy:g} Z"
    )


def rect_path(x: float, y: float, width: float, height: float, rx: float = 0.0, ry: float | None = None) -> str:
    """Rectangle, with rounded corners when rx/ry > 0 (clamped to half the sides)."""
    ry = rx if ry is None else ry
    rx = min(max(rx, 0.0), width / 2)
    ry = min(max(ry, 0.0), height / 2)
    if rx == 0 or ry == 0:
        return f"M {x:g} {y:g} H {x + width:g} V {y + height:g} H {x:g} Z"
    right, bottom = x + width, y + height
    return (
        f"M {x + rx:g} {y:g} H {right - rx:g} "
        f"A {rx:g} {ry:g} 0 0 1 {right:g} {y + ry:g} V {bottom - ry:g} "
        f"A {rx:g} {ry:g} 0 0 1 {right - rx:g} {bottom:g} H {x + rx:g} "
        f"A {rx:g} {ry:g} 0 0 1 {x:g} {bottom - ry:g} V {y + ry:g} "
        f"A {rx:g} {ry:g} 0 0 1 {x + rx:g} {y:g} Z"
    )


def polygon_path(points: str) -> str | None:
    """Closed path through an SVG `points` list; None when under 3 points."""
    nums = [float(n) for n in _NUMBER_RE.findall(points)]
    pairs = list(zip(nums[0::2], nums[1::2]))
    if len(pairs) < 3:
        return None
    head, *rest = pairs
    return " ".join([f"M {head[0]:g} {head[1]:g}"] + [f"L {px:g} {py:g}" for px, py in rest] + ["Z"])


def circle(width: float, height: float, fill: str | None = None, inset: float = 0.0) -> VectorSilhouette:
    """Circle filling the domain's shorter side."""
    r = min(width, height) / 2 - inset
    return VectorSilhouette.from_path(circle_path(width / 2, height / 2, r), fill=fill)


def rounded_rect(width: float, height: float, radius: float, fill: str | None = None) -> VectorSilhouette:
    return VectorSilhouette.from_path(rect_path(0, 0, width, height, radius), fill=fill)


def line(fill: str | None = None, y: float | None = None) -> LineSilhouette:
    return LineSilhouette(fill=fill, y=y)
