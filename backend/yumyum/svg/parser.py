"""SVG parser — regex facade over svgpathtools.

Turns an SVG document into a VectorSilhouette plus the domain size.
Paths are kept as path data; circles, ellipses, rects and polygons are
converted to equivalent path data first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from svgpathtools import parse_path

from yumyum.engine.silhouette import PathShape, VectorSilhouette
from yumyum.svg.shapes import ellipse_path, polygon_path, rect_path

logger = logging.getLogger(__name__)

# Regex for extracting viewBox
_VIEWBOX_RE = re.compile(r'viewBox\s*=\s*["\']([^"\']+)["\']')
_SVG_TAG_RE = re.compile(r"<svg\b[^>]*>", re.IGNORECASE)
_ELEMENT_RE = re.compile(r"<(path|circle|ellipse|rect|polygon)\b[^>]*?/?>", re.IGNORECASE)
_ATTR_RE = re.compile(r'([\w:-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\')')
_UNIT_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(px|pt)?\s*$")


@dataclass
class ParsedSvg:
    silhouette: VectorSilhouette
    width: float
    height: float


def parse_svg(svg_text: str) -> ParsedSvg:
    """Parse an SVG document.

    The domain is the viewBox size, or the width/height attributes when
    there is no viewBox. Shapes are shifted so the viewBox origin sits at
    (0, 0). Unfilled shapes (fill="none") are skipped because they have no
    area to eat.
    """
    width, height, min_x, min_y = _canvas(svg_text)

    shapes: list[PathShape] = []
    for match in _ELEMENT_RE.finditer(svg_text):
        tag = match.group(1).lower()
        attrs = _extract_attrs(match.group(0))
        d = _element_path(tag, attrs)
        if d is None:
            continue

        fill = attrs.get("fill")
        if fill is not None and fill.strip().lower() == "none":
            continue
        if min_x or min_y:
            d = _translate(d, -min_x, -min_y)
            if d is None:
                continue
        fill_rule = attrs.get("fill-rule", "nonzero").strip().lower()
        if fill_rule not in ("nonzero", "evenodd"):
            fill_rule = "nonzero"
        shapes.append(PathShape(d=d, fill=fill, fill_rule=fill_rule))

    logger.info("Parsed SVG: %d filled shapes, canvas %.0f×%.0f", len(shapes), width, height)
    return ParsedSvg(silhouette=VectorSilhouette(shapes=tuple(shapes)), width=width, height=height)


def _canvas(svg_text: str) -> tuple[float, float, float, float]:
    vb_match = _VIEWBOX_RE.search(svg_text)
    if vb_match:
        parts = vb_match.group(1).replace(",", " ").split()
        if len(parts) >= 4:
            try:
                min_x, min_y, w, h = (float(p) for p in parts[:4])
                return w, h, min_x, min_y
            except ValueError:
                logger.warning("Ignoring malformed viewBox: %r", vb_match.group(1))

    svg_tag = _SVG_TAG_RE.search(svg_text)
    attrs = _extract_attrs(svg_tag.group(0)) if svg_tag else {}
    return _length(attrs.get("width")), _length(attrs.get("height")), 0.0, 0.0


def _length(value: str | None) -> float:
    if not value:
        return 0.0
    m = _UNIT_RE.match(value)
    return float(m.group(1)) if m else 0.0


def _extract_attrs(tag_text: str) -> dict[str, str]:
    """Tag attributes, with inline style declarations taking precedence."""
    attrs: dict[str, str] = {}
    for m in _ATTR_RE.finditer(tag_text):
        attrs[m.group(1)] = m.group(2) if m.group(2) is not None else m.group(3)
    style = attrs.pop("style", "")
    for decl in style.split(";"):
        if ":" in decl:
            key, value = decl.split(":", 1)
            attrs[key.strip()] = value.strip()
    return attrs


def _element_path(tag: str, attrs: dict[str, str]) -> str | None:
    try:
        if tag == "path":
            return attrs.get("d") or None
        if tag == "circle":
            r = float(attrs["r"])
            return ellipse_path(float(attrs.get("cx", 0)), float(attrs.get("cy", 0)), r, r) if r > 0 else None
        if tag == "ellipse":
            rx, ry = float(attrs["rx"]), float(attrs["ry"])
            if rx <= 0 or ry <= 0:
                return None
            return ellipse_path(float(attrs.get("cx", 0)), float(attrs.get("cy", 0)), rx, ry)
        if tag == "rect":
            w, h = float(attrs["width"]), float(attrs["height"])
            if w <= 0 or h <= 0:
                return None
            rx = attrs.get("rx")
            ry = attrs.get("ry")
            rx_f = float(rx) if rx is not None else (float(ry) if ry is not None else 0.0)
            ry_f = float(ry) if ry is not None else rx_f
            return rect_path(float(attrs.get("x", 0)), float(attrs.get("y", 0)), w, h, rx_f, ry_f)
        if tag == "polygon":
            return polygon_path(attrs.get("points", ""))
    except (KeyError, ValueError) as e:
        logger.warning("Skipping <%s> with unusable geometry: %s", tag, e)
    return None


def _translate(d: str, dx: float, dy: float) -> str | None:
    try:
        return parse_path(d).translated(complex(dx, dy)).d()
    except Exception as e:
        logger.warning("Failed to parse path: %s", e)
        return None
