"""Image loading for raster silhouettes and colour refinement.

Sources may be a data URI, raw encoded bytes, or a file path. SVG
documents are rendered to PNG with CairoSVG first.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from pathlib import Path
from urllib.parse import unquote_to_bytes

from PIL import Image

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[^;,]*)*?),(?P<data>.*)$", re.DOTALL)
_SVG_SNIFF_RE = re.compile(rb"^\s*(<\?xml[^>]*>\s*)?(<!--.*?-->\s*)*<svg\b", re.DOTALL)

# Render size for SVG sources without an explicit target size.
_DEFAULT_SVG_SIZE = 512


def decode_data_uri(uri: str) -> bytes:
    """Payload of a data: URI (base64 or percent-encoded)."""
    m = _DATA_URI_RE.match(uri.strip())
    if not m:
        raise ValueError("Not a data URI")
    data = m.group("data")
    if ";base64" in (m.group("params") or ""):
        try:
            return base64.b64decode(data, validate=False)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e
    return unquote_to_bytes(data)


def is_svg(data: bytes) -> bool:
    return bool(_SVG_SNIFF_RE.match(data[:2048]))


def render_svg_to_png(svg: bytes, width: int = _DEFAULT_SVG_SIZE, height: int = _DEFAULT_SVG_SIZE) -> bytes:
    """Render SVG bytes to PNG bytes using cairosvg."""
    import cairosvg

    try:
        return cairosvg.svg2png(bytestring=svg, output_width=width, output_height=height)
    except Exception as e:
        logger.warning("Failed to render SVG to PNG: %s", e)
        raise ValueError(f"Unrenderable SVG: {e}") from e


def read_source(source: str | bytes | Path) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, str) and source.lstrip().startswith("data:"):
        return decode_data_uri(source)
    return Path(source).read_bytes()


def load_image(
    source: str | bytes | Path,
    width: int | None = None,
    height: int | None = None,
) -> Image.Image:
    """Decode a source into an RGBA image.

    width/height only matter for SVG sources, which have no pixel size of
    their own. Raises ValueError or OSError when the source is unusable.
    """
    data = read_source(source)
    if not data:
        raise ValueError("Empty image source")
    if is_svg(data):
        data = render_svg_to_png(data, width or _DEFAULT_SVG_SIZE, height or _DEFAULT_SVG_SIZE)
    image = Image.open(io.BytesIO(data))
    image.load()
    return image.convert("RGBA")
