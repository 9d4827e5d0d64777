"""Silhouette descriptors — the shapes the rasterizer knows how to discretize."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Union

import numpy as np
from numpy.typing import NDArray
from svgpathtools import parse_path

from yumyum.utils.geometry import path_to_rings

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathShape:
    """One filled path in path-command syntax (the SVG `d` mini-language)."""

    d: str
    fill: str | None = None
    fill_rule: str = "nonzero"

    @cached_property
    def rings(self) -> list[NDArray[np.float64]]:
        if not self.d or not self.d.strip():
            return []
        try:
            path = parse_path(self.d)
        except Exception as e:
            logger.warning("Failed to parse path: %s", e)
            return []
        return path_to_rings(path)


@dataclass(frozen=True)
class VectorSilhouette:
    """Filled paths in document order; later paths paint over earlier ones."""

    shapes: tuple[PathShape, ...] = ()

    @classmethod
    def from_path(cls, d: str, fill: str | None = None, fill_rule: str = "nonzero") -> VectorSilhouette:
        return cls(shapes=(PathShape(d=d, fill=fill, fill_rule=fill_rule),))

    @property
    def is_empty(self) -> bool:
        return all(not shape.rings for shape in self.shapes)


@dataclass(frozen=True)
class RasterSilhouette:
    """A raster image, optionally masked to a vector outline.

    The image is stretched over the whole domain; a cell is solid where
    the mask contains it and the pixel alpha is at least 128.
    """

    image: Image.Image
    mask: VectorSilhouette | None = None


@dataclass(frozen=True)
class LineSilhouette:
    """A one-cell-thick horizontal bar through the middle of the domain."""

    fill: str | None = None
    # Vertical position; None = domain centre.
    y: float | None = None


Silhouette = Union[VectorSilhouette, RasterSilhouette, LineSilhouette]

