"""Output records: bites for the mask renderer, crumbs for the particle renderer."""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass
from typing import Literal

from shapely.geometry import Polygon

from yumyum.engine.bite_path import BiteOutline

CrumbShape = Literal["triangle", "circle", "rect"]

_bite_ids = itertools.count(1)
_crumb_ids = itertools.count(1)


def next_bite_id() -> int:
    return next(_bite_ids)


def next_crumb_id() -> int:
    return next(_crumb_ids)


@dataclass(frozen=True, eq=False)
class Bite:
    """One committed (or planned) removal and the outline drawn for it."""

    id: int
    x: float
    y: float
    outline: BiteOutline
    # Degrees; the outline's top faces away from the pivot.
    rotation: float
    radius: float
    scale: float = 1.0

    @property
    def path(self) -> str:
        return self.outline.d

    @property
    def area(self) -> float:
        """Area of the drawn outline; placement does not change it."""
        return float(self.outline.polygon.area)

    @property
    def footprint(self) -> Polygon:
        """The outline as drawn on the canvas: rotated and centred on the bite."""
        return self.outline.placed_polygon(self.x, self.y, self.rotation)

    @property
    def center(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def angle(self) -> float:
        """Angle from the pivot to the bite centre, radians."""
        return math.radians(self.rotation + 90)


@dataclass(frozen=True)
class Crumb:
    id: int
    x: float
    y: float
    vx: float
    vy: float
    size: float
    color: str
    shape: CrumbShape
    rotation: float
    rotation_speed: float
    life: float
