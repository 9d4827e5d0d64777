"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from yumyum.engine.records import Bite, Crumb

Point = tuple[float, float]


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    sessions: int = 0


class BiteModel(BaseModel):
    id: int
    x: float
    y: float
    path: str
    rotation: float
    radius: float
    scale: float = 1.0
    area: float = 0.0
    # minx, miny, maxx, maxy of the placed outline
    bounds: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_bite(cls, bite: Bite) -> BiteModel:
        return cls(
            id=bite.id,
            x=bite.x,
            y=bite.y,
            path=bite.path,
            rotation=bite.rotation,
            radius=bite.radius,
            scale=bite.scale,
            area=round(bite.area, 2),
            bounds=tuple(round(v, 2) for v in bite.footprint.bounds),
        )


class CrumbModel(BaseModel):
    id: int
    x: float
    y: float
    vx: float
    vy: float
    size: float
    color: str
    shape: str
    rotation: float
    rotation_speed: float
    life: float

    @classmethod
    def from_crumb(cls, crumb: Crumb) -> CrumbModel:
        return cls(**vars(crumb))


class StructureModel(BaseModel):
    islands: list[Point] = Field(default_factory=list)
    perimeter: list[Point] = Field(default_factory=list)
    tips: list[Point] = Field(default_factory=list)


class DominantColorModel(BaseModel):
    color: str
    percentage: float


class SessionResponse(BaseModel):
    id: str
    state: str
    finished: bool = False
    coverage: float = 0.0
    scale: float = 1.0
    width: float = 0.0
    height: float = 0.0
    bites: list[BiteModel] = Field(default_factory=list)
    next_bite: BiteModel | None = None
    structure: StructureModel = Field(default_factory=StructureModel)
    dominant_colors: list[DominantColorModel] = Field(default_factory=list)
    pending_crumbs: int = 0


class BiteResponse(BaseModel):
    bite: BiteModel | None = None
    session: SessionResponse


class EatResponse(BaseModel):
    bites: list[BiteModel] = Field(default_factory=list)
    session: SessionResponse


class CrumbsResponse(BaseModel):
    crumbs: list[CrumbModel] = Field(default_factory=list)


class RefineColorsResponse(BaseModel):
    refined: bool
    session: SessionResponse
