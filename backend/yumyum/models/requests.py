"""API request models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from yumyum.engine.config import ColorDominanceConfig, EaterConfig


class ColorDominanceOptions(BaseModel):
    enabled: bool = False
    target_color: str | None = Field(default=None, description="Hex colour; omitted = most dominant colour")
    tolerance: float = Field(default=0.2, ge=0, le=1)
    strength: float = Field(default=0.5, ge=0, le=1)


class EaterOptions(BaseModel):
    cx: float | None = Field(default=None, description="Pivot x; defaults to the domain centre")
    cy: float | None = Field(default=None, description="Pivot y; defaults to the domain centre")
    max_r: float | None = Field(default=None, gt=0, description="Visual shape radius; defaults to min(w, h) / 2")
    bite_size_scale: float = Field(default=1.0, gt=0)
    interval: float = Field(default=200.0, gt=0, description="Auto-eat tick interval (ms)")
    auto_eat: bool = True
    reset_duration: float = Field(default=800.0, ge=0)
    gravity: float = 0.2
    drag: float = 0.96
    drill_in_bias: float = Field(default=0.2, ge=0, le=1)
    bite_roundness: float = Field(default=0.9, ge=0, le=1)
    start_point_randomness: float = Field(default=0.0, ge=0, le=1)
    bite_depth_variance: float = Field(default=0.2, ge=0, le=1)
    random_bite_placement: bool = False
    color_dominance: ColorDominanceOptions = Field(default_factory=ColorDominanceOptions)
    crumb_colors: list[str] = Field(default_factory=lambda: ["#FFFFFF", "#FF4785"])
    show_crumbs: bool = True

    def to_config(self) -> EaterConfig:
        """Engine config; raises ValueError for values pydantic can't check (colours)."""
        data = self.model_dump(exclude={"color_dominance", "crumb_colors"})
        return EaterConfig(
            **data,
            color_dominance=ColorDominanceConfig(**self.color_dominance.model_dump()),
            crumb_colors=tuple(self.crumb_colors),
        )


class SilhouetteSpec(BaseModel):
    kind: Literal["svg", "path", "image", "circle", "rounded_rect", "line"] = Field(
        ..., description="How to read the silhouette"
    )
    svg: str | None = Field(default=None, description="Raw SVG document (kind=svg)")
    d: str | None = Field(default=None, description="Path data (kind=path, or image mask)")
    image: str | None = Field(default=None, description="Image data URI (kind=image)")
    fill: str | None = None
    fill_rule: Literal["nonzero", "evenodd"] = "nonzero"
    border_radius: float = Field(default=0.0, ge=0, description="Corner radius (kind=rounded_rect)")
    width: float | None = Field(default=None, ge=0, description="Domain width; required unless kind=svg")
    height: float | None = Field(default=None, ge=0, description="Domain height; required unless kind=svg")

    @field_validator("image")
    @classmethod
    def image_is_data_uri(cls, v: str | None) -> str | None:
        return _require_data_uri(v)


class CreateSessionRequest(BaseModel):
    silhouette: SilhouetteSpec
    config: EaterOptions = Field(default_factory=EaterOptions)
    seed: int | None = Field(default=None, description="Random seed for reproducible eating")


class BiteRequest(BaseModel):
    x: float | None = Field(default=None, description="Manual bite x; omit for a planned bite")
    y: float | None = Field(default=None, description="Manual bite y; omit for a planned bite")


class EatRequest(BaseModel):
    coverage: float = Field(..., ge=0, le=1, description="Target eaten fraction")
    max_bites: int | None = Field(default=None, gt=0)


class RefineColorsRequest(BaseModel):
    image: str = Field(..., description="Image data URI to sample colours from")

    @field_validator("image")
    @classmethod
    def image_is_data_uri(cls, v: str) -> str:
        return _require_data_uri(v)


def _require_data_uri(value: str | None) -> str | None:
    """Images only arrive inline; anything else would be read from the server's disk."""
    if value is not None and not value.lstrip().startswith("data:"):
        raise ValueError("image must be a data: URI")
    return value
