"""Eater configuration: tunable parameters and engine constants."""

from __future__ import annotations

from dataclasses import dataclass, field

from yumyum.engine.colors import parse_hex

# Grid cell edge length in silhouette units.
GRID_CELL_SIZE = 10

# Manual interaction suppresses auto-eating for this long (ms).
IDLE_THRESHOLD_MS = 2000
# Poll interval while auto-eating is idle-paused (ms).
IDLE_POLL_MS = 100
# Floor for the jittered tick interval (ms).
MIN_TICK_MS = 20
# Total tick jitter as a fraction of the interval (±10%).
TICK_JITTER = 0.2

# Delay between entering FINISHED and starting the reset (ms).
FINISH_RESET_DELAY_MS = 1500
# Main body below this many cells is no longer worth biting.
MIN_VIABLE_CELLS = 15

# Shrink-bounce applied to the whole shape after every bite.
SCALE_PULSE = 0.995
SCALE_PULSE_MS = 150

# Bite sizing: base radius = 50 * (max_r / 240) * bite_size_scale.
BITE_BASE_RADIUS = 50.0
BITE_REFERENCE_RADIUS = 240.0
BITE_MIN_FACTOR = 0.7
BITE_MAX_FACTOR = 1.1
# Logical clearing reaches a bit past the drawn outline.
CLEAR_FACTOR = 1.2
# Final cosmetic bite covers the whole shape.
FINAL_BITE_FACTOR = 1.5


@dataclass(frozen=True)
class ColorDominanceConfig:
    """Bias bites toward regions matching a target colour."""

    enabled: bool = False
    # Hex colour. None = use the most dominant detected colour.
    target_color: str | None = None
    tolerance: float = 0.2
    strength: float = 0.5

    def __post_init__(self) -> None:
        _check_unit("color_dominance.tolerance", self.tolerance)
        _check_unit("color_dominance.strength", self.strength)
        if self.target_color is not None and parse_hex(self.target_color) is None:
            raise ValueError(f"color_dominance.target_color is not a hex colour: {self.target_color!r}")


@dataclass(frozen=True)
class EaterConfig:
    """Immutable parameter bundle for one eating session.

    Geometry fields (cx, cy, max_r) default to the domain centre and
    half the smaller domain side when left as None.
    """

    # Pivot and visual radius
    cx: float | None = None
    cy: float | None = None
    max_r: float | None = None

    # Simulation
    bite_size_scale: float = 1.0
    interval: float = 200.0
    auto_eat: bool = True
    reset_duration: float = 800.0

    # Forwarded to the exterior particle animation, unused by the engine
    gravity: float = 0.2
    drag: float = 0.96

    # Bite planning
    drill_in_bias: float = 0.2
    bite_roundness: float = 0.9
    start_point_randomness: float = 0.0
    bite_depth_variance: float = 0.2
    random_bite_placement: bool = False
    color_dominance: ColorDominanceConfig = field(default_factory=ColorDominanceConfig)

    # Crumbs
    crumb_colors: tuple[str, ...] = ("#FFFFFF", "#FF4785")
    show_crumbs: bool = True

    grid_cell_size: float = GRID_CELL_SIZE

    def __post_init__(self) -> None:
        if self.bite_size_scale <= 0:
            raise ValueError(f"bite_size_scale must be positive, got {self.bite_size_scale}")
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")
        if self.reset_duration < 0:
            raise ValueError(f"reset_duration must be >= 0, got {self.reset_duration}")
        if self.grid_cell_size <= 0:
            raise ValueError(f"grid_cell_size must be positive, got {self.grid_cell_size}")
        if self.max_r is not None and self.max_r <= 0:
            raise ValueError(f"max_r must be positive, got {self.max_r}")
        _check_unit("drill_in_bias", self.drill_in_bias)
        _check_unit("bite_roundness", self.bite_roundness)
        _check_unit("start_point_randomness", self.start_point_randomness)
        _check_unit("bite_depth_variance", self.bite_depth_variance)
        if not self.crumb_colors:
            raise ValueError("crumb_colors must not be empty")
        for color in self.crumb_colors:
            if parse_hex(color) is None:
                raise ValueError(f"crumb colour is not a hex colour: {color!r}")

    def pivot(self, width: float, height: float) -> tuple[float, float]:
        cx = self.cx if self.cx is not None else width / 2
        cy = self.cy if self.cy is not None else height / 2
        return (float(cx), float(cy))

    def shape_radius(self, width: float, height: float) -> float:
        if self.max_r is not None:
            return float(self.max_r)
        return min(width, height) / 2

    def base_bite_radius(self, width: float, height: float) -> float:
        """Nominal bite radius for this shape and bite_size_scale."""
        return self.base_bite_radius_for(self.shape_radius(width, height))

    def base_bite_radius_for(self, shape_radius: float) -> float:
        return BITE_BASE_RADIUS * (shape_radius / BITE_REFERENCE_RADIUS) * self.bite_size_scale


def _check_unit(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")
