"""Eater session — owns the grids and runs the eat / finish / reset cycle.

States:
    NOT_READY  no grid yet (nothing loaded, or the silhouette covered nothing)
    ACTIVE     auto-eat ticks running (if enabled), manual bites accepted
    FINISHED   remains exploded, reset scheduled
    RESETTING  waiting reset_duration before restoring the initial grid
    DISPOSED   torn down; every call is a no-op

All grid mutation happens synchronously inside one method call, so an
observer on the same loop never sees a half-applied bite.
"""

from __future__ import annotations

import asyncio
import logging
import math
from enum import Enum
from pathlib import Path

import numpy as np
from PIL import Image

from yumyum.engine.bite_path import generate_bite_path
from yumyum.engine.colors import ColorDominance, detect_dominant_colors, parse_hex
from yumyum.engine.config import (
    FINAL_BITE_FACTOR,
    FINISH_RESET_DELAY_MS,
    MIN_VIABLE_CELLS,
    SCALE_PULSE,
    SCALE_PULSE_MS,
    EaterConfig,
)
from yumyum.engine.crumbs import bite_crumbs, explosion_crumbs
from yumyum.engine.eroder import commit
from yumyum.engine.grid import ColorSampleGrid, OccupancyGrid
from yumyum.engine.planner import plan_bite
from yumyum.engine.rasterizer import build_grid, sample_image
from yumyum.engine.records import Bite, Crumb, next_bite_id
from yumyum.engine.scheduler import AsyncioScheduler, Scheduler, TimerHandle, is_idle_paused, next_tick_delay
from yumyum.engine.silhouette import RasterSilhouette, Silhouette
from yumyum.engine.topology import Analysis, StructurePreview, analyze, structure_preview
from yumyum.utils.geometry import angle_from
from yumyum.utils.images import load_image

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NOT_READY = "not_ready"
    ACTIVE = "active"
    FINISHED = "finished"
    RESETTING = "resetting"
    DISPOSED = "disposed"


class EaterSession:
    def __init__(
        self,
        config: EaterConfig | None = None,
        scheduler: Scheduler | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or EaterConfig()
        self.scheduler = scheduler or AsyncioScheduler()
        self.rng = rng or np.random.default_rng()
        self.state = SessionState.NOT_READY

        self.width = 0.0
        self.height = 0.0
        self.pivot = (0.0, 0.0)
        self.shape_radius = 0.0

        self._initial: OccupancyGrid | None = None
        self._grid: OccupancyGrid | None = None
        self._colors: ColorSampleGrid | None = None
        self._sorted_cells: list[tuple[float, float, float]] = []

        self._bites: list[Bite] = []
        self._pending_crumbs: list[Crumb] = []
        self._last_angle = 0.0
        self._last_interaction: float | None = None
        self._last_bite_at: float | None = None
        self._next_bite: Bite | None = None
        self._structure = StructurePreview()
        self._dominance = ColorDominance()

        self._timer: TimerHandle | None = None
        self._reset_after_finish = False
        self._refine_task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, silhouette: Silhouette, width: float, height: float) -> bool:
        """Replace the silhouette. Returns False (NOT_READY) when nothing is edible."""
        if self.state is SessionState.DISPOSED:
            return False
        self._cancel_timer()
        self._cancel_refine()

        self.width = float(width or 0.0)
        self.height = float(height or 0.0)
        self.pivot = self.config.pivot(self.width, self.height)
        self.shape_radius = self.config.shape_radius(self.width, self.height)
        self._bites = []
        self._pending_crumbs = []
        self._last_interaction = None
        self._last_bite_at = None

        sample = self.config.color_dominance.enabled or isinstance(silhouette, RasterSilhouette)
        result = build_grid(
            silhouette, self.width, self.height, self.pivot,
            sample_colors=sample, cell_size=self.config.grid_cell_size,
        )
        if result is None:
            self.state = SessionState.NOT_READY
            self._initial = self._grid = self._colors = None
            self._sorted_cells = []
            self._next_bite = None
            self._structure = StructurePreview()
            self._dominance = ColorDominance()
            return False

        self._initial = result.grid
        self._grid = result.grid.copy()
        self._colors = result.colors
        self._sorted_cells = result.sorted_cells
        self._update_dominance()
        self._last_angle = self.start_angle()
        self.state = SessionState.ACTIVE
        self._refresh()
        logger.info(
            "Session loaded %.0fx%.0f silhouette, %d cells, start angle %.2f",
            self.width, self.height, self._initial.count(), self._last_angle,
        )
        self.start()
        return True

    def start(self) -> None:
        """Arm the auto-eat loop if it should be running and isn't."""
        if self.state is SessionState.ACTIVE and self.config.auto_eat and self._timer is None:
            self._timer = self.scheduler.call_later(self.config.interval, self.tick)

    def start_angle(self) -> float:
        """Anchor angle for the first bite.

        Picks uniformly among the top 50% * start_point_randomness of cells
        by distance from the pivot; with randomness 0 that is the single
        farthest cell.
        """
        if not self._sorted_cells:
            return 0.0
        pool = max(1, math.floor(len(self._sorted_cells) * 0.5 * self.config.start_point_randomness))
        pick = int(self.rng.integers(pool)) if pool > 1 else 0
        x, y, _ = self._sorted_cells[pick]
        return angle_from(x, y, *self.pivot)

    # ------------------------------------------------------------------
    # Eating
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Timer callback: one auto bite unless idle-paused, then re-arm."""
        self._timer = None
        if self.state is not SessionState.ACTIVE or not self.config.auto_eat:
            return
        now = self.scheduler.now()
        if not is_idle_paused(self._last_interaction, now):
            self.step()
        if self.state is SessionState.ACTIVE and self._timer is None:
            delay = next_tick_delay(self._last_interaction, self.scheduler.now(), self.config.interval, self.rng.random())
            self._timer = self.scheduler.call_later(delay, self.tick)

    def step(self) -> Bite | None:
        """One planned bite attempt. Finishes the shape when too little is left."""
        if self.state is not SessionState.ACTIVE or self._grid is None:
            return None
        analysis = analyze(self._grid)
        if self._too_small(analysis):
            self._finish()
            return None

        plan = self._next_bite or self._plan(analysis)
        if plan is None:
            self._finish()
            return None
        return self._apply(plan)

    def trigger_bite(self, point: tuple[float, float]) -> Bite | None:
        """Manual bite at a point; pauses auto-eating for the idle threshold."""
        if self.state is not SessionState.ACTIVE or self._grid is None:
            return None
        self._last_interaction = self.scheduler.now()
        x, y = float(point[0]), float(point[1])
        angle = angle_from(x, y, *self.pivot)
        radius = self.config.base_bite_radius_for(self.shape_radius)
        bite = Bite(
            id=next_bite_id(),
            x=x,
            y=y,
            outline=generate_bite_path(radius, self.config.bite_roundness, self.config.bite_depth_variance, self.rng),
            rotation=math.degrees(angle) - 90,
            radius=radius,
        )
        return self._apply(bite)

    def eat_to(self, coverage: float, max_bites: int | None = None) -> list[Bite]:
        """Commit planned bites until `coverage` of the shape is gone.

        Stops early when the shape finishes or max_bites is reached.
        """
        if not 0.0 <= coverage <= 1.0:
            raise ValueError(f"coverage must be within [0, 1], got {coverage}")
        limit = max_bites if max_bites is not None else (self._grid.size if self._grid is not None else 0)
        bites: list[Bite] = []
        attempts = 0
        while self.state is SessionState.ACTIVE and self.coverage < coverage and attempts < limit:
            attempts += 1
            bite = self.step()
            if bite is not None:
                bites.append(bite)
        return bites

    def _apply(self, bite: Bite) -> Bite | None:
        result = commit(self._grid, bite.x, bite.y, bite.radius, self.pivot, self.config, self.rng, self._colors)
        if result.removed_count == 0:
            self._refresh()
            return None

        self._bites.append(bite)
        self._pending_crumbs.extend(bite_crumbs(bite.x, bite.y, result.removed_count, self.config, self.rng))
        self._pending_crumbs.extend(result.crumbs)
        self._last_angle = bite.angle
        self._last_bite_at = self.scheduler.now()
        self._refresh()
        return bite

    def _plan(self, analysis: Analysis | None) -> Bite | None:
        dominance = self.config.color_dominance
        return plan_bite(
            self._grid,
            analysis,
            self._last_angle,
            self.pivot,
            self.config,
            self.rng,
            self.shape_radius,
            colors=self._colors if dominance.enabled else None,
            target_rgb=self._target_rgb(),
        )

    def _refresh(self) -> None:
        """Recompute the cached plan and structure preview after a grid change."""
        analysis = analyze(self._grid)
        self._structure = structure_preview(self._grid, analysis)
        self._next_bite = None if self._too_small(analysis) else self._plan(analysis)

    @staticmethod
    def _too_small(analysis: Analysis | None) -> bool:
        if analysis is None:
            return True
        return len(analysis.main_cluster) < MIN_VIABLE_CELLS or analysis.occupied_count < MIN_VIABLE_CELLS

    # ------------------------------------------------------------------
    # Finish and reset
    # ------------------------------------------------------------------

    def _finish(self) -> None:
        self._cancel_timer()
        self._pending_crumbs.extend(explosion_crumbs(self._grid, self.config, self.rng, self._colors))
        remaining = self._grid.count()
        self._grid.cells[:] = False

        px, py = self.pivot
        self._bites.append(Bite(
            id=next_bite_id(),
            x=px,
            y=py,
            outline=generate_bite_path(self.shape_radius * FINAL_BITE_FACTOR, self.config.bite_roundness, 0.0, self.rng),
            rotation=0.0,
            radius=self.shape_radius * FINAL_BITE_FACTOR,
        ))
        self._next_bite = None
        self._structure = StructurePreview()
        self._last_bite_at = self.scheduler.now()
        self.state = SessionState.FINISHED
        logger.info("Shape finished after %d bites, %d cells exploded", len(self._bites) - 1, remaining)
        self._timer = self.scheduler.call_later(FINISH_RESET_DELAY_MS, self.reset)

    def reset(self) -> None:
        """Start the exit animation; the grid is restored after reset_duration."""
        if self.state in (SessionState.NOT_READY, SessionState.DISPOSED):
            return
        self._cancel_timer()
        self._reset_after_finish = self.state is SessionState.FINISHED
        self.state = SessionState.RESETTING
        self._timer = self.scheduler.call_later(self.config.reset_duration, self._restore)

    def _restore(self) -> None:
        self._timer = None
        if self.state is not SessionState.RESETTING or self._initial is None:
            return
        self._grid.restore_from(self._initial)
        self._bites = []
        self._pending_crumbs = []
        self._last_interaction = None
        self._last_bite_at = None
        self._last_angle = self.start_angle()
        self._update_dominance()
        self.state = SessionState.ACTIVE
        self._refresh()
        logger.info("Shape restored, %d cells, start angle %.2f", self._grid.count(), self._last_angle)
        self.start()

    def dispose(self) -> None:
        self._cancel_timer()
        self._cancel_refine()
        self.state = SessionState.DISPOSED
        self._initial = self._grid = self._colors = None
        self._bites = []
        self._pending_crumbs = []
        self._next_bite = None
        self._structure = StructurePreview()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _cancel_refine(self) -> None:
        if self._refine_task is not None and not self._refine_task.done():
            self._refine_task.cancel()
        self._refine_task = None

    # ------------------------------------------------------------------
    # Colour
    # ------------------------------------------------------------------

    def refine_colors(self, source: str | bytes | Path) -> asyncio.Task:
        """Swap in colour samples decoded from an image, off the event loop.

        Planning keeps using the current samples until the task completes.
        The task resolves to True when the samples were replaced.
        """
        self._cancel_refine()
        self._refine_task = asyncio.get_running_loop().create_task(self._refine(source))
        return self._refine_task

    async def _refine(self, source: str | bytes | Path) -> bool:
        initial = self._initial
        if initial is None:
            return False
        try:
            rgba = await asyncio.to_thread(_decode_samples, source, initial, self.width, self.height)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.warning("Colour refinement failed, keeping previous samples: %s", e)
            return False
        if self._initial is not initial:
            # Silhouette replaced or session disposed while decoding.
            return False
        rgba[~initial.cells] = 0
        self._colors = ColorSampleGrid(rgba=rgba)
        self._update_dominance()
        if self.state is SessionState.ACTIVE:
            self._refresh()
        logger.info("Colour samples refined, %d dominant colours", len(self._dominance.dominant_colors))
        return True

    def _update_dominance(self) -> None:
        if self._colors is None or self._grid is None:
            self._dominance = ColorDominance()
            return
        self._dominance = detect_dominant_colors(self._grid, self._colors.rgba)

    def _target_rgb(self) -> tuple[int, int, int] | None:
        dominance = self.config.color_dominance
        if not dominance.enabled:
            return None
        if dominance.target_color is not None:
            return parse_hex(dominance.target_color)
        return self._dominance.top_rgb

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def finished(self) -> bool:
        """True from the explosion until the shape is restored."""
        if self.state is SessionState.RESETTING:
            return self._reset_after_finish
        return self.state is SessionState.FINISHED

    @property
    def grid(self) -> OccupancyGrid | None:
        return self._grid

    @property
    def initial_grid(self) -> OccupancyGrid | None:
        return self._initial

    @property
    def colors(self) -> ColorSampleGrid | None:
        return self._colors

    @property
    def last_angle(self) -> float:
        return self._last_angle

    @property
    def coverage(self) -> float:
        """Fraction of the initial shape eaten so far."""
        if self._initial is None or self._grid is None:
            return 0.0
        total = self._initial.count()
        if total == 0:
            return 0.0
        return 1.0 - self._grid.count() / total

    @property
    def bites(self) -> list[Bite]:
        return list(self._bites)

    @property
    def next_bite(self) -> Bite | None:
        return self._next_bite

    @property
    def structure(self) -> StructurePreview:
        return self._structure

    @property
    def color_dominance(self) -> ColorDominance:
        return self._dominance

    @property
    def scale(self) -> float:
        """Brief shrink after every bite for the exterior animation."""
        if self._last_bite_at is not None and self.scheduler.now() - self._last_bite_at < SCALE_PULSE_MS:
            return SCALE_PULSE
        return 1.0

    @property
    def pending_crumbs(self) -> int:
        return len(self._pending_crumbs)

    def drain_crumbs(self) -> list[Crumb]:
        """Hand the spawned crumbs to the renderer and forget them."""
        crumbs, self._pending_crumbs = self._pending_crumbs, []
        return crumbs


def _decode_samples(source: str | bytes | Path, grid: OccupancyGrid, width: float, height: float) -> np.ndarray:
    image = load_image(source, max(1, math.ceil(width)), max(1, math.ceil(height)))
    return sample_image(image, grid, width, height).copy()
