"""YumYum shape-eating engine."""

from yumyum.engine.config import ColorDominanceConfig, EaterConfig
from yumyum.engine.records import Bite, Crumb
from yumyum.engine.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from yumyum.engine.session import EaterSession, SessionState
from yumyum.engine.silhouette import LineSilhouette, PathShape, RasterSilhouette, VectorSilhouette

__all__ = [
    "EaterConfig",
    "ColorDominanceConfig",
    "Bite",
    "Crumb",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "EaterSession",
    "SessionState",
    "PathShape",
    "VectorSilhouette",
    "RasterSilhouette",
    "LineSilhouette",
]
