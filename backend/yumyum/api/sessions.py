"""/api/sessions: create, drive and inspect eating sessions."""

from __future__ import annotations

import asyncio
import logging

import numpy as np
from fastapi import APIRouter, Depends, HTTPException
from PIL import Image

from yumyum.config import settings
from yumyum.dependencies import SessionStore, SessionStoreFull, get_store
from yumyum.engine.grid import cell_count
from yumyum.engine.scheduler import AsyncioScheduler
from yumyum.engine.session import EaterSession
from yumyum.engine.silhouette import RasterSilhouette, Silhouette, VectorSilhouette
from yumyum.models.requests import (
    BiteRequest,
    CreateSessionRequest,
    EatRequest,
    RefineColorsRequest,
    SilhouetteSpec,
)
from yumyum.models.responses import (
    BiteModel,
    BiteResponse,
    CrumbModel,
    CrumbsResponse,
    DominantColorModel,
    EatResponse,
    RefineColorsResponse,
    SessionResponse,
    StructureModel,
)
from yumyum.svg import shapes
from yumyum.svg.parser import parse_svg
from yumyum.utils.images import load_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions")


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(req: CreateSessionRequest, store: SessionStore = Depends(get_store)) -> SessionResponse:
    try:
        config = req.config.to_config()
        silhouette, width, height = await _build_silhouette(req.silhouette)
    except (ValueError, OSError, Image.DecompressionBombError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    session = EaterSession(config=config, scheduler=AsyncioScheduler(), rng=np.random.default_rng(req.seed))
    try:
        session_id = store.add(session)
    except SessionStoreFull as e:
        raise HTTPException(status_code=429, detail=str(e)) from e

    if not session.load(silhouette, width, height):
        logger.info("Session %s has nothing to eat (%s silhouette)", session_id, req.silhouette.kind)
    return _session_response(session_id, session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, store: SessionStore = Depends(get_store)) -> SessionResponse:
    return _session_response(session_id, _require(store, session_id))


@router.post("/{session_id}/bite", response_model=BiteResponse)
async def bite(
    session_id: str,
    req: BiteRequest | None = None,
    store: SessionStore = Depends(get_store),
) -> BiteResponse:
    """Manual bite at (x, y), or the planned bite when no point is given."""
    session = _require(store, session_id)
    if req is not None and (req.x is None) != (req.y is None):
        raise HTTPException(status_code=400, detail="Give both x and y, or neither")
    if req is not None and req.x is not None:
        result = session.trigger_bite((req.x, req.y))
    else:
        result = session.step()
    return BiteResponse(
        bite=BiteModel.from_bite(result) if result is not None else None,
        session=_session_response(session_id, session),
    )


@router.post("/{session_id}/eat", response_model=EatResponse)
async def eat(session_id: str, req: EatRequest, store: SessionStore = Depends(get_store)) -> EatResponse:
    """Eat until the target fraction of the shape is gone."""
    session = _require(store, session_id)
    bites = session.eat_to(req.coverage, req.max_bites)
    return EatResponse(
        bites=[BiteModel.from_bite(b) for b in bites],
        session=_session_response(session_id, session),
    )


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset(session_id: str, store: SessionStore = Depends(get_store)) -> SessionResponse:
    session = _require(store, session_id)
    session.reset()
    return _session_response(session_id, session)


@router.post("/{session_id}/colors", response_model=RefineColorsResponse)
async def refine_colors(
    session_id: str,
    req: RefineColorsRequest,
    store: SessionStore = Depends(get_store),
) -> RefineColorsResponse:
    session = _require(store, session_id)
    refined = await session.refine_colors(req.image)
    return RefineColorsResponse(refined=refined, session=_session_response(session_id, session))


@router.get("/{session_id}/crumbs", response_model=CrumbsResponse)
async def crumbs(session_id: str, store: SessionStore = Depends(get_store)) -> CrumbsResponse:
    """Drain the crumbs spawned since the last call."""
    session = _require(store, session_id)
    return CrumbsResponse(crumbs=[CrumbModel.from_crumb(c) for c in session.drain_crumbs()])


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str, store: SessionStore = Depends(get_store)) -> None:
    if not store.remove(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")


def _require(store: SessionStore, session_id: str) -> EaterSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return session


async def _build_silhouette(spec: SilhouetteSpec) -> tuple[Silhouette, float, float]:
    if spec.kind == "svg":
        if not spec.svg:
            raise ValueError("kind=svg needs an svg document")
        parsed = parse_svg(spec.svg)
        width, height = spec.width or parsed.width, spec.height or parsed.height
        _check_domain(width, height)
        return parsed.silhouette, width, height

    if spec.kind == "image":
        if not spec.image:
            raise ValueError("kind=image needs an image data URI")
        _check_domain(spec.width or 0, spec.height or 0)
        w = round(spec.width) if spec.width else None
        h = round(spec.height) if spec.height else None
        image = await asyncio.to_thread(load_image, spec.image, w, h)
        width, height = spec.width or image.width, spec.height or image.height
        _check_domain(width, height)
        mask = VectorSilhouette.from_path(spec.d) if spec.d else None
        return RasterSilhouette(image=image, mask=mask), width, height

    if not spec.width or not spec.height:
        raise ValueError(f"kind={spec.kind} needs width and height")
    _check_domain(spec.width, spec.height)
    if spec.kind == "path":
        if not spec.d:
            raise ValueError("kind=path needs path data in d")
        return VectorSilhouette.from_path(spec.d, fill=spec.fill, fill_rule=spec.fill_rule), spec.width, spec.height
    if spec.kind == "circle":
        return shapes.circle(spec.width, spec.height, fill=spec.fill), spec.width, spec.height
    if spec.kind == "rounded_rect":
        silhouette = shapes.rounded_rect(spec.width, spec.height, spec.border_radius, fill=spec.fill)
        return silhouette, spec.width, spec.height
    return shapes.line(fill=spec.fill), spec.width, spec.height


def _check_domain(width: float, height: float) -> None:
    cells = cell_count(width, height)
    if cells > settings.max_grid_cells:
        raise ValueError(
            f"Domain {width:g}x{height:g} needs {cells} grid cells, limit is {settings.max_grid_cells}"
        )


def _session_response(session_id: str, session: EaterSession) -> SessionResponse:
    structure = session.structure
    next_bite = session.next_bite
    return SessionResponse(
        id=session_id,
        state=session.state.value,
        finished=session.finished,
        coverage=round(session.coverage, 4),
        scale=session.scale,
        width=session.width,
        height=session.height,
        bites=[BiteModel.from_bite(b) for b in session.bites],
        next_bite=BiteModel.from_bite(next_bite) if next_bite is not None else None,
        structure=StructureModel(
            islands=structure.islands,
            perimeter=structure.perimeter,
            tips=structure.tips,
        ),
        dominant_colors=[
            DominantColorModel(color=c.color, percentage=c.percentage)
            for c in session.color_dominance.dominant_colors
        ],
        pending_crumbs=session.pending_crumbs,
    )
