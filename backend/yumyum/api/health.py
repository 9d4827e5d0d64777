"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from yumyum.dependencies import SessionStore, get_store
from yumyum.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(store: SessionStore = Depends(get_store)) -> HealthResponse:
    return HealthResponse(status="ok", version="0.1.0", sessions=len(store))
