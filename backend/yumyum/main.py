"""FastAPI app factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from yumyum.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.yumyum_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Cancel pending timers so nothing fires into a closed loop.
    app.state.sessions.clear()


def create_app() -> FastAPI:
    from yumyum.api.router import api_router
    from yumyum.dependencies import SessionStore

    app = FastAPI(
        title="YumYum",
        description="Shape-eating engine: bite planning and grid erosion over SVG and raster silhouettes",
        version="0.1.0",
        lifespan=_lifespan,
    )
    app.state.sessions = SessionStore(max_sessions=settings.max_sessions)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()
