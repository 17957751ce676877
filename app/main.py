from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.station_data import build_default_service
from settings import __version__


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_service()
    try:
        yield
    finally:
        service.close()
        build_default_service.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="OpenSenseMap Block Proxy",
        description="Same-origin proxy that caches and normalizes openSenseMap box readings.",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
