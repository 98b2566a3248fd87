from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.monitor import build_default_monitor
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    monitor = build_default_monitor()
    logger.info(
        "Canal ice monitor started",
        extra={"backend": monitor.readings.store.backend},
    )
    try:
        yield
    finally:
        monitor.shutdown()
        build_default_monitor.cache_clear()
        logger.info("Canal ice monitor stopped")


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Canal Ice Monitor",
        description="Read-only ice safety dashboard over per-location sensor readings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    static_dir = Path(__file__).resolve().parent / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app


def run() -> None:
    """Serve the API and dashboard with uvicorn on the configured port."""
    settings = get_settings()
    configure_logging()
    logger.info("Dashboard available at http://localhost:%s", settings.port)
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


app = create_app()
