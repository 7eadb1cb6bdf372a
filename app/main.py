from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.compliance import build_default_engine
from services.dashboard import build_default_dashboard

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_dashboard()
    logger.info(
        "Compliance engine ready (target=%d min, low flow < %s)",
        service.engine.target_minutes,
        service.engine.low_flow_threshold,
    )
    try:
        yield
    finally:
        build_default_dashboard.cache_clear()
        build_default_engine.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Valve Compliance Monitor",
        description="Session detection, compliance scoring and live diagnostics for valve telemetry.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
