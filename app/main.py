"""
Staff attendance service: application entry point.

This is the **only** file that assembles the app. Business rules live in
``services/``, persistence in ``models/`` and ``repositories/``, HTTP in
``api/``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.base import Base
from app.db.session import engine

# Ensure all models are imported so metadata.create_all can see them
from app.models.attendance import AttendanceRecord  # noqa: F401
from app.models.staff import Staff  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    logger.info(
        "%s v%s started (local offset %s, auto-checkout after %dh)",
        settings.PROJECT_NAME,
        settings.VERSION,
        settings.LOCAL_UTC_OFFSET,
        settings.AUTO_CHECKOUT_HOURS,
    )
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Staff attendance, tolerance scoring and auto-checkout",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    # Photos written by the local blob store
    application.mount("/media", StaticFiles(directory=settings.PHOTO_STORAGE_DIR, check_dir=False), name="media")

    return application


app = create_app()
