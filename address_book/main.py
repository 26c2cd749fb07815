"""Application entrypoint for the address book service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from address_book.api.v1 import router as api_v1_router
from address_book.core.config import Settings, get_settings
from address_book.core.db import build_engine, build_sessionmaker, create_schema
from address_book.core.exceptions import register_exception_handlers
from address_book.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    The engine is created here and attached to ``app.state``; the lifespan
    creates the schema on startup and disposes the engine on shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        await create_schema(engine)
        logger.info("Address book started", extra={"version": settings.version})
        try:
            yield
        finally:
            await engine.dispose()

    application = FastAPI(
        title="Trala Address Book API", version=settings.version, lifespan=lifespan
    )
    application.state.settings = settings
    application.state.engine = engine
    application.state.sessionmaker = build_sessionmaker(engine)
    application.dependency_overrides[get_settings] = lambda: settings

    _configure_cors(application, settings)
    register_exception_handlers(application)

    application.include_router(api_v1_router, prefix="/v1")

    return application


def _configure_cors(application: FastAPI, settings: Settings) -> None:
    if not settings.cors_origins:
        return

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
