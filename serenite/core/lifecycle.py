"""
Application lifecycle management using the FastAPI lifespan pattern.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from serenite.config.settings import get_settings
from serenite.database.async_db import dispose_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    The database engine is created on first use; shutdown disposes it.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.PROJECT_NAME} {settings.VERSION} ({settings.ENVIRONMENT})")
    if settings.SENTRY_DSN is None:
        logger.warning("SENTRY_DSN not set - error tracking disabled")

    yield

    await dispose_engine()
    logger.info("Application shutdown completed")
