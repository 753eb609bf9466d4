"""
Application entry point.

Configures logging and error tracking, then builds the app through the factory.
"""

import logging

import sentry_sdk

from serenite.config.settings import get_settings
from serenite.core.app_factory import create_app
from serenite.core.shared.logger import configure_logging

settings = get_settings()
configure_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT, log_file=settings.LOG_FILE)

logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=False,
        environment=settings.ENVIRONMENT,
        release=f"serenite@{settings.VERSION}",
    )

app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "serenite.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG,
    )
