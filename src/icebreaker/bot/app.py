"""FastAPI application for the Icebreaker Teams bot.

This module sets up the FastAPI application with health endpoints, the Bot
Framework message endpoint and the pairing trigger.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from icebreaker.bot import messages
from icebreaker.bot.health import router as health_router
from icebreaker.bot.messages import router as messages_router
from icebreaker.config.settings import get_settings
from icebreaker.version import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Builds the bot services on startup and releases the data store client on
    shutdown. The data store itself is connected on first use.

    Args:
        _app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    logger.info(f"Starting Icebreaker v{__version__}")

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    logger.info(f"Storage type: {settings.storage_type}")
    logger.info(f"Teams App ID: {settings.microsoft_app_id}")
    logger.info(f"App Type: {settings.microsoft_app_type}")
    if not settings.process_now_enabled:
        logger.warning("PROCESS_NOW_KEY is not set, the pairing trigger is disabled")

    services = messages.initialize_bot_services(settings)
    logger.info("Startup completed successfully")

    yield

    logger.info("Shutting down Icebreaker")
    try:
        await services.data_provider.close()
    except Exception as e:
        logger.error(f"Error closing data store: {e}", exc_info=True)
    finally:
        messages.set_bot_services(None)

    logger.info("Shutdown completed successfully")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.

    Example:
        >>> app = create_app()
        >>> # Run with: uvicorn icebreaker.bot.app:app
    """
    app = FastAPI(
        title="Icebreaker",
        description="Microsoft Teams bot that pairs team members for regular meetups",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(_request: Any, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions globally."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        )

    app.include_router(health_router, tags=["health"])
    app.include_router(messages_router, prefix="/api", tags=["messages"])

    return app


app = create_app()
