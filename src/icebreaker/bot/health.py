"""Health check endpoints for Icebreaker.

This module provides health check endpoints for monitoring the bot's status
and readiness for handling requests.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from icebreaker.bot import messages
from icebreaker.storage import IcebreakerBotDataProvider
from icebreaker.version import __version__

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthStatus(BaseModel):
    """Health check response model.

    Attributes:
        status: Overall health status (healthy, degraded, unhealthy).
        version: Application version.
        timestamp: Current timestamp.
        checks: Individual component health checks.
    """

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=UTC), description="Current timestamp"
    )
    checks: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Individual component health checks"
    )


class ReadinessStatus(BaseModel):
    """Readiness check response model."""

    ready: bool = Field(..., description="Service readiness status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=UTC), description="Current timestamp"
    )
    components: dict[str, bool] = Field(default_factory=dict, description="Component readiness")


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Health check endpoint.

    Reports the bot services and the data store. The store is initialized
    lazily, so a store that has not been used yet is reported as
    ``pending`` and the overall status is ``degraded``.

    Returns:
        Health status with component checks.

    Example:
        >>> response = client.get("/health")
        >>> assert response.json()["status"] in ("healthy", "degraded")
    """
    checks: dict[str, dict[str, Any]] = {}

    if not messages.is_initialized():
        checks["bot_services"] = {
            "status": "unhealthy",
            "message": "Bot services are not initialized",
        }
    else:
        services = messages.get_bot_services()
        checks["bot_services"] = {
            "status": "healthy",
            "storage_type": services.settings.storage_type,
        }
        checks["data_store"] = _data_store_check(services.data_provider)

    statuses = [check["status"] for check in checks.values()]
    if "unhealthy" in statuses:
        overall_status = "unhealthy"
    elif "pending" in statuses:
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    return HealthStatus(status=overall_status, version=__version__, checks=checks)


@router.get("/health/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check endpoint.

    Returns:
        Simple status message.
    """
    return {"status": "alive", "version": __version__}


@router.get("/health/ready")
async def readiness_check(response: Response) -> ReadinessStatus:
    """Readiness check endpoint.

    The service is ready once bot services are registered and the data store
    has not failed to initialize.

    Args:
        response: FastAPI response object for setting status code.

    Returns:
        Readiness status with component checks.
    """
    components: dict[str, bool] = {"bot_services": messages.is_initialized()}

    if components["bot_services"]:
        data_provider = messages.get_bot_services().data_provider
        components["data_store"] = not data_provider.is_failed
    else:
        components["data_store"] = False

    ready = all(components.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessStatus(ready=ready, version=__version__, components=components)


@router.get("/version", status_code=status.HTTP_200_OK)
async def version_info() -> dict[str, str]:
    """Version information endpoint."""
    return {
        "version": __version__,
        "name": "Icebreaker",
        "description": "Microsoft Teams bot that pairs team members for regular meetups",
    }


def _data_store_check(data_provider: IcebreakerBotDataProvider) -> dict[str, Any]:
    if data_provider.is_failed:
        return {"status": "unhealthy", "message": "Data store initialization failed"}
    if data_provider.is_initialized:
        return {"status": "healthy"}
    return {"status": "pending", "message": "Data store not initialized yet"}
