"""Message routing and Bot Framework endpoints for Icebreaker.

This module provides the FastAPI endpoints for receiving Bot Framework
activities from Microsoft Teams and for triggering the pairing job, plus the
registry of bot services shared by those endpoints.
"""

import hmac
import json
import logging
from dataclasses import dataclass
from typing import Any

from botbuilder.schema import Activity
from fastapi import APIRouter, BackgroundTasks, Header, HTTPException, Request, Response, status

from icebreaker.bot.adapter import IcebreakerAdapter, create_adapter
from icebreaker.bot.notifier import ConversationNotifier
from icebreaker.bot.teams_bot import IcebreakerBot
from icebreaker.config.secrets import SecretsHelper, SettingsSecretsHelper
from icebreaker.config.settings import Settings, get_settings
from icebreaker.matching.service import MatchingService
from icebreaker.storage import IcebreakerBotDataProvider, create_data_provider
from icebreaker.utils.telemetry import TelemetrySink, get_telemetry

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class BotServices:
    """Components shared by the HTTP endpoints.

    Attributes:
        settings: Application settings.
        secrets: Secrets helper.
        telemetry: Telemetry sink.
        data_provider: Store for teams and users.
        adapter: Bot Framework adapter.
        notifier: Proactive messaging.
        bot: Teams activity handler.
        matching_service: Pairing job.
    """

    settings: Settings
    secrets: SecretsHelper
    telemetry: TelemetrySink
    data_provider: IcebreakerBotDataProvider
    adapter: IcebreakerAdapter
    notifier: ConversationNotifier
    bot: IcebreakerBot
    matching_service: MatchingService


_services: BotServices | None = None


def initialize_bot_services(settings: Settings | None = None) -> BotServices:
    """Initialize or reinitialize bot services.

    The data store is not contacted here; it is initialized on first use.

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        The initialized services.

    Example:
        >>> services = initialize_bot_services(custom_settings)
    """
    global _services  # noqa: PLW0603

    settings = settings or get_settings()
    telemetry = get_telemetry()
    data_provider = create_data_provider(settings, telemetry)
    adapter = create_adapter(settings, telemetry)
    notifier = ConversationNotifier(adapter, settings)

    _services = BotServices(
        settings=settings,
        secrets=SettingsSecretsHelper(settings),
        telemetry=telemetry,
        data_provider=data_provider,
        adapter=adapter,
        notifier=notifier,
        bot=IcebreakerBot(
            data_provider=data_provider,
            notifier=notifier,
            settings=settings,
            telemetry=telemetry,
        ),
        matching_service=MatchingService(
            data_provider=data_provider,
            notifier=notifier,
            settings=settings,
            telemetry=telemetry,
        ),
    )

    logger.info("Bot services initialized")
    return _services


def set_bot_services(services: BotServices | None) -> None:
    """Replace the registered bot services (None clears them)."""
    global _services  # noqa: PLW0603
    _services = services


def get_bot_services() -> BotServices:
    """Get the registered bot services.

    Returns:
        The registered services.

    Raises:
        HTTPException: 503 if the services have not been initialized.
    """
    if _services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Bot services are not initialized",
        )
    return _services


def is_initialized() -> bool:
    """Whether bot services have been registered."""
    return _services is not None


@router.post("/messages", status_code=status.HTTP_200_OK)
async def handle_messages(
    request: Request,
    authorization: str = Header("", description="Authorization header from Bot Framework"),
) -> Response:
    """Handle incoming activities from Microsoft Teams.

    Args:
        request: FastAPI request object containing the activity.
        authorization: Authorization header for Bot Framework authentication.

    Returns:
        Invoke response body, or an empty 200 response.

    Raises:
        HTTPException: If authentication fails or the request is invalid.
    """
    services = get_bot_services()
    try:
        body = await request.json()
        activity = Activity().deserialize(body)

        logger.info(
            f"Received activity: type={activity.type}, "
            f"from={activity.from_property.id if activity.from_property else 'Unknown'}"
        )

        response = await services.adapter.process_activity(
            authorization, activity, services.bot.on_turn
        )

        if response:
            return Response(
                content=_serialize_body(response.body),
                status_code=response.status,
                media_type="application/json",
            )

        return Response(status_code=status.HTTP_200_OK)

    except ValueError as e:
        logger.error(f"Invalid request: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request: {e!s}",
        ) from e
    except PermissionError as e:
        logger.error(f"Authentication failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
        ) from e
    except Exception as e:
        logger.error(f"Error processing activity: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e


@router.post("/processnow/{key}", status_code=status.HTTP_202_ACCEPTED)
async def process_now(key: str, background_tasks: BackgroundTasks) -> dict[str, str]:
    """Start the pairing job.

    Called by an external scheduler. The job runs in the background after
    the response is sent.

    Args:
        key: Shared key that must match the configured process-now key.
        background_tasks: FastAPI background task queue.

    Returns:
        Acceptance status.

    Raises:
        HTTPException: 503 if the trigger is disabled, 401 if the key is wrong.

    Example:
        POST /api/processnow/<key>
        Response: {"status": "accepted", "message": "Pairing started"}
    """
    services = get_bot_services()

    expected_key = services.secrets.process_now_key
    if not expected_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pairing trigger is disabled",
        )

    if not hmac.compare_digest(key.encode(), expected_key.encode()):
        logger.warning("Rejected pairing trigger with invalid key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid key",
        )

    background_tasks.add_task(run_pairing_job, services.matching_service)
    logger.info("Pairing job scheduled")
    return {"status": "accepted", "message": "Pairing started"}


async def run_pairing_job(matching_service: MatchingService) -> int:
    """Run the pairing job, logging instead of raising on failure.

    Args:
        matching_service: Pairing job to run.

    Returns:
        Number of pair-ups notified (0 on failure).
    """
    try:
        return await matching_service.make_pairs_and_notify()
    except Exception as e:
        logger.error(f"Pairing job failed: {e}", exc_info=True)
        matching_service.telemetry.track_exception(e, {"operation": "make_pairs_and_notify"})
        return 0


def _serialize_body(body: Any) -> str:
    return json.dumps(body) if body is not None else ""
