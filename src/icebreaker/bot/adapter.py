"""Bot Framework adapter for Microsoft Teams integration.

This module provides the adapter for handling Bot Framework activities,
authentication, and error handling for Microsoft Teams.
"""

import logging

from botbuilder.core import MessageFactory, TurnContext
from botbuilder.integration.aiohttp import CloudAdapter, ConfigurationBotFrameworkAuthentication
from botframework.connector.auth import AuthenticationConfiguration

from icebreaker.config.settings import Settings, get_settings
from icebreaker.resources import ERROR_OCCURRED
from icebreaker.utils.telemetry import TelemetrySink, get_telemetry

logger = logging.getLogger(__name__)


class BotFrameworkConfiguration:
    """Bot Framework credentials in the attribute layout the SDK reads.

    ``ConfigurationBotFrameworkAuthentication`` looks up ``APP_ID``,
    ``APP_PASSWORD``, ``APP_TYPE`` and ``APP_TENANTID`` on its configuration.
    """

    def __init__(self, settings: Settings) -> None:
        self.APP_ID = settings.microsoft_app_id
        self.APP_PASSWORD = settings.microsoft_app_password
        self.APP_TYPE = settings.microsoft_app_type
        self.APP_TENANTID = settings.microsoft_app_tenant_id


class IcebreakerAdapter(CloudAdapter):  # type: ignore[misc]
    """Custom Bot Framework adapter for Icebreaker.

    This adapter handles authentication and turn errors for Microsoft Teams
    conversations.

    Attributes:
        settings: Application settings for authentication.
        telemetry: Sink receiving turn errors.

    Example:
        >>> settings = Settings()
        >>> adapter = IcebreakerAdapter(settings)
        >>> await adapter.process_activity(auth_header, activity, bot.on_turn)
    """

    def __init__(self, settings: Settings, telemetry: TelemetrySink | None = None) -> None:
        """Initialize the Bot Framework adapter.

        Args:
            settings: Application settings with Teams credentials.
            telemetry: Telemetry sink. If None, uses get_telemetry().
        """
        self.settings = settings
        self.telemetry = telemetry or get_telemetry()

        bot_framework_authentication = ConfigurationBotFrameworkAuthentication(
            BotFrameworkConfiguration(settings),
            auth_configuration=AuthenticationConfiguration(),
        )

        super().__init__(bot_framework_authentication)

        self.on_turn_error = self._on_error

        logger.info("Bot Framework adapter initialized")

    async def _on_error(self, context: TurnContext, error: Exception) -> None:
        """Handle errors that occur during activity processing.

        Args:
            context: Turn context for the current activity.
            error: Exception that was raised.
        """
        logger.error(f"Error processing activity: {error}", exc_info=True)
        self.telemetry.track_exception(
            error,
            {"activityType": context.activity.type if context.activity else None},
        )

        try:
            await context.send_activity(MessageFactory.text(ERROR_OCCURRED))
        except Exception as send_error:
            logger.error(f"Error sending error message: {send_error}", exc_info=True)


def create_adapter(
    settings: Settings | None = None, telemetry: TelemetrySink | None = None
) -> IcebreakerAdapter:
    """Create and configure a Bot Framework adapter.

    Args:
        settings: Application settings. If None, uses get_settings().
        telemetry: Telemetry sink. If None, uses get_telemetry().

    Returns:
        Configured IcebreakerAdapter instance.
    """
    return IcebreakerAdapter(settings or get_settings(), telemetry=telemetry)
