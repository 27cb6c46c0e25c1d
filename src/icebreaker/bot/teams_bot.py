"""Main bot for the Icebreaker Microsoft Teams integration.

This module provides the IcebreakerBot class, which records installations,
welcomes new members and handles opt-in / opt-out requests.
"""

import logging
import re
from typing import Any, Final

from botbuilder.core import CardFactory, MessageFactory, TurnContext
from botbuilder.core.teams import TeamsActivityHandler
from botbuilder.schema import Activity, Attachment
from botbuilder.schema.teams import TeamInfo, TeamsChannelAccount

from icebreaker.bot.notifier import ConversationNotifier
from icebreaker.cards import (
    create_opt_in_confirmation_card,
    create_opt_out_confirmation_card,
    create_team_welcome_card,
    create_user_welcome_card,
)
from icebreaker.config.settings import Settings, get_settings
from icebreaker.constants import ACTION_OPT_IN, ACTION_OPT_OUT
from icebreaker.models import TeamInstallInfo
from icebreaker.resources import ERROR_OCCURRED, I_DONT_KNOW
from icebreaker.storage import BotDataProvider, RecordNotFoundError
from icebreaker.utils.telemetry import TelemetrySink, get_telemetry

logger: Final = logging.getLogger(__name__)

DEFAULT_TEAM_NAME: Final[str] = "your team"

MENTION_PATTERN: Final = re.compile(r"<at>.*?</at>", re.IGNORECASE)


def create_card_activity(card: dict[str, Any]) -> Activity:
    """Wrap an adaptive card in a message activity.

    Args:
        card: Adaptive card JSON content.

    Returns:
        Message activity with the card attached.
    """
    attachment: Attachment = CardFactory.adaptive_card(card)
    return MessageFactory.attachment(attachment)


class IcebreakerBot(TeamsActivityHandler):  # type: ignore[misc]
    """Teams activity handler for Icebreaker.

    Attributes:
        data_provider: Store for team installations and users.
        notifier: Proactive messaging used to welcome new members.
        settings: Application settings.
        telemetry: Sink for traces and exceptions.

    Example:
        >>> bot = IcebreakerBot(data_provider=provider, notifier=notifier)
        >>> await adapter.process_activity(auth_header, activity, bot.on_turn)
    """

    def __init__(
        self,
        data_provider: BotDataProvider,
        notifier: ConversationNotifier | None = None,
        settings: Settings | None = None,
        telemetry: TelemetrySink | None = None,
    ) -> None:
        """Initialize the bot.

        Args:
            data_provider: Store for team installations and users.
            notifier: Proactive messaging. Welcome messages to new members are
                skipped if None.
            settings: Application settings. If None, uses get_settings().
            telemetry: Telemetry sink. If None, uses get_telemetry().
        """
        super().__init__()
        self.data_provider = data_provider
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.telemetry = telemetry or get_telemetry()

        logger.info("IcebreakerBot initialized")

    @property
    def bot_name(self) -> str:
        return self.settings.bot_display_name

    # Teams conversation update handlers

    async def on_teams_members_added(  # type: ignore[override]
        self,
        teams_members_added: list[TeamsChannelAccount],
        team_info: TeamInfo | None,
        turn_context: TurnContext,
    ) -> None:
        """Handle members added to a conversation.

        When the bot itself is added to a team, the installation is saved
        and a welcome card is posted to the team. Other members added to a
        team get a 1:1 welcome card.

        Args:
            teams_members_added: Members that were added.
            team_info: Team the conversation belongs to, if any.
            turn_context: Bot Framework turn context.
        """
        activity = turn_context.activity
        try:
            for member in teams_members_added:
                if member.id == activity.recipient.id:
                    await self._handle_bot_installed(turn_context, team_info)
                elif team_info is not None:
                    await self._welcome_user(turn_context, member, team_info)
        except Exception as e:
            logger.error(f"Error handling members added: {e}", exc_info=True)
            self.telemetry.track_exception(e, {"handler": "on_teams_members_added"})

    async def on_teams_members_removed(  # type: ignore[override]
        self,
        teams_members_removed: list[TeamsChannelAccount],
        team_info: TeamInfo | None,
        turn_context: TurnContext,
    ) -> None:
        """Handle members removed from a conversation.

        When the bot itself is removed from a team, the installation is deleted.

        Args:
            teams_members_removed: Members that were removed.
            team_info: Team the conversation belongs to, if any.
            turn_context: Bot Framework turn context.
        """
        activity = turn_context.activity
        for member in teams_members_removed:
            if member.id != activity.recipient.id:
                logger.info(f"Member removed from team: {member.id}")
                continue

            if team_info is None:
                logger.info("Bot removed from a conversation outside a team")
                continue

            team = self._team_from_activity(activity, team_info)
            self.telemetry.track_trace(f"Bot removed from team {team.team_id}")
            try:
                await self.data_provider.update_team_install_status(team, installed=False)
            except RecordNotFoundError:
                logger.warning(f"Team {team.team_id} was not recorded as installed")
            except Exception as e:
                logger.error(f"Error removing installation: {e}", exc_info=True)
                self.telemetry.track_exception(e, {"handler": "on_teams_members_removed"})

    # Message handlers

    async def on_message_activity(self, turn_context: TurnContext) -> None:
        """Handle 1:1 messages and card submissions.

        ``optout`` and ``optin`` (typed or submitted from a card) update the
        sender's opt-in status; anything else gets a "don't understand" reply.

        Args:
            turn_context: Bot Framework turn context.
        """
        activity = turn_context.activity
        try:
            command = self._get_command(activity)

            if command == ACTION_OPT_OUT:
                await self._set_opt_in_status(turn_context, opted_in=False)
                await turn_context.send_activity(
                    create_card_activity(create_opt_out_confirmation_card())
                )
            elif command == ACTION_OPT_IN:
                await self._set_opt_in_status(turn_context, opted_in=True)
                await turn_context.send_activity(
                    create_card_activity(create_opt_in_confirmation_card())
                )
            else:
                await turn_context.send_activity(MessageFactory.text(I_DONT_KNOW))

        except Exception as e:
            logger.error(f"Error handling message activity: {e}", exc_info=True)
            self.telemetry.track_exception(e, {"handler": "on_message_activity"})
            await turn_context.send_activity(MessageFactory.text(ERROR_OCCURRED))

    # Private helper methods

    async def _handle_bot_installed(
        self, turn_context: TurnContext, team_info: TeamInfo | None
    ) -> None:
        activity = turn_context.activity
        if team_info is None:
            logger.info("Bot added to a conversation outside a team, nothing to record")
            return

        team = self._team_from_activity(activity, team_info)
        self.telemetry.track_trace(f"Bot installed to team {team.team_id}")
        await self.data_provider.update_team_install_status(team, installed=True)

        card = create_team_welcome_card(self.bot_name, team_info.name or DEFAULT_TEAM_NAME)
        await turn_context.send_activity(create_card_activity(card))

    async def _welcome_user(
        self,
        turn_context: TurnContext,
        member: TeamsChannelAccount,
        team_info: TeamInfo,
    ) -> None:
        if self.notifier is None:
            logger.debug(f"No notifier configured, skipping welcome for {member.id}")
            return

        activity = turn_context.activity
        card = create_user_welcome_card(
            self.bot_name,
            member.name or member.id,
            team_info.name or DEFAULT_TEAM_NAME,
        )
        await self.notifier.send_to_user(
            self._get_tenant_id(activity),
            activity.service_url,
            member.id,
            create_card_activity(card),
        )
        logger.info(f"Sent welcome message to {member.id}")

    async def _set_opt_in_status(self, turn_context: TurnContext, opted_in: bool) -> None:
        activity = turn_context.activity
        user_id = activity.from_property.id
        await self.data_provider.set_user_info(
            self._get_tenant_id(activity), user_id, opted_in, activity.service_url
        )
        self.telemetry.track_trace(f"User {user_id} set opted_in={opted_in}")

    def _team_from_activity(self, activity: Activity, team_info: TeamInfo) -> TeamInstallInfo:
        return TeamInstallInfo(
            team_id=team_info.id,
            tenant_id=self._get_tenant_id(activity),
            service_url=activity.service_url,
            installer_name=activity.from_property.name if activity.from_property else None,
        )

    @staticmethod
    def _get_tenant_id(activity: Activity) -> str:
        """Get the tenant ID from the conversation or the Teams channel data."""
        if activity.conversation and activity.conversation.tenant_id:
            return str(activity.conversation.tenant_id)

        channel_data = activity.channel_data
        if isinstance(channel_data, dict):
            tenant = channel_data.get("tenant") or {}
            if tenant.get("id"):
                return str(tenant["id"])

        return ""

    @staticmethod
    def _get_command(activity: Activity) -> str:
        """Get the command from a card submission or the message text.

        Args:
            activity: Incoming message activity.

        Returns:
            Lower-cased command with @mentions removed.
        """
        if isinstance(activity.value, dict) and activity.value.get("action"):
            return str(activity.value["action"]).strip().lower()

        clean_text = MENTION_PATTERN.sub("", activity.text or "")
        return clean_text.strip().lower()
