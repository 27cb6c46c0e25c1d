"""Proactive messaging for Icebreaker.

The pairing job and the welcome flow talk to users and teams outside of an
incoming turn. This module wraps the adapter calls that continue a team
conversation or open a 1:1 conversation with a user.
"""

import logging
from typing import Any, Final

from botbuilder.core import BotAdapter, TurnContext
from botbuilder.core.teams import TeamsInfo
from botbuilder.schema import (
    Activity,
    ChannelAccount,
    ConversationAccount,
    ConversationParameters,
    ConversationReference,
)
from botbuilder.schema.teams import TeamsChannelAccount

from icebreaker.config.settings import Settings, get_settings
from icebreaker.constants import TEAMS_CHANNEL_ID
from icebreaker.models import TeamInstallInfo

logger: Final = logging.getLogger(__name__)


class ConversationNotifier:
    """Sends proactive messages to teams and users.

    Attributes:
        adapter: Bot Framework adapter used to start turns.
        settings: Application settings (bot app ID).

    Example:
        >>> notifier = ConversationNotifier(adapter)
        >>> members = await notifier.get_team_members(team)
        >>> await notifier.send_to_user(team.tenant_id, team.service_url, members[0].id, activity)
    """

    def __init__(self, adapter: BotAdapter, settings: Settings | None = None) -> None:
        """Initialize the notifier.

        Args:
            adapter: Bot Framework adapter.
            settings: Application settings. If None, uses get_settings().
        """
        self.adapter = adapter
        self.settings = settings or get_settings()

    @property
    def bot_app_id(self) -> str:
        return self.settings.microsoft_app_id

    def team_reference(self, team: TeamInstallInfo) -> ConversationReference:
        """Build a reference to the team's general channel conversation.

        Args:
            team: Installed team.

        Returns:
            Conversation reference for proactive turns in the team.
        """
        return ConversationReference(
            channel_id=TEAMS_CHANNEL_ID,
            service_url=team.service_url,
            bot=ChannelAccount(id=self.bot_app_id),
            conversation=ConversationAccount(
                id=team.team_id,
                is_group=True,
                conversation_type="channel",
                tenant_id=team.tenant_id,
            ),
        )

    async def get_team_members(self, team: TeamInstallInfo) -> list[TeamsChannelAccount]:
        """Get every member of a team, following continuation tokens.

        Args:
            team: Installed team.

        Returns:
            Team members.
        """
        members: list[TeamsChannelAccount] = []

        async def callback(turn_context: TurnContext) -> None:
            continuation_token: str | None = None
            while True:
                result = await TeamsInfo.get_paged_team_members(
                    turn_context, team.team_id, continuation_token
                )
                members.extend(result.members or [])
                continuation_token = result.continuation_token
                if not continuation_token:
                    break

        await self.adapter.continue_conversation(
            self.team_reference(team), callback, self.bot_app_id
        )
        logger.info(f"Found {len(members)} members in team {team.team_id}")
        return members

    async def send_to_team(self, team: TeamInstallInfo, activity: Activity | str) -> None:
        """Post a message to the team's general channel.

        Args:
            team: Installed team.
            activity: Message text or activity to send.
        """

        async def callback(turn_context: TurnContext) -> None:
            await turn_context.send_activity(activity)

        await self.adapter.continue_conversation(
            self.team_reference(team), callback, self.bot_app_id
        )
        logger.info(f"Sent proactive message to team {team.team_id}")

    async def send_to_user(
        self,
        tenant_id: str,
        service_url: str,
        user_id: str,
        activity: Activity | str,
    ) -> None:
        """Open (or reuse) a 1:1 conversation with a user and send a message.

        Args:
            tenant_id: Azure AD tenant of the user.
            service_url: Bot Framework service URL for the tenant.
            user_id: Teams user ID (29:xxx).
            activity: Message text or activity to send.
        """
        parameters = ConversationParameters(
            is_group=False,
            bot=ChannelAccount(id=self.bot_app_id),
            members=[ChannelAccount(id=user_id)],
            tenant_id=tenant_id,
            channel_data=self._tenant_channel_data(tenant_id),
        )

        async def callback(turn_context: TurnContext) -> None:
            await turn_context.send_activity(activity)

        await self.adapter.create_conversation(
            bot_app_id=self.bot_app_id,
            callback=callback,
            conversation_parameters=parameters,
            channel_id=TEAMS_CHANNEL_ID,
            service_url=service_url,
            audience=None,
        )
        logger.info(f"Sent proactive message to user {user_id}")

    @staticmethod
    def _tenant_channel_data(tenant_id: str) -> dict[str, Any]:
        return {"tenant": {"id": tenant_id}}
