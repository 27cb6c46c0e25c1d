"""Pairing job for Icebreaker.

The job runs once per trigger: for every installed team it pairs the
opted-in members at random and sends both members of each pair a 1:1
pair-up card.
"""

import logging
import random
import time
from typing import Any, Final

from icebreaker.bot.notifier import ConversationNotifier
from icebreaker.bot.teams_bot import create_card_activity
from icebreaker.cards import create_pairup_card
from icebreaker.config.settings import Settings, get_settings
from icebreaker.matching.pairing import make_pairs
from icebreaker.models import PairUp, TeamInstallInfo
from icebreaker.storage import BotDataProvider
from icebreaker.utils.telemetry import SeverityLevel, TelemetrySink, get_telemetry

logger: Final = logging.getLogger(__name__)


class MatchingService:
    """Pairs the members of every installed team and notifies them.

    Attributes:
        data_provider: Store for teams and user opt-in status.
        notifier: Proactive messaging for team rosters and 1:1 messages.
        settings: Application settings.
        telemetry: Sink for traces, events and exceptions.

    Example:
        >>> service = MatchingService(data_provider, notifier)
        >>> notified = await service.make_pairs_and_notify()
    """

    def __init__(
        self,
        data_provider: BotDataProvider,
        notifier: ConversationNotifier,
        settings: Settings | None = None,
        telemetry: TelemetrySink | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the pairing job.

        Args:
            data_provider: Store for teams and user opt-in status.
            notifier: Proactive messaging.
            settings: Application settings. If None, uses get_settings().
            telemetry: Telemetry sink. If None, uses get_telemetry().
            rng: Random number generator for pairing. Defaults to a new one.
        """
        self.data_provider = data_provider
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.telemetry = telemetry or get_telemetry()
        self.rng = rng or random.Random()

    async def make_pairs_and_notify(self) -> int:
        """Pair the opted-in members of every installed team and notify them.

        Members without a stored record count as opted in. A failure in one
        team or one pair is tracked and does not stop the others.

        Returns:
            Number of pair-ups whose members were both notified.
        """
        start_time = time.time()
        self.telemetry.track_trace("Making pairups")

        opt_in_lookup = await self.data_provider.get_all_users_opt_in_status()
        if opt_in_lookup is None:
            self.telemetry.track_trace(
                "Could not read user opt-in status, skipping pairups", SeverityLevel.WARNING
            )
            return 0

        teams = await self.data_provider.get_installed_teams()
        self.telemetry.track_trace(f"Generating pairs for {len(teams)} teams")

        pairups_notified = 0
        for team in teams:
            try:
                pairups = await self.make_pairs_for_team(team, opt_in_lookup)
            except Exception as e:
                logger.error(f"Error pairing members of team {team.team_id}: {e}", exc_info=True)
                self.telemetry.track_exception(e, {"teamId": team.team_id})
                continue

            for pairup in pairups:
                if await self.notify_pair(pairup):
                    pairups_notified += 1

        elapsed_ms = (time.time() - start_time) * 1000
        self.telemetry.track_event(
            "ProcessedPairups",
            {
                "installedTeamsCount": len(teams),
                "pairsNotified": pairups_notified,
                "elapsedMs": round(elapsed_ms, 1),
            },
        )
        logger.info(f"Made {pairups_notified} pairups in {elapsed_ms:.0f}ms")
        return pairups_notified

    async def make_pairs_for_team(
        self, team: TeamInstallInfo, opt_in_lookup: dict[str, bool]
    ) -> list[PairUp]:
        """Pair the opted-in members of one team.

        Args:
            team: Installed team.
            opt_in_lookup: Opt-in status by user ID.

        Returns:
            Pair-ups for the team.
        """
        members = await self.notifier.get_team_members(team)
        opted_in = [member for member in members if opt_in_lookup.get(member.id, True)]
        self.telemetry.track_trace(
            f"Found {len(opted_in)} of {len(members)} members opted in for team {team.team_id}"
        )

        return [
            PairUp(team=team, first=first, second=second)
            for first, second in make_pairs(opted_in, self.rng)
        ]

    async def notify_pair(self, pairup: PairUp) -> bool:
        """Send both members of a pair the pair-up card.

        Args:
            pairup: Pair to notify.

        Returns:
            True if both members were notified.
        """
        try:
            await self._notify_member(pairup.team, pairup.first, pairup.second)
            await self._notify_member(pairup.team, pairup.second, pairup.first)
        except Exception as e:
            logger.error(f"Error notifying pair in team {pairup.team.team_id}: {e}", exc_info=True)
            self.telemetry.track_exception(
                e,
                {
                    "teamId": pairup.team.team_id,
                    "firstUserId": pairup.first.id,
                    "secondUserId": pairup.second.id,
                },
            )
            return False
        return True

    async def _notify_member(self, team: TeamInstallInfo, member: Any, partner: Any) -> None:
        card = create_pairup_card(
            bot_name=self.settings.bot_display_name,
            sender_name=member.name or member.id,
            recipient_name=partner.name or partner.id,
            recipient_upn=getattr(partner, "user_principal_name", None),
        )
        await self.notifier.send_to_user(
            team.tenant_id, team.service_url, member.id, create_card_activity(card)
        )
