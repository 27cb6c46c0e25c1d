"""Bot data provider for team installation and user records.

This module provides the store operations used by the bot and the pairing
job. Every operation first awaits the one-time store initialization; an
initialization failure is raised by every operation for the lifetime of the
provider.

Read operations report errors to telemetry and return an empty or absent
result. Write operations report errors to telemetry and re-raise them.
"""

import logging
from abc import abstractmethod
from typing import Any, Final, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from icebreaker.config.settings import Settings, get_settings
from icebreaker.constants import OPT_IN_STATUS_FIELDS
from icebreaker.models import TeamInstallInfo, UserInfo, UserOptInStatus
from icebreaker.storage.initializer import (
    CosmosStoreInitializer,
    InMemoryStoreInitializer,
    StoreContainers,
    StoreInitializer,
)
from icebreaker.utils.lazy import AsyncLazy
from icebreaker.utils.telemetry import TelemetrySink, get_telemetry

logger: Final = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class BotDataProvider(Protocol):
    """Protocol for the bot's persistent state."""

    @abstractmethod
    async def update_team_install_status(self, team: TeamInstallInfo, installed: bool) -> None:
        """Save the team if installed, delete it otherwise."""
        ...

    @abstractmethod
    async def get_installed_teams(self) -> list[TeamInstallInfo]:
        """List the teams the bot is installed in."""
        ...

    @abstractmethod
    async def get_installed_team(self, team_id: str) -> TeamInstallInfo | None:
        """Get one installed team."""
        ...

    @abstractmethod
    async def get_user_info(self, user_id: str) -> UserInfo | None:
        """Get the stored information about a user."""
        ...

    @abstractmethod
    async def get_all_users_opt_in_status(self) -> dict[str, bool] | None:
        """Get the opt-in status of every stored user."""
        ...

    @abstractmethod
    async def set_user_info(
        self, tenant_id: str, user_id: str, opted_in: bool, service_url: str
    ) -> None:
        """Store the information about a user."""
        ...


class IcebreakerBotDataProvider:
    """Data provider storing teams and users in two document containers.

    Attributes:
        initializer: Routine producing the store containers.
        telemetry: Sink for traces and exceptions.
        page_size: Maximum documents per query page.

    Example:
        >>> provider = IcebreakerBotDataProvider(InMemoryStoreInitializer())
        >>> await provider.set_user_info("tenant", "29:user", True, "https://smba.example")
        >>> user = await provider.get_user_info("29:user")
    """

    def __init__(
        self,
        initializer: StoreInitializer,
        telemetry: TelemetrySink | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the provider without connecting to the store.

        Args:
            initializer: Store initializer run on first use.
            telemetry: Telemetry sink. If None, uses get_telemetry().
            settings: Application settings. If None, uses get_settings().
        """
        self.initializer = initializer
        self.telemetry = telemetry or get_telemetry()
        self.page_size = (settings or get_settings()).cosmos_query_page_size
        self._containers: AsyncLazy[StoreContainers] = AsyncLazy(
            initializer.initialize, name="data store"
        )

    @property
    def is_initialized(self) -> bool:
        """Whether the store has been initialized successfully."""
        return self._containers.is_ready

    @property
    def is_failed(self) -> bool:
        """Whether store initialization failed. Failures are not retried."""
        return self._containers.is_failed

    async def update_team_install_status(self, team: TeamInstallInfo, installed: bool) -> None:
        """Update team installation status in the store.

        If the bot is installed the team record is upserted (full replace),
        otherwise the record for the team is deleted.

        Args:
            team: Team installation info.
            installed: Whether the bot is installed in the team.

        Raises:
            RecordNotFoundError: If deleting a team that is not stored.
            StoreError: If the write fails.
        """
        containers = await self._ensure_initialized()

        try:
            if installed:
                await containers.teams.upsert_item(team.to_document())
                logger.info(f"Saved installation: {team}")
            else:
                await containers.teams.delete_item(team.team_id)
                logger.info(f"Removed installation for team {team.team_id}")
        except Exception as e:
            self.telemetry.track_exception(
                e, {"operation": "update_team_install_status", "teamId": team.team_id}
            )
            raise

    async def get_installed_teams(self) -> list[TeamInstallInfo]:
        """Get the list of teams to which the bot was installed.

        Returns:
            Installed teams. Empty if none are stored or if the query fails.
            Documents that do not form a valid record are reported and skipped.
        """
        containers = await self._ensure_initialized()

        installed_teams: list[TeamInstallInfo] = []
        try:
            async for page in containers.teams.query_pages(page_size=self.page_size):
                for document in page:
                    team = self._validate_record(
                        TeamInstallInfo, document, "get_installed_teams"
                    )
                    if team is not None:
                        installed_teams.append(team)
        except Exception as e:
            self.telemetry.track_exception(e, {"operation": "get_installed_teams"})
            return []

        return installed_teams

    async def get_installed_team(self, team_id: str) -> TeamInstallInfo | None:
        """Get the team that the bot has been installed to.

        Args:
            team_id: Team ID.

        Returns:
            The team, or None if it is not stored or the read fails.
        """
        containers = await self._ensure_initialized()

        try:
            document = await containers.teams.read_item(team_id)
            return TeamInstallInfo.from_document(document)
        except Exception as e:
            self.telemetry.track_exception(e, {"operation": "get_installed_team", "teamId": team_id})
            return None

    async def get_user_info(self, user_id: str) -> UserInfo | None:
        """Get the stored information about the given user.

        Args:
            user_id: Teams user ID.

        Returns:
            The user, or None if it is not stored or the read fails.
        """
        containers = await self._ensure_initialized()

        try:
            document = await containers.users.read_item(user_id)
            return UserInfo.from_document(document)
        except Exception as e:
            self.telemetry.track_exception(e, {"operation": "get_user_info", "userId": user_id})
            return None

    async def get_all_users_opt_in_status(self) -> dict[str, bool] | None:
        """Get the opt-in status of every stored user.

        Only the ``id`` and ``optedIn`` fields are read.

        Returns:
            Mapping of user ID to opt-in status, or None if the query fails.
            Documents that do not form a valid record are reported and skipped.
        """
        containers = await self._ensure_initialized()

        try:
            lookup: dict[str, bool] = {}
            async for page in containers.users.query_pages(
                fields=OPT_IN_STATUS_FIELDS, page_size=self.page_size
            ):
                for document in page:
                    status = self._validate_record(
                        UserOptInStatus, document, "get_all_users_opt_in_status"
                    )
                    if status is not None:
                        lookup[status.user_id] = status.opted_in
            return lookup
        except Exception as e:
            self.telemetry.track_exception(e, {"operation": "get_all_users_opt_in_status"})
            return None

    async def set_user_info(
        self, tenant_id: str, user_id: str, opted_in: bool, service_url: str
    ) -> None:
        """Set the user info for the given user.

        The stored record is replaced as a whole; fields not passed here, such
        as recent pair-ups, are not preserved.

        Args:
            tenant_id: Azure AD tenant ID.
            user_id: Teams user ID.
            opted_in: Whether the user participates in pairings.
            service_url: Bot Framework service URL for the user.

        Raises:
            StoreError: If the write fails.
        """
        containers = await self._ensure_initialized()

        user_info = UserInfo(
            user_id=user_id,
            tenant_id=tenant_id,
            service_url=service_url,
            opted_in=opted_in,
        )
        try:
            await containers.users.upsert_item(user_info.to_document())
            logger.info(f"Saved user {user_id} with opted_in={opted_in}")
        except Exception as e:
            self.telemetry.track_exception(e, {"operation": "set_user_info", "userId": user_id})
            raise

    async def close(self) -> None:
        """Release the store client if the store was initialized."""
        if not self._containers.is_ready:
            return

        containers = await self._containers.get()
        if containers.close is not None:
            await containers.close()
            logger.info("Closed data store client")

    async def _ensure_initialized(self) -> StoreContainers:
        return await self._containers.get()

    def _validate_record(
        self, model: type[RecordT], document: dict[str, Any], operation: str
    ) -> RecordT | None:
        try:
            return model.model_validate(document)
        except ValidationError as e:
            document_id = document.get("id")
            logger.warning(f"Skipping invalid {model.__name__} document {document_id}: {e}")
            self.telemetry.track_exception(
                e, {"operation": operation, "documentId": str(document_id)}
            )
            return None


def create_data_provider(
    settings: Settings | None = None,
    telemetry: TelemetrySink | None = None,
) -> IcebreakerBotDataProvider:
    """Create a data provider for the configured storage backend.

    Args:
        settings: Application settings. If None, uses get_settings().
        telemetry: Telemetry sink. If None, uses get_telemetry().

    Returns:
        Configured IcebreakerBotDataProvider instance.

    Raises:
        ValueError: If the storage type is not supported.

    Example:
        >>> provider = create_data_provider(Settings(storage_type="memory"))
    """
    settings = settings or get_settings()
    telemetry = telemetry or get_telemetry()

    initializer: StoreInitializer
    if settings.storage_type == "cosmos":
        initializer = CosmosStoreInitializer(settings=settings, telemetry=telemetry)
    elif settings.storage_type == "memory":
        initializer = InMemoryStoreInitializer(settings=settings)
    else:
        raise ValueError(f"Unknown storage type: {settings.storage_type}")

    logger.info(f"Created data provider with {type(initializer).__name__}")
    return IcebreakerBotDataProvider(initializer, telemetry=telemetry, settings=settings)
