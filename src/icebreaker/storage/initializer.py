"""Store initialization for Icebreaker.

An initializer connects to the backing store and returns the teams and
users containers. The data provider runs its initializer at most once (see
``icebreaker.utils.lazy.AsyncLazy``); the containers it returns are then
shared read-only by every store operation.
"""

import logging
from abc import abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Final, Protocol

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosHttpResponseError

from icebreaker.config.secrets import SecretsHelper, SettingsSecretsHelper
from icebreaker.config.settings import Settings, get_settings
from icebreaker.constants import PARTITION_KEY_PATH, SHARED_OFFER_DISABLED_MESSAGE
from icebreaker.storage.containers import (
    CosmosDocumentContainer,
    DocumentContainer,
    InMemoryDocumentContainer,
)
from icebreaker.storage.exceptions import StoreInitializationError
from icebreaker.utils.telemetry import SeverityLevel, TelemetrySink, get_telemetry

logger: Final = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreContainers:
    """Containers produced by store initialization.

    Attributes:
        teams: Container of team installation records.
        users: Container of user records.
        close: Coroutine function releasing the store client, if any.
    """

    teams: DocumentContainer
    users: DocumentContainer
    close: Callable[[], Awaitable[None]] | None = None


class StoreInitializer(Protocol):
    """Protocol for store initialization routines."""

    @abstractmethod
    async def initialize(self) -> StoreContainers:
        """Connect to the store and return its containers.

        Returns:
            The teams and users containers.
        """
        ...


def is_shared_offer_disabled(error: CosmosHttpResponseError) -> bool:
    """Check whether an error means database-level throughput is unsupported.

    Args:
        error: Error raised while creating the database.

    Returns:
        True for a 400 response mentioning the disabled shared offer.
    """
    return error.status_code == 400 and SHARED_OFFER_DISABLED_MESSAGE in str(error.message)


class CosmosStoreInitializer:
    """Initializer creating the Cosmos DB database and containers if needed.

    The database is created with the default throughput shared by its
    containers. Accounts that reject database-level throughput (for example
    serverless accounts) get a database without throughput, and each
    container is provisioned with the default throughput instead.

    Example:
        >>> initializer = CosmosStoreInitializer(settings)
        >>> containers = await initializer.initialize()
        >>> await containers.teams.read_item("19:abc@thread.skype")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        secrets: SecretsHelper | None = None,
        telemetry: TelemetrySink | None = None,
    ) -> None:
        """Initialize with configuration and collaborators.

        Args:
            settings: Application settings. If None, uses get_settings().
            secrets: Secrets helper for the access key. Defaults to settings-backed.
            telemetry: Telemetry sink. If None, uses get_telemetry().
        """
        self.settings = settings or get_settings()
        self.secrets = secrets or SettingsSecretsHelper(self.settings)
        self.telemetry = telemetry or get_telemetry()

    async def initialize(self) -> StoreContainers:
        """Connect to Cosmos DB and create the database and containers if absent.

        Returns:
            The teams and users containers, with a close callback for the client.

        Raises:
            StoreInitializationError: If the database or a container cannot be created.
        """
        self.telemetry.track_trace("Initializing data store")

        throughput = self.settings.cosmos_default_throughput
        client = CosmosClient(
            self.settings.cosmos_db_endpoint_url, credential=self.secrets.cosmos_db_key
        )

        try:
            database, use_shared_offer = await self._create_database(client, throughput)
            container_throughput = None if use_shared_offer else throughput

            teams = await database.create_container_if_not_exists(
                id=self.settings.cosmos_collection_teams,
                partition_key=PartitionKey(path=PARTITION_KEY_PATH),
                offer_throughput=container_throughput,
            )
            users = await database.create_container_if_not_exists(
                id=self.settings.cosmos_collection_users,
                partition_key=PartitionKey(path=PARTITION_KEY_PATH),
                offer_throughput=container_throughput,
            )
        except Exception as e:
            await client.close()
            raise StoreInitializationError(
                f"Failed to initialize data store: {e}",
                operation="initialize",
                status_code=getattr(e, "status_code", None),
                details={"database": self.settings.cosmos_db_database_name},
            ) from e

        self.telemetry.track_trace("Data store initialized")
        return StoreContainers(
            teams=CosmosDocumentContainer(teams),
            users=CosmosDocumentContainer(users),
            close=client.close,
        )

    async def _create_database(
        self, client: CosmosClient, throughput: int
    ) -> tuple[DatabaseProxy, bool]:
        """Create the database, falling back to container-level throughput.

        Args:
            client: Cosmos DB client.
            throughput: Throughput to provision.

        Returns:
            The database proxy and whether its throughput is shared by containers.
        """
        name = self.settings.cosmos_db_database_name

        try:
            database = await client.create_database_if_not_exists(
                id=name, offer_throughput=throughput
            )
            return database, True
        except CosmosHttpResponseError as e:
            if not is_shared_offer_disabled(e):
                raise

        self.telemetry.track_trace(
            "Database shared offer is disabled for the account, "
            "will provision throughput at container level",
            SeverityLevel.INFORMATION,
        )
        database = await client.create_database_if_not_exists(id=name)
        return database, False


class InMemoryStoreInitializer:
    """Initializer returning in-memory containers for development and testing.

    The same containers are returned on every call, so data survives for the
    lifetime of the initializer.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize empty containers named after the configured collections.

        Args:
            settings: Application settings. If None, uses get_settings().
        """
        settings = settings or get_settings()
        page_size = settings.cosmos_query_page_size or 100
        self.teams = InMemoryDocumentContainer(settings.cosmos_collection_teams, page_size)
        self.users = InMemoryDocumentContainer(settings.cosmos_collection_users, page_size)

    async def initialize(self) -> StoreContainers:
        logger.info("Initialized in-memory data store")
        return StoreContainers(teams=self.teams, users=self.users)
