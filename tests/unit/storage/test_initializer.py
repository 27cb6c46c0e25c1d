"""Tests for store initialization."""

from unittest.mock import AsyncMock, Mock, call, patch

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from icebreaker.config.settings import Settings
from icebreaker.storage import (
    CosmosDocumentContainer,
    CosmosStoreInitializer,
    InMemoryStoreInitializer,
    StoreInitializationError,
)
from icebreaker.storage.initializer import is_shared_offer_disabled
from icebreaker.utils.telemetry import SeverityLevel


@pytest.fixture
def cosmos_settings() -> Settings:
    return Settings(
        _env_file=None,
        storage_type="cosmos",
        cosmos_db_endpoint_url="https://account.documents.azure.com:443/",
        cosmos_db_key="cosmos-key",
        cosmos_default_throughput=400,
    )


@pytest.fixture
def database() -> Mock:
    database = Mock()
    database.create_container_if_not_exists = AsyncMock(
        side_effect=lambda id, **_: Mock(id=id)  # noqa: A002
    )
    return database


@pytest.fixture
def client(database: Mock) -> Mock:
    client = Mock()
    client.create_database_if_not_exists = AsyncMock(return_value=database)
    client.close = AsyncMock()
    return client


def _shared_offer_disabled() -> CosmosHttpResponseError:
    return CosmosHttpResponseError(
        status_code=400,
        message="Message: {\"Errors\":[\"Setting offer throughput or autopilot on container "
        "is not supported for serverless accounts. SharedOffer is Disabled\"]}",
    )


class TestIsSharedOfferDisabled:
    """Tests for shared offer error detection."""

    def test_detects_shared_offer_disabled(self) -> None:
        assert is_shared_offer_disabled(_shared_offer_disabled()) is True

    def test_other_bad_request(self) -> None:
        error = CosmosHttpResponseError(status_code=400, message="Bad request")
        assert is_shared_offer_disabled(error) is False

    def test_message_with_other_status(self) -> None:
        error = CosmosHttpResponseError(status_code=403, message="SharedOffer is Disabled")
        assert is_shared_offer_disabled(error) is False


class TestCosmosStoreInitializer:
    """Test suite for CosmosStoreInitializer."""

    async def test_shared_database_throughput(
        self, cosmos_settings: Settings, client: Mock, database: Mock, telemetry: Mock
    ) -> None:
        """Test that containers share the database throughput when allowed."""
        with patch("icebreaker.storage.initializer.CosmosClient", return_value=client) as ctor:
            containers = await CosmosStoreInitializer(
                cosmos_settings, telemetry=telemetry
            ).initialize()

        ctor.assert_called_once_with(
            "https://account.documents.azure.com:443/", credential="cosmos-key"
        )
        client.create_database_if_not_exists.assert_awaited_once_with(
            id="IcebreakerDB", offer_throughput=400
        )
        for container_call in database.create_container_if_not_exists.await_args_list:
            assert container_call.kwargs["offer_throughput"] is None
            assert container_call.kwargs["partition_key"]["paths"] == ["/id"]

        assert isinstance(containers.teams, CosmosDocumentContainer)
        assert containers.teams.name == "TeamsInfo"
        assert containers.users.name == "UsersInfo"
        client.close.assert_not_awaited()
        telemetry.track_trace.assert_any_call("Initializing data store")
        telemetry.track_trace.assert_any_call("Data store initialized")

    async def test_shared_offer_disabled_fallback(
        self, cosmos_settings: Settings, client: Mock, database: Mock, telemetry: Mock
    ) -> None:
        """Test container-level throughput when the account rejects shared offers."""
        client.create_database_if_not_exists.side_effect = [_shared_offer_disabled(), database]

        with patch("icebreaker.storage.initializer.CosmosClient", return_value=client):
            containers = await CosmosStoreInitializer(
                cosmos_settings, telemetry=telemetry
            ).initialize()

        assert client.create_database_if_not_exists.await_args_list == [
            call(id="IcebreakerDB", offer_throughput=400),
            call(id="IcebreakerDB"),
        ]
        throughputs = [
            c.kwargs["offer_throughput"]
            for c in database.create_container_if_not_exists.await_args_list
        ]
        assert throughputs == [400, 400]
        assert containers.users.name == "UsersInfo"

        severities = [
            c.args[1] for c in telemetry.track_trace.call_args_list if len(c.args) > 1
        ]
        assert SeverityLevel.INFORMATION in severities

    async def test_other_database_error_raises(
        self, cosmos_settings: Settings, client: Mock, telemetry: Mock
    ) -> None:
        """Test that unrelated errors fail initialization and close the client."""
        client.create_database_if_not_exists.side_effect = CosmosHttpResponseError(
            status_code=401, message="Unauthorized"
        )

        with (
            patch("icebreaker.storage.initializer.CosmosClient", return_value=client),
            pytest.raises(StoreInitializationError) as exc_info,
        ):
            await CosmosStoreInitializer(cosmos_settings, telemetry=telemetry).initialize()

        assert exc_info.value.status_code == 401
        assert isinstance(exc_info.value.__cause__, CosmosHttpResponseError)
        client.close.assert_awaited_once()

    async def test_container_error_raises(
        self, cosmos_settings: Settings, client: Mock, database: Mock, telemetry: Mock
    ) -> None:
        database.create_container_if_not_exists.side_effect = CosmosHttpResponseError(
            status_code=503, message="Service unavailable"
        )

        with (
            patch("icebreaker.storage.initializer.CosmosClient", return_value=client),
            pytest.raises(StoreInitializationError),
        ):
            await CosmosStoreInitializer(cosmos_settings, telemetry=telemetry).initialize()

        client.close.assert_awaited_once()

    async def test_close_callback_closes_client(
        self, cosmos_settings: Settings, client: Mock, telemetry: Mock
    ) -> None:
        with patch("icebreaker.storage.initializer.CosmosClient", return_value=client):
            containers = await CosmosStoreInitializer(
                cosmos_settings, telemetry=telemetry
            ).initialize()

        assert containers.close is not None
        await containers.close()
        client.close.assert_awaited_once()


class TestInMemoryStoreInitializer:
    """Test suite for InMemoryStoreInitializer."""

    async def test_returns_same_containers(self, settings: Settings) -> None:
        initializer = InMemoryStoreInitializer(settings)

        first = await initializer.initialize()
        second = await initializer.initialize()

        assert first.teams is second.teams
        assert first.users.name == "UsersInfo"
        assert first.close is None
