"""Pytest configuration and shared fixtures."""

from collections.abc import Iterator
from unittest.mock import Mock

import pytest

from icebreaker.config.settings import Settings, get_settings
from icebreaker.models import TeamInstallInfo
from icebreaker.storage import IcebreakerBotDataProvider, InMemoryStoreInitializer
from icebreaker.utils.telemetry import LoggingTelemetrySink, get_telemetry


@pytest.fixture(autouse=True)
def clear_cached_singletons() -> Iterator[None]:
    """Clear cached settings and telemetry between tests."""
    get_settings.cache_clear()
    get_telemetry.cache_clear()
    yield
    get_settings.cache_clear()
    get_telemetry.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Provide settings for in-memory storage with a pairing trigger key.

    Returns:
        Settings instance independent of the environment.
    """
    return Settings(
        _env_file=None,
        storage_type="memory",
        microsoft_app_id="app-id",
        microsoft_app_password="app-password",
        process_now_key="secret-key",
        bot_display_name="Icebreaker",
    )


@pytest.fixture
def telemetry() -> Mock:
    """Provide a telemetry sink that records calls.

    Returns:
        Mock with the LoggingTelemetrySink interface.
    """
    return Mock(spec=LoggingTelemetrySink)


@pytest.fixture
def initializer(settings: Settings) -> InMemoryStoreInitializer:
    """Provide an in-memory store initializer."""
    return InMemoryStoreInitializer(settings)


@pytest.fixture
def data_provider(
    initializer: InMemoryStoreInitializer, telemetry: Mock, settings: Settings
) -> IcebreakerBotDataProvider:
    """Provide a data provider over in-memory containers."""
    return IcebreakerBotDataProvider(initializer, telemetry=telemetry, settings=settings)


@pytest.fixture
def sample_team() -> TeamInstallInfo:
    """Provide a sample team installation.

    Returns:
        Team installation record.
    """
    return TeamInstallInfo(
        team_id="19:team1@thread.skype",
        tenant_id="tenant-1",
        service_url="https://smba.trafficmanager.net/amer/",
        installer_name="Ada Lovelace",
    )
