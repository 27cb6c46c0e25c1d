"""Secret values consumed by Icebreaker.

Secrets are read through a small protocol so that a vault-backed helper can
replace the settings-backed default without touching the store or the bot.
"""

from typing import Protocol

from icebreaker.config.settings import Settings, get_settings


class SecretsHelper(Protocol):
    """Protocol for objects that supply secret configuration values."""

    @property
    def cosmos_db_key(self) -> str:
        """Cosmos DB account access key."""
        ...

    @property
    def process_now_key(self) -> str:
        """Shared key authorizing the pairing trigger endpoint."""
        ...


class SettingsSecretsHelper:
    """Secrets helper reading values from application settings.

    Example:
        >>> secrets = SettingsSecretsHelper()
        >>> key = secrets.cosmos_db_key
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the helper.

        Args:
            settings: Application settings. If None, uses get_settings().
        """
        self._settings = settings or get_settings()

    @property
    def cosmos_db_key(self) -> str:
        return self._settings.cosmos_db_key

    @property
    def process_now_key(self) -> str:
        return self._settings.process_now_key
