"""Application settings and configuration management.

This module provides Pydantic-based settings that load from environment
variables with validation and type safety. Settings follow the 12-factor
app methodology for configuration management.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from icebreaker.constants import DEFAULT_REQUEST_THROUGHPUT

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables. The class
    provides sensible defaults for development (in-memory storage) while
    enforcing required values when Cosmos DB storage is selected.

    Example:
        >>> settings = Settings()
        >>> print(settings.storage_type)
        'memory'
        >>> print(settings.cosmos_db_database_name)
        'IcebreakerDB'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Cosmos DB Configuration
    # =========================================================================

    storage_type: Literal["cosmos", "memory"] = Field(
        default="memory",
        description="Storage backend for team and user records",
    )

    cosmos_db_endpoint_url: str = Field(
        default="",
        description="Cosmos DB account endpoint URL",
    )

    cosmos_db_key: str = Field(
        default="",
        description="Cosmos DB account access key",
    )

    cosmos_db_database_name: str = Field(
        default="IcebreakerDB",
        min_length=1,
        description="Cosmos DB database name",
    )

    cosmos_collection_teams: str = Field(
        default="TeamsInfo",
        min_length=1,
        description="Container holding team installation records",
    )

    cosmos_collection_users: str = Field(
        default="UsersInfo",
        min_length=1,
        description="Container holding user records",
    )

    cosmos_default_throughput: int = Field(
        default=DEFAULT_REQUEST_THROUGHPUT,
        ge=DEFAULT_REQUEST_THROUGHPUT,
        le=1000000,
        description="Provisioned throughput (RU/s) for the database or each container",
    )

    cosmos_query_page_size: int | None = Field(
        default=None,
        ge=1,
        le=1000,
        description="Maximum documents per query page (server default if not set)",
    )

    # =========================================================================
    # Microsoft Teams Bot Configuration
    # =========================================================================

    microsoft_app_id: str = Field(
        default="",
        description="Microsoft App ID for Teams Bot authentication",
    )

    microsoft_app_password: str = Field(
        default="",
        description="Microsoft App Password for Teams Bot authentication",
    )

    microsoft_app_type: Literal["SingleTenant", "MultiTenant", "UserAssignedMSI"] = Field(
        default="MultiTenant",
        description="Microsoft App Type",
    )

    microsoft_app_tenant_id: str = Field(
        default="",
        description="Microsoft Tenant ID (required for SingleTenant)",
    )

    bot_display_name: str = Field(
        default="Icebreaker",
        min_length=1,
        description="Bot name used in welcome and pair-up messages",
    )

    # =========================================================================
    # Pairing Trigger Configuration
    # =========================================================================

    process_now_key: str = Field(
        default="",
        description="Shared key authorizing the pairing trigger endpoint (empty disables it)",
    )

    # =========================================================================
    # Telemetry & Logging Configuration
    # =========================================================================

    enable_telemetry: bool = Field(
        default=True,
        description="Emit telemetry traces, events and exceptions",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )

    # =========================================================================
    # Application Configuration
    # =========================================================================

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the FastAPI application",
    )

    @model_validator(mode="after")
    def validate_teams_config(self) -> "Settings":
        """Validate that Teams configuration is complete if app_id is set.

        Returns:
            The validated Settings instance.

        Raises:
            ValueError: If app_id is set but password or tenant_id is missing.
        """
        if self.microsoft_app_id and not self.microsoft_app_password:
            raise ValueError("MICROSOFT_APP_PASSWORD is required when MICROSOFT_APP_ID is set")

        if (
            self.microsoft_app_id
            and self.microsoft_app_type == "SingleTenant"
            and not self.microsoft_app_tenant_id
        ):
            raise ValueError("MICROSOFT_APP_TENANT_ID is required for SingleTenant apps")

        return self

    @model_validator(mode="after")
    def validate_cosmos_config(self) -> "Settings":
        """Validate that Cosmos DB connection values are set for cosmos storage.

        Returns:
            The validated Settings instance.

        Raises:
            ValueError: If cosmos storage is selected without endpoint or key.
        """
        if self.storage_type != "cosmos":
            return self

        if not self.cosmos_db_endpoint_url:
            raise ValueError("COSMOS_DB_ENDPOINT_URL is required when STORAGE_TYPE=cosmos")

        if not self.cosmos_db_key:
            raise ValueError("COSMOS_DB_KEY is required when STORAGE_TYPE=cosmos")

        return self

    @property
    def process_now_enabled(self) -> bool:
        """Whether the pairing trigger endpoint accepts requests."""
        return bool(self.process_now_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are cached to avoid repeated environment variable reads
    and validation. The cache is cleared on application restart.

    Returns:
        Validated Settings instance.

    Example:
        >>> settings = get_settings()
        >>> print(settings.bot_display_name)
        'Icebreaker'
    """
    return Settings()
