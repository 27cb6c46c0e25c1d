"""Team installation records for Icebreaker.

A team installation record is created when the bot is added to a team,
fully overwritten when it is added again and deleted when it is removed.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TeamInstallInfo(BaseModel):
    """Information about a team to which the bot was installed.

    The team ID doubles as the document ID and partition key.

    Attributes:
        team_id: Teams team ID (document field ``id``).
        tenant_id: Azure AD tenant that owns the team.
        service_url: Bot Framework service URL for messages to the team.
        installer_name: Display name of the user that installed the bot.
    """

    model_config = ConfigDict(populate_by_name=True)

    team_id: str = Field(..., alias="id", min_length=1, description="Team ID")
    tenant_id: str = Field(..., alias="tenantId", description="Azure AD tenant ID")
    service_url: str = Field(..., alias="serviceUrl", description="Bot Framework service URL")
    installer_name: str | None = Field(
        None, alias="installerName", description="Name of the person that installed the bot"
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a store document keyed by document field names."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "TeamInstallInfo":
        """Build a record from a store document, ignoring system properties.

        Args:
            document: Document as returned by the store.

        Returns:
            Validated team installation record.
        """
        return cls.model_validate(document)

    def __str__(self) -> str:
        return (
            f"Team - Id = {self.team_id}, TenantId = {self.tenant_id}, "
            f"ServiceUrl = {self.service_url}, Installer = {self.installer_name}"
        )
