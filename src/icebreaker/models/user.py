"""User records for Icebreaker."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserInfo(BaseModel):
    """A user known to the bot.

    The Teams user ID (29:xxx) is also the document ID and partition key.
    Records are always written whole; there is no partial update.

    Attributes:
        user_id: Teams user ID (document field ``id``).
        tenant_id: Azure AD tenant ID.
        service_url: Bot Framework service URL for direct messages.
        opted_in: Whether the user currently participates in pairings.
        recent_pairups: Users this user was recently paired with.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="id", min_length=1, description="Teams user ID")
    tenant_id: str = Field(..., alias="tenantId", description="Azure AD tenant ID")
    service_url: str = Field(..., alias="serviceUrl", description="Bot Framework service URL")
    opted_in: bool = Field(..., alias="optedIn", description="Participates in pairings")
    recent_pairups: list["UserInfo"] | None = Field(
        None, alias="recentPairups", description="Recent pair-up partners"
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a store document keyed by document field names."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "UserInfo":
        """Build a record from a store document, ignoring system properties.

        Args:
            document: Document as returned by the store.

        Returns:
            Validated user record.
        """
        return cls.model_validate(document)


class UserOptInStatus(BaseModel):
    """Projection of a user record carrying only its opt-in status."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="id", min_length=1)
    opted_in: bool = Field(..., alias="optedIn")
