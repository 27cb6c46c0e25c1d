"""Pair-up value types produced by the pairing job."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from icebreaker.models.installation import TeamInstallInfo


class PairUp(BaseModel):
    """Two members of the same team matched for a meetup.

    Members are Bot Framework channel accounts (usually
    ``TeamsChannelAccount``); they are kept as-is so the notification card can
    use their names and user principal names.

    Attributes:
        team: Team the members belong to.
        first: First member of the pair.
        second: Second member of the pair.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    team: TeamInstallInfo = Field(..., description="Team the pair was made in")
    first: Any = Field(..., description="First member")
    second: Any = Field(..., description="Second member")

    def members(self) -> tuple[Any, Any]:
        """Return both members of the pair."""
        return (self.first, self.second)
