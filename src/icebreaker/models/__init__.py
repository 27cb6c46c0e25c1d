"""Data models for Icebreaker.

This package contains the Pydantic records persisted in the document store
and the value types used by the pairing job.
"""

from icebreaker.models.installation import TeamInstallInfo
from icebreaker.models.pairing import PairUp
from icebreaker.models.user import UserInfo, UserOptInStatus

__all__ = [
    "PairUp",
    "TeamInstallInfo",
    "UserInfo",
    "UserOptInStatus",
]
