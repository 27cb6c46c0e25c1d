"""Pairing of opted-in team members.

This package provides the random pairing routine and the job that pairs
the members of every installed team and notifies them.
"""

from icebreaker.matching.pairing import make_pairs
from icebreaker.matching.service import MatchingService

__all__ = ["MatchingService", "make_pairs"]
