"""Adaptive card creation for Icebreaker messages.

This module provides functions for creating Microsoft Teams Adaptive Cards
for welcome messages, pair-up notifications and opt-in/opt-out confirmations.
"""

from icebreaker.cards.icebreaker_cards import (
    create_opt_in_confirmation_card,
    create_opt_out_confirmation_card,
    create_pairup_card,
    create_team_welcome_card,
    create_user_welcome_card,
)

__all__ = [
    "create_opt_in_confirmation_card",
    "create_opt_out_confirmation_card",
    "create_pairup_card",
    "create_team_welcome_card",
    "create_user_welcome_card",
]
