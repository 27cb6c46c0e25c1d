"""Bot Framework integration for Icebreaker.

This package contains the Teams activity handler, the adapter, proactive
messaging and the HTTP endpoints.
"""

from icebreaker.bot.adapter import IcebreakerAdapter, create_adapter
from icebreaker.bot.notifier import ConversationNotifier
from icebreaker.bot.teams_bot import IcebreakerBot, create_card_activity

__all__ = [
    "ConversationNotifier",
    "IcebreakerAdapter",
    "IcebreakerBot",
    "create_adapter",
    "create_card_activity",
]
