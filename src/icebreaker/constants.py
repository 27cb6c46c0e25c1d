"""Constants used throughout Icebreaker.

This module contains application constants that do not depend on runtime
configuration or environment variables. For environment-based configuration,
see the config module.
"""

from typing import Final

# =============================================================================
# Cosmos DB Storage
# =============================================================================

DEFAULT_REQUEST_THROUGHPUT: Final[int] = 400
"""Minimum provisioned throughput (RU/s) requested for databases and containers."""

PARTITION_KEY_PATH: Final[str] = "/id"
"""Partition key path shared by the teams and users containers."""

SHARED_OFFER_DISABLED_MESSAGE: Final[str] = "SharedOffer is Disabled"
"""Error text returned when the account does not allow database-level throughput."""

SELECT_ALL_QUERY: Final[str] = "SELECT * FROM c"
"""Query returning every document of a container."""

OPT_IN_STATUS_FIELDS: Final[tuple[str, ...]] = ("id", "optedIn")
"""Projection used to read the opt-in status of every user."""

# =============================================================================
# Microsoft Teams
# =============================================================================

TEAMS_CHANNEL_ID: Final[str] = "msteams"
"""Bot Framework channel ID for Microsoft Teams."""

TEAMS_CHAT_DEEP_LINK: Final[str] = "https://teams.microsoft.com/l/chat/0/0?users={users}"
"""Deep link template opening a chat with the given comma-separated users."""

# =============================================================================
# Adaptive Cards
# =============================================================================

CARD_VERSION: Final[str] = "1.5"
"""Adaptive Card schema version supported by Microsoft Teams."""

CARD_COLOR_ACCENT: Final[str] = "Accent"
"""Accent text color for card headings."""

CARD_COLOR_GOOD: Final[str] = "Good"
"""Good (green) text color for confirmations."""

CARD_SIZE_LARGE: Final[str] = "Large"
"""Large text size for card titles."""

CARD_WEIGHT_BOLDER: Final[str] = "Bolder"
"""Bold text weight for card titles."""

# =============================================================================
# Card Actions
# =============================================================================

ACTION_OPT_OUT: Final[str] = "optout"
"""Card action / message text that pauses pairings for the sender."""

ACTION_OPT_IN: Final[str] = "optin"
"""Card action / message text that resumes pairings for the sender."""
