"""Adaptive cards sent by the Icebreaker bot.

Every card that lets a user change their participation carries an
``Action.Submit`` whose data is ``{"action": "optout"}`` or
``{"action": "optin"}``; the bot handles those submissions as messages.

Example:
    ```python
    from icebreaker.cards import create_pairup_card

    card = create_pairup_card(
        bot_name="Icebreaker",
        sender_name="Ada",
        recipient_name="Grace",
        recipient_upn="grace@contoso.com",
    )
    ```
"""

import logging
from typing import Any, Final
from urllib.parse import quote

from icebreaker.constants import (
    ACTION_OPT_IN,
    ACTION_OPT_OUT,
    CARD_COLOR_ACCENT,
    CARD_COLOR_GOOD,
    CARD_SIZE_LARGE,
    CARD_VERSION,
    CARD_WEIGHT_BOLDER,
    TEAMS_CHAT_DEEP_LINK,
)
from icebreaker.resources import (
    CHAT_BUTTON_TEXT,
    INSTALL_MESSAGE,
    MEETUP_CONTENT,
    MEETUP_TITLE,
    OPT_IN_CONFIRMATION,
    OPT_OUT_CONFIRMATION,
    PAUSE_PAIRINGS_BUTTON_TEXT,
    RESUME_PAIRINGS_BUTTON_TEXT,
    WELCOME_USER_MESSAGE,
    format_resource,
)

logger: Final = logging.getLogger(__name__)


def _card(body: list[dict[str, Any]], actions: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "type": "AdaptiveCard",
        "$schema": "http://adaptivecards.io/schemas/adaptive-card.json",
        "version": CARD_VERSION,
        "body": body,
        "actions": actions,
    }


def _title(text: str, color: str = CARD_COLOR_ACCENT) -> dict[str, Any]:
    return {
        "type": "TextBlock",
        "text": text,
        "size": CARD_SIZE_LARGE,
        "weight": CARD_WEIGHT_BOLDER,
        "color": color,
        "wrap": True,
    }


def _text(text: str) -> dict[str, Any]:
    return {"type": "TextBlock", "text": text, "wrap": True, "spacing": "Small"}


def _submit(title: str, action: str) -> dict[str, Any]:
    return {"type": "Action.Submit", "title": title, "data": {"action": action}}


def create_team_welcome_card(bot_name: str, team_name: str) -> dict[str, Any]:
    """Create the card posted to a team when the bot is installed.

    Args:
        bot_name: Display name of the bot.
        team_name: Display name of the team.

    Returns:
        Adaptive Card JSON structure.
    """
    return _card(
        body=[
            _title(f"👋 {bot_name}"),
            _text(format_resource(INSTALL_MESSAGE, team_name)),
        ],
        actions=[_submit(PAUSE_PAIRINGS_BUTTON_TEXT, ACTION_OPT_OUT)],
    )


def create_user_welcome_card(bot_name: str, user_name: str, team_name: str) -> dict[str, Any]:
    """Create the 1:1 card sent to a member who joins an installed team.

    Args:
        bot_name: Display name of the bot.
        user_name: Display name of the new member.
        team_name: Display name of the team.

    Returns:
        Adaptive Card JSON structure.
    """
    return _card(
        body=[
            _title(f"👋 {bot_name}"),
            _text(format_resource(WELCOME_USER_MESSAGE, user_name, bot_name, team_name)),
        ],
        actions=[_submit(PAUSE_PAIRINGS_BUTTON_TEXT, ACTION_OPT_OUT)],
    )


def create_pairup_card(
    bot_name: str,
    sender_name: str,
    recipient_name: str,
    recipient_upn: str | None = None,
) -> dict[str, Any]:
    """Create the pair-up notification sent to one member of a pair.

    Args:
        bot_name: Display name of the bot.
        sender_name: Name of the member receiving the card.
        recipient_name: Name of the member they were paired with.
        recipient_upn: User principal name of the partner, used for the chat
            deep link. The chat button is omitted if None.

    Returns:
        Adaptive Card JSON structure.

    Example:
        >>> card = create_pairup_card("Icebreaker", "Ada", "Grace", "grace@contoso.com")
        >>> card["body"][0]["text"]
        'Ada / Grace Meet up'
    """
    actions: list[dict[str, Any]] = []
    if recipient_upn:
        actions.append(
            {
                "type": "Action.OpenUrl",
                "title": format_resource(CHAT_BUTTON_TEXT, recipient_name),
                "url": TEAMS_CHAT_DEEP_LINK.format(users=quote(recipient_upn)),
            }
        )
    else:
        logger.debug(f"No user principal name for {recipient_name}, omitting chat link")
    actions.append(_submit(PAUSE_PAIRINGS_BUTTON_TEXT, ACTION_OPT_OUT))

    return _card(
        body=[
            _title(format_resource(MEETUP_TITLE, sender_name, recipient_name)),
            _text(format_resource(MEETUP_CONTENT, bot_name)),
        ],
        actions=actions,
    )


def create_opt_out_confirmation_card() -> dict[str, Any]:
    """Create the confirmation sent after a user pauses pairings."""
    return _card(
        body=[_text(OPT_OUT_CONFIRMATION)],
        actions=[_submit(RESUME_PAIRINGS_BUTTON_TEXT, ACTION_OPT_IN)],
    )


def create_opt_in_confirmation_card() -> dict[str, Any]:
    """Create the confirmation sent after a user resumes pairings."""
    return _card(
        body=[
            {**_text(OPT_IN_CONFIRMATION), "color": CARD_COLOR_GOOD},
        ],
        actions=[_submit(PAUSE_PAIRINGS_BUTTON_TEXT, ACTION_OPT_OUT)],
    )
