"""English message strings used by the bot.

Strings use positional ``{0}`` placeholders and are rendered with
``format_resource``.
"""

from typing import Final

ERROR_OCCURRED: Final[str] = "😓 there was an error while processing request. Retry?"

I_DONT_KNOW: Final[str] = (
    "😕 no idea what you just said. "
    "My tiny 🤖 🧠 doesn't understand how to handle that yet!"
)

INSTALL_MESSAGE: Final[str] = (
    "If you're reading this, it's because I was added to {0}. I get to help you meet more "
    "people around your organization by randomly pairing you with someone new every week. "
    "You get to make more friends and learn about the people you work with. "
    "It's a win-win-*win* situation."
)

WELCOME_USER_MESSAGE: Final[str] = (
    "Hi {0}! I'm {1}, and I was added to {2}. Every week I'll pair you with someone new "
    "from the team so you can meet for a coffee, a lunch or a call."
)

MEETUP_CONTENT: Final[str] = (
    "Hey there! Looks like {0} matched us this week. It'd be great to meet up for a coffee "
    "or a lunch or a call if you've got time."
)

MEETUP_TITLE: Final[str] = "{0} / {1} Meet up"

OPT_IN_CONFIRMATION: Final[str] = (
    "Yay! Welcome back, I have resumed your pairings. "
    "You can always pause again if needed in future."
)

OPT_OUT_CONFIRMATION: Final[str] = (
    "I have paused your pairings. "
    "Click Resume pairings when you're ready to start meeting people again!"
)

CHAT_BUTTON_TEXT: Final[str] = "Chat with {0}"

PAUSE_PAIRINGS_BUTTON_TEXT: Final[str] = "Pause pairings"

RESUME_PAIRINGS_BUTTON_TEXT: Final[str] = "Resume pairings"


def format_resource(template: str, *args: object) -> str:
    """Render a resource string with positional arguments.

    Args:
        template: Resource string with ``{0}``-style placeholders.
        *args: Values for the placeholders.

    Returns:
        Rendered string.

    Example:
        >>> format_resource(MEETUP_TITLE, "Ada", "Grace")
        'Ada / Grace Meet up'
    """
    return template.format(*args)
