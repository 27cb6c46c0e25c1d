"""Icebreaker - meetup pairing bot for Microsoft Teams.

This package provides a Microsoft Teams bot that periodically pairs opted-in
members of each team it is installed in, storing installation and user state
in Azure Cosmos DB.
"""

__version__ = "1.0.0"
__author__ = "Icebreaker Contributors"
__license__ = "MIT"

__all__ = ["__author__", "__license__", "__version__"]
