"""Configuration management for Icebreaker.

This module exports the main Settings class, the secrets helper and
configuration utilities.
"""

from icebreaker.config.secrets import SecretsHelper, SettingsSecretsHelper
from icebreaker.config.settings import Settings, get_settings

__all__ = ["SecretsHelper", "Settings", "SettingsSecretsHelper", "get_settings"]
