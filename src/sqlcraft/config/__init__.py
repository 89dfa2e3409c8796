"""Configuration management for sqlcraft.

Usage:
    >>> from sqlcraft.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.multirow_insert_policy)
"""

from sqlcraft.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
