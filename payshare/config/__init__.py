"""Configuration package."""

from payshare.config.settings import (
    AppSettings,
    PolicyDefaultsSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "PolicyDefaultsSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
