"""Configuration module - settings and environment management."""

from src.config.settings import (
    ARTICLE_URL_PREFIX,
    ConfigurationError,
    Settings,
    load_settings,
)

__all__ = [
    "ARTICLE_URL_PREFIX",
    "ConfigurationError",
    "Settings",
    "load_settings",
]
