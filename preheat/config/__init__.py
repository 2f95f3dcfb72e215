"""Configuration for preheat."""

from .core import HTTPSettings, LoggingSettings
from .settings import ConfigurationError, Settings


__all__ = [
    "ConfigurationError",
    "HTTPSettings",
    "LoggingSettings",
    "Settings",
]
