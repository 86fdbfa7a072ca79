"""Configuration for neo-cache."""

from .logging_config import LoggingConfig, LogFormat, LogLevel, LogVerbosity, setup_logging
from .settings import CacheSettings, get_cache_settings, load_cache_settings

__all__ = [
    "LoggingConfig",
    "LogFormat",
    "LogLevel",
    "LogVerbosity",
    "setup_logging",
    "CacheSettings",
    "get_cache_settings",
    "load_cache_settings",
]
