"""Configuration for wellcoach services."""

from .settings import WellcoachSettings, get_settings
from .logging_config import LoggingConfig, setup_logging, get_logger

__all__ = [
    "WellcoachSettings",
    "get_settings",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
]
