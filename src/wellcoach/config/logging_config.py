"""Centralized logging configuration for wellcoach.

Provides consistent, configurable logging with environment-based control
over verbosity and log levels.
"""

import logging
import logging.config
import os
from enum import Enum


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogVerbosity(str, Enum):
    """Log verbosity modes."""
    QUIET = "QUIET"      # Only errors and critical
    NORMAL = "NORMAL"    # Warnings and above
    VERBOSE = "VERBOSE"  # Info level logging
    DEBUG = "DEBUG"      # Full debug logging


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


def get_log_level_from_verbosity(verbosity: str) -> str:
    """Map verbosity mode to log level."""
    verbosity_map = {
        LogVerbosity.QUIET: LogLevel.ERROR.value,
        LogVerbosity.NORMAL: LogLevel.WARNING.value,
        LogVerbosity.VERBOSE: LogLevel.INFO.value,
        LogVerbosity.DEBUG: LogLevel.DEBUG.value,
    }
    try:
        return verbosity_map[LogVerbosity(verbosity.upper())]
    except ValueError:
        return LogLevel.WARNING.value


class LoggingConfig:
    """Centralized logging configuration manager."""
    
    # Modules that only need warnings unless debugging
    DEFAULT_QUIET_MODULES = [
        "wellcoach.features.realtime.adapters",
        "wellcoach.features.profiles.repositories",
    ]
    
    # Modules that should only log errors
    ERROR_ONLY_MODULES = [
        "httpx",
        "httpcore",
        "urllib3",
        "asyncio",
        "keycloak",
    ]
    
    # Loggers that must stay visible regardless of verbosity
    ALWAYS_ON_MODULES = [
        "wellcoach.features.auth.services.signup_saga",
    ]
    
    @classmethod
    def build(cls) -> dict:
        """Build a dictConfig mapping from environment variables."""
        log_verbosity = os.getenv("LOG_VERBOSITY", "NORMAL").upper()
        log_format = os.getenv("LOG_FORMAT", LogFormat.SIMPLE.value).lower()
        enable_sql_logging = os.getenv("ENABLE_SQL_LOGGING", "false").lower() == "true"
        enable_auth_logging = os.getenv("ENABLE_AUTH_LOGGING", "false").lower() == "true"
        
        # LOG_LEVEL wins over verbosity when set explicitly
        effective_log_level = os.getenv("LOG_LEVEL", "").upper() or get_log_level_from_verbosity(log_verbosity)
        if effective_log_level not in LogLevel.__members__:
            effective_log_level = LogLevel.WARNING.value
        
        if log_format == LogFormat.JSON.value:
            format_string = '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}'
        elif log_format == LogFormat.DETAILED.value:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        else:
            format_string = "%(asctime)s - %(levelname)s - %(message)s"
        
        logging_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": format_string,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": "DEBUG",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "level": effective_log_level,
                "handlers": ["console"],
            },
            "loggers": {}
        }
        
        quiet_level = "WARNING" if effective_log_level != "DEBUG" else "DEBUG"
        for module in cls.DEFAULT_QUIET_MODULES:
            logging_config["loggers"][module] = {"level": quiet_level}
        
        for module in cls.ERROR_ONLY_MODULES:
            logging_config["loggers"][module] = {"level": "ERROR"}
        
        if not enable_sql_logging:
            logging_config["loggers"]["asyncpg"] = {"level": "WARNING"}
        
        if enable_auth_logging:
            logging_config["loggers"]["wellcoach.features.auth"] = {"level": "DEBUG"}
        
        for module in cls.ALWAYS_ON_MODULES:
            logging_config["loggers"][module] = {"level": "INFO"}
        
        return logging_config
    
    @classmethod
    def configure(cls) -> None:
        """Configure logging based on environment variables."""
        logging_config = cls.build()
        logging.config.dictConfig(logging_config)
        
        logger = logging.getLogger(__name__)
        logger.debug(f"Logging configured: level={logging_config['root']['level']}")


def setup_logging() -> None:
    """Setup logging configuration from environment variables.
    
    Called once at application startup by the app factory.
    """
    LoggingConfig.configure()


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger."""
    return logging.getLogger(name)
