"""Configuration management for the lost & found match engine."""

from .defaults import DEFAULT_STOP_WORDS
from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_config, validate_config_file
from .models import (
    AppConfig,
    ItemConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    MatchingConfig,
    ScoreWeights,
)

__all__ = [
    # Loader functions
    "load_config",
    "parse_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "MatchingConfig",
    "ScoreWeights",
    "ItemConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Constants
    "DEFAULT_STOP_WORDS",
    # Exceptions
    "ConfigurationError",
]
