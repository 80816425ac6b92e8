"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    AwardsConfig,
    BotConfig,
    GitHubConfig,
    LoggingConfig,
    SlackConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "BotConfig",
    # Section configs
    "AwardsConfig",
    "GitHubConfig",
    "LoggingConfig",
    "SlackConfig",
]
