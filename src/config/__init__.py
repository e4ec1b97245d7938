"""Configuration loading and validation module."""

from src.config.loader import ConfigLoader, ConfigValidationError, load_feed_config
from src.config.schemas.feed import FeedConfig
from src.config.state_machine import ConfigState, ConfigStateError


__all__ = [
    "ConfigLoader",
    "ConfigState",
    "ConfigStateError",
    "ConfigValidationError",
    "FeedConfig",
    "load_feed_config",
]
