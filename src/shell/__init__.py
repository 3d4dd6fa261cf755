"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Early-warning feed client (HTTP)
- Push notification client (HTTP)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from src.shell.feed_client import FeedClient, FetchError
from src.shell.push_client import PushClient, PushResponse, NotifyError
from src.shell.config_loader import load_config, build_config, ConfigError

__all__ = [
    "FeedClient",
    "FetchError",
    "PushClient",
    "PushResponse",
    "NotifyError",
    "load_config",
    "build_config",
    "ConfigError",
]
