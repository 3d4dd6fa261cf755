"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Feed response parsing
- Candidate selection (staleness and duplicate filtering)
- Message formatting
- Configuration validation

All functions here are deterministic and have no I/O.
"""

from src.core.event import SeismicEvent, FeedResponse, parse_event, parse_feed_response
from src.core.selection import PollDecision, PollOutcome, is_stale, select_candidate
from src.core.formatter import AlertMessage, format_alert
from src.core.config import Config, validate_config

__all__ = [
    # Event
    "SeismicEvent",
    "FeedResponse",
    "parse_event",
    "parse_feed_response",
    # Selection
    "PollDecision",
    "PollOutcome",
    "is_stale",
    "select_candidate",
    # Formatter
    "AlertMessage",
    "format_alert",
    # Config
    "Config",
    "validate_config",
]
