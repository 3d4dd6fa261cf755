"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

import re
from dataclasses import dataclass, field

from src.core.formatter import DEFAULT_TIMEZONE, TimezoneError, resolve_timezone


DEFAULT_FEED_BASE_URL = "https://mobile-new.chinaeew.cn/v1"
DEFAULT_PUSH_BASE_URL = "https://api.day.app"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


@dataclass
class FeedConfig:
    """Early-warning feed connection settings.

    Attributes:
        base_url: Feed API base (``/earlywarnings`` is appended)
        updates: Page-size/recency hint passed as the ``updates`` parameter
        timeout_seconds: HTTP timeout
        verify_tls: Whether to verify the feed's TLS certificate
    """
    base_url: str = DEFAULT_FEED_BASE_URL
    updates: int = 4
    timeout_seconds: float = 10.0
    verify_tls: bool = False


@dataclass
class PushConfig:
    """Push notification sink settings.

    Attributes:
        base_url: Push provider base URL
        timeout_seconds: HTTP timeout
        verify_tls: Whether to verify the provider's TLS certificate
    """
    base_url: str = DEFAULT_PUSH_BASE_URL
    timeout_seconds: float = 10.0
    verify_tls: bool = True


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects. One instance is
    built at startup and handed to both the poller and the notifier.

    Attributes:
        push_key: Credential for the push provider (required)
        poll_interval_seconds: Delay between the end of one poll and the next
        staleness_threshold_seconds: Maximum event age still worth alerting on
        timezone: IANA zone used to render alert timestamps
        shutdown_grace_seconds: How long to wait for workers on shutdown
        feed: Feed connection settings
        push: Push sink settings
    """
    push_key: str = ""
    poll_interval_seconds: float = 3.0
    staleness_threshold_seconds: float = 30 * 60
    timezone: str = DEFAULT_TIMEZONE
    shutdown_grace_seconds: float = 5.0
    feed: FeedConfig = field(default_factory=FeedConfig)
    push: PushConfig = field(default_factory=PushConfig)

    @property
    def staleness_threshold_ms(self) -> int:
        return int(self.staleness_threshold_seconds * 1000)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def parse_duration(value: str | int | float) -> float:
    """Parse a duration such as '3s', '500ms', '2m' or '1m30s' into seconds.

    Pure function. Bare numbers are taken as seconds.

    Raises:
        ValueError: If the value is not a recognisable duration
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    if not text:
        raise ValueError("empty duration")

    try:
        return float(text)
    except ValueError:
        pass

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")

    return total


def _validate_positive(value: float, field_name: str) -> list[ValidationError]:
    if value <= 0:
        return [ValidationError(
            field=field_name,
            message=f"Must be positive, got {value}",
        )]
    return []


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if not config.push_key:
        errors.append(ValidationError(
            field="push_key",
            message="Push key is required",
        ))
    elif config.push_key.startswith("${"):
        errors.append(ValidationError(
            field="push_key",
            message="Push key not resolved (still contains placeholder)",
        ))

    errors.extend(_validate_positive(config.poll_interval_seconds, "poll_interval_seconds"))
    errors.extend(_validate_positive(
        config.staleness_threshold_seconds, "staleness_threshold_seconds",
    ))
    errors.extend(_validate_positive(config.feed.timeout_seconds, "feed.timeout_seconds"))
    errors.extend(_validate_positive(config.push.timeout_seconds, "push.timeout_seconds"))

    if config.shutdown_grace_seconds < 0:
        errors.append(ValidationError(
            field="shutdown_grace_seconds",
            message=f"Must not be negative, got {config.shutdown_grace_seconds}",
        ))

    try:
        resolve_timezone(config.timezone)
    except TimezoneError as e:
        errors.append(ValidationError(field="timezone", message=str(e)))

    if config.feed.updates <= 0:
        errors.append(ValidationError(
            field="feed.updates",
            message=f"Must be positive, got {config.feed.updates}",
        ))

    if not config.feed.base_url:
        errors.append(ValidationError(field="feed.base_url", message="Feed URL is required"))
    if not config.push.base_url:
        errors.append(ValidationError(field="push.base_url", message="Push URL is required"))

    # Events would age out between polls
    if 0 < config.staleness_threshold_seconds < config.poll_interval_seconds:
        errors.append(ValidationError(
            field="poll_interval_seconds",
            message=(
                f"Poll interval ({config.poll_interval_seconds}s) exceeds staleness "
                f"threshold ({config.staleness_threshold_seconds}s)"
            ),
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
