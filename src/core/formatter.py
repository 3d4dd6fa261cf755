"""Message formatting - Pure functions.

This module formats seismic events into push notification text.
All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.core.event import SeismicEvent


DEFAULT_TIMEZONE = "Asia/Shanghai"

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class TimezoneError(ValueError):
    """Raised when the alert time zone cannot be resolved."""


@dataclass(frozen=True)
class AlertMessage:
    """Rendered push notification.

    Attributes:
        title: Short headline (time and magnitude)
        body: Location and depth details
    """
    title: str
    body: str


def resolve_timezone(name: str) -> tzinfo:
    """Look up an IANA time zone by name.

    Raises:
        TimezoneError: If the zone is unknown or the name is malformed
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise TimezoneError(f"unknown time zone {name!r}") from e


def format_local_time(event: SeismicEvent, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Render the event start time in the given zone as YYYY-MM-DD HH:MM:SS."""
    return event.start_time.astimezone(resolve_timezone(tz_name)).strftime(TIME_FORMAT)


def format_title(event: SeismicEvent, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Headline, e.g. '2024-01-01 08:00:00 有5.2级地震发生了'."""
    return f"{format_local_time(event, tz_name)} 有{event.magnitude:.1f}级地震发生了"


def format_body(event: SeismicEvent) -> str:
    """Detail line with epicenter, coordinates and depth."""
    return (
        f"地点:{event.epicenter},"
        f"东经:{event.longitude:f}°,"
        f"北纬:{event.latitude:f}°,"
        f"地震深度:{event.depth:.1f}公里"
    )


def format_alert(event: SeismicEvent, tz_name: str = DEFAULT_TIMEZONE) -> AlertMessage:
    """Format an event as a push notification.

    Pure function.

    Args:
        event: Event to format
        tz_name: IANA zone the start time is rendered in

    Returns:
        AlertMessage with title and body

    Raises:
        TimezoneError: If tz_name cannot be resolved
    """
    return AlertMessage(
        title=format_title(event, tz_name),
        body=format_body(event),
    )


def format_event_summary(event: SeismicEvent) -> str:
    """One-line log summary of an event."""
    return (
        f"#{event.event_id} rev {event.updates} M{event.magnitude:.1f} "
        f"{event.epicenter} at {event.start_time.isoformat()}"
    )
