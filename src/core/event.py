"""Seismic event data models and parsing - Pure functions.

This module turns decoded early-warning feed JSON into typed SeismicEvent
objects. All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


class EventParseError(ValueError):
    """Raised when a feed record cannot be turned into a SeismicEvent."""


@dataclass(frozen=True)
class SeismicEvent:
    """Immutable seismic event report.

    Attributes:
        event_id: Feed-assigned event identifier
        updates: Revision count of this report
        latitude: Epicenter latitude (degrees)
        longitude: Epicenter longitude (degrees)
        depth: Depth in kilometers
        epicenter: Human-readable epicenter name
        start_at: Event start, epoch milliseconds
        update_at: Last revision time, epoch milliseconds
        magnitude: Estimated magnitude
        inside_net: Provider network counter (opaque)
        stations: Provider station counter (opaque)
    """
    event_id: int
    updates: int
    latitude: float
    longitude: float
    depth: float
    epicenter: str
    start_at: int
    update_at: int
    magnitude: float
    inside_net: int = 0
    stations: int = 0

    @property
    def start_time(self) -> datetime:
        """Event start as an aware UTC datetime."""
        return datetime.fromtimestamp(self.start_at / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class FeedResponse:
    """Decoded feed envelope.

    Attributes:
        code: Provider status code
        message: Provider status message
        events: Events in feed order (newest first by contract)
    """
    code: int
    message: str
    events: tuple[SeismicEvent, ...] = ()


def parse_event(record: dict[str, Any]) -> SeismicEvent:
    """Parse a single feed record into a SeismicEvent.

    Pure function.

    Args:
        record: One element of the feed's ``data`` array

    Returns:
        Parsed SeismicEvent

    Raises:
        EventParseError: If a required field is missing or has the wrong type
    """
    if not isinstance(record, dict):
        raise EventParseError(f"event record must be an object, got {type(record).__name__}")

    try:
        start_at = int(record["startAt"])
        return SeismicEvent(
            event_id=int(record["eventId"]),
            updates=int(record.get("updates", 0)),
            latitude=float(record.get("latitude", 0.0)),
            longitude=float(record.get("longitude", 0.0)),
            depth=float(record.get("depth", 0.0)),
            epicenter=str(record.get("epicenter", "")),
            start_at=start_at,
            update_at=int(record.get("updateAt", start_at)),
            magnitude=float(record["magnitude"]),
            inside_net=int(record.get("insideNet", 0)),
            # Upstream spells this field "sations"
            stations=int(record.get("sations", 0)),
        )
    except KeyError as e:
        raise EventParseError(f"event record missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise EventParseError(f"event record has invalid value: {e}") from e


def parse_feed_response(payload: Any) -> FeedResponse:
    """Parse a decoded feed body into a FeedResponse.

    Pure function. A missing or null ``data`` key means no events.

    Args:
        payload: Decoded JSON body

    Returns:
        FeedResponse with events in feed order

    Raises:
        EventParseError: If the envelope or any record is malformed
    """
    if not isinstance(payload, dict):
        raise EventParseError(f"feed response must be an object, got {type(payload).__name__}")

    data = payload.get("data") or []
    if not isinstance(data, list):
        raise EventParseError("feed response 'data' must be a list")

    try:
        code = int(payload.get("code", 0))
    except (TypeError, ValueError) as e:
        raise EventParseError(f"feed response has invalid code: {e}") from e

    return FeedResponse(
        code=code,
        message=str(payload.get("message", "")),
        events=tuple(parse_event(record) for record in data),
    )


def is_newest_first(events: tuple[SeismicEvent, ...] | list[SeismicEvent]) -> bool:
    """Check the feed's ordering contract (non-increasing start_at).

    Pure function.
    """
    return all(
        earlier.start_at >= later.start_at
        for earlier, later in zip(events, events[1:])
    )
