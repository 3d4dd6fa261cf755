"""Unit tests for feed event parsing.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timezone

import pytest

from src.core.event import (
    EventParseError,
    SeismicEvent,
    is_newest_first,
    parse_event,
    parse_feed_response,
)


# Sample early-warning record as returned by the feed
SAMPLE_RECORD = {
    "eventId": 13475,
    "updates": 3,
    "latitude": 30.28,
    "longitude": 102.95,
    "depth": 12.0,
    "epicenter": "四川雅安市芦山县",
    "startAt": 1703001600000,  # 2023-12-19 16:00:00 UTC
    "updateAt": 1703001612000,
    "magnitude": 5.2,
    "insideNet": 1,
    "sations": 48,
}

SAMPLE_RESPONSE = {
    "code": 0,
    "message": "success",
    "data": [SAMPLE_RECORD],
}


def make_event(event_id: int, start_at: int) -> SeismicEvent:
    return SeismicEvent(
        event_id=event_id,
        updates=1,
        latitude=30.0,
        longitude=100.0,
        depth=10.0,
        epicenter="Test",
        start_at=start_at,
        update_at=start_at,
        magnitude=4.0,
    )


class TestParseEvent:
    """Tests for parse_event() pure function."""

    def test_parses_valid_record(self):
        """Should parse every field of a valid record."""
        result = parse_event(SAMPLE_RECORD)

        assert result.event_id == 13475
        assert result.updates == 3
        assert result.latitude == 30.28
        assert result.longitude == 102.95
        assert result.depth == 12.0
        assert result.epicenter == "四川雅安市芦山县"
        assert result.start_at == 1703001600000
        assert result.update_at == 1703001612000
        assert result.magnitude == 5.2
        assert result.inside_net == 1
        assert result.stations == 48

    def test_start_time_is_utc(self):
        """start_time should convert milliseconds to an aware UTC datetime."""
        result = parse_event(SAMPLE_RECORD)

        assert result.start_time == datetime(2023, 12, 19, 16, 0, 0, tzinfo=timezone.utc)

    def test_optional_counters_default_to_zero(self):
        """Missing provider counters should default to zero."""
        record = {k: v for k, v in SAMPLE_RECORD.items() if k not in ("insideNet", "sations")}

        result = parse_event(record)

        assert result.inside_net == 0
        assert result.stations == 0

    def test_update_at_defaults_to_start_at(self):
        """Missing updateAt should fall back to startAt."""
        record = {k: v for k, v in SAMPLE_RECORD.items() if k != "updateAt"}

        result = parse_event(record)

        assert result.update_at == result.start_at

    @pytest.mark.parametrize("field", ["eventId", "startAt", "magnitude"])
    def test_missing_required_field_raises(self, field):
        """Should raise if a required field is missing."""
        record = {k: v for k, v in SAMPLE_RECORD.items() if k != field}

        with pytest.raises(EventParseError, match=field):
            parse_event(record)

    def test_invalid_value_raises(self):
        """Should raise if a numeric field cannot be converted."""
        record = {**SAMPLE_RECORD, "magnitude": "strong"}

        with pytest.raises(EventParseError):
            parse_event(record)

    def test_non_object_raises(self):
        """Should raise for records that are not objects."""
        with pytest.raises(EventParseError):
            parse_event(["not", "a", "record"])

    def test_event_is_immutable(self):
        """SeismicEvent should be frozen."""
        result = parse_event(SAMPLE_RECORD)

        with pytest.raises(AttributeError):
            result.magnitude = 9.9


class TestParseFeedResponse:
    """Tests for parse_feed_response() pure function."""

    def test_parses_envelope(self):
        """Should parse code, message and events."""
        result = parse_feed_response(SAMPLE_RESPONSE)

        assert result.code == 0
        assert result.message == "success"
        assert len(result.events) == 1
        assert result.events[0].event_id == 13475

    def test_empty_data(self):
        """Empty data list should produce no events."""
        result = parse_feed_response({"data": []})

        assert result.events == ()

    def test_null_data(self):
        """Null or missing data should produce no events."""
        assert parse_feed_response({"code": 0, "data": None}).events == ()
        assert parse_feed_response({"code": 0}).events == ()

    def test_preserves_feed_order(self):
        """Events should stay in the order the feed returned them."""
        second = {**SAMPLE_RECORD, "eventId": 2, "startAt": 1703001500000}
        payload = {"data": [SAMPLE_RECORD, second]}

        result = parse_feed_response(payload)

        assert [e.event_id for e in result.events] == [13475, 2]

    def test_non_object_raises(self):
        """A JSON array body is not a valid response."""
        with pytest.raises(EventParseError):
            parse_feed_response([SAMPLE_RECORD])

    def test_data_not_list_raises(self):
        """A non-list data field is not a valid response."""
        with pytest.raises(EventParseError):
            parse_feed_response({"data": {"eventId": 1}})

    def test_malformed_record_raises(self):
        """One malformed record fails the whole page."""
        with pytest.raises(EventParseError):
            parse_feed_response({"data": [SAMPLE_RECORD, {"eventId": 2}]})


class TestIsNewestFirst:
    """Tests for the feed ordering contract check."""

    def test_newest_first(self):
        events = [make_event(3, 3000), make_event(2, 2000), make_event(1, 1000)]
        assert is_newest_first(events) is True

    def test_equal_start_times_allowed(self):
        events = [make_event(2, 2000), make_event(1, 2000)]
        assert is_newest_first(events) is True

    def test_oldest_first(self):
        events = [make_event(1, 1000), make_event(2, 2000)]
        assert is_newest_first(events) is False

    def test_empty_and_single(self):
        assert is_newest_first([]) is True
        assert is_newest_first([make_event(1, 1000)]) is True
