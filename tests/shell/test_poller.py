"""Tests for the Poller.

The feed client is mocked; time is injected through the clock callable.
"""

import threading
from unittest.mock import Mock

import pytest

from src.core.config import Config
from src.core.event import FeedResponse, SeismicEvent
from src.core.selection import PollOutcome
from src.handoff import Handoff
from src.poller import Poller
from src.shell.feed_client import FetchError


NOW = 1_700_000_000.0
NOW_MS = int(NOW * 1000)
MINUTE_MS = 60 * 1000


def make_event(start_at: int, event_id: int = 1, updates: int = 1, magnitude: float = 5.2):
    return SeismicEvent(
        event_id=event_id,
        updates=updates,
        latitude=30.28,
        longitude=102.95,
        depth=10.0,
        epicenter="Test",
        start_at=start_at,
        update_at=start_at,
        magnitude=magnitude,
    )


def feed_page(*events):
    return FeedResponse(code=0, message="success", events=tuple(events))


@pytest.fixture
def config():
    return Config(push_key="key", poll_interval_seconds=0.01)


@pytest.fixture
def feed_client():
    client = Mock()
    client.fetch.return_value = feed_page()
    return client


@pytest.fixture
def handoff():
    return Handoff(poll_timeout=0.01)


@pytest.fixture
def stop():
    return threading.Event()


@pytest.fixture
def poller(config, feed_client, handoff):
    return Poller(config, feed_client, handoff, clock=lambda: NOW)


class TestPollOnce:
    """Tests for Poller.poll_once()."""

    def test_empty_response(self, poller, feed_client, handoff, stop):
        """Empty page: cursor stays 0, nothing sent."""
        outcome = poller.poll_once(stop)

        assert outcome is PollOutcome.EMPTY
        assert poller.last_ts == 0
        assert handoff.pending() == 0
        feed_client.fetch.assert_called_once_with(start_at=0)

    def test_fresh_event_emitted(self, poller, feed_client, handoff, stop):
        """Event 10 minutes old with M5.2: emitted, cursor advances."""
        event = make_event(NOW_MS - 10 * MINUTE_MS, magnitude=5.2)
        feed_client.fetch.return_value = feed_page(event)

        outcome = poller.poll_once(stop)

        assert outcome is PollOutcome.EMITTED
        assert poller.last_ts == event.start_at
        assert handoff.receive(stop) == event

    def test_stale_event_not_emitted(self, poller, feed_client, handoff, stop):
        """Event 40 minutes old: not emitted, cursor still updates."""
        event = make_event(NOW_MS - 40 * MINUTE_MS)
        feed_client.fetch.return_value = feed_page(event)

        outcome = poller.poll_once(stop)

        assert outcome is PollOutcome.STALE
        assert poller.last_ts == event.start_at
        assert handoff.pending() == 0

    def test_fetch_failure(self, poller, feed_client, handoff, stop):
        """Fetch error: cursor unchanged, nothing sent."""
        poller.last_ts = 12345
        feed_client.fetch.side_effect = FetchError("boom")

        outcome = poller.poll_once(stop)

        assert outcome is PollOutcome.FETCH_FAILED
        assert poller.last_ts == 12345
        assert handoff.pending() == 0

    def test_uses_cursor_for_next_fetch(self, poller, feed_client, handoff, stop):
        event = make_event(NOW_MS - 40 * MINUTE_MS)
        feed_client.fetch.return_value = feed_page(event)
        poller.poll_once(stop)

        feed_client.fetch.return_value = feed_page()
        poller.poll_once(stop)

        assert feed_client.fetch.call_args_list[-1].kwargs == {"start_at": event.start_at}

    def test_emits_only_first_event(self, poller, feed_client, handoff, stop):
        first = make_event(NOW_MS - 1 * MINUTE_MS, event_id=2)
        second = make_event(NOW_MS - 2 * MINUTE_MS, event_id=1)
        feed_client.fetch.return_value = feed_page(first, second)

        poller.poll_once(stop)

        assert handoff.receive(stop) == first
        assert handoff.pending() == 0

    def test_out_of_order_feed_still_uses_first(self, poller, feed_client, handoff, stop, caplog):
        """Feed contract violation is logged but element 0 is still used."""
        older = make_event(NOW_MS - 2 * MINUTE_MS, event_id=1)
        newer = make_event(NOW_MS - 1 * MINUTE_MS, event_id=2)
        feed_client.fetch.return_value = feed_page(older, newer)

        outcome = poller.poll_once(stop)

        assert outcome is PollOutcome.EMITTED
        assert handoff.receive(stop) == older
        assert "not ordered newest first" in caplog.text

    def test_fresh_event_reported_again_is_emitted_again(self, poller, feed_client, handoff, stop):
        """The feed re-reporting the same fresh first event forwards it again."""
        event = make_event(NOW_MS - 1 * MINUTE_MS)
        feed_client.fetch.return_value = feed_page(event)

        assert poller.poll_once(stop) is PollOutcome.EMITTED
        assert handoff.receive(stop) == event

        assert poller.poll_once(stop) is PollOutcome.EMITTED
        assert handoff.receive(stop) == event
        assert poller.last_ts == event.start_at

    def test_cursor_never_regresses(self, poller, feed_client, stop):
        poller.last_ts = NOW_MS - 1 * MINUTE_MS
        feed_client.fetch.return_value = feed_page(make_event(NOW_MS - 5 * MINUTE_MS))

        outcome = poller.poll_once(stop)

        assert outcome is PollOutcome.DUPLICATE
        assert poller.last_ts == NOW_MS - 1 * MINUTE_MS

    def test_cancelled_while_handoff_full(self, poller, feed_client, handoff, stop):
        """A full hand-off plus cancellation returns without emitting."""
        handoff.send(make_event(NOW_MS - 3 * MINUTE_MS, event_id=99), stop)
        event = make_event(NOW_MS - 1 * MINUTE_MS)
        feed_client.fetch.return_value = feed_page(event)

        stop.set()
        outcome = poller.poll_once(stop)

        assert outcome is PollOutcome.CANCELLED
        assert handoff.pending() == 1
        assert poller.last_ts == event.start_at


class TestPollerRun:
    """Tests for Poller.run()."""

    def test_exits_when_stopped_during_wait(self, config, feed_client, handoff, stop):
        """Cancellation while waiting for the timer exits without polling."""
        config.poll_interval_seconds = 60
        poller = Poller(config, feed_client, handoff, clock=lambda: NOW)
        thread = threading.Thread(target=poller.run, args=(stop,))
        thread.start()

        stop.set()
        thread.join(timeout=2)

        assert not thread.is_alive()
        feed_client.fetch.assert_not_called()
        assert handoff.pending() == 0

    def test_keeps_polling_after_failures(self, poller, feed_client, stop):
        """Fetch errors do not stop the loop."""
        calls = []

        def fetch(start_at):
            calls.append(start_at)
            if len(calls) >= 3:
                stop.set()
            raise FetchError("down")

        feed_client.fetch.side_effect = fetch

        poller.run(stop)

        assert len(calls) >= 3

    def test_unexpected_error_does_not_stop_loop(self, poller, feed_client, stop):
        calls = []

        def fetch(start_at):
            calls.append(start_at)
            if len(calls) >= 2:
                stop.set()
                return feed_page()
            raise RuntimeError("unexpected")

        feed_client.fetch.side_effect = fetch

        poller.run(stop)

        assert len(calls) >= 2
