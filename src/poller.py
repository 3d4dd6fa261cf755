"""Poller - the producer side of the alert pipeline.

Fetches the feed on a fixed interval, applies the pure selection policy
from core.selection and hands at most one event per tick to the notifier.
"""

import logging
import threading
import time
from typing import Callable

from src.core.config import Config
from src.core.event import SeismicEvent, is_newest_first
from src.core.formatter import format_event_summary
from src.core.selection import PollOutcome, select_candidate
from src.handoff import Handoff
from src.shell.feed_client import FeedClient, FetchError


logger = logging.getLogger(__name__)


class Poller:
    """Polls the feed and forwards fresh events.

    Owns the poll cursor (``last_ts``). The cursor starts at zero, moves
    only when a candidate is inspected, and never moves backwards.
    """

    def __init__(
        self,
        config: Config,
        feed_client: FeedClient,
        handoff: Handoff,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize poller.

        Args:
            config: Application configuration
            feed_client: Client used to query the feed
            handoff: Channel to the notifier
            clock: Returns current wall-clock time in seconds since the epoch
        """
        self.config = config
        self.feed_client = feed_client
        self.handoff = handoff
        self.clock = clock
        self.last_ts = 0

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _fetch(self) -> tuple[SeismicEvent, ...] | None:
        try:
            response = self.feed_client.fetch(start_at=self.last_ts)
        except FetchError as e:
            logger.error("Failed to query feed: %s", e)
            return None
        return response.events

    def poll_once(self, stop: threading.Event) -> PollOutcome:
        """Run a single poll tick.

        Args:
            stop: Shared cancellation signal

        Returns:
            PollOutcome describing what happened
        """
        events = self._fetch()
        if events is None:
            return PollOutcome.FETCH_FAILED

        if events:
            logger.info("Found %d events", len(events))
            if not is_newest_first(events):
                logger.warning("Feed events not ordered newest first; using the first one")

        decision = select_candidate(
            events,
            cursor=self.last_ts,
            now_ms=self._now_ms(),
            threshold_ms=self.config.staleness_threshold_ms,
        )
        self.last_ts = decision.cursor

        if decision.outcome is PollOutcome.EMPTY:
            logger.debug("No new events")
            return decision.outcome

        summary = format_event_summary(decision.candidate)

        if decision.outcome is PollOutcome.DUPLICATE:
            logger.debug("Skipping event older than cursor: %s", summary)
            return decision.outcome

        if decision.outcome is PollOutcome.STALE:
            logger.info(
                "Latest event is out of date (%.0fs old): %s",
                decision.age_ms / 1000,
                summary,
            )
            return decision.outcome

        if not self.handoff.send(decision.candidate, stop):
            logger.info("Cancelled before event %s was handed off", summary)
            return PollOutcome.CANCELLED

        logger.info("Emitted event %s", summary)
        return PollOutcome.EMITTED

    def run(self, stop: threading.Event) -> None:
        """Poll until stop is set.

        The interval is measured from the end of one tick to the start of
        the next, so a slow fetch delays every later tick.
        """
        logger.info("Poller started (interval %.1fs)", self.config.poll_interval_seconds)

        while not stop.wait(self.config.poll_interval_seconds):
            try:
                self.poll_once(stop)
            except Exception:
                logger.exception("Unexpected error during poll tick")

        logger.info("Poller exiting")
