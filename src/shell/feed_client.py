"""Early-warning Feed Client - Imperative Shell.

This module handles HTTP communication with the seismic early-warning feed.
All I/O is contained here; parsing and selection are in the core module.
"""

import logging

import requests
import urllib3

from src.core.config import FeedConfig
from src.core.event import EventParseError, FeedResponse, parse_feed_response


logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Feed request, transport or decode failure."""


class FeedClient:
    """Client for fetching early-warning events.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        config: FeedConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize feed client.

        Args:
            config: Feed connection settings (defaults if not provided)
            session: HTTP session (created if not provided)
        """
        self.config = config or FeedConfig()
        self.session = session or requests.Session()
        self.session.verify = self.config.verify_tls

        if not self.config.verify_tls:
            logger.warning(
                "TLS certificate verification disabled for feed %s",
                self.config.base_url,
            )
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @property
    def url(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/earlywarnings"

    def fetch(self, start_at: int) -> FeedResponse:
        """Fetch events starting at the given cursor.

        This method performs HTTP I/O.

        Args:
            start_at: Cursor, epoch milliseconds

        Returns:
            Parsed FeedResponse (events in feed order)

        Raises:
            FetchError: If the request, status, JSON decode or parse fails
        """
        params = {
            "start_at": str(start_at),
            "updates": str(self.config.updates),
        }

        logger.debug("Fetching early warnings", extra={"params": params})

        try:
            response = self.session.get(
                self.url,
                params=params,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise FetchError(f"feed request failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"feed returned invalid JSON: {e}") from e

        try:
            result = parse_feed_response(payload)
        except EventParseError as e:
            raise FetchError(f"feed returned malformed data: {e}") from e

        logger.debug(
            "Fetched %d events from feed (code=%d)",
            len(result.events),
            result.code,
        )

        return result
