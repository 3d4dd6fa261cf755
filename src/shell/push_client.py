"""Push Notification Client - Imperative Shell.

This module handles HTTP communication with a Bark-style push provider
(``GET <base>/<key>/<title>/<body>``). All I/O is contained here; message
formatting is in the core module.
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import requests
import urllib3

from src.core.config import PushConfig


logger = logging.getLogger(__name__)


class NotifyError(Exception):
    """Notification could not be rendered or delivered.

    Attributes:
        status_code: HTTP status when the provider answered, else 0
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class PushResponse:
    """Response from the push provider.

    Attributes:
        success: Whether the notification was accepted
        status_code: HTTP status code (0 if no response)
        body: Raw response body text
        error: Error message if failed
    """
    success: bool
    status_code: int
    body: str = ""
    error: str | None = None


class PushClient:
    """Client for sending push notifications.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        config: PushConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize push client.

        Args:
            config: Push sink settings (defaults if not provided)
            session: HTTP session (created if not provided)
        """
        self.config = config or PushConfig()
        self.session = session or requests.Session()
        self.session.verify = self.config.verify_tls

        if not self.config.verify_tls:
            logger.warning(
                "TLS certificate verification disabled for push provider %s",
                self.config.base_url,
            )
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def build_url(self, key: str, title: str, body: str) -> str:
        """Build the push URL with every segment percent-encoded."""
        segments = [quote(part, safe="") for part in (key, title, body)]
        return "/".join([self.config.base_url.rstrip("/"), *segments])

    def _request(self, url: str) -> requests.Response:
        """Perform the GET and read the body.

        Raises:
            NotifyError: On transport failure, non-2xx status or unreadable body
        """
        try:
            response = self.session.get(url, timeout=self.config.timeout_seconds)
        except requests.RequestException as e:
            raise NotifyError(f"push request failed: {e}") from e

        try:
            text = response.text
        except (requests.RequestException, UnicodeDecodeError) as e:
            raise NotifyError(f"failed to read push response: {e}") from e

        if not 200 <= response.status_code < 300:
            raise NotifyError(
                f"push provider returned {response.status_code}: {text}",
                status_code=response.status_code,
            )

        return response

    def send(self, key: str, title: str, body: str) -> PushResponse:
        """Send a notification.

        This method performs HTTP I/O.

        Args:
            key: Push provider credential
            title: Notification title
            body: Notification body

        Returns:
            PushResponse indicating success or failure
        """
        logger.debug("Sending push notification: %s", title)

        try:
            response = self._request(self.build_url(key, title, body))
        except NotifyError as e:
            return PushResponse(
                success=False,
                status_code=e.status_code,
                error=str(e),
            )

        return PushResponse(
            success=True,
            status_code=response.status_code,
            body=response.text,
        )
