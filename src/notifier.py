"""Notifier - the consumer side of the alert pipeline.

Receives events from the hand-off, renders them and pushes them to the
notification sink. A failed delivery is logged and dropped.
"""

import logging
import threading

from src.core.config import Config
from src.core.event import SeismicEvent
from src.core.formatter import TimezoneError, format_alert, format_event_summary
from src.handoff import Handoff
from src.shell.push_client import NotifyError, PushClient, PushResponse


logger = logging.getLogger(__name__)


class Notifier:
    """Delivers push notifications for events handed over by the poller."""

    def __init__(
        self,
        config: Config,
        push_client: PushClient,
        handoff: Handoff,
    ) -> None:
        self.config = config
        self.push_client = push_client
        self.handoff = handoff

    def deliver(self, event: SeismicEvent) -> PushResponse:
        """Format and send one notification.

        Never raises; failures are logged and reported in the response.
        Events are not retried.

        Args:
            event: Event to notify about

        Returns:
            PushResponse from the sink (or a failed one if formatting failed)
        """
        try:
            message = format_alert(event, self.config.timezone)
        except TimezoneError as e:
            error = NotifyError(f"failed to format notification: {e}")
            logger.error("Send notification failed: %s", error)
            return PushResponse(success=False, status_code=0, error=str(error))

        response = self.push_client.send(self.config.push_key, message.title, message.body)

        if response.success:
            logger.info("Notification sent successfully: %s", response.body)
        else:
            logger.error(
                "Send notification failed for %s: %s",
                format_event_summary(event),
                response.error,
            )

        return response

    def run(self, stop: threading.Event) -> None:
        """Deliver events until stop is set.

        Returns immediately on cancellation; an event still waiting in the
        hand-off is not drained.
        """
        logger.info("Notifier started")

        while True:
            event = self.handoff.receive(stop)
            if event is None:
                break
            try:
                self.deliver(event)
            except Exception:
                logger.exception("Unexpected error delivering %s", format_event_summary(event))

        logger.info("Notifier exiting")
