"""Single-slot hand-off between the poller and the notifier.

One producer, one consumer, at most one event in flight. Both sides block
until the other is ready or the shared stop event is set.
"""

import queue
import threading

from src.core.event import SeismicEvent


# How often blocked callers re-check the stop event (seconds)
DEFAULT_POLL_TIMEOUT = 0.5


class Handoff:
    """Bounded (capacity 1) FIFO channel of SeismicEvent."""

    def __init__(self, poll_timeout: float = DEFAULT_POLL_TIMEOUT) -> None:
        self._queue: queue.Queue[SeismicEvent] = queue.Queue(maxsize=1)
        self.poll_timeout = poll_timeout

    def send(self, event: SeismicEvent, stop: threading.Event) -> bool:
        """Block until the event is accepted or stop is set.

        Returns:
            True if the event was handed off, False if cancelled first
        """
        while not stop.is_set():
            try:
                self._queue.put(event, timeout=self.poll_timeout)
                return True
            except queue.Full:
                continue
        return False

    def receive(self, stop: threading.Event) -> SeismicEvent | None:
        """Block until an event arrives or stop is set.

        Returns:
            The next event, or None once stop is set. A pending event is
            left in place when cancelled.
        """
        while not stop.is_set():
            try:
                return self._queue.get(timeout=self.poll_timeout)
            except queue.Empty:
                continue
        return None

    def pending(self) -> int:
        """Number of events waiting for the consumer (0 or 1)."""
        return self._queue.qsize()
