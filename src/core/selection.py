"""Candidate selection logic - Pure functions.

Decides, for one poll tick, which event (if any) is forwarded to the
notifier and where the poll cursor moves. The only state involved is the
cursor, which the poller owns and passes in explicitly.
"""

from dataclasses import dataclass
from enum import Enum

from src.core.event import SeismicEvent


# Events older than this are not worth a push notification
DEFAULT_STALENESS_THRESHOLD_MS = 30 * 60 * 1000


class PollOutcome(Enum):
    """What happened during a single poll tick."""
    FETCH_FAILED = "fetch_failed"
    EMPTY = "empty"
    STALE = "stale"
    DUPLICATE = "duplicate"
    EMITTED = "emitted"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PollDecision:
    """Result of evaluating a feed page.

    Attributes:
        outcome: EMITTED if the candidate should be sent, otherwise the
            rejection reason (EMPTY, STALE or DUPLICATE)
        cursor: Cursor value to use for the next fetch
        candidate: The event that was inspected (None when empty)
        age_ms: Age of the candidate at decision time
    """
    outcome: PollOutcome
    cursor: int
    candidate: SeismicEvent | None = None
    age_ms: int = 0

    @property
    def should_emit(self) -> bool:
        return self.outcome is PollOutcome.EMITTED


def is_stale(event: SeismicEvent, now_ms: int, threshold_ms: int) -> bool:
    """Return True if the event started more than threshold_ms before now.

    Pure function. An event exactly at the threshold is still fresh.
    """
    return now_ms - event.start_at > threshold_ms


def select_candidate(
    events: tuple[SeismicEvent, ...] | list[SeismicEvent],
    cursor: int,
    now_ms: int,
    threshold_ms: int = DEFAULT_STALENESS_THRESHOLD_MS,
) -> PollDecision:
    """Decide what to do with one page of feed results.

    Pure function. The feed lists events newest first, so only the first
    element is a candidate. The cursor advances to the candidate's start
    even when the candidate is rejected, so a stale leading event is not
    re-inspected forever. The cursor never moves backwards.

    Args:
        events: Events in feed order
        cursor: Current cursor (epoch ms)
        now_ms: Current wall-clock time (epoch ms)
        threshold_ms: Staleness threshold in milliseconds

    Returns:
        PollDecision describing the outcome and the next cursor
    """
    if not events:
        return PollDecision(outcome=PollOutcome.EMPTY, cursor=cursor)

    candidate = events[0]
    next_cursor = max(cursor, candidate.start_at)
    age_ms = now_ms - candidate.start_at

    if candidate.start_at < cursor:
        outcome = PollOutcome.DUPLICATE
    elif is_stale(candidate, now_ms, threshold_ms):
        outcome = PollOutcome.STALE
    else:
        outcome = PollOutcome.EMITTED

    return PollDecision(
        outcome=outcome,
        cursor=next_cursor,
        candidate=candidate,
        age_ms=age_ms,
    )
