"""Live countdown for the single active job.

Purely derived from the ticket and wall-clock ``now``: nothing is stored
between ticks except which ticket has already had its completion notice.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from workboard.schedule.allocator import allocate
from workboard.schedule.duration import MAX_JOB_MINUTES, round_half_away
from workboard.schedule.models import Ticket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CountdownState:
    remaining_seconds: int
    end_instant: Optional[datetime]
    percent: int


NEUTRAL = CountdownState(remaining_seconds=0, end_instant=None, percent=0)


def find_active_ticket(tickets: Iterable[Ticket]) -> Optional[Ticket]:
    """First in_process ticket, or None."""
    for ticket in tickets or []:
        if ticket.is_in_process:
            return ticket
    return None


def baseline_seconds(ticket: Ticket) -> Optional[float]:
    """Remaining seconds as of the most recent start, None if unknown.

    A stored ``remainingSeconds`` is authoritative. Before the first pause it
    may be absent, in which case this person's share of the estimate is used.
    Either is capped at MAX_JOB_MINUTES.
    """
    remaining = ticket.meta.remaining_seconds
    if remaining is not None:
        return min(float(MAX_JOB_MINUTES * 60), max(0.0, remaining))
    if ticket.meta.team_est:
        return float(min(MAX_JOB_MINUTES, max(0, allocate(ticket))) * 60)
    return None


def compute(ticket: Optional[Ticket], now: datetime) -> CountdownState:
    """Countdown for ``ticket`` at ``now``, neutral when it cannot be computed."""
    if ticket is None or not ticket.is_in_process:
        return NEUTRAL

    baseline = baseline_seconds(ticket)
    started_at = ticket.meta.started_at
    if baseline is None or started_at is None:
        return NEUTRAL

    try:
        end_instant = started_at + timedelta(seconds=baseline)
    except OverflowError:
        return NEUTRAL
    remaining = max(0, round_half_away((end_instant - now).total_seconds()))

    percent = 0
    if baseline > 0:
        percent = min(100, round_half_away((baseline - remaining) / baseline * 100))
        percent = max(0, percent)

    return CountdownState(remaining_seconds=remaining, end_instant=end_instant, percent=percent)


class LiveCountdown:
    """Per-second countdown with a one-time completion callback per ticket."""

    def __init__(self, on_complete: Optional[Callable[[Ticket], None]] = None):
        self.on_complete = on_complete
        self._notified_ticket_id: Optional[str] = None

    def tick(self, active_ticket: Optional[Ticket], now: datetime) -> CountdownState:
        if active_ticket is None:
            self._notified_ticket_id = None
            return NEUTRAL

        state = compute(active_ticket, now)

        if (state.end_instant is not None
                and state.remaining_seconds <= 0
                and active_ticket.id != self._notified_ticket_id):
            self._notified_ticket_id = active_ticket.id
            logger.info(f"[COUNTDOWN] Estimation completed for {active_ticket.job_id}")
            if self.on_complete:
                self.on_complete(active_ticket)

        return state
