"""Single-person job sequencing.

Models one person as a FIFO queue with at most one job genuinely in flight.
The in-flight job keeps its real start time; everything else is laid out
back to back from the person's day start, skipping lunch. When a job is
already underway at lunch, the lunch hour is inserted inside it.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from workboard.schedule.allocator import allocate
from workboard.schedule.clock import WorkdayClock
from workboard.schedule.duration import MAX_JOB_MINUTES
from workboard.schedule.models import ProjectedJob, Ticket

logger = logging.getLogger(__name__)


def _sort_key(ticket: Ticket) -> tuple:
    """in_process first (by session start, else intake), then FIFO by intake.

    Tickets missing the relevant timestamp sort last within their group.
    """
    if ticket.is_in_process:
        ts = ticket.started_at or ticket.created_at
        group = 0
    else:
        ts = ticket.created_at
        group = 1
    return (group, ts is None, ts or datetime.min)


def order_tickets(tickets: Iterable[Ticket]) -> list[Ticket]:
    """Queue order for one person. Stable for equal keys."""
    return sorted(tickets, key=_sort_key)


def sequence(
    tickets: Iterable[Ticket],
    day_start_hhmm: Optional[str],
    now: datetime,
    clock: Optional[WorkdayClock] = None,
    assignee: Optional[str] = None,
) -> list[ProjectedJob]:
    """Project start/end times for one person's tickets, in processing order.

    Args:
        tickets: The person's tickets, any order
        day_start_hhmm: Person's "HH:MM" start; malformed or None uses the clock default
        now: Wall-clock anchor; only its date is used
        clock: Workday model (default lunch 13:00-14:00)
        assignee: Name stamped on the emitted jobs

    Returns:
        ProjectedJobs in chronological processing order
    """
    clock = clock or WorkdayClock()
    cursor = clock.day_start(day_start_hhmm, now.date())
    active_slot_taken = False
    jobs = []

    for ticket in order_tickets(tickets):
        estimate = max(0, allocate(ticket))
        if estimate > MAX_JOB_MINUTES:
            logger.warning(
                f"[SCHEDULE] {ticket.job_id}: {estimate} min estimate capped at {MAX_JOB_MINUTES}"
            )
            estimate = MAX_JOB_MINUTES
        cursor = clock.next_available(cursor)

        if ticket.is_in_process and ticket.started_at and not active_slot_taken:
            start = ticket.started_at
            active_slot_taken = True
        else:
            if ticket.is_in_process:
                logger.debug(
                    f"[SCHEDULE] {assignee or '?'}: {ticket.job_id} also in_process, queued"
                )
            start = cursor

        try:
            end = start + timedelta(minutes=estimate)
            lunch_start, _ = clock.lunch_window(start.date())
            if start < lunch_start and end > lunch_start:
                end += clock.lunch_length
        except OverflowError:
            logger.warning(f"[SCHEDULE] {ticket.job_id}: start {start} out of range, skipped")
            continue

        jobs.append(ProjectedJob(
            ticket=ticket,
            estimate_minutes=estimate,
            start_time=start,
            end_time=end,
            assignee=assignee,
        ))
        cursor = end

    return jobs
