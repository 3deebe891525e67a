"""Team availability board: one projected row per assignee.

Rows are sorted soonest-available first, which answers "who is free next".
A ticket with N assignees is deliberately projected once on each of the N
rows, using that person's share of the effort.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Iterable, Optional

from workboard.schedule.clock import WorkdayClock
from workboard.schedule.lanes import assign_lanes
from workboard.schedule.models import ScheduleRow, TeamMember, Ticket
from workboard.schedule.sequencer import sequence

logger = logging.getLogger(__name__)

# Statuses the availability board asks the ticket service for
AVAILABILITY_STATUSES = [
    "assigned",
    "in_process",
    "paused",
    "rf_qc",
    "qcd",
    "file_received",
    "sent",
    "cancelled",
]

ALL_STATUSES = "all"


def group_by_assignee(tickets: Iterable[Ticket]) -> dict[str, list[Ticket]]:
    """Map each assignee name to their tickets, in order of first appearance."""
    groups: dict[str, list[Ticket]] = {}
    for ticket in tickets:
        for name in ticket.assigned_info.team_members:
            groups.setdefault(name, []).append(ticket)
    return groups


def roster_by_name(team_members: Optional[Iterable[TeamMember]]) -> dict[str, TeamMember]:
    """Roster keyed by display name. On duplicate names the last entry wins."""
    return {member.name: member for member in team_members or []}


def build(
    tickets: Optional[Iterable[Ticket]],
    team_members: Optional[Iterable[TeamMember]],
    now: datetime,
    clock: Optional[WorkdayClock] = None,
) -> list[ScheduleRow]:
    """Project every assignee's queue for today.

    Args:
        tickets: Snapshot of tickets (None treated as empty)
        team_members: Roster used for day start times (None treated as empty)
        now: Wall-clock anchor for the projection
        clock: Workday model

    Returns:
        ScheduleRows sorted by last job end, earliest first
    """
    clock = clock or WorkdayClock()
    roster = roster_by_name(team_members)

    rows = []
    for name, member_tickets in group_by_assignee(tickets or []).items():
        member = roster.get(name)
        start_hhmm = member.start_time if member else clock.default_day_start
        if member is None:
            logger.debug(f"[SCHEDULE] No roster entry for '{name}', using {start_hhmm}")

        jobs = sequence(member_tickets, start_hhmm, now, clock=clock, assignee=name)
        lane_count = assign_lanes(jobs)

        if jobs:
            last_end = max(job.end_time for job in jobs)
        else:
            last_end = clock.shift_start(start_hhmm, now.date())

        rows.append(ScheduleRow(
            assignee_name=name,
            jobs=jobs,
            last_job_end_time=last_end,
            lane_count=lane_count,
        ))

    rows.sort(key=lambda row: row.last_job_end_time)
    logger.debug(f"[SCHEDULE] Built {len(rows)} row(s)")
    return rows


def filter_rows(rows: list[ScheduleRow], status: str) -> list[ScheduleRow]:
    """Keep only jobs in ``status``; rows left empty are dropped.

    Jobs keep their projected times and lanes from the unfiltered board.
    """
    if not status or status == ALL_STATUSES:
        return list(rows)

    filtered = []
    for row in rows:
        jobs = [job for job in row.jobs if job.status == status]
        if jobs:
            filtered.append(ScheduleRow(
                assignee_name=row.assignee_name,
                jobs=jobs,
                last_job_end_time=row.last_job_end_time,
                lane_count=row.lane_count,
            ))
    return filtered


def status_counts(rows: list[ScheduleRow]) -> Counter:
    """Number of projected jobs per status across all rows."""
    counts: Counter = Counter()
    for row in rows:
        for job in row.jobs:
            if job.status:
                counts[job.status] += 1
    return counts
