"""Availability projection core.

The sole entry point for the board is ``build(tickets, team_members, now)``;
``LiveCountdown.tick(ticket, now)`` drives the per-second active-job display.
Everything here is pure, synchronous and recomputed from scratch per refresh.
"""

from workboard.schedule.aggregator import (
    ALL_STATUSES,
    AVAILABILITY_STATUSES,
    build,
    filter_rows,
    group_by_assignee,
    status_counts,
)
from workboard.schedule.allocator import EstimateShare, allocate, share_estimate
from workboard.schedule.clock import WorkdayClock
from workboard.schedule.countdown import (
    NEUTRAL,
    CountdownState,
    LiveCountdown,
    find_active_ticket,
)
from workboard.schedule.duration import (
    format_countdown,
    format_duration,
    format_estimate,
    parse_estimate,
)
from workboard.schedule.lanes import assign_lanes, row_height
from workboard.schedule.models import (
    AssignedInfo,
    ProjectedJob,
    ScheduleRow,
    TeamMember,
    Ticket,
    TicketMeta,
)
from workboard.schedule.sequencer import sequence

__all__ = [
    # aggregator
    "ALL_STATUSES",
    "AVAILABILITY_STATUSES",
    "build",
    "filter_rows",
    "group_by_assignee",
    "status_counts",
    # allocator
    "EstimateShare",
    "allocate",
    "share_estimate",
    # clock
    "WorkdayClock",
    # countdown
    "NEUTRAL",
    "CountdownState",
    "LiveCountdown",
    "find_active_ticket",
    # duration
    "format_countdown",
    "format_duration",
    "format_estimate",
    "parse_estimate",
    # lanes
    "assign_lanes",
    "row_height",
    # models
    "AssignedInfo",
    "ProjectedJob",
    "ScheduleRow",
    "TeamMember",
    "Ticket",
    "TicketMeta",
    # sequencer
    "sequence",
]
