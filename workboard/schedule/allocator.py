"""Per-assignee share of a ticket's effort.

A ticket assigned to several people is treated as evenly parallelisable work:
each assignee gets round(base / n) minutes. Shares are not reconciled, so
they may not sum exactly to the base.
"""

import math
from dataclasses import dataclass
from typing import Optional

from workboard.schedule.duration import (
    format_estimate,
    parse_estimate,
    round_half_away,
)
from workboard.schedule.models import Ticket


@dataclass
class EstimateShare:
    """Display breakdown of a ticket estimate across its assignees."""
    total: str
    per_person: str
    count: int
    per_person_hours: float


def _clamp_minutes(value: float) -> float:
    if value is None or math.isnan(value) or value < 0:
        return 0
    return value


def base_minutes(ticket: Ticket) -> int:
    """Whole-ticket minutes still to do.

    Live remaining time wins over the typed estimate once work has started.
    """
    remaining = ticket.meta.remaining_seconds
    if remaining is not None:
        return round_half_away(_clamp_minutes(remaining / 60))
    return parse_estimate(ticket.meta.team_est)


def allocate(ticket: Ticket) -> int:
    """Minutes of this ticket that fall to each individual assignee."""
    base = base_minutes(ticket)
    count = ticket.assigned_info.assignee_count
    if count > 1:
        return round_half_away(base / count)
    return base


def share_estimate(ticket: Ticket) -> Optional[EstimateShare]:
    """Per-person breakdown of the typed estimate, None when no estimate is set."""
    total = ticket.meta.team_est
    if not total:
        return None

    count = len(ticket.assigned_info.team_members)
    if count <= 1:
        minutes = parse_estimate(total)
        return EstimateShare(total=total, per_person=total, count=1,
                             per_person_hours=round(minutes / 60, 2))

    per_person_minutes = parse_estimate(total) / count
    hours = int(per_person_minutes // 60)
    mins = round_half_away(per_person_minutes % 60)
    if mins == 60:
        hours, mins = hours + 1, 0
    return EstimateShare(
        total=total,
        per_person=format_estimate(hours, f"{mins:02d}"),
        count=count,
        per_person_hours=round(per_person_minutes / 60, 2),
    )
