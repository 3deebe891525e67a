"""Work session bookkeeping: starting, pausing and estimate ownership.

Builds the partial-update payloads the ticket service expects. Time is
tracked as a remaining-seconds budget: starting stamps ``startedAt``,
pausing subtracts the elapsed time and clears it again.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from workboard.schedule.allocator import allocate
from workboard.schedule.duration import parse_estimate
from workboard.schedule.models import Ticket


@dataclass
class CurrentUser:
    """The person acting in the client."""
    name: str
    email: Optional[str] = None


def _has_file_output(value) -> bool:
    if isinstance(value, list):
        return len(value) > 0
    if isinstance(value, str):
        return value.strip() != ""
    return False


def missing_start_fields(ticket: Ticket) -> list[str]:
    """Required fields still empty before the ticket may be started."""
    missing = []
    if not (ticket.meta.team_est or "").strip():
        missing.append("Estimation")
    if not _has_file_output(ticket.meta.file_output):
        missing.append("File Output")
    if ticket.meta.proofread is None:
        missing.append("Proofread")
    return missing


def _estimate_seconds(ticket: Ticket) -> float:
    """Whole-ticket estimate in seconds, for initialising the budget."""
    return float(parse_estimate(ticket.meta.team_est) * 60)


def start_payload(ticket: Ticket, now: datetime) -> dict:
    """Update that moves ``ticket`` into in_process at ``now``.

    A resumed ticket keeps its remaining budget; a first start seeds both
    ``remainingSeconds`` and ``originalEstSeconds`` from the typed estimate.
    """
    meta = ticket.meta.to_payload()
    meta["startedAt"] = now.isoformat()
    if meta.get("remainingSeconds") is None:
        seconds = _estimate_seconds(ticket)
        meta["originalEstSeconds"] = meta.get("originalEstSeconds") or seconds
        meta["remainingSeconds"] = seconds
    return {"status": "in_process", "meta": meta}


def pause_payload(ticket: Ticket, now: datetime) -> dict:
    """Update that pauses ``ticket`` at ``now``, banking the time spent."""
    meta = ticket.meta.to_payload()

    # Without a stored budget, bank against this person's share, as the countdown shows it
    base = ticket.meta.remaining_seconds
    if base is None and ticket.meta.team_est:
        base = float(allocate(ticket) * 60)

    remaining = base
    started_at = ticket.meta.started_at
    if started_at and base is not None:
        elapsed = round((now - started_at).total_seconds())
        remaining = max(0, base - elapsed)

    meta.update({
        "remainingSeconds": remaining,
        "originalEstSeconds": meta.get("originalEstSeconds") or base,
        "pausedAt": now.isoformat(),
        "startedAt": None,
    })
    return {"status": "paused", "meta": meta}


def _same_person(value: Optional[str], user: CurrentUser) -> bool:
    if not value:
        return False
    normalized = value.strip().lower()
    candidates = {user.name.strip().lower()}
    if user.email:
        candidates.add(user.email.strip().lower())
    return normalized in candidates


def is_owner(ticket: Ticket, user: CurrentUser) -> bool:
    """Whether ``user`` owns ``ticket``.

    Precedence: the explicit owner field, then the legacy single assignee,
    then the first team member. Names compare case-insensitively and whole;
    there is no partial or e-mail local-part matching.
    """
    info = ticket.assigned_info
    if info.owner:
        return _same_person(info.owner, user)
    if info.emp_name:
        return _same_person(info.emp_name, user)
    if info.team_members:
        return _same_person(info.team_members[0], user)
    return False


def can_set_estimate(ticket: Ticket, user: CurrentUser) -> tuple[bool, str]:
    """Whether ``user`` may enter the estimate, with the reason when not."""
    if (ticket.meta.team_est or "").strip():
        return False, "Estimation has already been set and cannot be changed."
    if len(ticket.assigned_info.team_members) > 1 and not is_owner(ticket, user):
        owner = ticket.assigned_info.owner or "the owner"
        return False, f"Only the task owner ({owner}) can set the estimation for this task."
    return True, ""


def other_active_tickets(tickets: list[Ticket], ticket: Ticket) -> list[Ticket]:
    """in_process tickets other than ``ticket`` (to auto-pause before starting it)."""
    return [t for t in tickets if t.is_in_process and t.id != ticket.id]


def find_ticket(tickets: list[Ticket], ref: str) -> Optional[Ticket]:
    """Look a ticket up by its id, falling back to its job id."""
    for ticket in tickets:
        if ticket.id == ref:
            return ticket
    for ticket in tickets:
        if ticket.job_id == ref:
            return ticket
    return None
