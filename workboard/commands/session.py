"""
wb start / wb pause / wb estimate - Work session actions on a ticket.
"""

import dataclasses
import logging
from datetime import datetime

from workboard.lib.api import ApiError
from workboard.lib.config import ClientConfig
from workboard.lib.snapshot import SnapshotError
from workboard.schedule.allocator import share_estimate
from workboard.schedule.duration import format_estimate, split_estimate
from workboard.workflow.fsm import InvalidTransition, TicketFSM
from workboard.workflow.session import (
    CurrentUser,
    can_set_estimate,
    find_ticket,
    missing_start_fields,
    other_active_tickets,
    pause_payload,
    start_payload,
)

logger = logging.getLogger(__name__)


def _load_ticket(source, ref: str):
    tickets = source.list_tickets()
    ticket = find_ticket(tickets, ref)
    if ticket is None:
        print(f"ERROR: Ticket '{ref}' not found")
    return ticket, tickets


def cmd_start(args, config: ClientConfig, source, now: datetime = None) -> int:
    """Start (or resume) a ticket, pausing the member's other running job first."""
    now = now or datetime.now()

    try:
        ticket, tickets = _load_ticket(source, args.ticket)
        if ticket is None:
            return 2

        missing = missing_start_fields(ticket)
        if missing:
            print(f"ERROR: Please fill in the required fields before starting: {', '.join(missing)}")
            return 1

        trigger = "resume" if ticket.status == "paused" else "start"
        try:
            TicketFSM(ticket).fire(trigger)
        except InvalidTransition as e:
            print(f"ERROR: {e}")
            return 1

        member = args.member or (ticket.assigned_info.team_members or [None])[0]
        for other in other_active_tickets(tickets, ticket):
            if member and member not in other.assigned_info.team_members:
                continue
            logger.info(f"[SESSION] Auto-pausing {other.job_id} before starting {ticket.job_id}")
            source.update_ticket(other.id, pause_payload(other, now))
            print(f"Paused: {other.job_id}")

        source.update_ticket(ticket.id, start_payload(ticket, now))
    except (ApiError, SnapshotError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Started: {ticket.job_id}")
    return 0


def cmd_pause(args, config: ClientConfig, source, now: datetime = None) -> int:
    """Pause a running ticket, banking the time spent."""
    now = now or datetime.now()

    try:
        ticket, _ = _load_ticket(source, args.ticket)
        if ticket is None:
            return 2

        try:
            TicketFSM(ticket).fire("pause")
        except InvalidTransition as e:
            print(f"ERROR: {e}")
            return 1

        source.update_ticket(ticket.id, pause_payload(ticket, now))
    except (ApiError, SnapshotError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Paused: {ticket.job_id}")
    return 0


def _show_estimate(ticket, user) -> int:
    """Print the current estimate as picker values, and whether it can be set."""
    hours, minutes = split_estimate(ticket.meta.team_est)
    if ticket.meta.team_est:
        print(f"{ticket.job_id}: {ticket.meta.team_est} (hours={hours}, minutes={minutes})")
    else:
        print(f"{ticket.job_id}: no estimate set")

    if user is not None:
        allowed, reason = can_set_estimate(ticket, user)
        print("  You can set it" if allowed else f"  {reason}")
    return 0


def cmd_estimate(args, config: ClientConfig, source) -> int:
    """Show or set a ticket's estimate.

    Without hours and minutes the current value is shown. Setting is allowed
    once, and only by the owner on shared tickets.
    """
    user = CurrentUser(args.user, args.email) if args.user else None
    showing = args.hours is None and args.minutes is None

    if not showing:
        if args.hours is None or args.minutes is None:
            print("ERROR: Give both hours and minutes")
            return 2
        if user is None:
            print("ERROR: --user is required to set an estimate")
            return 2
        text = format_estimate(args.hours, args.minutes)
        if not text:
            print("ERROR: Estimation must be greater than zero")
            return 1

    try:
        ticket, _ = _load_ticket(source, args.ticket)
        if ticket is None:
            return 2
        if showing:
            return _show_estimate(ticket, user)

        allowed, reason = can_set_estimate(ticket, user)
        if not allowed:
            print(f"ERROR: {reason}")
            return 1

        meta = ticket.meta.to_payload()
        meta["teamEst"] = text
        source.update_ticket(ticket.id, {"meta": meta})
    except (ApiError, SnapshotError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Estimate set: {ticket.job_id} = {text}")
    updated = dataclasses.replace(ticket, meta=dataclasses.replace(ticket.meta, team_est=text))
    share = share_estimate(updated)
    if share and share.count > 1:
        print(f"  {share.per_person} per person across {share.count} people")
    return 0
