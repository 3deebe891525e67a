"""
wb move - Move a ticket through its workflow.

The target is either a trigger name (``qc_pass``) or the status to move to
(``qcd``); a status is translated to the trigger that reaches it.
"""

from datetime import datetime

from workboard.lib.api import ApiError
from workboard.lib.config import ClientConfig
from workboard.lib.snapshot import SnapshotError
from workboard.lib.timeline import status_label
from workboard.workflow.fsm import TRIGGERS, InvalidTransition, TicketFSM, trigger_for
from workboard.workflow.session import find_ticket, pause_payload, start_payload
from workboard.workflow.status import is_terminal


def _print_allowed(fsm: TicketFSM, status: str) -> None:
    allowed = fsm.available_triggers()
    print(f"  Allowed from {status}: {', '.join(allowed) if allowed else 'none'}")


def cmd_move(args, config: ClientConfig, source, now: datetime = None) -> int:
    """Fire a workflow trigger on a ticket and save the new status."""
    now = now or datetime.now()

    try:
        ticket = find_ticket(source.list_tickets(), args.ticket)
        if ticket is None:
            print(f"ERROR: Ticket '{args.ticket}' not found")
            return 2

        fsm = TicketFSM(ticket)
        trigger = args.trigger
        if trigger not in TRIGGERS:
            trigger = trigger_for(ticket.status, args.trigger)
            if trigger is None:
                print(f"ERROR: No transition from {ticket.status} to {args.trigger}")
                _print_allowed(fsm, ticket.status)
                return 1

        try:
            new_status = fsm.fire(trigger)
        except InvalidTransition as e:
            print(f"ERROR: {e}")
            _print_allowed(fsm, ticket.status)
            return 1

        # Session moves also carry the time bookkeeping
        if trigger == "pause":
            payload = pause_payload(ticket, now)
        elif new_status == "in_process":
            payload = start_payload(ticket, now)
        else:
            payload = {"status": new_status}

        source.update_ticket(ticket.id, payload)
    except (ApiError, SnapshotError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"{ticket.job_id}: {status_label(ticket.status)} -> {status_label(new_status)}")
    if is_terminal(new_status):
        print("  Ticket closed")
    return 0
