"""Ticket status values.

Status is the only thing that says which workflow stage a ticket is in.
Values match the strings the ticket service stores.
"""

from enum import Enum


class TicketStatus(Enum):
    """All valid ticket statuses."""

    # Intake
    NOT_ASSIGNED = "not_assigned"
    ASSIGNED = "assigned"

    # Execution
    IN_PROCESS = "in_process"
    PAUSED = "paused"

    # QC loop
    RF_QC = "rf_qc"
    QCD = "qcd"
    QC_EDITS = "qc_edits"

    # Delivery
    FILE_RECEIVED = "file_received"
    SENT = "sent"

    # Detours
    ON_HOLD = "on_hold"
    TBC = "tbc"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({TicketStatus.SENT, TicketStatus.CANCELLED})


def parse_status(status_str: str | None) -> TicketStatus | None:
    """Parse a status string into TicketStatus, None if unknown."""
    if status_str is None:
        return None
    try:
        return TicketStatus(status_str)
    except ValueError:
        return None


def is_terminal(status_str: str | None) -> bool:
    return parse_status(status_str) in TERMINAL_STATUSES
