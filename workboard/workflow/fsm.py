"""Ticket lifecycle state machine using transitions library.

The common path is one-directional:
    assigned -> in_process -> rf_qc -> qcd -> file_received / sent
with paused, on_hold, tbc and cancelled as detours. The scheduling core never
uses this: it only reads status. The FSM guards user actions (start, pause,
move) before they are sent to the ticket service.

Usage:
    from workboard.workflow.fsm import TicketFSM

    fsm = TicketFSM(ticket)
    fsm.start()          # assigned -> in_process
    fsm.submit_for_qc()  # in_process -> rf_qc
"""

import logging
from typing import Callable

from transitions import Machine, MachineError

from workboard.schedule.models import Ticket
from workboard.workflow.status import TicketStatus

logger = logging.getLogger(__name__)


STATES = [status.value for status in TicketStatus]

_OPEN = [
    "not_assigned", "assigned", "in_process", "paused", "rf_qc", "qcd",
    "qc_edits", "file_received", "on_hold", "tbc",
]

# Each trigger becomes a method on the FSM
TRANSITIONS = [
    # Intake
    {"trigger": "assign", "source": "not_assigned", "dest": "assigned"},
    {"trigger": "unassign", "source": "assigned", "dest": "not_assigned"},

    # Execution
    {"trigger": "start", "source": "assigned", "dest": "in_process"},
    {"trigger": "start", "source": "qc_edits", "dest": "in_process"},
    {"trigger": "resume", "source": "paused", "dest": "in_process"},
    {"trigger": "pause", "source": "in_process", "dest": "paused"},

    # QC loop
    {"trigger": "submit_for_qc", "source": "in_process", "dest": "rf_qc"},
    {"trigger": "submit_for_qc", "source": "paused", "dest": "rf_qc"},
    {"trigger": "qc_pass", "source": "rf_qc", "dest": "qcd"},
    {"trigger": "request_edits", "source": "rf_qc", "dest": "qc_edits"},
    {"trigger": "request_edits", "source": "qcd", "dest": "qc_edits"},

    # Delivery
    {"trigger": "receive_file", "source": "qcd", "dest": "file_received"},
    {"trigger": "send", "source": "qcd", "dest": "sent"},
    {"trigger": "send", "source": "file_received", "dest": "sent"},

    # Detours
    {"trigger": "hold", "source": ["not_assigned", "assigned", "paused", "qc_edits"], "dest": "on_hold"},
    {"trigger": "release", "source": "on_hold", "dest": "assigned"},
    {"trigger": "mark_tbc", "source": ["not_assigned", "assigned"], "dest": "tbc"},
    {"trigger": "confirm", "source": "tbc", "dest": "assigned"},
    {"trigger": "cancel", "source": _OPEN, "dest": "cancelled"},
    {"trigger": "reopen", "source": "cancelled", "dest": "assigned"},
]


def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name."""
    lookup: dict[tuple[str, str], str] = {}
    for t in TRANSITIONS:
        sources = t["source"] if isinstance(t["source"], list) else [t["source"]]
        for source in sources:
            key = (source, t["dest"])
            if key not in lookup:  # First trigger wins for a given source->dest
                lookup[key] = t["trigger"]
    return lookup


TRIGGER_FOR = _build_trigger_lookup()

TRIGGERS = sorted({t["trigger"] for t in TRANSITIONS})


def trigger_for(source: str, dest: str) -> str | None:
    """Trigger that moves a ticket from ``source`` to ``dest``, if any."""
    return TRIGGER_FOR.get((source, dest))


class InvalidTransition(Exception):
    """Raised when a trigger is not allowed from the ticket's current status."""

    def __init__(self, from_state: str, trigger: str, job_id: str = ""):
        self.from_state = from_state
        self.trigger = trigger
        self.job_id = job_id
        super().__init__(
            f"Cannot {trigger} from {from_state}"
            + (f" (ticket: {job_id})" if job_id else "")
        )


class TicketFSM:
    """State machine for one ticket's status.

    Starts from the ticket's current status and reports each transition
    through ``on_transition``. The ticket object itself is not modified.
    """

    def __init__(self, ticket: Ticket, on_transition: Callable[[str, str, str], None] | None = None):
        """Initialize FSM for a ticket.

        Args:
            ticket: Ticket whose status seeds the machine
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.ticket = ticket
        self.job_id = ticket.job_id
        self.on_transition = on_transition

        initial = ticket.status
        if initial not in STATES:
            logger.warning(f"[FSM] {self.job_id}: Unknown status '{initial}', defaulting to 'not_assigned'")
            initial = "not_assigned"

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        """Callback after any state transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.info(f"[FSM] {self.job_id}: {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def available_triggers(self) -> list[str]:
        """Triggers available in current state."""
        return self.machine.get_triggers(self.state)

    def fire(self, trigger: str) -> str:
        """Run ``trigger`` by name and return the new state.

        Raises:
            InvalidTransition: if the trigger is unknown or not allowed here
        """
        if trigger not in TRIGGERS or not self.can(trigger):
            raise InvalidTransition(self.state, trigger, self.job_id)
        try:
            self.trigger(trigger)
        except MachineError:
            raise InvalidTransition(self.state, trigger, self.job_id) from None
        return self.state
