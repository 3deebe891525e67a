"""Refresh loop collaborator between the ticket source and the UI.

The service is handed its fetchers and a "now" provider rather than creating
them, so tests can drive it with static data and a fixed clock. Each refresh
replaces the projection wholesale; a failed fetch leaves the previous one in
place.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from workboard.lib.api import ApiError
from workboard.lib.snapshot import SnapshotError
from workboard.schedule.aggregator import build
from workboard.schedule.clock import WorkdayClock
from workboard.schedule.countdown import CountdownState, LiveCountdown, find_active_ticket
from workboard.schedule.models import ScheduleRow, TeamMember, Ticket

logger = logging.getLogger(__name__)


class ScheduleService:
    """Holds the latest projection and the live countdown state."""

    def __init__(
        self,
        fetch_tickets: Callable[[], Optional[list[Ticket]]],
        fetch_team_members: Callable[[], Optional[list[TeamMember]]],
        now_provider: Callable[[], datetime] = datetime.now,
        clock: Optional[WorkdayClock] = None,
        on_estimate_complete: Optional[Callable[[Ticket], None]] = None,
    ):
        self.fetch_tickets = fetch_tickets
        self.fetch_team_members = fetch_team_members
        self.now_provider = now_provider
        self.clock = clock or WorkdayClock()
        self.countdown = LiveCountdown(on_complete=on_estimate_complete)

        self.rows: list[ScheduleRow] = []
        self.tickets: list[Ticket] = []
        self.team_members: list[TeamMember] = []
        self.last_error: Optional[str] = None
        self.refreshed_at: Optional[datetime] = None

    def refresh(self) -> bool:
        """Fetch a fresh snapshot and rebuild the projection.

        Returns True on success. On failure the previous projection stays.
        """
        try:
            tickets = self.fetch_tickets() or []
            members = self.fetch_team_members() or []
        except (ApiError, SnapshotError) as e:
            self.last_error = str(e)
            logger.warning(f"[SCHEDULE] Refresh failed, keeping previous projection: {e}")
            return False

        now = self.now_provider()
        self.tickets = tickets
        self.team_members = members
        self.rows = build(tickets, members, now, clock=self.clock)
        self.last_error = None
        self.refreshed_at = now
        return True

    def tickets_for(self, member_name: str) -> list[Ticket]:
        return [t for t in self.tickets if member_name in t.assigned_info.team_members]

    def active_ticket(self, member_name: Optional[str] = None) -> Optional[Ticket]:
        tickets = self.tickets_for(member_name) if member_name else self.tickets
        return find_active_ticket(tickets)

    def countdown_for(self, member_name: Optional[str] = None) -> CountdownState:
        """Advance the countdown for a member's active job to "now"."""
        return self.countdown.tick(self.active_ticket(member_name), self.now_provider())
