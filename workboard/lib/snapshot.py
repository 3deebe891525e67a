"""
Offline ticket/roster snapshots.

A snapshot is a YAML (or JSON, which YAML accepts) file holding the same
shapes the REST service returns:

    tickets:
      - _id: t1
        jobId: JOB-001
        status: assigned
        createdAt: "2025-03-03T09:00:00"
        assignedInfo: {teamMembers: [Alice]}
        meta: {teamEst: "1h 00m"}
    teamMembers:
      - name: Alice
        startTime: "08:00"

Used for demos, reproducing a board state from a bug report, and tests.
"""

import logging
from datetime import date, datetime
from pathlib import Path

import yaml

from workboard.lib import validate
from workboard.schedule.models import TeamMember, Ticket

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Snapshot file missing or unreadable."""


class Snapshot:
    """Ticket source backed by a file, re-read on every fetch."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            raise SnapshotError(f"Snapshot not found: {self.path}")

        try:
            data = yaml.safe_load(self.path.read_text())
        except yaml.YAMLError as e:
            raise SnapshotError(f"Invalid snapshot {self.path}: {e}") from None

        if data is None:
            return {}
        data = _stringify_dates(data)
        try:
            validate.validate(data, "snapshot")
        except validate.ValidationError as e:
            raise SnapshotError(f"Invalid snapshot {self.path}: {e}") from None
        logger.debug(f"[SNAPSHOT] Loaded {self.path}")
        return data

    def list_tickets(self, statuses: list[str] = None) -> list[Ticket]:
        items = validate.valid_items(self._load().get("tickets") or [], "ticket")
        if statuses:
            items = [item for item in items if item.get("status") in statuses]
        return [Ticket.from_dict(item) for item in items]

    def list_team_members(self) -> list[TeamMember]:
        items = validate.valid_items(self._load().get("teamMembers") or [], "team_member")
        return [TeamMember.from_dict(item) for item in items]

    def member_tasks(self, member_name: str) -> list[Ticket]:
        tickets = self.list_tickets()
        return [
            t for t in tickets
            if member_name in t.assigned_info.team_members or t.assigned_info.emp_name == member_name
        ]

    def update_ticket(self, ticket_id: str, payload: dict) -> None:
        raise SnapshotError("Snapshots are read-only; use the API to change tickets")


def _stringify_dates(value):
    """YAML turns unquoted timestamps into date objects; the schemas expect strings."""
    if isinstance(value, dict):
        return {k: _stringify_dates(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_dates(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
