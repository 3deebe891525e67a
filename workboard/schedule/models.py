"""Ticket, roster and projection types for the scheduling core.

Tickets and team members arrive as REST JSON (camelCase keys, Mongo-style
``_id``). ``from_dict`` constructors normalise them into dataclasses with
naive local datetimes so the rest of the core never touches raw payloads.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

DEFAULT_DAY_START = "08:00"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    Aware values (``Z`` or ``+hh:mm`` suffix) are converted to local time.
    Returns None for missing or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


def parse_seconds(value: Any) -> Optional[float]:
    """Coerce a seconds field to a float, None when absent, non-numeric or infinite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds):
        return None
    return seconds


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class AssignedInfo:
    """Who a ticket is assigned to."""
    owner: Optional[str] = None
    team_members: list[str] = field(default_factory=list)
    emp_name: Optional[str] = None  # Legacy single-assignee field
    team_lead: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "AssignedInfo":
        data = data or {}
        members = data.get("teamMembers") or []
        return cls(
            owner=data.get("owner") or None,
            team_members=[str(m) for m in members if m],
            emp_name=data.get("empName") or None,
            team_lead=data.get("teamLead") or None,
        )

    @property
    def assignee_count(self) -> int:
        return max(1, len(self.team_members))


@dataclass
class TicketMeta:
    """Timing and production metadata carried in ``ticket.meta``."""
    team_est: Optional[str] = None
    remaining_seconds: Optional[float] = None
    original_est_seconds: Optional[float] = None
    started_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    deadline: Optional[str] = None
    timezone: Optional[str] = None
    file_output: Any = None
    proofread: Optional[bool] = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TicketMeta":
        data = data or {}
        return cls(
            team_est=data.get("teamEst") or None,
            remaining_seconds=parse_seconds(data.get("remainingSeconds")),
            original_est_seconds=parse_seconds(data.get("originalEstSeconds")),
            started_at=parse_timestamp(data.get("startedAt")),
            paused_at=parse_timestamp(data.get("pausedAt")),
            deadline=data.get("deadline"),
            timezone=data.get("timezone"),
            file_output=data.get("fileOutput"),
            proofread=data.get("proofread"),
            raw=dict(data),
        )

    def to_payload(self) -> dict:
        """Serialise back to the REST ``meta`` shape, preserving unknown keys."""
        payload = dict(self.raw)
        payload.update({
            "teamEst": self.team_est,
            "remainingSeconds": self.remaining_seconds,
            "originalEstSeconds": self.original_est_seconds,
            "startedAt": _format_timestamp(self.started_at),
            "pausedAt": _format_timestamp(self.paused_at),
        })
        return payload


@dataclass
class Ticket:
    """A unit of production work (a "job")."""
    id: str
    job_id: str
    status: str
    assigned_info: AssignedInfo = field(default_factory=AssignedInfo)
    meta: TicketMeta = field(default_factory=TicketMeta)
    created_at: Optional[datetime] = None
    first_started_at: Optional[datetime] = None  # Top-level startedAt, set on first start only
    client_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Ticket":
        ticket_id = data.get("_id") or data.get("id") or ""
        return cls(
            id=str(ticket_id),
            job_id=data.get("jobId") or "N/A",
            status=data.get("status") or "not_assigned",
            assigned_info=AssignedInfo.from_dict(data.get("assignedInfo")),
            meta=TicketMeta.from_dict(data.get("meta")),
            created_at=parse_timestamp(data.get("createdAt")),
            first_started_at=parse_timestamp(data.get("startedAt")),
            client_name=data.get("clientName"),
        )

    @property
    def started_at(self) -> Optional[datetime]:
        """Start of the current execution session.

        ``meta.startedAt`` tracks the most recent resume; the top-level field
        only records the first start and is a fallback for older tickets.
        """
        return self.meta.started_at or self.first_started_at

    @property
    def is_in_process(self) -> bool:
        return self.status == "in_process"


@dataclass
class TeamMember:
    """A roster entry. ``name`` is the join key against ticket assignment."""
    name: str
    start_time: str = DEFAULT_DAY_START
    email: Optional[str] = None
    team_name: Optional[str] = None
    tl_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "TeamMember":
        return cls(
            name=data.get("name") or "",
            start_time=data.get("startTime") or DEFAULT_DAY_START,
            email=data.get("emailId") or None,
            team_name=data.get("teamName") or None,
            tl_name=data.get("tlName") or None,
        )


@dataclass
class ProjectedJob:
    """One ticket placed on one assignee's timeline."""
    ticket: Ticket
    estimate_minutes: int
    start_time: datetime
    end_time: datetime
    assignee: Optional[str] = None
    lane: int = 0

    @property
    def status(self) -> str:
        return self.ticket.status

    @property
    def job_id(self) -> str:
        return self.ticket.job_id

    @property
    def key(self) -> str:
        """Stable identifier for UI widgets (a ticket appears once per assignee)."""
        return f"{self.ticket.id}-{self.assignee}" if self.assignee else self.ticket.id

    def to_dict(self) -> dict:
        return {
            "ticketId": self.ticket.id,
            "jobId": self.job_id,
            "status": self.status,
            "assignee": self.assignee,
            "estimateMinutes": self.estimate_minutes,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "lane": self.lane,
        }


@dataclass
class ScheduleRow:
    """An assignee's projected queue for the day."""
    assignee_name: str
    jobs: list[ProjectedJob]
    last_job_end_time: datetime
    lane_count: int = 0

    def to_dict(self) -> dict:
        return {
            "assignee": self.assignee_name,
            "lastJobEndTime": self.last_job_end_time.isoformat(),
            "laneCount": self.lane_count,
            "jobs": [job.to_dict() for job in self.jobs],
        }
