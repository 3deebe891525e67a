"""
Timeline geometry and labels for the availability board.

The board shows a fixed 08:00-20:00 window. Positions are percentages of
that window so the same numbers drive the Textual bars and any other
renderer.

Designed for reuse in: wb schedule, wb tasks, wb watch
"""

from datetime import datetime, time
from typing import NamedTuple, Optional

from workboard.schedule.duration import format_duration
from workboard.schedule.models import ProjectedJob

TIMELINE_START_HOUR = 8
TIMELINE_END_HOUR = 20
TIMELINE_MINUTES = (TIMELINE_END_HOUR - TIMELINE_START_HOUR) * 60
MIN_BAR_WIDTH_PERCENT = 0.5

STATUS_LABELS = {
    "not_assigned": "Not Assigned",
    "assigned": "Assigned",
    "in_process": "In Progress",
    "paused": "Paused",
    "rf_qc": "Ready for QC",
    "qcd": "QC Done",
    "qc_edits": "QC Edits",
    "file_received": "File Received",
    "sent": "Sent",
    "on_hold": "On Hold",
    "tbc": "TBC",
    "cancelled": "Cancelled",
}

# Rich styles; only the running job is highlighted
STATUS_COLORS = {
    "in_process": "bold white on blue",
    "paused": "yellow",
    "cancelled": "dim red",
}
DEFAULT_BAR_COLOR = "grey70"

BAR_CHAR = "█"
EMPTY_CHAR = "·"


class HourMarker(NamedTuple):
    hour: int
    label: str
    percent: float


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, DEFAULT_BAR_COLOR)


def _window(day: datetime) -> tuple[datetime, datetime]:
    return (
        datetime.combine(day.date(), time(TIMELINE_START_HOUR)),
        datetime.combine(day.date(), time(TIMELINE_END_HOUR)),
    )


def timeline_position(start: datetime, end: datetime) -> tuple[float, float]:
    """(left %, width %) of a bar within the start day's window, clamped to it."""
    window_start, _ = _window(start)
    start_minutes = (start - window_start).total_seconds() / 60
    duration_minutes = (end - start).total_seconds() / 60

    left = max(0.0, min(100.0, start_minutes / TIMELINE_MINUTES * 100))
    width = max(MIN_BAR_WIDTH_PERCENT,
                min(100.0 - left, duration_minutes / TIMELINE_MINUTES * 100))
    return left, width


def format_clock(value: datetime) -> str:
    """12-hour clock label, e.g. "1:05 PM"."""
    suffix = "PM" if value.hour >= 12 else "AM"
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {suffix}"


def hour_markers() -> list[HourMarker]:
    """One marker per hour from 8 AM to 8 PM inclusive."""
    span = TIMELINE_END_HOUR - TIMELINE_START_HOUR
    markers = []
    for i in range(span + 1):
        hour = TIMELINE_START_HOUR + i
        display = hour - 12 if hour > 12 else hour
        suffix = "PM" if hour >= 12 else "AM"
        markers.append(HourMarker(hour, f"{display} {suffix}", i / span * 100))
    return markers


def current_time_position(now: datetime) -> Optional[float]:
    """Percent position of ``now``, or None outside the board window."""
    window_start, window_end = _window(now)
    if now < window_start or now > window_end:
        return None
    return (now - window_start).total_seconds() / 60 / TIMELINE_MINUTES * 100


def render_bar(left: float, width: float, columns: int) -> str:
    """Plain-text bar of ``columns`` cells for a (left %, width %) position."""
    if columns <= 0:
        return ""
    first = min(columns - 1, int(round(left / 100 * columns)))
    cells = max(1, int(round(width / 100 * columns)))
    last = min(columns, first + cells)
    return EMPTY_CHAR * first + BAR_CHAR * (last - first) + EMPTY_CHAR * (columns - last)


def render_lane(jobs: list[ProjectedJob], columns: int) -> str:
    """Rich markup for one lane: every job's bar overlaid on one track."""
    cells = [EMPTY_CHAR] * columns
    styles: list[Optional[str]] = [None] * columns

    for job in jobs:
        left, width = timeline_position(job.start_time, job.end_time)
        bar = render_bar(left, width, columns)
        for i, ch in enumerate(bar):
            if ch == BAR_CHAR:
                cells[i] = BAR_CHAR
                styles[i] = status_color(job.status)

    out = []
    for ch, style in zip(cells, styles):
        out.append(f"[{style}]{ch}[/]" if style else f"[dim]{ch}[/]")
    return "".join(out)


def describe_job(job: ProjectedJob) -> str:
    """One-line summary, e.g. "JOB-7 09:00-11:00 (2h) Assigned"."""
    return (
        f"{job.job_id} {job.start_time:%H:%M}-{job.end_time:%H:%M} "
        f"({format_duration(job.estimate_minutes)}) {status_label(job.status)}"
    )
