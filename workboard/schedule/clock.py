"""Workday availability model: a per-person day start and a fixed lunch hour."""

import logging
import re
from datetime import date, datetime, time, timedelta

from workboard.schedule.models import DEFAULT_DAY_START

logger = logging.getLogger(__name__)

DEFAULT_LUNCH_START = "13:00"
DEFAULT_LUNCH_END = "14:00"

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def parse_hhmm(value, fallback: str = DEFAULT_DAY_START) -> time:
    """Parse "HH:MM" (24-hour) into a time, using ``fallback`` when malformed."""
    match = _HHMM_RE.match(value) if isinstance(value, str) else None
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour < 24 and minute < 60:
            return time(hour, minute)

    if value:
        logger.debug(f"[CLOCK] Unparseable time '{value}', using {fallback}")
    if fallback is None:
        raise ValueError(f"Invalid HH:MM time: {value!r}")
    return parse_hhmm(fallback, fallback=None)


class WorkdayClock:
    """Answers "when can this person next work" for one calendar day at a time.

    The lunch window applies every day, independent of the person's start
    time. Instants are naive local datetimes.
    """

    def __init__(
        self,
        lunch_start: str = DEFAULT_LUNCH_START,
        lunch_end: str = DEFAULT_LUNCH_END,
        default_day_start: str = DEFAULT_DAY_START,
    ):
        self.lunch_start = parse_hhmm(lunch_start, DEFAULT_LUNCH_START)
        self.lunch_end = parse_hhmm(lunch_end, DEFAULT_LUNCH_END)
        if self.lunch_end < self.lunch_start:
            logger.warning(
                f"[CLOCK] Lunch end {lunch_end} before start {lunch_start}, using defaults"
            )
            self.lunch_start = parse_hhmm(DEFAULT_LUNCH_START)
            self.lunch_end = parse_hhmm(DEFAULT_LUNCH_END)
        self.default_day_start = default_day_start

    @property
    def lunch_length(self) -> timedelta:
        return (datetime.combine(date.min, self.lunch_end)
                - datetime.combine(date.min, self.lunch_start))

    def lunch_window(self, day: date) -> tuple[datetime, datetime]:
        """Lunch [start, end) on the given day."""
        return (
            datetime.combine(day, self.lunch_start),
            datetime.combine(day, self.lunch_end),
        )

    def next_available(self, candidate: datetime) -> datetime:
        """First working instant at or after ``candidate``."""
        lunch_start, lunch_end = self.lunch_window(candidate.date())
        if lunch_start <= candidate < lunch_end:
            return lunch_end
        return candidate

    def shift_start(self, hhmm, today: date) -> datetime:
        """Today at the person's configured start time, lunch not applied."""
        return datetime.combine(today, parse_hhmm(hhmm, self.default_day_start))

    def day_start(self, hhmm, today: date) -> datetime:
        """Sequencing seed for a person: today at their start time, outside lunch."""
        return self.next_available(self.shift_start(hhmm, today))
