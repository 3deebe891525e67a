"""Free-text estimate parsing and duration formatting.

Estimates are typed by people ("2h 30m", "2:30", "2") so parsing never
fails: anything unrecognised becomes DEFAULT_ESTIMATE_MINUTES. An empty
estimate is distinct from a zero-length one only at the formatting layer,
where ``format_estimate(0, "00")`` yields "" to mean "not set yet".
"""

import math
import re

DEFAULT_ESTIMATE_MINUTES = 60

# Longest single job the schedule lays out
MAX_JOB_MINUTES = 24 * 60

# Choices offered by the estimate picker
HOURS_OPTIONS = list(range(25))
MINUTES_OPTIONS = ["00", "15", "30", "45"]

_HOURS_MINUTES_RE = re.compile(r"(\d+)h\s*(\d+)m")
_COLON_RE = re.compile(r"(\d+):(\d+)")
_HOURS_ONLY_RE = re.compile(r"^(\d+)$")


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero. NaN and infinity give 0."""
    if not math.isfinite(value):
        return 0
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded if value >= 0 else -rounded)


def _match(text: str):
    match = _HOURS_MINUTES_RE.search(text)
    if match:
        return int(match.group(1)), int(match.group(2))

    match = _COLON_RE.search(text)
    if match:
        return int(match.group(1)), int(match.group(2))

    match = _HOURS_ONLY_RE.match(text)
    if match:
        return int(match.group(1)), 0

    return None


def parse_estimate(text) -> int:
    """Parse an estimate string into whole minutes.

    Recognised forms, tried in order: "<H>h <M>m", "<H>:<M>", "<N>" (hours).
    Returns DEFAULT_ESTIMATE_MINUTES for empty or unrecognised input.
    """
    if not text or not isinstance(text, str):
        return DEFAULT_ESTIMATE_MINUTES

    parsed = _match(text.strip())
    if parsed is None:
        return DEFAULT_ESTIMATE_MINUTES

    hours, minutes = parsed
    return hours * 60 + minutes


def split_estimate(text) -> tuple[int, str]:
    """Split an estimate into (hours, "MM") for the estimate picker.

    Unset or unrecognised input gives (0, "00"), not the parsing default.
    """
    if not text or not isinstance(text, str):
        return 0, "00"

    parsed = _match(text.strip())
    if parsed is None:
        return 0, "00"

    hours, minutes = parsed
    return hours, f"{minutes:02d}"


def format_estimate(hours: int, minutes: str) -> str:
    """Format picker values as an estimate string; (0, "00") means unset."""
    if hours == 0 and minutes == "00":
        return ""
    return f"{hours}h {minutes}m"


def format_duration(minutes: int) -> str:
    """Compact duration label used on timeline bars ("45m", "2h", "2h 30m")."""
    minutes = max(0, int(minutes))
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_countdown(seconds: float) -> str:
    """Format remaining seconds as HH:MM:SS."""
    if seconds <= 0:
        return "00:00:00"
    seconds = int(seconds)
    hrs, rest = divmod(seconds, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hrs:02d}:{mins:02d}:{secs:02d}"
