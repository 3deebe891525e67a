"""Tests for workboard.lib.timeline module."""

from datetime import datetime

import pytest
from rich.text import Text

from workboard.lib.timeline import (
    BAR_CHAR,
    EMPTY_CHAR,
    current_time_position,
    describe_job,
    format_clock,
    hour_markers,
    render_bar,
    render_lane,
    status_color,
    status_label,
    timeline_position,
)
from workboard.schedule.models import ProjectedJob, Ticket


def at(hour, minute=0):
    return datetime(2025, 3, 3, hour, minute)


def job(status="assigned", start=at(9), end=at(11), job_id="JOB-7"):
    return ProjectedJob(
        ticket=Ticket(id="t7", job_id=job_id, status=status),
        estimate_minutes=int((end - start).total_seconds() // 60),
        start_time=start,
        end_time=end,
    )


class TestTimelinePosition:
    """Tests for timeline_position."""

    def test_window_start(self):
        assert timeline_position(at(8), at(20)) == (0.0, 100.0)

    def test_middle(self):
        left, width = timeline_position(at(14), at(17))
        assert left == pytest.approx(50.0)
        assert width == pytest.approx(25.0)

    def test_before_window_clamped(self):
        left, _ = timeline_position(at(7), at(9))
        assert left == 0.0

    def test_runs_past_window_clamped(self):
        left, width = timeline_position(at(19), at(23))
        assert left + width == pytest.approx(100.0)

    def test_minimum_width(self):
        _, width = timeline_position(at(10), at(10))
        assert width == 0.5


class TestClockLabels:
    """Tests for format_clock, hour_markers and current_time_position."""

    def test_format_clock(self):
        assert format_clock(at(13, 5)) == "1:05 PM"
        assert format_clock(at(0, 0)) == "12:00 AM"
        assert format_clock(at(12, 30)) == "12:30 PM"
        assert format_clock(at(9)) == "9:00 AM"

    def test_hour_markers(self):
        markers = hour_markers()
        assert len(markers) == 13
        assert (markers[0].label, markers[0].percent) == ("8 AM", 0)
        assert markers[4].label == "12 PM"
        assert markers[5].label == "1 PM"
        assert (markers[-1].label, markers[-1].percent) == ("8 PM", 100)

    def test_current_time_inside(self):
        assert current_time_position(at(14)) == pytest.approx(50.0)

    def test_current_time_outside(self):
        assert current_time_position(at(7, 59)) is None
        assert current_time_position(at(20, 1)) is None


class TestRendering:
    """Tests for text rendering."""

    def test_render_bar(self):
        assert render_bar(50.0, 25.0, 8) == EMPTY_CHAR * 4 + BAR_CHAR * 2 + EMPTY_CHAR * 2

    def test_render_bar_at_least_one_cell(self):
        assert render_bar(0.0, 0.5, 10).count(BAR_CHAR) == 1

    def test_render_bar_never_overflows(self):
        assert len(render_bar(99.0, 50.0, 12)) == 12

    def test_render_bar_zero_columns(self):
        assert render_bar(10.0, 10.0, 0) == ""

    def test_render_lane_markup_valid(self):
        result = render_lane([job("in_process"), job("paused", at(14), at(15))], 24)
        text = Text.from_markup(result)
        assert len(text.plain) == 24
        assert text.plain.count(BAR_CHAR) > 0

    def test_status_helpers(self):
        assert status_label("rf_qc") == "Ready for QC"
        assert status_label("mystery") == "mystery"
        assert status_color("in_process") != status_color("assigned")

    def test_describe_job(self):
        assert describe_job(job()) == "JOB-7 09:00-11:00 (2h) Assigned"
