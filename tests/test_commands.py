"""Tests for the wb command modules."""

import argparse
import json
from datetime import datetime

import pytest

from workboard.commands.move import cmd_move
from workboard.commands.schedule import cmd_schedule
from workboard.commands.session import cmd_estimate, cmd_pause, cmd_start
from workboard.commands.tasks import cmd_tasks
from workboard.lib.api import ApiError
from workboard.lib.config import ClientConfig
from workboard.schedule.models import TeamMember, Ticket

NOW = datetime(2025, 3, 3, 10, 0)


def ticket_dict(id, status="assigned", members=("Alice",), est="1h 00m", started=None,
                remaining=None, created="2025-03-03T09:00:00", owner=None):
    return {
        "_id": id,
        "jobId": f"JOB-{id}",
        "status": status,
        "createdAt": created,
        "assignedInfo": {"teamMembers": list(members), "owner": owner},
        "meta": {
            "teamEst": est,
            "startedAt": started,
            "remainingSeconds": remaining,
            "fileOutput": ["pdf"],
            "proofread": True,
        },
    }


class FakeSource:
    """Ticket source that records updates."""

    def __init__(self, tickets, members=None):
        self.tickets = [Ticket.from_dict(t) for t in tickets]
        self.members = members or []
        self.updates = []
        self.error = None

    def list_tickets(self, statuses=None):
        if self.error:
            raise self.error
        if statuses:
            return [t for t in self.tickets if t.status in statuses]
        return list(self.tickets)

    def list_team_members(self):
        return self.members

    def member_tasks(self, name):
        return [t for t in self.tickets if name in t.assigned_info.team_members]

    def update_ticket(self, ticket_id, payload):
        self.updates.append((ticket_id, payload))
        return None


def args(**kwargs):
    return argparse.Namespace(**kwargs)


class TestSchedule:
    """Tests for wb schedule."""

    def test_prints_board(self, capsys):
        source = FakeSource([
            ticket_dict("a", est="1h 00m"),
            ticket_dict("b", est="2h 00m", created="2025-03-03T09:30:00"),
        ], [TeamMember(name="Alice", start_time="08:00")])
        assert cmd_schedule(args(status="all", json=False), ClientConfig(), source, now=NOW) == 0
        out = capsys.readouterr().out
        assert "Alice  (free from 11:00 AM)" in out
        assert "JOB-a 08:00-09:00 (1h) Assigned" in out
        assert "JOB-b 09:00-11:00 (2h) Assigned" in out

    def test_json(self, capsys):
        source = FakeSource([ticket_dict("a")])
        cmd_schedule(args(status="all", json=True), ClientConfig(), source, now=NOW)
        data = json.loads(capsys.readouterr().out)
        assert data["statusCounts"] == {"assigned": 1}
        assert data["rows"][0]["assignee"] == "Alice"
        assert data["rows"][0]["jobs"][0]["startTime"] == "2025-03-03T08:00:00"
        assert data["rows"][0]["rowHeight"] == 24

    def test_status_filter(self, capsys):
        source = FakeSource([ticket_dict("a"), ticket_dict("b", status="paused", members=("Bob",))])
        cmd_schedule(args(status="paused", json=False), ClientConfig(), source, now=NOW)
        out = capsys.readouterr().out
        assert "Bob" in out
        assert "Alice" not in out

    def test_corrupt_timing_does_not_break_board(self, capsys):
        source = FakeSource([
            ticket_dict("big", est="99999999h 0m"),
            ticket_dict("inf", members=("Bob",), remaining=float("inf")),
        ])
        assert cmd_schedule(args(status="all", json=False), ClientConfig(), source, now=NOW) == 0
        out = capsys.readouterr().out
        assert "JOB-big 08:00-09:00 (24h) Assigned" in out
        assert "JOB-inf 08:00-09:00 (1h) Assigned" in out

    def test_empty(self, capsys):
        cmd_schedule(args(status="all", json=False), ClientConfig(), FakeSource([]), now=NOW)
        assert "No scheduled work" in capsys.readouterr().out

    def test_fetch_error(self, capsys):
        source = FakeSource([])
        source.error = ApiError("GET /tickets failed: HTTP 500", 500)
        assert cmd_schedule(args(status="all", json=False), ClientConfig(), source, now=NOW) == 1
        assert "ERROR: GET /tickets failed" in capsys.readouterr().out


class TestTasks:
    """Tests for wb tasks."""

    def test_duplicate_roster_last_wins(self, capsys):
        """wb tasks resolves the day start the same way as wb schedule."""
        source = FakeSource([ticket_dict("a")], [
            TeamMember(name="Alice", start_time="08:00"),
            TeamMember(name="Alice", start_time="09:00"),
        ])
        cmd_tasks(args(member="Alice"), ClientConfig(), source, now=NOW)
        tasks_out = capsys.readouterr().out
        cmd_schedule(args(status="all", json=False), ClientConfig(), source, now=NOW)
        schedule_out = capsys.readouterr().out
        assert "JOB-a 09:00-10:00" in tasks_out
        assert "JOB-a 09:00-10:00" in schedule_out

    def test_queue_and_countdown(self, capsys):
        source = FakeSource([
            ticket_dict("run", status="in_process", started="2025-03-03T09:30:00", remaining=3600),
            ticket_dict("next"),
        ])
        assert cmd_tasks(args(member="Alice"), ClientConfig(), source, now=NOW) == 0
        out = capsys.readouterr().out
        assert "JOB-run 09:30-10:30" in out
        assert "JOB-next 10:30-11:30" in out
        assert "Active: JOB-run  00:30:00 left  (50%)" in out

    def test_shared_estimate_shown(self, capsys):
        source = FakeSource([ticket_dict("s", members=("Alice", "Bob"), est="3h 00m")])
        cmd_tasks(args(member="Bob"), ClientConfig(), source, now=NOW)
        assert "3h 00m total, 1h 30m each (2 people)" in capsys.readouterr().out

    def test_no_tasks(self, capsys):
        assert cmd_tasks(args(member="Zed"), ClientConfig(), FakeSource([]), now=NOW) == 0
        assert "No tasks for Zed" in capsys.readouterr().out


class TestStart:
    """Tests for wb start."""

    def test_start_sends_payload(self, capsys):
        source = FakeSource([ticket_dict("a")])
        assert cmd_start(args(ticket="a", member=None), ClientConfig(), source, now=NOW) == 0
        ticket_id, payload = source.updates[0]
        assert ticket_id == "a"
        assert payload["status"] == "in_process"
        assert payload["meta"]["startedAt"] == NOW.isoformat()
        assert "Started: JOB-a" in capsys.readouterr().out

    def test_auto_pauses_other_active(self, capsys):
        source = FakeSource([
            ticket_dict("run", status="in_process", started="2025-03-03T09:30:00", remaining=3600),
            ticket_dict("other", status="in_process", members=("Bob",), started="2025-03-03T09:00:00"),
            ticket_dict("new"),
        ])
        cmd_start(args(ticket="JOB-new", member="Alice"), ClientConfig(), source, now=NOW)
        assert [(tid, p["status"]) for tid, p in source.updates] == [
            ("run", "paused"),
            ("new", "in_process"),
        ]
        assert source.updates[0][1]["meta"]["remainingSeconds"] == 1800

    def test_resume_paused(self):
        source = FakeSource([ticket_dict("a", status="paused", remaining=600)])
        assert cmd_start(args(ticket="a", member=None), ClientConfig(), source, now=NOW) == 0
        assert source.updates[0][1]["meta"]["remainingSeconds"] == 600

    def test_missing_fields(self, capsys):
        data = ticket_dict("a", est=None)
        data["meta"]["proofread"] = None
        source = FakeSource([data])
        assert cmd_start(args(ticket="a", member=None), ClientConfig(), source, now=NOW) == 1
        assert "Estimation, Proofread" in capsys.readouterr().out
        assert source.updates == []

    def test_invalid_transition(self, capsys):
        source = FakeSource([ticket_dict("a", status="sent")])
        assert cmd_start(args(ticket="a", member=None), ClientConfig(), source, now=NOW) == 1
        assert "Cannot start from sent" in capsys.readouterr().out

    def test_not_found(self, capsys):
        assert cmd_start(args(ticket="zzz", member=None), ClientConfig(), FakeSource([]), now=NOW) == 2
        assert "not found" in capsys.readouterr().out


class TestPause:
    """Tests for wb pause."""

    def test_pause(self):
        source = FakeSource([
            ticket_dict("a", status="in_process", started="2025-03-03T09:00:00", remaining=5400),
        ])
        assert cmd_pause(args(ticket="a"), ClientConfig(), source, now=NOW) == 0
        payload = source.updates[0][1]
        assert payload["status"] == "paused"
        assert payload["meta"]["remainingSeconds"] == 1800

    def test_pause_not_running(self, capsys):
        source = FakeSource([ticket_dict("a")])
        assert cmd_pause(args(ticket="a"), ClientConfig(), source, now=NOW) == 1
        assert "Cannot pause from assigned" in capsys.readouterr().out


class TestEstimate:
    """Tests for wb estimate."""

    def test_sets_estimate(self, capsys):
        source = FakeSource([ticket_dict("a", est=None, members=("Alice", "Bob"), owner="Alice")])
        result = cmd_estimate(args(ticket="a", hours=3, minutes="00", user="Alice", email=None),
                              ClientConfig(), source)
        assert result == 0
        assert source.updates[0][1]["meta"]["teamEst"] == "3h 00m"
        out = capsys.readouterr().out
        assert "1h 30m per person across 2 people" in out

    def test_zero_rejected(self, capsys):
        source = FakeSource([ticket_dict("a", est=None)])
        assert cmd_estimate(args(ticket="a", hours=0, minutes="00", user="Alice", email=None),
                            ClientConfig(), source) == 1
        assert source.updates == []

    def test_not_owner(self, capsys):
        source = FakeSource([ticket_dict("a", est=None, members=("Alice", "Bob"), owner="Alice")])
        assert cmd_estimate(args(ticket="a", hours=1, minutes="30", user="Bob", email=None),
                            ClientConfig(), source) == 1
        assert "Only the task owner (Alice)" in capsys.readouterr().out

    def test_already_set(self, capsys):
        source = FakeSource([ticket_dict("a", est="1h 00m")])
        assert cmd_estimate(args(ticket="a", hours=2, minutes="00", user="Alice", email=None),
                            ClientConfig(), source) == 1
        assert "already been set" in capsys.readouterr().out


class TestEstimateView:
    """Tests for wb estimate without values."""

    def test_shows_picker_values(self, capsys):
        source = FakeSource([ticket_dict("a", est="2h 30m")])
        assert cmd_estimate(args(ticket="a", hours=None, minutes=None, user=None, email=None),
                            ClientConfig(), source) == 0
        assert "JOB-a: 2h 30m (hours=2, minutes=30)" in capsys.readouterr().out
        assert source.updates == []

    def test_unset_with_user(self, capsys):
        source = FakeSource([ticket_dict("a", est=None)])
        cmd_estimate(args(ticket="a", hours=None, minutes=None, user="Alice", email=None),
                     ClientConfig(), source)
        out = capsys.readouterr().out
        assert "JOB-a: no estimate set" in out
        assert "You can set it" in out

    def test_hours_without_minutes(self, capsys):
        source = FakeSource([ticket_dict("a", est=None)])
        assert cmd_estimate(args(ticket="a", hours=2, minutes=None, user="Alice", email=None),
                            ClientConfig(), source) == 2
        assert "both hours and minutes" in capsys.readouterr().out

    def test_setting_requires_user(self, capsys):
        source = FakeSource([ticket_dict("a", est=None)])
        assert cmd_estimate(args(ticket="a", hours=2, minutes="00", user=None, email=None),
                            ClientConfig(), source) == 2
        assert "--user is required" in capsys.readouterr().out
        assert source.updates == []


class TestMove:
    """Tests for wb move."""

    def test_status_only_move(self, capsys):
        source = FakeSource([ticket_dict("a", status="rf_qc")])
        assert cmd_move(args(ticket="a", trigger="qc_pass"), ClientConfig(), source, now=NOW) == 0
        assert source.updates == [("a", {"status": "qcd"})]
        assert "Ready for QC -> QC Done" in capsys.readouterr().out

    def test_pause_move_carries_meta(self):
        source = FakeSource([
            ticket_dict("a", status="in_process", started="2025-03-03T09:30:00", remaining=3600),
        ])
        cmd_move(args(ticket="a", trigger="pause"), ClientConfig(), source, now=NOW)
        assert source.updates[0][1]["meta"]["remainingSeconds"] == 1800

    def test_invalid_lists_allowed(self, capsys):
        source = FakeSource([ticket_dict("a", status="tbc")])
        assert cmd_move(args(ticket="a", trigger="send"), ClientConfig(), source, now=NOW) == 1
        out = capsys.readouterr().out
        assert "Cannot send from tbc" in out
        assert "cancel" in out
        assert "confirm" in out
        assert source.updates == []

    def test_api_error(self, capsys):
        source = FakeSource([])
        source.error = ApiError("down")
        assert cmd_move(args(ticket="a", trigger="send"), ClientConfig(), source, now=NOW) == 1
        assert "ERROR: down" in capsys.readouterr().out

    def test_terminal_move_reported(self, capsys):
        source = FakeSource([ticket_dict("a", status="qcd")])
        cmd_move(args(ticket="a", trigger="send"), ClientConfig(), source, now=NOW)
        assert "Ticket closed" in capsys.readouterr().out

    def test_move_by_target_status(self, capsys):
        source = FakeSource([ticket_dict("a", status="rf_qc")])
        assert cmd_move(args(ticket="a", trigger="qcd"), ClientConfig(), source, now=NOW) == 0
        assert source.updates == [("a", {"status": "qcd"})]
        assert "Ready for QC -> QC Done" in capsys.readouterr().out

    def test_target_status_to_paused_banks_time(self):
        source = FakeSource([
            ticket_dict("a", status="in_process", started="2025-03-03T09:30:00", remaining=3600),
        ])
        assert cmd_move(args(ticket="a", trigger="paused"), ClientConfig(), source, now=NOW) == 0
        assert source.updates[0][1]["meta"]["remainingSeconds"] == 1800

    def test_unreachable_target_status(self, capsys):
        source = FakeSource([ticket_dict("a", status="assigned")])
        assert cmd_move(args(ticket="a", trigger="sent"), ClientConfig(), source, now=NOW) == 1
        out = capsys.readouterr().out
        assert "No transition from assigned to sent" in out
        assert "Allowed from assigned" in out
        assert source.updates == []
