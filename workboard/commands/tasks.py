"""
wb tasks - Show one member's queue and the countdown for their active job.
"""

from datetime import datetime

from workboard.lib.api import ApiError
from workboard.lib.config import ClientConfig
from workboard.lib.snapshot import SnapshotError
from workboard.lib.timeline import describe_job
from workboard.schedule.aggregator import roster_by_name
from workboard.schedule.allocator import share_estimate
from workboard.schedule.countdown import compute, find_active_ticket
from workboard.schedule.duration import format_countdown
from workboard.schedule.sequencer import sequence
from workboard.workflow.session import missing_start_fields


def cmd_tasks(args, config: ClientConfig, source, now: datetime = None) -> int:
    """List a member's tasks in projected order."""
    now = now or datetime.now()
    member_name = args.member

    try:
        tickets = source.member_tasks(member_name)
        members = source.list_team_members()
    except (ApiError, SnapshotError) as e:
        print(f"ERROR: {e}")
        return 1

    if not tickets:
        print(f"No tasks for {member_name}")
        return 0

    clock = config.workday_clock()
    member = roster_by_name(members).get(member_name)
    start_hhmm = member.start_time if member else clock.default_day_start
    jobs = sequence(tickets, start_hhmm, now, clock=clock, assignee=member_name)

    print(f"Tasks: {member_name}")
    print("-" * 60)
    for job in jobs:
        print(f"  {describe_job(job)}")
        share = share_estimate(job.ticket)
        if share and share.count > 1:
            print(f"      {share.total} total, {share.per_person} each ({share.count} people)")
        missing = missing_start_fields(job.ticket)
        if missing and job.status == "assigned":
            print(f"      needs: {', '.join(missing)}")

    active = find_active_ticket(tickets)
    print()
    if active is None:
        print("No job in progress")
        return 0

    state = compute(active, now)
    print(f"Active: {active.job_id}  {format_countdown(state.remaining_seconds)} left  ({state.percent}%)")
    if state.end_instant is not None and state.remaining_seconds <= 0:
        print("  Estimation completed")
    return 0
