"""
wb schedule - Print the availability board.
"""

import json
from datetime import datetime

from workboard.lib.api import ApiError
from workboard.lib.config import ClientConfig
from workboard.lib.snapshot import SnapshotError
from workboard.lib.timeline import describe_job, format_clock, status_label
from workboard.schedule.aggregator import AVAILABILITY_STATUSES, build, filter_rows, status_counts
from workboard.schedule.lanes import row_height


def cmd_schedule(args, config: ClientConfig, source, now: datetime = None) -> int:
    """Project every member's queue for today and print it."""
    now = now or datetime.now()

    try:
        tickets = source.list_tickets(AVAILABILITY_STATUSES)
        members = source.list_team_members()
    except (ApiError, SnapshotError) as e:
        print(f"ERROR: {e}")
        return 1

    rows = build(tickets, members, now, clock=config.workday_clock())
    counts = status_counts(rows)
    rows = filter_rows(rows, args.status)

    if args.json:
        print(json.dumps({
            "generatedAt": now.isoformat(),
            "statusCounts": dict(counts),
            "rows": [{**row.to_dict(), "rowHeight": row_height(row.lane_count)} for row in rows],
        }, indent=2))
        return 0

    print(f"Availability ({now:%Y-%m-%d %H:%M})")
    print("=" * 60)

    if not rows:
        print("No scheduled work")
        return 0

    for row in rows:
        print()
        print(f"{row.assignee_name}  (free from {format_clock(row.last_job_end_time)})")
        for job in row.jobs:
            lane = f" [lane {job.lane + 1}]" if row.lane_count > 1 else ""
            print(f"  {describe_job(job)}{lane}")

    print()
    summary = ", ".join(f"{status_label(s)}: {n}" for s, n in sorted(counts.items()))
    print(f"{len(rows)} member(s); {summary}")
    return 0
