"""
wb watch - Live team availability board.

Interactive TUI over the schedule projection. Polls the ticket source on the
configured interval and ticks the active job's countdown every second.
"""

from datetime import datetime
from typing import Callable, Optional

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from workboard import notifications
from workboard.lib.api import ApiError
from workboard.lib.config import ClientConfig
from workboard.lib.snapshot import SnapshotError
from workboard.lib.timeline import (
    BAR_CHAR,
    EMPTY_CHAR,
    current_time_position,
    describe_job,
    format_clock,
    hour_markers,
    render_lane,
    status_label,
)
from workboard.lib.tui import ConfirmModal, ContentScreen
from workboard.schedule.aggregator import ALL_STATUSES, AVAILABILITY_STATUSES, filter_rows
from workboard.schedule.countdown import NEUTRAL, CountdownState
from workboard.schedule.countdown import compute as compute_countdown
from workboard.schedule.duration import format_countdown
from workboard.schedule.models import ScheduleRow, Ticket
from workboard.schedule.service import ScheduleService
from workboard.workflow.session import pause_payload

# Configuration
COUNTDOWN_TICK_SECONDS = 1.0
BOARD_COLUMNS = 60
NAME_WIDTH = 14
PROGRESS_WIDTH = 20

FILTER_CYCLE = [ALL_STATUSES] + AVAILABILITY_STATUSES


def _hour_header(columns: int) -> str:
    """Hour numbers placed over their timeline columns."""
    cells = [" "] * columns
    for marker in hour_markers():
        label = str(marker.hour % 12 or 12)
        pos = min(columns - len(label), int(round(marker.percent / 100 * columns)))
        for i, ch in enumerate(label):
            cells[pos + i] = ch
    return "".join(cells)


def _now_marker(now: datetime, columns: int) -> str:
    """Caret under the current time, empty outside the board window."""
    percent = current_time_position(now)
    if percent is None:
        return ""
    return " " * min(columns - 1, int(percent / 100 * columns)) + "▼"


def _progress_bar(percent: int, width: int = PROGRESS_WIDTH) -> str:
    filled = max(0, min(width, round(percent / 100 * width)))
    return BAR_CHAR * filled + EMPTY_CHAR * (width - filled)


class BoardWidget(Static):
    """One row per member, one track per lane."""

    rows: reactive[list] = reactive(list, always_update=True)
    now: reactive[Optional[datetime]] = reactive(None)
    status_filter: reactive[str] = reactive(ALL_STATUSES)
    stale_since: reactive[Optional[datetime]] = reactive(None)

    def render(self) -> str:
        lines = []
        if self.stale_since:
            lines.append(f"[yellow]Refresh failed; showing data from {self.stale_since:%H:%M}[/yellow]")
        if self.status_filter != ALL_STATUSES:
            lines.append(f"Filter: [cyan]{status_label(self.status_filter)}[/cyan]")

        rows = filter_rows(self.rows, self.status_filter)
        if not rows:
            lines.append("[dim]No scheduled work[/dim]")
            return "\n".join(lines)

        pad = " " * NAME_WIDTH
        lines.append(f"{pad}[dim]{_hour_header(BOARD_COLUMNS)}[/dim]")
        if self.now:
            marker = _now_marker(self.now, BOARD_COLUMNS)
            if marker:
                lines.append(f"{pad}[red]{marker}[/red]")

        for row in rows:
            name = escape(row.assignee_name[:NAME_WIDTH - 1].ljust(NAME_WIDTH))
            for lane in range(max(1, row.lane_count)):
                jobs = [job for job in row.jobs if job.lane == lane]
                prefix = f"[bold]{name}[/bold]" if lane == 0 else pad
                lines.append(prefix + render_lane(jobs, BOARD_COLUMNS))
            lines.append(f"{pad}[dim]free from {format_clock(row.last_job_end_time)}[/dim]")

        return "\n".join(lines)


class CountdownWidget(Static):
    """Live countdown for the active job."""

    job_id: reactive[Optional[str]] = reactive(None)
    countdown_state: reactive[CountdownState] = reactive(NEUTRAL)

    def render(self) -> str:
        if not self.job_id:
            return "[dim]No job in progress[/dim]"

        state = self.countdown_state
        line = (
            f"[bold]{escape(self.job_id)}[/bold]  "
            f"{format_countdown(state.remaining_seconds)}  "
            f"[blue]{_progress_bar(state.percent)}[/blue] {state.percent}%"
        )
        if state.end_instant is not None and state.remaining_seconds <= 0:
            line += "  [red]Estimation completed[/red]"
        return line


class AvailabilityApp(App):
    """Main availability board application."""

    CSS = """
    #main-container {
        layout: vertical;
        padding: 1;
    }

    #countdown-box {
        border: solid green;
        padding: 0 1;
        margin-bottom: 1;
        height: auto;
    }

    #board-box {
        border: solid blue;
        padding: 1;
        height: 1fr;
    }

    #action-bar {
        dock: bottom;
        height: 1;
        background: $surface;
        padding: 0 1;
    }

    #queue-body {
        padding: 1;
    }

    BoardWidget {
        height: auto;
    }

    CountdownWidget {
        height: auto;
    }
    """

    BINDINGS = [
        Binding("f", "cycle_filter", "Filter", show=False),
        Binding("r", "refresh", "Refresh", show=False),
        Binding("p", "pause_active", "Pause", show=False),
        Binding("d", "show_queue", "Details", show=False),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        source,
        config: ClientConfig,
        member: Optional[str] = None,
        now_provider: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__()
        self.ticket_source = source
        self.client_config = config
        self.member = member
        self.now_provider = now_provider
        self.service = ScheduleService(
            fetch_tickets=lambda: source.list_tickets(AVAILABILITY_STATUSES),
            fetch_team_members=source.list_team_members,
            now_provider=now_provider,
            clock=config.workday_clock(),
            on_estimate_complete=self._on_estimate_complete,
        )
        self.status_filter = ALL_STATUSES
        self._load_error_notified = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Container(CountdownWidget(id="countdown"), id="countdown-box"),
            VerticalScroll(BoardWidget(id="board"), id="board-box"),
            id="main-container",
        )
        yield Static(id="action-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_data()
        self.set_interval(self.client_config.poll_interval_seconds, self.refresh_data)
        self.set_interval(COUNTDOWN_TICK_SECONDS, self.tick_countdown)

    def refresh_data(self) -> None:
        """Re-fetch tickets and rebuild the projection."""
        if self.service.refresh():
            self._load_error_notified = False
        elif not self._load_error_notified:
            self.notify(f"Failed to load tickets: {self.service.last_error}", severity="error")
            if self.client_config.desktop_notifications:
                notifications.notify_fetch_failed(self.service.last_error or "unknown error")
            self._load_error_notified = True

        board = self.query_one("#board", BoardWidget)
        board.rows = self.service.rows
        board.now = self.now_provider()
        board.status_filter = self.status_filter
        board.stale_since = self.service.refreshed_at if self.service.last_error else None

        self.query_one("#action-bar", Static).update(self._get_action_bar())

        self.title = "wb watch"
        self.sub_title = f"{len(self.service.rows)} member(s)"
        self.tick_countdown()

    def tick_countdown(self) -> None:
        state = self.service.countdown_for(self.member)
        active = self.service.active_ticket(self.member)

        widget = self.query_one("#countdown", CountdownWidget)
        widget.job_id = active.job_id if active else None
        widget.countdown_state = state

    def _on_estimate_complete(self, ticket: Ticket) -> None:
        self.notify(f"{ticket.job_id}: Estimation completed", severity="warning")
        if self.client_config.desktop_notifications:
            notifications.notify_estimation_complete(ticket.job_id)

    def _get_action_bar(self) -> str:
        actions = ["\\[f]ilter", "\\[r]efresh", "\\[d]etails"]
        if self.service.active_ticket(self.member):
            actions.append("\\[p]ause")
        actions.append("\\[q]uit")
        return " | ".join(actions)

    def action_cycle_filter(self) -> None:
        """Step to the next status filter."""
        index = FILTER_CYCLE.index(self.status_filter)
        self.status_filter = FILTER_CYCLE[(index + 1) % len(FILTER_CYCLE)]
        self.query_one("#board", BoardWidget).status_filter = self.status_filter

    def action_refresh(self) -> None:
        self.refresh_data()

    def action_pause_active(self) -> None:
        """Pause the active job after confirmation."""
        active = self.service.active_ticket(self.member)
        if not active:
            self.notify("No job in progress", severity="warning")
            return

        def handle_confirm(confirmed: bool) -> None:
            if not confirmed:
                return
            try:
                self.ticket_source.update_ticket(active.id, pause_payload(active, self.now_provider()))
                self.notify(f"Paused {active.job_id}", severity="information")
            except (ApiError, SnapshotError) as e:
                self.notify(f"Pause failed: {e}", severity="error")
            self.refresh_data()

        left = compute_countdown(active, self.now_provider()).remaining_seconds
        self.push_screen(
            ConfirmModal(f"Pause {escape(active.job_id)}?", detail=f"{format_countdown(left)} left"),
            handle_confirm,
        )

    def action_show_queue(self) -> None:
        """Show every projected job, member by member."""
        rows = filter_rows(self.service.rows, self.status_filter)
        if not rows:
            self.notify("No scheduled work", severity="warning")
            return
        self.push_screen(ContentScreen(format_queue(rows), title="Queue"))


def format_queue(rows: list[ScheduleRow]) -> str:
    """Rich markup listing of each member's projected jobs."""
    lines = []
    for row in rows:
        lines.append(f"[bold]{escape(row.assignee_name)}[/bold]  "
                     f"[dim]free from {format_clock(row.last_job_end_time)}[/dim]")
        for job in row.jobs:
            lines.append(f"  {escape(describe_job(job))}")
        lines.append("")
    return "\n".join(lines).rstrip()


def cmd_watch(args, config: ClientConfig, source) -> int:
    """Run the availability board."""
    app = AvailabilityApp(source, config, member=args.member)
    app.run()
    return 0
