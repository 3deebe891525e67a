"""Modal screens shared by the wb board."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Static


class ConfirmModal(ModalScreen[bool]):
    """Yes/no prompt before a ticket update is sent.

    Dismisses with True on confirm. The optional detail line carries
    context such as the time left on the job being paused.
    """

    CSS = """
    ConfirmModal {
        align: center middle;
    }

    #confirm-box {
        width: 48;
        height: auto;
        padding: 1 2;
        background: $panel;
        border: round $warning;
    }

    #confirm-detail {
        color: $text-muted;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__()
        self.message = message
        self.detail = detail

    def compose(self) -> ComposeResult:
        parts = [Static(f"[bold]{self.message}[/bold]", id="confirm-message")]
        if self.detail:
            parts.append(Static(self.detail, id="confirm-detail"))
        parts.append(Static("\\[y] confirm   \\[n] keep going", id="confirm-keys"))
        yield Container(*parts, id="confirm-box")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class ContentScreen(ModalScreen):
    """Scrollable read-only view, used for the full job queue."""

    BINDINGS = [
        Binding("q", "back", "Back"),
        Binding("escape", "back", "Back"),
    ]

    def __init__(self, content: str, title: str = "") -> None:
        super().__init__()
        self.content_text = content
        self.screen_title = title

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(Static(self.content_text, id="queue-body"))
        yield Footer()

    def on_mount(self) -> None:
        if self.screen_title:
            self.title = self.screen_title

    def action_back(self) -> None:
        self.app.pop_screen()
