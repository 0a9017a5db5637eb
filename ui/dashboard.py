"""Real-time CLI dashboard for request and webhook monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import DeliveryOutcome
from ui.log_utils import redact_url

console = Console()


class RequestInfo:
    """Info about a single intercepted request."""

    def __init__(self, method: str, path: str, timestamp: datetime):
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing traffic and webhook delivery."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 8
        self._counts = {"requests": 0, "delivered": 0, "failed": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    @property
    def counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    @property
    def errors(self) -> list[str]:
        with self._lock:
            return list(self._errors)

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_request(self, method: str, path: str) -> None:
        """Log a request that triggered a notification."""
        with self._lock:
            self._counts["requests"] += 1
            self._requests.insert(0, RequestInfo(method, path, datetime.now()))
            self._requests = self._requests[: self._max_requests]
            self._refresh()

    def log_outcome(self, outcome: DeliveryOutcome) -> None:
        """Log the result of a webhook notification."""
        with self._lock:
            if outcome.succeeded:
                self._counts["delivered"] += 1
            else:
                self._counts["failed"] += 1
                detail = outcome.error or f"status {outcome.status_code}"
                truncated = detail[:60] + "..." if len(detail) > 60 else detail
                self._errors.insert(0, f"{datetime.now():%H:%M:%S} {truncated}")
                self._errors = self._errors[:3]
            self._refresh()

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Request Notifier", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Requests: {self._counts['requests']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Delivered: {self._counts['delivered']}", style="green")
        stats.append("  |  ")
        stats.append(f"Failed: {self._counts['failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.server.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=8)
            table.add_column("Path", ratio=1)

            for req in self._requests:
                table.add_row(req.timestamp.strftime("%H:%M:%S"), req.method, req.path)

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent Requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with webhook failures and target."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(f"Webhook: {redact_url(self.config.notifier.url)}", style="dim")

        return Panel(content, title="[dim]Webhook[/dim]", border_style="dim")
