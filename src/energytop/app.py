"""energytop - Main Textual application."""

from datetime import datetime
from queue import Empty, Queue

from rich.markup import escape
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, VerticalScroll
from textual.widgets import Collapsible, DataTable, Footer, Static

from energytop.aggregator import SeriesAggregator
from energytop.config import MonitorConfig
from energytop.models import ChartView, DisplayRow
from energytop.monitor import EnergyMonitor, PollResult
from energytop.providers import FileSnapshotProvider, SnapshotProvider
from energytop.table import format_energy

SPARK_BLOCKS = "▁▂▃▄▅▆▇█"


def render_sparkline(values: list[float | None] | tuple[float | None, ...], width: int = 60) -> str:
    """
    Render the trailing ``width`` values as a unicode sparkline.

    Missing values render as a blank cell so gaps stay visible.
    """
    window = list(values)[-width:] if width > 0 else []
    present = [v for v in window if v is not None]
    if not present:
        return " " * len(window)

    low, high = min(present), max(present)
    span = high - low
    top = len(SPARK_BLOCKS) - 1
    chars = []
    for value in window:
        if value is None:
            chars.append(" ")
        elif span == 0:
            chars.append(SPARK_BLOCKS[top // 2])
        else:
            chars.append(SPARK_BLOCKS[round((value - low) / span * top)])
    return "".join(chars)


class HeaderStatus(Static):
    """Header widget showing poll status and the latest sample time."""

    DEFAULT_CSS = """
    HeaderStatus {
        height: auto;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, source: str = "", *args, **kwargs) -> None:
        """Initialize HeaderStatus."""
        super().__init__(*args, **kwargs)
        self._source = source
        self._status = "Initializing…"
        self._timestamp: int | None = None

    @property
    def status(self) -> str:
        return self._status

    def on_mount(self) -> None:
        self.update(self._render_status())

    def update_status(self, result: PollResult) -> None:
        """Update from the outcome of a poll cycle."""
        self._status = result.status
        if result.snapshot is not None:
            self._timestamp = result.snapshot.timestamp
        self.update(self._render_status())

    def _render_status(self) -> str:
        color = "green" if self._status == "OK" else "red"
        if self._timestamp is None:
            ts = "—"
        else:
            ts = datetime.fromtimestamp(self._timestamp).strftime("%Y-%m-%d %H:%M:%S")
        return (
            f"[b]Source:[/b] {escape(self._source)}\n"
            f"[b]Status:[/b] [{color}]{escape(self._status)}[/{color}]\n"
            f"[b]Timestamp:[/b] {ts}"
        )


class EnergyChart(Static):
    """Rolling chart with one sparkline per series."""

    DEFAULT_CSS = """
    EnergyChart {
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(self, *args, spark_width: int = 60, **kwargs) -> None:
        """Initialize EnergyChart."""
        super().__init__(*args, **kwargs)
        self._spark_width = spark_width
        self._view = ChartView(labels=(), datasets=())

    @property
    def view(self) -> ChartView:
        return self._view

    def on_mount(self) -> None:
        self.update(self._render_chart())

    def update_chart(self, view: ChartView) -> None:
        """Redraw from a chart view."""
        self._view = view
        self.update(self._render_chart())

    def _render_chart(self) -> Text:
        if not self._view.labels:
            return Text("Waiting for data…", style="dim")

        text = Text()
        text.append(f"{self._view.labels[0]} → {self._view.labels[-1]}\n", style="dim")
        for dataset in self._view.datasets:
            latest = dataset.values[-1] if dataset.values else None
            text.append(f"{dataset.label[:32]:<32} ", style="bold")
            text.append(render_sparkline(dataset.values, self._spark_width), style="cyan")
            text.append(f" {format_energy(latest):>10}\n")
        return text


class EnergyTable(Container):
    """Container for the latest readings table."""

    DEFAULT_CSS = """
    EnergyTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize EnergyTable."""
        super().__init__(*args, **kwargs)
        self._current_pids: list[int] = []

    @property
    def current_pids(self) -> list[int]:
        """Pids in display order."""
        return list(self._current_pids)

    def compose(self) -> ComposeResult:
        """Compose the energy table."""
        yield DataTable(id="energy-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#energy-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("comm", key="comm", width=20)
        table.add_column("energy (kWh)", key="energy", width=14)

    def update_rows(self, rows: list[DisplayRow]) -> None:
        """
        Replace the table contents with new rows.

        Rows arrive already sorted, so the table is rebuilt to keep their order.
        """
        table = self.query_one("#energy-table", DataTable)
        table.clear()

        if not rows:
            table.add_row("", Text("No entries", style="dim"), "", key="empty")
            self._current_pids = []
            return

        for row in rows:
            table.add_row(
                str(row.pid),
                Text(row.comm),
                Text(row.energy, justify="right"),
                key=str(row.pid),
            )
        self._current_pids = [row.pid for row in rows]


class EnergytopApp(App):
    """Main energytop application."""

    TITLE = "energytop"
    SUB_TITLE = "Per-process energy monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-status {
        dock: top;
        height: auto;
    }

    #chart-scroll {
        height: 1fr;
        border: solid $secondary;
    }

    #raw-text {
        padding: 0 1;
        max-height: 12;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "reset", "Reset chart"),
    ]

    def __init__(
        self,
        config: MonitorConfig | None = None,
        provider: SnapshotProvider | None = None,
    ) -> None:
        """Initialize the EnergytopApp."""
        super().__init__()
        self._config = config or MonitorConfig()
        self._update_queue: Queue[PollResult] = Queue()
        self._aggregator = SeriesAggregator(max_points=self._config.max_points)
        self._monitor = EnergyMonitor(
            provider or FileSnapshotProvider(self._config.source_path),
            self._aggregator,
            self._update_queue,
            poll_rate=self._config.poll_rate,
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStatus(self._config.source_path, id="header-status")
        with VerticalScroll(id="chart-scroll"):
            yield EnergyChart(id="energy-chart")
        yield EnergyTable()
        with Collapsible(title="Raw source", collapsed=True):
            yield Static("—", id="raw-text", markup=False)
        yield Footer()

    def on_mount(self) -> None:
        """Start the energy monitor when the app is mounted."""
        self._monitor.start()
        # Set up a timer to poll the queue for updates
        self.set_interval(0.25, self._check_for_updates)

    def on_unmount(self) -> None:
        self._monitor.stop()

    def _check_for_updates(self) -> None:
        """Check the queue for poll results and refresh the UI."""
        # Drain the queue, only the most recent result is displayed
        result = None
        latest_ok = None
        while True:
            try:
                result = self._update_queue.get_nowait()
            except Empty:
                break
            if result.ok:
                latest_ok = result

        # A success followed by a failure was still ingested, so redraw it
        if latest_ok is not None and latest_ok is not result:
            self._update_ui(latest_ok)
        if result is not None:
            self._update_ui(result)

    def _update_ui(self, result: PollResult) -> None:
        """Update the UI with the outcome of a poll cycle."""
        self.query_one("#header-status", HeaderStatus).update_status(result)

        raw_text = result.raw_text
        if raw_text is not None:
            self.query_one("#raw-text", Static).update(raw_text)

        if result.ok:
            self.query_one(EnergyTable).update_rows(result.rows)
            self.query_one("#energy-chart", EnergyChart).update_chart(self._aggregator.chart_view())

    def action_reset(self) -> None:
        """Clear the chart window."""
        self._aggregator.reset()
        self.query_one("#energy-chart", EnergyChart).update_chart(self._aggregator.chart_view())
        self.notify("Chart reset")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()
