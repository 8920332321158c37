"""TextUI - Textual-based terminal UI for AutoStore.

Shows one table row per archiving task (tray, cabinet, matched, stored and
failed side calls), the running log and the failed side calls of the run.
"""

import threading
from typing import Callable, Dict, Optional, Tuple, TYPE_CHECKING

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Footer, Header, Label, ProgressBar, RichLog, Static

from autostore import AutoStore, __version__

if TYPE_CHECKING:
    from workflows import TaskReport

TASK_COLUMNS = (
    ("Task", "task"),
    ("Document Tray", "tray"),
    ("File Cabinet", "cabinet"),
    ("Fetched", "fetched"),
    ("Matched", "matched"),
    ("Stored", "stored"),
    ("Errors", "errors"),
)


class RunInfo(Static):
    """One-line summary of where and how the run happens."""

    def __init__(self, platform: str = "", dry_run: bool = False, **kwargs) -> None:
        super().__init__(**kwargs)
        self.platform = platform
        self.organization = "(logging on...)"
        self.mode = "dry run" if dry_run else "store"

    def on_mount(self) -> None:
        self.refresh_info()

    def refresh_info(self) -> None:
        self.update(
            f"[b]{self.platform}[/b]  Organization: {self.organization}  Mode: {self.mode}"
        )


class AutoStoreApp(App):
    """Textual app showing the progress of an AutoStore run."""

    CSS = """
    #run-info {
        height: 1;
        padding: 0 1;
        background: $boost;
    }

    .section-title {
        height: 1;
        padding: 0 1;
        background: $accent;
        color: $text;
        text-style: bold;
    }

    #task-table {
        height: auto;
        max-height: 40%;
    }

    #logs {
        height: 1fr;
    }

    #activity-pane {
        width: 2fr;
    }

    #error-pane {
        width: 1fr;
        border-left: solid $error;
    }

    #status-bar {
        height: 1;
        padding: 0 1;
    }

    #task-progress {
        width: 30;
    }

    #stored-total {
        width: 1fr;
        text-align: right;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit"),
    ]

    def __init__(self, platform: str = "", dry_run: bool = False,
                 process_func: Optional[Callable[[], None]] = None) -> None:
        super().__init__()
        self.platform = platform
        self.dry_run = dry_run
        self._process_func = process_func
        # Task number -> (stored, errors) of its latest report
        self._task_totals: Dict[str, Tuple[int, int]] = {}

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield RunInfo(self.platform, self.dry_run, id="run-info")
        yield Static("TASKS", classes="section-title")
        yield DataTable(id="task-table", cursor_type="row", zebra_stripes=True)

        with Horizontal(id="logs"):
            with Vertical(id="activity-pane"):
                yield Static("ACTIVITY", classes="section-title")
                yield RichLog(id="activity-log", markup=True, wrap=True)
            with Vertical(id="error-pane"):
                yield Static("FAILED SIDE CALLS", classes="section-title")
                yield RichLog(id="error-log", markup=True, wrap=True)

        with Horizontal(id="status-bar"):
            yield ProgressBar(id="task-progress", show_eta=False)
            yield Label("", id="stored-total")

        yield Footer()

    def on_mount(self) -> None:
        self.title = f"AutoStore v{__version__}"
        table = self.query_one("#task-table", DataTable)
        for label, key in TASK_COLUMNS:
            table.add_column(label, key=key)
        self._update_totals()

        AutoStore.set_app(self)
        if self._process_func:
            threading.Thread(target=self._process_func, daemon=True).start()

    def on_unmount(self) -> None:
        AutoStore.set_app(None)

    @property
    def tasks_done(self) -> int:
        return len(self._task_totals)

    @property
    def stored_total(self) -> int:
        return sum(stored for stored, _ in self._task_totals.values())

    @property
    def error_total(self) -> int:
        return sum(errors for _, errors in self._task_totals.values())

    def _update_totals(self) -> None:
        verb = "would store" if self.dry_run else "stored"
        self.query_one("#stored-total", Label).update(
            f"{self.tasks_done} tasks done, {verb} {self.stored_total} documents, "
            f"{self.error_total} errors"
        )

    def add_task_report(self, report: "TaskReport") -> None:
        """Add or refresh the row of a finished task.

        A retried run reports the same task numbers again; their rows are
        overwritten rather than duplicated.
        """
        table = self.query_one("#task-table", DataTable)
        key = str(report.task_index)
        stored = report.matched if self.dry_run else report.stored
        values = {
            "task": report.task_index,
            "tray": report.tray.name if report.tray else "",
            "cabinet": report.cabinet.name if report.cabinet else "",
            "fetched": report.fetched,
            "matched": report.matched,
            "stored": stored,
            "errors": len(report.errors),
        }
        if key in self._task_totals:
            for column, value in values.items():
                table.update_cell(key, column, value)
        else:
            table.add_row(*(values[column] for _, column in TASK_COLUMNS), key=key)
        self._task_totals[key] = (stored, len(report.errors))

        error_log = self.query_one("#error-log", RichLog)
        for message in report.errors:
            error_log.write(f"[red]Task {report.task_index}:[/red] {message}")
        self._update_totals()

    def add_activity(self, message: str) -> None:
        self.query_one("#activity-log", RichLog).write(message)

    def set_progress(self, current: int, total: int) -> None:
        self.query_one("#task-progress", ProgressBar).update(total=total, progress=current)

    def update_organization(self, organization: str) -> None:
        info = self.query_one("#run-info", RunInfo)
        info.organization = organization
        info.refresh_info()
