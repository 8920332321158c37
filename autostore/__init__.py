"""AutoStore - Application state and reporting."""

import re
from datetime import datetime
from typing import Optional, Any, TYPE_CHECKING

if TYPE_CHECKING:
    import argparse
    from workflows import TaskReport

__version__ = "0.2.0"


def _strip_rich_markup(text: str) -> str:
    """Remove Rich markup tags like [red], [/red], [bold], etc."""
    return re.sub(r'\[/?[a-zA-Z_]+\]', '', text)


class AutoStore:
    """Central run flags and output routing for AutoStore."""

    # CLI config options
    dry_run: bool = False

    # UI app reference (None = CLI mode)
    _app: Optional[Any] = None

    @classmethod
    def configure(cls, args: "argparse.Namespace") -> None:
        """Initialize run flags from parsed CLI args."""
        cls.dry_run = getattr(args, 'dry_run', False)

    @classmethod
    def set_app(cls, app: Any) -> None:
        """Set the Textual app reference for UI updates."""
        cls._app = app

    @classmethod
    def report_task(cls, report: "TaskReport") -> None:
        """Show a finished task (task table in TUI, summary lines in CLI)."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.add_task_report, report)
            return
        timestamp = datetime.now().strftime("%H:%M")
        print(f"{timestamp} Task {report.task_index}: "
              f"stored {report.stored} of {report.matched} matching")
        print(f"  {report.tray.name} → {report.cabinet.name}")

    @classmethod
    def print_right(cls, message: str) -> None:
        """Add line to the activity log (TUI) or stdout (CLI)."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.add_activity, message)
        else:
            print(_strip_rich_markup(message))

    @classmethod
    def set_progress(cls, current: int, total: int) -> None:
        """Update progress bar and label."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.set_progress, current, total)

    @classmethod
    def set_organization(cls, organization: str) -> None:
        """Show the organization once logged on."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.update_organization, organization)
