"""Tests for the Textual task view, driven headless with App.run_test()."""

import asyncio

from textual.widgets import DataTable, RichLog

from autostore import AutoStore
from docuware import FileCabinet
from textui import AutoStoreApp
from workflows import TaskReport

from conftest import CABINET_ID, TRAY_ID


def make_report(index=1, matched=3, stored=3, errors=None):
    return TaskReport(
        task_index=index,
        tray=FileCabinet(id=TRAY_ID, name="Inbox Tray"),
        cabinet=FileCabinet(id=CABINET_ID, name="Invoices"),
        fetched=5,
        matched=matched,
        stored=stored,
        errors=list(errors or []),
    )


def run_app(app, scenario):
    """Run ``scenario(app, pilot)`` against a headless app."""
    async def runner():
        async with app.run_test() as pilot:
            await scenario(app, pilot)
    asyncio.run(runner())


class TestTaskTable:
    """Tests for the task table."""

    def test_task_row_shows_tray_cabinet_and_counts(self):
        async def scenario(app, pilot):
            app.add_task_report(make_report(errors=["Index update failed for document 7: boom"]))
            await pilot.pause()

            table = app.query_one("#task-table", DataTable)
            assert table.row_count == 1
            assert table.get_row_at(0) == [1, "Inbox Tray", "Invoices", 5, 3, 3, 1]
            assert len(app.query_one("#error-log", RichLog).lines) >= 1
            assert app.stored_total == 3
            assert app.error_total == 1

        run_app(AutoStoreApp(platform="https://acme.docuware.cloud"), scenario)

    def test_retried_task_overwrites_its_row(self):
        async def scenario(app, pilot):
            app.add_task_report(make_report(stored=0, errors=["Transfer failed"]))
            app.add_task_report(make_report(stored=3))
            await pilot.pause()

            table = app.query_one("#task-table", DataTable)
            assert table.row_count == 1
            assert table.get_row_at(0)[5] == 3
            assert app.tasks_done == 1
            assert app.stored_total == 3
            assert app.error_total == 0

        run_app(AutoStoreApp(), scenario)

    def test_dry_run_counts_matched_documents(self):
        async def scenario(app, pilot):
            app.add_task_report(make_report(index=1, matched=4, stored=0))
            app.add_task_report(make_report(index=2, matched=2, stored=0))
            await pilot.pause()

            assert app.query_one("#task-table", DataTable).row_count == 2
            assert app.stored_total == 6

        run_app(AutoStoreApp(dry_run=True), scenario)


class TestOutputRouting:
    """AutoStore output reaches the app from the worker thread."""

    def test_reports_and_messages_from_worker_thread(self):
        async def scenario(app, pilot):
            assert AutoStore._app is app

            def worker():
                AutoStore.set_organization("Peters Engineering")
                AutoStore.print_right("[green]\t> Stored 3 documents[/green]")
                AutoStore.set_progress(1, 2)
                AutoStore.report_task(make_report())

            await asyncio.to_thread(worker)
            await pilot.pause()

            assert app.query_one("#run-info").organization == "Peters Engineering"
            assert len(app.query_one("#activity-log", RichLog).lines) >= 1
            assert app.query_one("#task-table", DataTable).row_count == 1

        app = AutoStoreApp(platform="https://acme.docuware.cloud")
        run_app(app, scenario)
        assert AutoStore._app is None

    def test_run_starts_in_worker_thread(self):
        started = []

        async def scenario(app, pilot):
            for _ in range(50):
                if started:
                    break
                await pilot.pause(0.01)
            assert started == [True]

        run_app(AutoStoreApp(process_func=lambda: started.append(True)), scenario)
