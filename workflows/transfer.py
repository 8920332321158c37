"""Transfer workflow: move matching tray documents into a file cabinet."""

from dataclasses import dataclass, field
from typing import List, Optional

import requests

from autostore import AutoStore
from autostore.config import Task
from docuware import (
    DocuWareError,
    DocuWareGateway,
    Document,
    FileCabinet,
    IntellixTrust,
    LinkNotFoundError,
)
from .matcher import matches
from .pager import iter_documents
from .suggestions import ReconciledField, build_index_update, reconcile

# Errors of a single document's side call; they never stop the batch
SIDE_CALL_ERRORS = (DocuWareError, requests.RequestException)


@dataclass
class TaskReport:
    """Outcome of one task."""
    task_index: int
    tray: Optional[FileCabinet] = None
    cabinet: Optional[FileCabinet] = None
    fetched: int = 0
    matched: int = 0
    stored: int = 0
    reintellixed: int = 0
    document_ids: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def _format_pattern(pattern) -> str:
    return pattern if isinstance(pattern, str) else ",".join(pattern)


def _print_task_header(report: TaskReport, task: Task) -> None:
    AutoStore.print_right(f"\n[yellow]Task {report.task_index}:[/yellow]")
    AutoStore.print_right(f"\t> Document Tray: {report.tray.display_name}")
    AutoStore.print_right(f"\t> File Cabinet: {report.cabinet.display_name}")
    trust = task.allowed_intellix_trust
    if trust is not None:
        AutoStore.print_right(f"\t> Intellix Trust Filter: {_format_pattern(trust)}")


def _print_preview(document: Document, fields: Optional[List[ReconciledField]]) -> None:
    AutoStore.print_right(
        f"\t> ID:{document.id} Title:{document.title} IntellixTrust:{document.intellix_trust}"
    )
    for f in fields or []:
        AutoStore.print_right(
            f"\t\t> {f.name:<25} = {str(f.value):<50} Confidence: {f.confidence}"
        )


def _side_call_failed(report: TaskReport, document: Document, action: str,
                      exc: Exception) -> None:
    message = f"{action} failed for document {document.id}: {exc}"
    report.errors.append(message)
    AutoStore.print_right(f"\t[red]✗ {message}[/red]")


def reintellix_if_failed(gateway: DocuWareGateway, task: Task, tray: FileCabinet,
                         document: Document, report: TaskReport,
                         dry_run: bool = False) -> None:
    """Resend a document whose classification failed to the indexing service."""
    if not task.reintellix_on_failure:
        return
    if document.intellix_trust != IntellixTrust.FAILED:
        return

    if dry_run:
        AutoStore.print_right(f"\t> Would re-intellix ID:{document.id} Title:{document.title}")
        return

    try:
        gateway.reintellix(tray, document)
    except LinkNotFoundError:
        raise
    except SIDE_CALL_ERRORS as e:
        _side_call_failed(report, document, "Re-intellix", e)
        return
    report.reintellixed += 1
    AutoStore.print_right(f"\t> Re-intellix requested for ID:{document.id}")


def apply_suggestions(gateway: DocuWareGateway, task: Task, document: Document,
                      report: TaskReport) -> None:
    """Write the reconciled suggestions of one document to its index."""
    try:
        fields = reconcile(document, gateway.get_suggestions(document), task)
        if fields:
            gateway.update_index_fields(document, build_index_update(fields))
    except LinkNotFoundError:
        raise
    except SIDE_CALL_ERRORS as e:
        _side_call_failed(report, document, "Index update", e)


def run_task(gateway: DocuWareGateway, task: Task, index: int,
             dry_run: bool = False) -> TaskReport:
    """Run one archiving task to completion.

    Every fetched document is checked for the re-intellix side path, then
    matched against the task filters. Matching documents get their
    suggestions applied and are queued; all queued documents are moved with
    a single transfer call at the end.

    Args:
        gateway: Logged-on DocuWare gateway
        task: Task configuration
        index: 1-based task number, for reporting
        dry_run: Only list what would be stored

    Returns:
        TaskReport with counts and the ids that were transferred

    Raises:
        DocuWareError: If resolving cabinets, paging or the transfer fails
        requests.RequestException: On transport errors outside side calls
    """
    report = TaskReport(task_index=index)
    report.cabinet = gateway.get_file_cabinet(task.file_cabinet_id)
    report.tray = gateway.get_file_cabinet(task.document_tray_id)
    _print_task_header(report, task)

    batch: List[int] = []
    for document in iter_documents(gateway, report.tray, task.limit):
        report.fetched += 1
        reintellix_if_failed(gateway, task, report.tray, document, report, dry_run)

        if not matches(task.filters, document):
            continue
        report.matched += 1

        if dry_run:
            fields = None
            if task.suggestions is not None:
                try:
                    fields = reconcile(document, gateway.get_suggestions(document), task)
                except LinkNotFoundError:
                    raise
                except SIDE_CALL_ERRORS as e:
                    _side_call_failed(report, document, "Suggestions", e)
            _print_preview(document, fields)
            continue

        if document.id is None:
            continue

        if task.suggestions is not None:
            apply_suggestions(gateway, task, document, report)
        batch.append(document.id)

    if batch and not dry_run:
        gateway.transfer(
            batch,
            report.tray,
            report.cabinet,
            task.keep_source,
            store_dialog_id=task.store_dialog_id,
            fill_intellix=task.suggestions is None,
        )
        report.stored = len(batch)
        report.document_ids = batch

    AutoStore.report_task(report)
    AutoStore.print_right(f"[green]\t> Stored {report.stored} documents[/green]\n")
    return report
