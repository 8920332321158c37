"""Shared fixtures: an in-memory DocuWare gateway and record builders."""

import pytest

from autostore import AutoStore
from autostore.config import Config, Task
from docuware import (
    DocuWareError,
    DocuWareGateway,
    DocuWareSession,
    Document,
    DocumentsPage,
    FileCabinet,
    Organization,
    SessionError,
    SuggestionField,
    SuggestionValue,
)


TRAY_ID = "b_tray-0001"
CABINET_ID = "fc-0001"


def make_doc(doc_id, title="", trust=None, fields=None):
    """Build a Document the way a query result would deliver it."""
    raw = {"Id": doc_id, "Title": title, "IntellixTrust": trust,
           "Fields": [{"FieldName": k, "Item": v} for k, v in (fields or {}).items()]}
    return Document(
        id=doc_id,
        title=title,
        intellix_trust=trust,
        fields=dict(fields or {}),
        links={"suggestions": f"/docs/{doc_id}/suggestions", "fields": f"/docs/{doc_id}/fields"},
        raw=raw,
    )


def make_suggestion(name, item, element="String", confidence=None):
    raw = {"Name": name, "Value": [{"Item": item, "ItemElementName": element}],
           "Confidence": confidence}
    return SuggestionField(
        name=name,
        values=[SuggestionValue(item=item, item_element_name=element)],
        confidence=confidence,
        raw=raw,
    )


def make_pages(*batches):
    """Chain document batches into pages linked by 'next'."""
    pages = []
    for i, batch in enumerate(batches):
        links = {"next": f"page-{i + 1}"} if i < len(batches) - 1 else {}
        pages.append(DocumentsPage(items=list(batch), links=links))
    return pages


class FakeGateway(DocuWareGateway):
    """In-memory DocuWare platform recording every call."""

    def __init__(self, pages=None, suggestions=None, logon_failures=0):
        self.cabinets = {
            TRAY_ID: FileCabinet(id=TRAY_ID, name="Inbox Tray"),
            CABINET_ID: FileCabinet(id=CABINET_ID, name="Invoices",
                                    links={"transfer": f"/fc/{CABINET_ID}/transfer"}),
        }
        self.pages = pages if pages is not None else make_pages([])
        self.suggestions = suggestions or {}
        self.logon_failures = logon_failures
        self.fail_update_ids = set()
        self.fail_reintellix_ids = set()
        self.fail_transfer = False

        self.session = None
        self.calls = []
        self.logons = 0
        self.first_page_counts = []
        self.transfers = []
        self.updates = []
        self.reintellixed = []

    @property
    def display_name(self):
        return "https://fake.docuware.cloud"

    def logon(self, credentials):
        self.calls.append("logon")
        self.logons += 1
        if self.logons <= self.logon_failures:
            raise SessionError("No cookies returned!")
        self.session = DocuWareSession(username=credentials.username)
        return self.session

    def get_organization(self):
        self.calls.append("organization")
        return Organization(id="org-1", name="Peters Engineering")

    def get_file_cabinet(self, cabinet_id):
        self.calls.append(f"cabinet:{cabinet_id}")
        if cabinet_id not in self.cabinets:
            raise DocuWareError(f"File cabinet {cabinet_id} not found", status_code=404)
        return self.cabinets[cabinet_id]

    def query_first_page(self, cabinet, count):
        self.calls.append("page:0")
        self.first_page_counts.append(count)
        return self.pages[0]

    def query_next_page(self, page):
        if not page.next_link:
            raise DocuWareError("No next link available, you already received all results.")
        index = int(page.next_link.split("-")[1])
        self.calls.append(f"page:{index}")
        return self.pages[index]

    def transfer(self, document_ids, source, destination, keep_source,
                 store_dialog_id=None, fill_intellix=True):
        self.calls.append("transfer")
        if self.fail_transfer:
            raise DocuWareError("Transfer failed", status_code=500)
        self.transfers.append({
            "ids": list(document_ids),
            "source": source.id,
            "destination": destination.id,
            "keep_source": keep_source,
            "store_dialog_id": store_dialog_id,
            "fill_intellix": fill_intellix,
        })
        return {}

    def get_suggestions(self, document):
        self.calls.append(f"suggestions:{document.id}")
        return list(self.suggestions.get(document.id, []))

    def update_index_fields(self, document, payload):
        self.calls.append(f"update:{document.id}")
        if document.id in self.fail_update_ids:
            raise DocuWareError("Field validation failed", status_code=422)
        self.updates.append((document.id, payload))
        return payload

    def reintellix(self, cabinet, document):
        self.calls.append(f"reintellix:{document.id}")
        if document.id in self.fail_reintellix_ids:
            raise DocuWareError("Intellix unavailable", status_code=503)
        self.reintellixed.append(document.id)
        return {}


@pytest.fixture(autouse=True)
def cli_output():
    """Make sure no TUI is attached and flags are reset between tests."""
    AutoStore.set_app(None)
    AutoStore.dry_run = False
    yield
    AutoStore.set_app(None)


@pytest.fixture
def task():
    return Task(file_cabinet_id=CABINET_ID, document_tray_id=TRAY_ID, limit=50)


@pytest.fixture
def config(task):
    return Config(
        root_url="https://fake.docuware.cloud",
        user="admin",
        password="secret",
        organization="Peters Engineering",
        host_id="host-1",
        tasks=[task],
    )
