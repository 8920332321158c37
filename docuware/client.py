"""DocuWare Platform REST client.

Talks to the DocuWare Platform API over HTTPS with ``requests``. The
session cookies returned by logon live in the client's ``requests.Session``
and are sent with every later call.
"""

from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urljoin

import requests

from .base import (
    Credentials,
    DocuWareError,
    DocuWareGateway,
    DocuWareSession,
    Document,
    DocumentsPage,
    FileCabinet,
    Organization,
    SessionError,
    SuggestionField,
    require_link,
)


DEFAULT_TIMEOUT = 120.0
USER_AGENT = "AutoStore CLI"

FILE_CABINET_TRANSFER_INFO_JSON = (
    "application/vnd.docuware.platform.filecabinettransferinfo+json"
)

# DocumentAction.ReIntellix: resend text shots to the indexing service
REINTELLIX_ACTION = 0


def _error_message(response: requests.Response) -> str:
    """Extract the platform's error message from a failed response."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("Message"):
        return data["Message"]
    return response.reason or f"HTTP {response.status_code}"


class DocuWareClient(DocuWareGateway):
    """DocuWare gateway backed by the Platform REST API.

    All relative paths are resolved against ``root_url``. Every request
    carries the same fixed timeout.
    """

    def __init__(self, root_url: str, timeout: float = DEFAULT_TIMEOUT,
                 http_factory: Optional[Callable[[], requests.Session]] = None) -> None:
        """Initialize the client.

        Args:
            root_url: Platform root (e.g., 'https://acme.docuware.cloud')
            timeout: Per-request timeout in seconds
            http_factory: Builds the HTTP session used after each logon
                (defaults to ``requests.Session``)
        """
        if not root_url:
            raise DocuWareError("Platform root URL is empty")
        self.root_url = root_url.rstrip("/") + "/"
        self.timeout = timeout
        self._http_factory = http_factory or requests.Session
        self.http = self._new_http()
        self.session: Optional[DocuWareSession] = None

    def _new_http(self) -> requests.Session:
        http = self._http_factory()
        http.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })
        return http

    @property
    def display_name(self) -> str:
        return self.root_url.rstrip("/")

    def _url(self, path: str) -> str:
        """Resolve a platform path or an absolute link href."""
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.root_url, path.lstrip("/"))

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send a request and raise DocuWareError for HTTP error statuses.

        Transport failures (timeouts, refused connections) propagate as
        ``requests.RequestException``.
        """
        response = self.http.request(method, self._url(path), timeout=self.timeout, **kwargs)
        if response.status_code >= 400:
            raise DocuWareError(
                f"{method} {path} failed: {_error_message(response)}",
                status_code=response.status_code,
            )
        return response

    def _json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = self._request(method, path, **kwargs)
        if not response.content:
            return {}
        return response.json()

    # =========================================================================
    # Session
    # =========================================================================

    def logon(self, credentials: Credentials) -> DocuWareSession:
        """Log on and keep the returned cookies for the rest of the run.

        A fresh HTTP session is used for every logon so a retried run never
        reuses cookies from a failed attempt.
        """
        self.http = self._new_http()
        self.session = None

        response = self._request(
            "POST", "DocuWare/Platform/Account/Logon",
            data=credentials.to_form(),
        )
        if not response.cookies:
            raise SessionError("No cookies returned!")

        self.http.cookies.update(response.cookies)
        self.http.cookies.set("DWFormatCulture", "en")
        self.session = DocuWareSession(username=credentials.username)
        return self.session

    def _require_session(self) -> None:
        if self.session is None:
            raise SessionError("Not logged on")

    def get_organization(self) -> Organization:
        self._require_session()
        return Organization.from_json(self._json("GET", "DocuWare/Platform/Organization"))

    # =========================================================================
    # Collections
    # =========================================================================

    def get_file_cabinet(self, cabinet_id: str) -> FileCabinet:
        self._require_session()
        return FileCabinet.from_json(
            self._json("GET", f"DocuWare/Platform/FileCabinets/{cabinet_id}")
        )

    def query_first_page(self, cabinet: FileCabinet, count: int) -> DocumentsPage:
        self._require_session()
        data = self._json(
            "GET", f"DocuWare/Platform/FileCabinets/{cabinet.id}/Query/Documents",
            params={"count": count},
        )
        return DocumentsPage.from_json(data)

    def query_next_page(self, page: DocumentsPage) -> DocumentsPage:
        self._require_session()
        next_link = page.next_link
        if not next_link:
            raise DocuWareError("No next link available, you already received all results.")
        return DocumentsPage.from_json(self._json("GET", next_link))

    # =========================================================================
    # Transfer and indexing
    # =========================================================================

    def transfer(self, document_ids: List[int], source: FileCabinet,
                 destination: FileCabinet, keep_source: bool,
                 store_dialog_id: Optional[str] = None,
                 fill_intellix: bool = True) -> Dict[str, Any]:
        self._require_session()
        transfer_link = require_link(destination.links, "transfer")
        body = {
            "KeepSource": keep_source,
            "SourceDocId": list(document_ids),
            "SourceFileCabinetId": source.id,
            "FillIntellix": fill_intellix,
        }
        # The platform does not pick the default store dialog on its own
        params = {"StoreDialogId": store_dialog_id} if store_dialog_id else None
        return self._json(
            "POST", transfer_link,
            params=params,
            json=body,
            headers={"Content-Type": FILE_CABINET_TRANSFER_INFO_JSON},
        )

    def get_suggestions(self, document: Document) -> List[SuggestionField]:
        self._require_session()
        data = self._json("GET", require_link(document.links, "suggestions"))
        return [SuggestionField.from_json(item) for item in data.get("Field") or []]

    def update_index_fields(self, document: Document,
                            payload: Dict[str, Any]) -> Dict[str, Any]:
        self._require_session()
        return self._json("POST", require_link(document.links, "fields"), json=payload)

    def reintellix(self, cabinet: FileCabinet, document: Document) -> Dict[str, Any]:
        self._require_session()
        body = {"DocumentAction": REINTELLIX_ACTION, "DocumentActionParameters": {}}
        return self._json(
            "PUT", f"DocuWare/Platform/FileCabinets/{cabinet.id}/Operations/ProcessDocumentAction",
            params={"docId": document.id},
            json=body,
        )
