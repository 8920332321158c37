"""Base classes for the DocuWare gateway.

This module defines the records the archiving pipeline works with and the
abstract interface a DocuWare backend must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class DocuWareError(Exception):
    """Base exception for DocuWare operations."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionError(DocuWareError):
    """Logon did not produce a usable session."""
    pass


class LinkNotFoundError(DocuWareError):
    """An expected relation link is missing from a resource."""

    def __init__(self, rel: str) -> None:
        super().__init__(f"No {rel} link found!")
        self.rel = rel


class IntellixTrust:
    """Trust labels reported by the intelligent indexing service."""
    FAILED = "Failed"
    GREEN = "Green"
    IN_PROGRESS = "InProgress"
    NONE = "None"
    RED = "Red"
    YELLOW = "Yellow"

    ALL = (FAILED, GREEN, IN_PROGRESS, NONE, RED, YELLOW)


def parse_links(data: Dict[str, Any]) -> Dict[str, str]:
    """Map lower-cased ``rel`` names to hrefs from a DocuWare ``Links`` list."""
    links = {}
    for link in data.get("Links") or []:
        rel = link.get("rel")
        href = link.get("href")
        if rel and href:
            links[rel.lower()] = href
    return links


def find_link(links: Dict[str, str], rel: str) -> Optional[str]:
    return links.get(rel.lower())


def require_link(links: Dict[str, str], rel: str) -> str:
    """Return the href for ``rel`` or raise LinkNotFoundError."""
    href = find_link(links, rel)
    if not href:
        raise LinkNotFoundError(rel)
    return href


@dataclass(frozen=True)
class Credentials:
    """Logon model for the DocuWare platform."""
    username: str
    password: str
    organization: str
    host_id: str

    def to_form(self) -> Dict[str, Any]:
        return {
            "Username": self.username,
            "Password": self.password,
            "Organization": self.organization,
            "HostID": self.host_id,
            "RedirectToMyselfInCaseOfError": False,
            "RememberMe": True,
        }


@dataclass
class DocuWareSession:
    """Authenticated session state, written once at logon."""
    username: str


@dataclass
class Organization:
    id: Optional[str]
    name: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Organization":
        return cls(id=data.get("Id"), name=data.get("Name", ""))


@dataclass
class FileCabinet:
    """A file cabinet or document tray.

    Attributes:
        id: Cabinet GUID
        name: Display name
        links: Relation name (lower-case) to href
        raw: Server payload
    """
    id: str
    name: str
    links: Dict[str, str] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "FileCabinet":
        return cls(
            id=data.get("Id", ""),
            name=data.get("Name", ""),
            links=parse_links(data),
            raw=data,
        )

    @property
    def display_name(self) -> str:
        return f"{self.name} (Id: {self.id})"


@dataclass
class Document:
    """A document in a tray or file cabinet.

    Attributes:
        id: Document id (None for malformed results)
        title: Document title
        intellix_trust: One of IntellixTrust.ALL, or None if not reported
        fields: Existing index values keyed by field name
        links: Relation name (lower-case) to href
        raw: Server payload, consulted by filters for any other property
    """
    id: Optional[int]
    title: str = ""
    intellix_trust: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    links: Dict[str, str] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Document":
        fields = {}
        for index_field in data.get("Fields") or []:
            name = index_field.get("FieldName")
            if name:
                fields[name] = index_field.get("Item")
        return cls(
            id=data.get("Id"),
            title=data.get("Title") or "",
            intellix_trust=data.get("IntellixTrust"),
            fields=fields,
            links=parse_links(data),
            raw=data,
        )

    @property
    def trust(self) -> Optional[str]:
        return self.intellix_trust


@dataclass
class DocumentsPage:
    """One page of a documents query."""
    items: List[Document]
    links: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "DocumentsPage":
        return cls(
            items=[Document.from_json(item) for item in data.get("Items") or []],
            links=parse_links(data),
        )

    @property
    def next_link(self) -> Optional[str]:
        return find_link(self.links, "next")


@dataclass
class SuggestionValue:
    item: Any
    item_element_name: Optional[str] = None
    confidence: Optional[Any] = None


@dataclass
class SuggestionField:
    """A field value proposed by the intelligent indexing service.

    ``values`` is ranked, best candidate first.
    """
    name: str
    values: List[SuggestionValue] = field(default_factory=list)
    confidence: Optional[Any] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SuggestionField":
        values = [
            SuggestionValue(
                item=value.get("Item"),
                item_element_name=value.get("ItemElementName"),
                confidence=value.get("Confidence"),
            )
            for value in data.get("Value") or []
        ]
        return cls(
            name=data.get("Name", ""),
            values=values,
            confidence=data.get("Confidence"),
            raw=data,
        )

    @property
    def top(self) -> Optional[SuggestionValue]:
        return self.values[0] if self.values else None

    @property
    def value(self) -> Any:
        top = self.top
        return top.item if top else None


class DocuWareGateway(ABC):
    """Abstract interface to a DocuWare platform.

    The pipeline only talks to DocuWare through this interface, so tests
    can substitute an in-memory implementation.
    """

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name of the platform (e.g., its root URL)."""
        pass

    # =========================================================================
    # Session
    # =========================================================================

    @abstractmethod
    def logon(self, credentials: Credentials) -> DocuWareSession:
        """Establish the session used by every later call.

        Raises:
            SessionError: If the platform returned no session cookies
        """
        pass

    @abstractmethod
    def get_organization(self) -> Organization:
        pass

    # =========================================================================
    # Collections
    # =========================================================================

    @abstractmethod
    def get_file_cabinet(self, cabinet_id: str) -> FileCabinet:
        """Return a file cabinet or document tray by GUID."""
        pass

    @abstractmethod
    def query_first_page(self, cabinet: FileCabinet, count: int) -> DocumentsPage:
        """Query the first ``count`` documents of a cabinet."""
        pass

    @abstractmethod
    def query_next_page(self, page: DocumentsPage) -> DocumentsPage:
        """Follow the ``next`` link of a page.

        Raises:
            DocuWareError: If the page has no continuation
        """
        pass

    # =========================================================================
    # Transfer and indexing
    # =========================================================================

    @abstractmethod
    def transfer(self, document_ids: List[int], source: FileCabinet,
                 destination: FileCabinet, keep_source: bool,
                 store_dialog_id: Optional[str] = None,
                 fill_intellix: bool = True) -> Dict[str, Any]:
        """Move documents from a tray into a file cabinet in one call.

        Raises:
            LinkNotFoundError: If the destination has no transfer link
        """
        pass

    @abstractmethod
    def get_suggestions(self, document: Document) -> List[SuggestionField]:
        """Return the indexing service's suggestions for a document.

        Raises:
            LinkNotFoundError: If the document has no suggestions link
        """
        pass

    @abstractmethod
    def update_index_fields(self, document: Document,
                            payload: Dict[str, Any]) -> Dict[str, Any]:
        """Write index values (a ``{"Field": [...]}`` payload) to a document."""
        pass

    @abstractmethod
    def reintellix(self, cabinet: FileCabinet, document: Document) -> Dict[str, Any]:
        """Resend a document's text shots to the indexing service."""
        pass
