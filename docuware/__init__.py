"""DocuWare gateway abstraction for autostore.

Provides the records and the interface the archiving pipeline uses to talk
to a DocuWare platform:
- DocuWareGateway: abstract interface
- DocuWareClient: Platform REST API implementation

Usage:
    from docuware import create_client, Credentials

    client = create_client("https://acme.docuware.cloud", timeout=120)
    client.logon(Credentials("user", "secret", "Acme", "host-id"))
"""

from .base import (
    Credentials,
    DocuWareError,
    DocuWareGateway,
    DocuWareSession,
    Document,
    DocumentsPage,
    FileCabinet,
    IntellixTrust,
    LinkNotFoundError,
    Organization,
    SessionError,
    SuggestionField,
    SuggestionValue,
)
from .client import DocuWareClient, DEFAULT_TIMEOUT


def create_client(root_url: str, timeout: float = DEFAULT_TIMEOUT) -> DocuWareGateway:
    """Create a gateway for a DocuWare platform root URL.

    Raises:
        ValueError: If the URL is not http(s)
    """
    if not root_url.startswith(("https://", "http://")):
        raise ValueError(
            f"Invalid platform URL: {root_url}. "
            "Must start with 'https://' or 'http://'"
        )
    return DocuWareClient(root_url, timeout=timeout)


__all__ = [
    'Credentials',
    'DocuWareError',
    'DocuWareGateway',
    'DocuWareSession',
    'Document',
    'DocumentsPage',
    'FileCabinet',
    'IntellixTrust',
    'LinkNotFoundError',
    'Organization',
    'SessionError',
    'SuggestionField',
    'SuggestionValue',
    'DocuWareClient',
    'DEFAULT_TIMEOUT',
    'create_client',
]
