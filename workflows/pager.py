"""Lazy paging through a document tray."""

from typing import Iterator

from docuware import DocuWareGateway, Document, DocumentsPage, FileCabinet


def iter_pages(gateway: DocuWareGateway, cabinet: FileCabinet,
               limit: int) -> Iterator[DocumentsPage]:
    """Yield result pages in server order until a page has no next link.

    Fetch errors propagate to the caller. The iterator is single-use;
    iterating again re-queries the first page.
    """
    page = gateway.query_first_page(cabinet, limit)
    yield page
    while page.next_link:
        page = gateway.query_next_page(page)
        yield page


def iter_documents(gateway: DocuWareGateway, cabinet: FileCabinet,
                   limit: int) -> Iterator[Document]:
    """Yield every document of every page, preserving order."""
    for page in iter_pages(gateway, cabinet, limit):
        yield from page.items
