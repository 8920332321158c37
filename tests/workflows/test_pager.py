"""Tests for the document tray pager."""

import pytest

from docuware import DocuWareError
from workflows import iter_documents, iter_pages

from conftest import FakeGateway, TRAY_ID, make_doc, make_pages


@pytest.fixture
def tray():
    return FakeGateway().cabinets[TRAY_ID]


class TestIterPages:
    """Tests for iter_pages()."""

    def test_two_pages_then_stop(self, tray):
        pages = make_pages([make_doc(1), make_doc(2)], [make_doc(3)])
        gateway = FakeGateway(pages=pages)

        result = list(iter_pages(gateway, tray, 2))

        assert result == pages
        assert gateway.calls == ["page:0", "page:1"]
        assert gateway.first_page_counts == [2]

    def test_single_page(self, tray):
        gateway = FakeGateway(pages=make_pages([make_doc(1)]))
        assert len(list(iter_pages(gateway, tray, 10))) == 1

    def test_is_lazy(self, tray):
        gateway = FakeGateway(pages=make_pages([make_doc(1)], [make_doc(2)]))
        pages = iter_pages(gateway, tray, 1)
        assert gateway.calls == []
        next(pages)
        assert gateway.calls == ["page:0"]

    def test_fetch_error_propagates(self, tray):
        gateway = FakeGateway(pages=make_pages([make_doc(1)], [make_doc(2)]))

        def broken(page):
            raise DocuWareError("Gateway timeout", status_code=504)
        gateway.query_next_page = broken

        pages = iter_pages(gateway, tray, 1)
        next(pages)
        with pytest.raises(DocuWareError):
            next(pages)

    def test_restart_requeries_first_page(self, tray):
        gateway = FakeGateway(pages=make_pages([make_doc(1)]))
        list(iter_pages(gateway, tray, 5))
        list(iter_pages(gateway, tray, 5))
        assert gateway.first_page_counts == [5, 5]


class TestIterDocuments:
    """Tests for iter_documents()."""

    def test_order_preserved_across_pages(self, tray):
        pages = make_pages([make_doc(3), make_doc(1)], [], [make_doc(2)])
        gateway = FakeGateway(pages=pages)
        ids = [doc.id for doc in iter_documents(gateway, tray, 2)]
        assert ids == [3, 1, 2]
