import io

import pytest
from fakes import FakeStack
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def _render_pdf(*pages: str) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for index, text in enumerate(pages):
        if index:
            c.showPage()
        if text:
            c.drawString(72, 720, text)
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Single-page PDF with a known line of invoice text."""
    return _render_pdf("Invoice 1042 total amount due 1250 EUR")


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Two-page PDF with known text on each page."""
    return _render_pdf("Page one content", "Page two content")


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Valid PDF whose only page has no text layer, like a scan."""
    return _render_pdf("")


@pytest.fixture()
def stack() -> FakeStack:
    """Workflow, query agent and gateway over in-memory stores and the example client."""
    return FakeStack()
