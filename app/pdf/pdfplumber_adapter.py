import io

import pdfplumber

from app.pdf.base import BasePdfExtractor, PdfText
from app.pdf.exceptions import PdfExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Reads the PDF text layer using pdfplumber."""

    def extract(self, pdf_bytes: bytes) -> PdfText:
        if not pdf_bytes:
            raise PdfExtractionError("pdfplumber extraction failed: empty input")
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc
        return PdfText(text="\n".join(pages).strip(), page_count=len(pages))
