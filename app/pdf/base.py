from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PdfText:
    """Text layer of a PDF plus its page count."""

    text: str
    page_count: int

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> PdfText:
        """Extract the text layer from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            PdfText with pages joined by newlines; empty text for scanned PDFs.

        Raises:
            PdfExtractionError: if the bytes are not a readable PDF.
        """
