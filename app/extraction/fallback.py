"""Deterministic, model-free extraction keyed by file extension."""

from app.extraction.exceptions import ExtractionError, UnsupportedFileTypeError
from app.extraction.file_types import (
    OPAQUE_BINARY_EXTENSIONS,
    TEXT_EXTENSIONS,
    file_extension,
)
from app.pdf.base import BasePdfExtractor


def format_size_mb(size_bytes: int) -> str:
    return f"{size_bytes / (1024 * 1024):.2f} MB"


class FallbackExtractor:
    """Reads embedded text where the format has it, describes the file otherwise."""

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def extract(self, file_bytes: bytes, file_name: str) -> str:
        """Return text for the file.

        Raises:
            ExtractionError: if a text file decodes to nothing.
            UnsupportedFileTypeError: for extensions with no registered handler.
            PdfExtractionError: if a PDF cannot be opened.
        """
        extension = file_extension(file_name)
        if extension in TEXT_EXTENSIONS:
            text = self._decode_text(file_bytes)
            if not text:
                raise ExtractionError(f"Text file '{file_name}' is empty")
            return text
        if extension == "pdf":
            return self._extract_pdf(file_bytes, file_name)
        if extension in OPAQUE_BINARY_EXTENSIONS:
            return self._describe(file_bytes, file_name, extension)
        raise UnsupportedFileTypeError(
            f"No extractor for '{file_name}' (extension '{extension or 'none'}')"
        )

    @staticmethod
    def _decode_text(file_bytes: bytes) -> str:
        text = file_bytes.decode("utf-8", errors="replace").replace("\x00", "")
        return text.replace("\r\n", "\n").replace("\r", "\n").strip()

    def _extract_pdf(self, file_bytes: bytes, file_name: str) -> str:
        pdf = self._pdf_extractor.extract(file_bytes)
        if pdf.has_text:
            return pdf.text
        return (
            f"Scanned PDF document: {file_name} ({pdf.page_count} pages, "
            f"{format_size_mb(len(file_bytes))}) - no embedded text layer"
        )

    @staticmethod
    def _describe(file_bytes: bytes, file_name: str, extension: str) -> str:
        return (
            f"{extension.upper()} document: {file_name} "
            f"({format_size_mb(len(file_bytes))}) - text content not extracted"
        )
