class ExtractionError(Exception):
    """Raised when an extractor cannot produce text for a file."""


class UnsupportedFileTypeError(ExtractionError):
    """Raised when no fallback extractor is registered for a file extension."""
