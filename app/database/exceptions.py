class RepositoryError(Exception):
    """Base exception for metadata store errors."""


class DocumentNotFoundError(RepositoryError):
    """Raised when a document cannot be found in the database."""
