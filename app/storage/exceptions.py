class BlobStoreError(Exception):
    """Base exception for object store failures."""


class BlobNotFoundError(BlobStoreError):
    """Raised when no blob exists at the requested path."""
