class VectorIndexError(Exception):
    """Raised when the vector index cannot be written or queried."""
