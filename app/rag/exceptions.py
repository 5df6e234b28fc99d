class QueryFailed(Exception):
    """A RAG query could not be answered (embedding, search, lookup or generation)."""
