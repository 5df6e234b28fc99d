from dataclasses import dataclass

PLACEHOLDER_SUFFIX = "placeholder"
FALLBACK_SUFFIX = "fallback"


@dataclass(frozen=True)
class EmbeddingOutcome:
    """Result of embedding a document's text into the vector index."""

    vector_id: str
    embedding_present: bool
    error: str | None = None


def placeholder_vector_id(document_id: str) -> str:
    return f"doc-{document_id}-{PLACEHOLDER_SUFFIX}"


def fallback_vector_id(document_id: str) -> str:
    return f"doc-{document_id}-{FALLBACK_SUFFIX}"
