import uuid
from datetime import datetime, timezone

from app.embedding.models import EmbeddingOutcome, fallback_vector_id, placeholder_vector_id
from app.llm.client_base import BaseLlmClient
from app.logging.logger import Log
from app.vector_index.base import BaseVectorIndex
from app.vector_index.models import VectorEntry
from app.workflow.retry import NO_RETRY, RetryPolicy


class Embedder:
    """Embeds extracted text and registers it in the vector index.

    Embedding is an enhancement: every failure degrades to a placeholder
    vector id instead of raising.
    """

    def __init__(
        self,
        *,
        client: BaseLlmClient,
        vector_index: BaseVectorIndex,
        model: str,
        min_text_chars: int = 10,
        snippet_chars: int = 1000,
        retry_policy: RetryPolicy = NO_RETRY,
    ) -> None:
        self._client = client
        self._vector_index = vector_index
        self._model = model
        self._min_text_chars = min_text_chars
        self._snippet_chars = snippet_chars
        self._retry_policy = retry_policy

    def embed_query(self, text: str) -> list[float]:
        """Embed a search query with the same model used for documents.

        Raises:
            LlmError: if the model call fails.
        """
        return self._client.create_embeddings(model=self._model, texts=[text])[0]

    def embed_document(
        self,
        document_id: str,
        text: str,
        transaction_id: str | None = None,
    ) -> EmbeddingOutcome:
        content = (text or "").strip()
        if len(content) < self._min_text_chars:
            Log.info(
                f"Skipping embedding for document {document_id}: "
                f"text shorter than {self._min_text_chars} chars"
            )
            return EmbeddingOutcome(
                vector_id=placeholder_vector_id(document_id),
                embedding_present=False,
            )

        try:
            vector_id = self._retry_policy.call(
                f"Embedding document {document_id}",
                lambda: self._store(document_id, content, transaction_id),
            )
        except Exception as exc:
            Log.warning(
                f"Embedding failed for document {document_id}, using placeholder: {exc}"
            )
            return EmbeddingOutcome(
                vector_id=fallback_vector_id(document_id),
                embedding_present=False,
                error=str(exc) or type(exc).__name__,
            )

        Log.info(f"Embedded document {document_id} as {vector_id}")
        return EmbeddingOutcome(vector_id=vector_id, embedding_present=True)

    def _store(self, document_id: str, content: str, transaction_id: str | None) -> str:
        embedding = self.embed_query(content)
        vector_id = f"doc-{document_id}-{uuid.uuid4().hex}"
        metadata: dict[str, object] = {
            "document_id": document_id,
            "text": content[: self._snippet_chars],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if transaction_id is not None:
            metadata["transaction_id"] = transaction_id
        self._vector_index.upsert(
            [VectorEntry(id=vector_id, embedding=embedding, metadata=metadata)]
        )
        return vector_id
