"""ChromaDB vector index adapter.

Uses a persistent collection in cosine space. Embeddings are always computed
by the pipeline's model client, so the collection never embeds on its own.
"""

import os
from typing import Any

os.environ.setdefault("ANONYMIZED_TELEMETRY", "False")

import chromadb  # noqa: E402

from app.logging.logger import Log  # noqa: E402
from app.vector_index.base import BaseVectorIndex  # noqa: E402
from app.vector_index.exceptions import VectorIndexError  # noqa: E402
from app.vector_index.models import VectorEntry, VectorMatch  # noqa: E402


class _PrecomputedEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Placeholder that stops ChromaDB from loading its default model."""

    def __call__(self, input: list[str]) -> list[list[float]]:  # noqa: A002
        raise NotImplementedError("Embeddings are precomputed by the model client")

    def name(self) -> str:
        return "precomputed"


class ChromaVectorIndex(BaseVectorIndex):
    """Vector index backed by a ChromaDB collection."""

    def __init__(self, collection: Any) -> None:
        self._collection = collection

    @classmethod
    def persistent(cls, persist_directory: str, collection_name: str) -> "ChromaVectorIndex":
        """Open (or create) an on-disk collection."""
        client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        collection = client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
            embedding_function=_PrecomputedEmbeddingFunction(),
        )
        return cls(collection)

    def upsert(self, entries: list[VectorEntry]) -> None:
        if not entries:
            return
        try:
            self._collection.upsert(
                ids=[entry.id for entry in entries],
                embeddings=[entry.embedding for entry in entries],
                documents=[str(entry.metadata.get("text", "")) for entry in entries],
                metadatas=[_clean_metadata(entry.metadata) for entry in entries],
            )
        except Exception as exc:
            raise VectorIndexError(f"ChromaDB upsert failed: {exc}") from exc
        Log.debug(f"Upserted {len(entries)} vectors")

    def query(
        self,
        embedding: list[float],
        top_k: int,
        transaction_id: str | None = None,
    ) -> list[VectorMatch]:
        kwargs: dict[str, Any] = {
            "query_embeddings": [embedding],
            "n_results": top_k,
            "include": ["metadatas", "distances"],
        }
        if transaction_id is not None:
            kwargs["where"] = {"transaction_id": transaction_id}

        try:
            if self._collection.count() == 0:
                return []
            results = self._collection.query(**kwargs)
        except Exception as exc:
            raise VectorIndexError(f"ChromaDB query failed: {exc}") from exc

        ids = (results.get("ids") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0] or [{}] * len(ids)
        distances = (results.get("distances") or [[]])[0] or [1.0] * len(ids)

        matches = [
            VectorMatch(
                id=vector_id,
                score=max(0.0, min(1.0, 1.0 - float(distance))),
                metadata=dict(metadata or {}),
            )
            for vector_id, metadata, distance in zip(ids, metadatas, distances, strict=True)
        ]
        return sorted(matches, key=lambda match: match.score, reverse=True)

    def count(self) -> int:
        try:
            return int(self._collection.count())
        except Exception as exc:
            raise VectorIndexError(f"ChromaDB count failed: {exc}") from exc


def _clean_metadata(metadata: dict[str, Any]) -> dict[str, str | int | float | bool]:
    """ChromaDB metadata values must be scalars and cannot be None."""
    cleaned: dict[str, str | int | float | bool] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            cleaned[key] = value
        else:
            cleaned[key] = str(value)
    return cleaned
