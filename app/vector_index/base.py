from abc import ABC, abstractmethod

from app.vector_index.models import VectorEntry, VectorMatch


class BaseVectorIndex(ABC):
    """Contract for nearest-neighbor search over fixed-dimension embeddings."""

    @abstractmethod
    def upsert(self, entries: list[VectorEntry]) -> None:
        """Insert or replace entries by id.

        Raises:
            VectorIndexError: if the write fails.
        """

    @abstractmethod
    def query(
        self,
        embedding: list[float],
        top_k: int,
        transaction_id: str | None = None,
    ) -> list[VectorMatch]:
        """Return up to top_k matches ordered by descending score.

        When transaction_id is given, only entries stored with that
        transaction_id are considered.

        Raises:
            VectorIndexError: if the search fails.
        """

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored entries."""
