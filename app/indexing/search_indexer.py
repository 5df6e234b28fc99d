from app.database.models import SearchIndexEntry
from app.database.repositories.search_index_repository import SearchIndexRepository
from app.logging.logger import Log


class SearchIndexer:
    """Creates the searchable row the query agent's scope filter relies on."""

    def __init__(
        self,
        search_index_repo: SearchIndexRepository,
        max_content_chars: int = 100_000,
    ) -> None:
        self._search_index_repo = search_index_repo
        self._max_content_chars = max_content_chars

    def index(
        self,
        document_id: str,
        transaction_id: str | None,
        text: str,
        vector_id: str,
        confidence: float,
    ) -> bool:
        """Write the entry; returns True once it is visible to searches.

        Raises:
            ValueError: if there is no content or vector id to index.
        """
        content = (text or "")[: self._max_content_chars]
        if not content.strip():
            raise ValueError(f"Document {document_id} has no content to index")
        if not vector_id:
            raise ValueError(f"Document {document_id} has no vector id to index")

        entry = SearchIndexEntry(
            document_id=document_id,
            transaction_id=transaction_id,
            content=content,
            vector_id=vector_id,
            confidence=confidence,
        )
        published = self._search_index_repo.write_entry(entry)
        Log.info(
            f"Indexed document {document_id} "
            f"(searchable={published}, transaction={transaction_id})"
        )
        return published
