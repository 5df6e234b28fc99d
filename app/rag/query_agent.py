"""Retrieval-augmented answers over indexed documents."""

from pathlib import Path

from app.database.repositories.search_index_repository import SearchIndexRepository
from app.embedding.embedder import Embedder
from app.llm.client_base import BaseLlmClient
from app.logging.logger import Log
from app.rag.exceptions import QueryFailed
from app.rag.models import QueryAnswer, QuerySource
from app.rag.prompt_loader import load_system_prompt
from app.vector_index.base import BaseVectorIndex
from app.vector_index.models import VectorMatch

NO_CONTEXT_ANSWER = "No indexed documents match this question."


class RagQueryAgent:
    """Answers a question from the top-K most similar searchable documents.

    Read-only: never writes to the vector index or the search index.
    """

    def __init__(
        self,
        *,
        embedder: Embedder,
        vector_index: BaseVectorIndex,
        search_index_repo: SearchIndexRepository,
        client: BaseLlmClient,
        model: str,
        temperature: float = 0.0,
        top_k: int = 5,
        context_max_chars: int = 16_000,
        snippet_chars: int = 200,
        system_prompt_path: Path | None = None,
    ) -> None:
        self._embedder = embedder
        self._vector_index = vector_index
        self._search_index_repo = search_index_repo
        self._client = client
        self._model = model
        self._temperature = temperature
        self._top_k = top_k
        self._context_max_chars = context_max_chars
        self._snippet_chars = snippet_chars
        self._system_prompt = load_system_prompt(system_prompt_path)

    def query(self, query: str, transaction_id: str | None = None) -> QueryAnswer:
        """Answer a question scoped to a transaction, or across all documents.

        Raises:
            ValueError: if the query is empty or blank.
            QueryFailed: if any retrieval or generation stage fails.
        """
        if not query or not query.strip():
            raise ValueError("Query must not be empty")
        question = query.strip()

        try:
            matches = self._retrieve(question, transaction_id)
        except Exception as exc:
            raise QueryFailed(f"Document retrieval failed: {exc}") from exc

        if not matches:
            Log.info(f"RAG query found no searchable documents (transaction={transaction_id})")
            return QueryAnswer(answer=NO_CONTEXT_ANSWER, sources=[], confidence=0.0)

        prompt = self._build_prompt(question, matches)
        try:
            answer = self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
            )
        except Exception as exc:
            raise QueryFailed(f"Answer generation failed: {exc}") from exc

        sources = [
            QuerySource(
                document_id=match.document_id,
                confidence=match.score,
                snippet=match.text[: self._snippet_chars],
            )
            for match in matches
        ]
        confidence = max(match.score for match in matches)
        Log.info(
            f"RAG query answered from {len(sources)} documents, confidence {confidence:.2f}"
        )
        return QueryAnswer(answer=answer, sources=sources, confidence=confidence)

    def _retrieve(self, question: str, transaction_id: str | None) -> list[VectorMatch]:
        embedding = self._embedder.embed_query(question)
        candidates = self._vector_index.query(embedding, self._top_k, transaction_id)
        if not candidates:
            return []

        # A match counts only if it is the vector the committed index entry points at.
        indexed_vectors = {
            entry.document_id: entry.vector_id
            for entry in self._search_index_repo.find_searchable(
                list({match.document_id for match in candidates}),
                transaction_id,
            )
        }
        visible = [
            match for match in candidates
            if indexed_vectors.get(match.document_id) == match.id
        ]
        dropped = len(candidates) - len(visible)
        if dropped:
            Log.debug(f"Dropped {dropped} vector matches without a searchable index entry")
        return sorted(visible, key=lambda match: match.score, reverse=True)

    def _build_prompt(self, question: str, matches: list[VectorMatch]) -> str:
        blocks: list[str] = []
        used = 0
        for match in matches:
            block = f"[document {match.document_id}]\n{match.text}"
            if blocks and used + len(block) > self._context_max_chars:
                break
            block = block[: self._context_max_chars - used]
            blocks.append(block)
            used += len(block)
        context = "\n\n".join(blocks)
        return f"Context:\n{context}\n\nQuestion: {question}"
