from app.config.settings import Settings
from app.vector_index.base import BaseVectorIndex
from app.vector_index.chromadb_adapter import ChromaVectorIndex


class VectorIndexFactory:
    """Creates the configured vector index."""

    @classmethod
    def create(cls, settings: Settings) -> BaseVectorIndex:
        return ChromaVectorIndex.persistent(
            persist_directory=settings.chroma_persist_dir,
            collection_name=settings.chroma_collection,
        )
