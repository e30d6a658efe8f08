"""
Retrieval — vector index access and store-scoped similarity search.

This package wraps the vector database behind a clean interface so that
the ingestion and answer layers never need to know which DB is backing a
store.

Public surface
--------------
- :class:`StoreRetriever` — top-K search against one store.
- :class:`VectorIndexBase` — abstract backend (subclass for Qdrant, etc.).
- :class:`ChromaVectorIndex` — default Chroma backend.
- :class:`RetrievedChunk` — ranked search result.
"""

from pdf_rag.retrieval.base import VectorIndexBase
from pdf_rag.retrieval.models import RetrievedChunk
from pdf_rag.retrieval.retriever import StoreRetriever

__all__ = [
    "ChromaVectorIndex",
    "RetrievedChunk",
    "StoreRetriever",
    "VectorIndexBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorIndex to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorIndex":
        from pdf_rag.retrieval.chroma_store import ChromaVectorIndex

        return ChromaVectorIndex
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
