"""Abstract base class for vector-index backends.

One store maps to one collection.  Adding a new backend (Qdrant, pgvector …)
only requires subclassing :class:`VectorIndexBase`; the ingestion and
retrieval pipelines are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class VectorIndexBase(ABC):
    """Backend-agnostic vector-index interface."""

    # -- collection lifecycle -------------------------------------------------

    @abstractmethod
    def create_collection(self, name: str, metric: str = "cosine") -> None:
        """Create an empty collection *name* using distance *metric*."""
        ...

    @abstractmethod
    def delete_collection(self, name: str) -> None:
        """Drop collection *name*.  Must be a no-op when it does not exist."""
        ...

    @abstractmethod
    def collection_exists(self, name: str) -> bool:
        ...

    # -- data -----------------------------------------------------------------

    @abstractmethod
    def upsert(
        self,
        name: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]],
    ) -> None:
        """Write one batch of records to collection *name* in a single call."""
        ...

    @abstractmethod
    def query(self, name: str, embedding: list[float], *, k: int = 3) -> list[dict[str, Any]]:
        """Return up to *k* hits closest to *embedding*, best first.

        Each hit dict **must** contain:

        * ``"id"`` – record identifier
        * ``"content"`` – the stored text
        * ``"score"`` – similarity score (higher = more similar)
        * ``"metadata"`` – associated metadata dict
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
