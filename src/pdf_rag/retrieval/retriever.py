"""Store retriever — similarity search against one store's collection.

The query is always embedded with the model the store was built with: the
retriever reads ``embedding_model`` from the store record and resolves the
embedding function itself, so a caller cannot mix model families.

Usage::

    from pdf_rag.retrieval.retriever import StoreRetriever

    retriever = StoreRetriever(registry, index)
    for hit in retriever.search(store_id, "What is the warranty period?", top_k=5):
        print(hit.short_ref(), hit.text[:80])
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pdf_rag.errors import EmbeddingUnavailable, IndexUnavailable, StoreNotFound, ValidationError
from pdf_rag.ingestion.embedder import get_embedding_function, load_embeddings
from pdf_rag.retrieval.models import RetrievedChunk

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from pdf_rag.registry.base import StoreRegistry
    from pdf_rag.registry.models import StoreRecord
    from pdf_rag.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)

TIE_MARGIN = 8


def _sort_key(hit: dict[str, Any]) -> tuple[float, int]:
    score = hit.get("score")
    seq = hit.get("metadata", {}).get("sequence_index")
    return (
        -(score if score is not None else float("-inf")),
        seq if isinstance(seq, int) else 2**63,
    )


class StoreRetriever:
    """Top-K retrieval scoped to a single store.

    Parameters
    ----------
    registry:
        Source of store records (existence and embedding model).
    index:
        Vector-index backend holding one collection per store.
    embeddings_factory:
        Resolves an embedding model identifier to an ``Embeddings`` instance.
    """

    def __init__(
        self,
        registry: StoreRegistry,
        index: VectorIndexBase,
        *,
        embeddings_factory: Callable[[str], Embeddings] = get_embedding_function,
    ) -> None:
        self._registry = registry
        self._index = index
        self._embeddings_factory = embeddings_factory

    # -- public API -----------------------------------------------------------

    def search(self, store_id: str, query_text: str, top_k: int = 3) -> list[RetrievedChunk]:
        """Return up to *top_k* chunks ranked best-first.

        Ties in score are broken by ascending ``sequence_index`` so repeated
        calls return identical rankings.

        Raises
        ------
        StoreNotFound
            No record exists for *store_id*.
        ValidationError
            *query_text* is blank or *top_k* is below 1.
        EmbeddingUnavailable
            The store's embedding model could not be loaded or called.
        IndexUnavailable
            The vector index query failed.
        """
        if not query_text or not query_text.strip():
            raise ValidationError("Query text is required")
        if top_k < 1:
            raise ValidationError(f"top_k must be >= 1, got {top_k}")

        record = self.get_record(store_id)
        embeddings = load_embeddings(record.embedding_model, self._embeddings_factory)
        try:
            query_vector = embeddings.embed_query(query_text)
        except Exception as exc:
            logger.exception("Query embedding failed for store %s", store_id)
            raise EmbeddingUnavailable(
                f"Cannot embed query with model '{record.embedding_model}': {exc}"
            ) from exc

        # Fetch past top_k so equal scores at the cut-off are resolved by
        # sequence_index rather than by the index's internal order.
        fetch_k = top_k + TIE_MARGIN
        logger.info("Querying collection %s (top_k=%d, model=%s)", store_id, top_k, record.embedding_model)
        try:
            raw_hits = self._index.query(store_id, query_vector, k=fetch_k)
        except Exception as exc:
            logger.exception("Vector index query failed for store %s", store_id)
            raise IndexUnavailable(f"Query failed for store {store_id}: {exc}") from exc
        return self._to_results(sorted(raw_hits, key=_sort_key)[:top_k])

    def get_record(self, store_id: str) -> StoreRecord:
        record = self._registry.get(store_id)
        if record is None:
            raise StoreNotFound(store_id)
        return record

    # -- internals ------------------------------------------------------------

    def _to_results(self, raw_hits: list[dict[str, Any]]) -> list[RetrievedChunk]:
        results: list[RetrievedChunk] = []
        for rank, hit in enumerate(raw_hits, 1):
            meta = hit.get("metadata", {})
            results.append(
                RetrievedChunk(
                    text=hit.get("content", ""),
                    source_name=meta.get("source", "unknown"),
                    page_number=int(meta.get("page", 0)),
                    rank=rank,
                    score=hit.get("score"),
                    sequence_index=meta.get("sequence_index"),
                )
            )
        return results
