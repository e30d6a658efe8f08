"""Batched embedding and upsert of chunks into a store's collection.

The indexer owns the store's collection for the duration of a run: it
creates the collection, fills it batch by batch, and drops it again if any
batch fails, so a failed run never leaves a half-written collection behind.

Batches are processed strictly one after another.  The embedding backend is
free to parallelise inside ``embed_documents``; the indexer never has two
upserts in flight.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

from pdf_rag.config import PipelineConfig
from pdf_rag.errors import EmptyCorpus, IndexWriteFailure
from pdf_rag.ingestion.embedder import preflight
from pdf_rag.ingestion.models import Chunk

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from pdf_rag.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def iter_batches(chunks: Sequence[Chunk], batch_size: int) -> Iterator[Sequence[Chunk]]:
    """Yield consecutive slices of at most *batch_size* chunks."""
    for start in range(0, len(chunks), batch_size):
        yield chunks[start : start + batch_size]


class BatchIndexer:
    """Embed chunks in bounded batches and upsert them into a vector index.

    Parameters
    ----------
    index:
        Vector-index backend receiving one collection per store.
    config:
        Supplies ``batch_size`` and the collection's distance ``metric``.
    on_progress:
        Optional ``(processed_chunks, total_chunks)`` callback fired after
        every successful batch.
    """

    def __init__(
        self,
        index: VectorIndexBase,
        config: PipelineConfig | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._index = index
        self.config = config or PipelineConfig()
        self._on_progress = on_progress
        self.processed_chunks = 0

    def index(
        self,
        store_id: str,
        chunks: Sequence[Chunk],
        embeddings: Embeddings,
        *,
        model_name: str = "",
    ) -> int:
        """Index every chunk under collection *store_id*.

        Returns
        -------
        int
            Number of chunks written.

        Raises
        ------
        EmptyCorpus
            *chunks* is empty; nothing is created.
        EmbeddingUnavailable
            The preflight embedding call failed; nothing is created.
        IndexWriteFailure
            The collection could not be created, or a batch failed and the
            collection has been deleted again.
        """
        if not chunks:
            raise EmptyCorpus("No text chunks to index")

        preflight(embeddings, model_name)

        self.processed_chunks = 0
        total = len(chunks)
        total_batches = math.ceil(total / self.config.batch_size)
        logger.info("Storing %d chunks in collection %s (%d batches)", total, store_id, total_batches)

        t0 = time.monotonic()
        with self._provisional_collection(store_id):
            for batch_num, batch in enumerate(iter_batches(chunks, self.config.batch_size), 1):
                logger.info("Processing batch %d of %d...", batch_num, total_batches)
                try:
                    self._index_batch(store_id, batch, embeddings)
                except Exception as exc:
                    raise IndexWriteFailure(
                        f"Batch {batch_num} of {total_batches} failed for store {store_id}: {exc}"
                    ) from exc

                self.processed_chunks += len(batch)
                logger.info("Processed %d/%d chunks", self.processed_chunks, total)
                if self._on_progress is not None:
                    self._on_progress(self.processed_chunks, total)

        logger.info("Indexed %d vectors in %.1fs", self.processed_chunks, time.monotonic() - t0)
        return self.processed_chunks

    # -- internals ------------------------------------------------------------

    def _index_batch(self, store_id: str, batch: Sequence[Chunk], embeddings: Embeddings) -> None:
        texts = [chunk.text for chunk in batch]
        vectors = embeddings.embed_documents(texts)
        if len(vectors) != len(texts):
            raise ValueError(f"embedding backend returned {len(vectors)} vectors for {len(texts)} texts")

        self._index.upsert(
            store_id,
            ids=[chunk.chunk_id(store_id) for chunk in batch],
            embeddings=[list(v) for v in vectors],
            documents=texts,
            metadatas=[chunk.metadata() for chunk in batch],
        )

    @contextmanager
    def _provisional_collection(self, store_id: str) -> Iterator[None]:
        """Create the collection, and drop it again if the body raises."""
        try:
            self._index.create_collection(store_id, self.config.metric)
        except Exception as exc:
            raise IndexWriteFailure(f"Could not create collection for store {store_id}: {exc}") from exc
        try:
            yield
        except BaseException:
            logger.warning("Rolling back collection %s after %d indexed chunks", store_id, self.processed_chunks)
            self._index.delete_collection(store_id)
            raise
