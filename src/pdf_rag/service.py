"""Store service — the four operations exposed to callers.

``create_store`` and ``query`` drive the two pipelines; ``list_stores``,
``get_store`` and ``delete_store`` are bookkeeping over the registry and
the vector index.  The HTTP app and the CLI both go through this class.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from pdf_rag.config import PipelineConfig, Settings, settings
from pdf_rag.errors import StoreNotFound
from pdf_rag.generation.synthesizer import AnswerSynthesizer
from pdf_rag.ingestion.pipeline import IngestionRequest, StoreBuilder
from pdf_rag.retrieval.models import RetrievedChunk
from pdf_rag.retrieval.retriever import StoreRetriever

if TYPE_CHECKING:
    from pdf_rag.registry.base import StoreRegistry
    from pdf_rag.registry.models import StoreRecord
    from pdf_rag.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)


class QueryResult(BaseModel):
    """Answer to one question against one store."""

    answer: str
    source_count: int
    embedding_model: str
    sources: list[RetrievedChunk] = Field(default_factory=list)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class StoreService:
    """Facade over store creation, querying, listing and deletion."""

    def __init__(
        self,
        registry: StoreRegistry,
        index: VectorIndexBase,
        *,
        builder: StoreBuilder | None = None,
        retriever: StoreRetriever | None = None,
        synthesizer: AnswerSynthesizer | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self._registry = registry
        self._index = index
        self._builder = builder or StoreBuilder(registry, index, self.config)
        self._retriever = retriever or StoreRetriever(registry, index)
        self._synthesizer = synthesizer or AnswerSynthesizer()

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> StoreService:
        """Wire the default Chroma index and directory registry."""
        from pdf_rag.registry.file_registry import FileStoreRegistry
        from pdf_rag.retrieval.chroma_store import ChromaVectorIndex

        source = source or settings
        config = PipelineConfig.from_settings(source)
        registry = FileStoreRegistry(source.stores_dir)
        index = ChromaVectorIndex(host=source.chroma_host, port=source.chroma_port, path=source.chroma_path)
        builder = StoreBuilder(registry, index, config, work_dir=source.work_dir or None)
        return cls(registry, index, builder=builder, config=config)

    # -- pipelines ------------------------------------------------------------

    def create_store(self, request: IngestionRequest) -> StoreRecord:
        return self._builder.build(request)

    def create_store_from_paths(self, paths: list[str], store_name: str, embedding_model: str) -> StoreRecord:
        return self._builder.build_from_paths(paths, store_name, embedding_model)

    def query(self, store_id: str, query_text: str, top_k: int | None = None) -> QueryResult:
        """Retrieve from *store_id* and answer *query_text* from the hits."""
        record = self.get_store(store_id)
        k = self.config.default_top_k if top_k is None else top_k
        retrieved = self._retriever.search(store_id, query_text, k)
        answer = self._synthesizer.answer(query_text, retrieved)
        return QueryResult(
            answer=answer,
            source_count=len(retrieved),
            embedding_model=record.embedding_model,
            sources=retrieved,
        )

    # -- bookkeeping ----------------------------------------------------------

    def list_stores(self) -> list[StoreRecord]:
        return self._registry.list()

    def get_store(self, store_id: str) -> StoreRecord:
        record = self._registry.get(store_id)
        if record is None:
            raise StoreNotFound(store_id)
        return record

    def delete_store(self, store_id: str) -> None:
        """Drop the store's collection, then its record.

        The record goes last, so a failed collection delete leaves the store
        listed and the delete can simply be retried.
        """
        self.get_store(store_id)
        self._index.delete_collection(store_id)
        self._registry.delete(store_id)
        logger.info("Deleted store %s", store_id)
