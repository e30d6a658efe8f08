"""Store creation — load → chunk → embed/index → register.

A run owns a private workspace directory and a fresh store id.  The store
record is written only after every batch has been indexed; until then the
store is invisible to listing and querying.  The workspace is removed on
every exit path.

Usage::

    builder = StoreBuilder(registry, index)
    record = builder.build_from_paths(["a.pdf", "b.pdf"], "Manuals", "ollama:nomic-embed-text")
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from pdf_rag.config import PipelineConfig, settings
from pdf_rag.errors import ValidationError
from pdf_rag.ingestion.chunker import Chunker
from pdf_rag.ingestion.embedder import get_embedding_function, load_embeddings
from pdf_rag.ingestion.indexer import BatchIndexer, ProgressCallback
from pdf_rag.ingestion.loader import is_pdf_name, load_corpus
from pdf_rag.registry.models import StoreRecord, StoreStatus

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from pdf_rag.registry.base import StoreRegistry
    from pdf_rag.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)

EmbeddingsFactory = Callable[[str], "Embeddings"]


@dataclass(frozen=True)
class SourceFile:
    """An uploaded document: its original file name and raw bytes."""

    name: str
    content: bytes = field(repr=False)


@dataclass
class IngestionRequest:
    """Everything needed to build one store."""

    files: list[SourceFile]
    store_name: str
    embedding_model: str

    def validate(self) -> None:
        """Raise :class:`ValidationError` for the first problem found."""
        if not self.files:
            raise ValidationError("No files provided")
        if not self.store_name or not self.store_name.strip():
            raise ValidationError("Store name is required")
        if not self.embedding_model or not self.embedding_model.strip():
            raise ValidationError("Embedding model is required")

        seen: set[str] = set()
        for source in self.files:
            name = Path(source.name).name
            if not name or not is_pdf_name(name):
                raise ValidationError(f"Invalid file type: {source.name}. Only PDFs are supported.")
            if name in seen:
                raise ValidationError(f"Duplicate file name: {name}")
            seen.add(name)


class StoreBuilder:
    """Run the ingestion pipeline for one store at a time.

    Parameters
    ----------
    registry:
        Where the finished :class:`StoreRecord` is written.
    index:
        Vector-index backend; the store's collection is named after its id.
    config:
        Chunking / batching / metric configuration.
    embeddings_factory:
        Resolves an embedding model identifier to an ``Embeddings`` instance.
    work_dir:
        Parent directory for run workspaces (system temp when empty).
    """

    def __init__(
        self,
        registry: StoreRegistry,
        index: VectorIndexBase,
        config: PipelineConfig | None = None,
        *,
        embeddings_factory: EmbeddingsFactory = get_embedding_function,
        work_dir: str | Path | None = None,
    ) -> None:
        self._registry = registry
        self._index = index
        self.config = config or PipelineConfig()
        self._embeddings_factory = embeddings_factory
        self._work_dir = str(work_dir or settings.work_dir) or None
        self._chunker = Chunker(self.config)

    # -- public API -----------------------------------------------------------

    def build(self, request: IngestionRequest, *, on_progress: ProgressCallback | None = None) -> StoreRecord:
        """Create a store from uploaded files and return its ready record."""
        request.validate()
        record = self._new_record(request.store_name, request.embedding_model, len(request.files))

        with self._workspace(record.id) as workspace:
            paths = []
            for source in request.files:
                path = workspace / Path(source.name).name
                path.write_bytes(source.content)
                paths.append(path)
            return self._run(record, paths, on_progress)

    def build_from_paths(
        self,
        paths: Sequence[str | Path],
        store_name: str,
        embedding_model: str,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> StoreRecord:
        """Create a store from PDF files already on disk."""
        files = []
        for p in paths:
            p = Path(p)
            try:
                content = p.read_bytes()
            except OSError as exc:
                raise ValidationError(f"Cannot read {p}: {exc}") from exc
            files.append(SourceFile(name=p.name, content=content))
        return self.build(IngestionRequest(files, store_name, embedding_model), on_progress=on_progress)

    # -- internals ------------------------------------------------------------

    def _new_record(self, store_name: str, embedding_model: str, file_count: int) -> StoreRecord:
        return StoreRecord(
            id=str(uuid.uuid4()),
            name=store_name.strip(),
            embedding_model=embedding_model.strip(),
            file_count=file_count,
            status=StoreStatus.PROCESSING,
        )

    def _run(self, record: StoreRecord, paths: list[Path], on_progress: ProgressCallback | None) -> StoreRecord:
        logger.info("Loading %d PDF(s) for store %s...", len(paths), record.id)
        pages = load_corpus(paths)
        chunks = self._chunker.split(pages)

        logger.info("Creating embeddings with model: %s...", record.embedding_model)
        embeddings = load_embeddings(record.embedding_model, self._embeddings_factory)
        indexer = BatchIndexer(self._index, self.config, on_progress=on_progress)
        chunk_count = indexer.index(record.id, chunks, embeddings, model_name=record.embedding_model)

        ready = record.model_copy(update={"chunk_count": chunk_count, "status": StoreStatus.READY})
        try:
            self._registry.put(ready)
        except BaseException:
            logger.warning("Registry write failed; dropping collection %s", record.id)
            self._index.delete_collection(record.id)
            raise

        logger.info("Vector store created successfully: %s (%d chunks)", record.id, chunk_count)
        return ready

    @contextmanager
    def _workspace(self, store_id: str) -> Iterator[Path]:
        """Private scratch directory for one run, removed on every exit path."""
        path = Path(tempfile.mkdtemp(prefix=f"{store_id}-", dir=self._work_dir))
        try:
            yield path
        finally:
            shutil.rmtree(path, ignore_errors=True)
