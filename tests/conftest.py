"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import math
import re
from typing import Any

import pytest
from langchain_core.embeddings import Embeddings

from pdf_rag.config import PipelineConfig
from pdf_rag.errors import StoreNotFound
from pdf_rag.ingestion.models import PageUnit
from pdf_rag.registry.base import StoreRegistry
from pdf_rag.registry.models import StoreRecord
from pdf_rag.retrieval.base import VectorIndexBase


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fake embedding backends ─────────────────────────────────────────────

VOCAB = ["warranty", "battery", "engine", "safety", "install", "price", "x"]


class KeywordEmbeddings(Embeddings):
    """Deterministic embeddings: one dimension per vocabulary word count."""

    def __init__(self) -> None:
        self.query_calls: list[str] = []
        self.document_calls: list[list[str]] = []

    def _vector(self, text: str) -> list[float]:
        words = re.findall(r"[a-z]+", text.lower())
        return [float(words.count(term)) for term in VOCAB]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return self._vector(text)


class UnreachableEmbeddings(Embeddings):
    """Every call fails as if the backend were down."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise ConnectionError("connection refused")

    def embed_query(self, text: str) -> list[float]:
        raise ConnectionError("connection refused")


# ── In-memory vector index ──────────────────────────────────────────────


def _cosine(a: list[float], b: list[float]) -> float:
    na = math.sqrt(sum(x * x for x in a))
    nb = math.sqrt(sum(x * x for x in b))
    if not na or not nb:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / (na * nb)


class FakeVectorIndex(VectorIndexBase):
    """Dict-backed index; ``fail_on_upsert=n`` makes the n-th upsert call raise."""

    def __init__(self, fail_on_upsert: int | None = None) -> None:
        self.collections: dict[str, dict[str, Any]] = {}
        self.upsert_calls = 0
        self.upsert_sizes: list[int] = []
        self.fail_on_upsert = fail_on_upsert

    def create_collection(self, name: str, metric: str = "cosine") -> None:
        if name in self.collections:
            raise ValueError(f"collection {name} already exists")
        self.collections[name] = {"metric": metric, "rows": {}}

    def delete_collection(self, name: str) -> None:
        self.collections.pop(name, None)

    def collection_exists(self, name: str) -> bool:
        return name in self.collections

    def upsert(
        self,
        name: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]],
    ) -> None:
        self.upsert_calls += 1
        if self.fail_on_upsert == self.upsert_calls:
            raise RuntimeError("disk full")
        self.upsert_sizes.append(len(ids))
        rows = self.collections[name]["rows"]
        for doc_id, vec, doc, meta in zip(ids, embeddings, documents, metadatas):
            rows[doc_id] = (vec, doc, meta)

    def query(self, name: str, embedding: list[float], *, k: int = 3) -> list[dict[str, Any]]:
        rows = self.collections[name]["rows"]
        hits = [
            {"id": doc_id, "content": doc, "score": _cosine(embedding, vec), "metadata": dict(meta)}
            for doc_id, (vec, doc, meta) in rows.items()
        ]
        hits.sort(key=lambda h: -h["score"])
        return hits[:k]

    def health_check(self) -> bool:
        return True


class CannedIndex(FakeVectorIndex):
    """Returns a fixed hit list regardless of the query vector."""

    def __init__(self, hits: list[dict[str, Any]]) -> None:
        super().__init__()
        self._hits = hits

    def query(self, name: str, embedding: list[float], *, k: int = 3) -> list[dict[str, Any]]:
        return [dict(h) for h in self._hits[:k]]


class MemoryRegistry(StoreRegistry):
    def __init__(self) -> None:
        self.records: dict[str, StoreRecord] = {}

    def get(self, store_id: str) -> StoreRecord | None:
        return self.records.get(store_id)

    def put(self, record: StoreRecord) -> None:
        self.records[record.id] = record

    def delete(self, store_id: str) -> None:
        if store_id not in self.records:
            raise StoreNotFound(store_id)
        del self.records[store_id]

    def list(self) -> list[StoreRecord]:
        return sorted(self.records.values(), key=lambda r: r.created_at, reverse=True)


# ── Minimal PDF writer ──────────────────────────────────────────────────


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(page_texts: list[str]) -> bytes:
    """Build a valid PDF with one Helvetica text line per page ("" = blank page)."""
    n = len(page_texts)
    font_num = 3
    page_nums = [4 + 2 * i for i in range(n)]
    objects: dict[int, bytes] = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: (
            "<< /Type /Pages /Kids [" + " ".join(f"{p} 0 R" for p in page_nums) + f"] /Count {n} >>"
        ).encode(),
        font_num: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    for page_num, text in zip(page_nums, page_texts):
        content_num = page_num + 1
        stream = f"BT /F1 12 Tf 72 720 Td ({_pdf_escape(text)}) Tj ET".encode() if text else b""
        objects[page_num] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 {font_num} 0 R >> >> /Contents {content_num} 0 R >>"
        ).encode()
        objects[content_num] = b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"

    out = bytearray(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for num in sorted(objects):
        offsets[num] = len(out)
        out += b"%d 0 obj\n" % num + objects[num] + b"\nendobj\n"

    xref_at = len(out)
    size = max(objects) + 1
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for num in range(1, size):
        out += b"%010d 00000 n \n" % offsets[num]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_at)
    return bytes(out)


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture()
def vector_index() -> FakeVectorIndex:
    return FakeVectorIndex()


@pytest.fixture()
def registry() -> MemoryRegistry:
    return MemoryRegistry()


@pytest.fixture()
def small_config() -> PipelineConfig:
    """Tiny windows and batches so short test texts span several of each."""
    return PipelineConfig(window_size=50, overlap=10, batch_size=4)


@pytest.fixture()
def sample_pages() -> list[PageUnit]:
    return [
        PageUnit(text="The warranty covers the battery for two years. " * 2, source_name="manual.pdf", page_number=1),
        PageUnit(text="Engine safety checks must run before install. " * 2, source_name="manual.pdf", page_number=2),
        PageUnit(text="Price list for spare battery packs.", source_name="prices.pdf", page_number=1),
    ]


@pytest.fixture()
def pdf_factory():
    """Return :func:`make_pdf` so tests can build PDFs inline."""
    return make_pdf


@pytest.fixture()
def index_factory():
    """Build a :class:`FakeVectorIndex` that fails on a chosen upsert call."""
    return FakeVectorIndex


@pytest.fixture()
def canned_index_factory():
    return CannedIndex


@pytest.fixture()
def unreachable_embeddings() -> UnreachableEmbeddings:
    return UnreachableEmbeddings()


@pytest.fixture()
def store_service(registry, vector_index, embeddings, small_config, tmp_path):
    """A fully wired service over in-memory fakes and a canned chat model."""
    from langchain_core.language_models.fake_chat_models import FakeListChatModel

    from pdf_rag.generation.synthesizer import AnswerSynthesizer
    from pdf_rag.ingestion.pipeline import StoreBuilder
    from pdf_rag.retrieval.retriever import StoreRetriever
    from pdf_rag.service import StoreService

    factory = lambda model: embeddings  # noqa: E731
    return StoreService(
        registry,
        vector_index,
        builder=StoreBuilder(registry, vector_index, small_config, embeddings_factory=factory, work_dir=tmp_path),
        retriever=StoreRetriever(registry, vector_index, embeddings_factory=factory),
        synthesizer=AnswerSynthesizer(FakeListChatModel(responses=["The warranty lasts two years [Document 1]."])),
        config=small_config,
    )
