"""Unit tests for the store service facade."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from pdf_rag.errors import StoreNotFound, ValidationError
from pdf_rag.generation.synthesizer import NO_RESULTS_ANSWER
from pdf_rag.ingestion.pipeline import IngestionRequest, SourceFile
from pdf_rag.registry.models import StoreRecord, StoreStatus
from pdf_rag.service import StoreService


@pytest.fixture()
def manuals(store_service: StoreService, pdf_factory) -> StoreRecord:
    files = [
        SourceFile("manual.pdf", pdf_factory(["The warranty covers the battery.", "Engine safety first."])),
        SourceFile("prices.pdf", pdf_factory(["Battery price list."])),
    ]
    return store_service.create_store(IngestionRequest(files, "Manuals", "test-model"))


def test_create_then_get(store_service: StoreService, manuals: StoreRecord) -> None:
    assert manuals.status is StoreStatus.READY
    assert store_service.get_store(manuals.id) == manuals
    assert manuals.file_count == 2


def test_query_answers_with_sources(store_service: StoreService, manuals: StoreRecord) -> None:
    result = store_service.query(manuals.id, "warranty battery", top_k=2)

    assert result.answer == "The warranty lasts two years [Document 1]."
    assert result.source_count == 2
    assert result.embedding_model == "test-model"
    assert [s.rank for s in result.sources] == [1, 2]
    assert result.sources[0].source_name == "manual.pdf"


def test_query_uses_default_top_k(store_service: StoreService, manuals: StoreRecord) -> None:
    result = store_service.query(manuals.id, "battery")
    assert result.source_count == min(store_service.config.default_top_k, manuals.chunk_count)


def test_query_camel_case_dump(store_service: StoreService, manuals: StoreRecord) -> None:
    data = store_service.query(manuals.id, "battery", top_k=1).model_dump(by_alias=True)
    assert set(data) == {"answer", "sourceCount", "embeddingModel", "sources"}


def test_query_empty_store_returns_sentinel(store_service: StoreService, registry, vector_index) -> None:
    registry.put(StoreRecord(id="empty", name="Empty", embedding_model="test-model", status=StoreStatus.READY))
    vector_index.create_collection("empty")
    result = store_service.query("empty", "battery")
    assert result.answer == NO_RESULTS_ANSWER
    assert result.source_count == 0
    assert result.sources == []


def test_query_unknown_store(store_service: StoreService) -> None:
    with pytest.raises(StoreNotFound, match="Vector store not found: missing"):
        store_service.query("missing", "battery")


def test_query_blank_text(store_service: StoreService, manuals: StoreRecord) -> None:
    with pytest.raises(ValidationError):
        store_service.query(manuals.id, "  ")


def test_list_newest_first(store_service: StoreService, pdf_factory) -> None:
    first = store_service.create_store(IngestionRequest([SourceFile("a.pdf", pdf_factory(["x"]))], "A", "m"))
    second = store_service.create_store(IngestionRequest([SourceFile("b.pdf", pdf_factory(["x"]))], "B", "m"))
    listed = store_service.list_stores()
    assert {r.id for r in listed} == {first.id, second.id}
    stamps = [r.created_at for r in listed]
    assert stamps == sorted(stamps, reverse=True)


def test_delete_removes_collection_and_record(
    store_service: StoreService, manuals: StoreRecord, registry, vector_index
) -> None:
    store_service.delete_store(manuals.id)
    assert registry.get(manuals.id) is None
    assert not vector_index.collection_exists(manuals.id)
    with pytest.raises(StoreNotFound):
        store_service.get_store(manuals.id)


def test_delete_unknown_store(store_service: StoreService) -> None:
    with pytest.raises(StoreNotFound):
        store_service.delete_store("missing")


def test_delete_drops_collection_before_record(registry) -> None:
    registry.put(StoreRecord(id="s1", name="S", embedding_model="m", status=StoreStatus.READY))
    calls = MagicMock()
    index = calls.index
    original_delete = registry.delete
    calls.registry_delete.side_effect = original_delete
    registry.delete = calls.registry_delete

    service = StoreService(registry, index, builder=MagicMock(), retriever=MagicMock(), synthesizer=MagicMock())
    service.delete_store("s1")

    assert [c[0] for c in calls.mock_calls] == ["index.delete_collection", "registry_delete"]


def test_failed_collection_delete_keeps_record(registry) -> None:
    registry.put(StoreRecord(id="s1", name="S", embedding_model="m", status=StoreStatus.READY))
    index = MagicMock()
    index.delete_collection.side_effect = RuntimeError("chroma unavailable")
    service = StoreService(registry, index, builder=MagicMock(), retriever=MagicMock(), synthesizer=MagicMock())

    with pytest.raises(RuntimeError):
        service.delete_store("s1")
    assert registry.get("s1") is not None


@pytest.mark.parametrize("top_k", [0, -1])
def test_query_rejects_non_positive_top_k(store_service: StoreService, manuals: StoreRecord, top_k: int) -> None:
    with pytest.raises(ValidationError, match="top_k must be >= 1"):
        store_service.query(manuals.id, "battery", top_k=top_k)
