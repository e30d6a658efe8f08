"""FastAPI application exposing store creation and querying as a REST API."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from pdf_rag.config import configure_logging
from pdf_rag.errors import RagStoreError
from pdf_rag.ingestion.pipeline import IngestionRequest, SourceFile
from pdf_rag.service import StoreService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_service() -> StoreService:
    """Process-wide service built from settings (overridden in tests)."""
    return StoreService.from_settings()


# ── Request / Response schemas ────────────────────────────────────────
class QueryRequest(BaseModel):
    """Incoming question against one store."""

    store_id: str
    query: str
    top_k: int | None = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


def _ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="PDF RAG API",
        version="0.1.0",
        description="Create vector stores from PDF documents and ask questions against them.",
    )

    @app.exception_handler(RagStoreError)
    async def _store_error(request: Request, exc: RagStoreError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc)})

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": f"Internal server error: {exc}"})

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.post("/stores")
    def create_store(
        files: list[UploadFile] | None = File(default=None),
        store_name: str = Form(default="", alias="storeName"),
        embedding_model: str = Form(default="", alias="embeddingModel"),
        service: StoreService = Depends(get_service),
    ) -> dict[str, Any]:
        """Build a new store from uploaded PDFs."""
        sources = [SourceFile(name=f.filename or "", content=f.file.read()) for f in files or []]
        record = service.create_store(IngestionRequest(sources, store_name, embedding_model))
        return _ok(record.model_dump(mode="json", by_alias=True))

    @app.get("/stores")
    def list_stores(service: StoreService = Depends(get_service)) -> dict[str, Any]:
        """All ready stores, newest first."""
        return _ok([r.model_dump(mode="json", by_alias=True) for r in service.list_stores()])

    @app.get("/stores/{store_id}")
    def get_store(store_id: str, service: StoreService = Depends(get_service)) -> dict[str, Any]:
        return _ok(service.get_store(store_id).model_dump(mode="json", by_alias=True))

    @app.delete("/stores/{store_id}")
    def delete_store(store_id: str, service: StoreService = Depends(get_service)) -> dict[str, Any]:
        service.delete_store(store_id)
        return _ok({"message": "Store deleted successfully"})

    @app.post("/query")
    def query(request: QueryRequest, service: StoreService = Depends(get_service)) -> dict[str, Any]:
        """Retrieve from a store and answer the question."""
        result = service.query(request.store_id, request.query, request.top_k)
        return _ok(result.model_dump(mode="json", by_alias=True))

    return app


app = create_app()
