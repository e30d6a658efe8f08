"""Persisted store metadata."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class StoreStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"


class StoreRecord(BaseModel):
    """Identity, configuration and lifecycle state of one store.

    Serialised with camelCase keys (``embeddingModel``, ``chunkCount`` …) so
    the on-disk ``meta.json`` keeps the layout existing stores were written
    with.
    """

    id: str
    name: str
    embedding_model: str
    file_count: int = 0
    chunk_count: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: StoreStatus = StoreStatus.PROCESSING

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @property
    def is_ready(self) -> bool:
        return self.status is StoreStatus.READY
