"""Domain models for retrieval results."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class RetrievedChunk(BaseModel):
    """A passage returned by a similarity search.

    Attributes
    ----------
    text:
        The chunk text as stored in the index.
    source_name:
        File the chunk was cut from (``"unknown"`` when metadata is missing).
    page_number:
        1-based page holding the chunk's first character (0 when unknown).
    rank:
        1-based position in the ranked result list.
    score:
        Similarity score reported by the index (higher = more similar).
    sequence_index:
        Ingestion-order position of the chunk; breaks score ties.
    """

    text: str
    source_name: str = "unknown"
    page_number: int = 0
    rank: int
    score: float | None = None
    sequence_index: int | None = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def short_ref(self) -> str:
        """Return a compact ``[source p.N]`` reference string."""
        return f"[{self.source_name} p.{self.page_number}]"

    def __str__(self) -> str:  # noqa: D105
        return f"#{self.rank} {self.short_ref()} {self.text[:120]}…"
