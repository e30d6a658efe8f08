"""Value objects flowing through the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PageUnit:
    """Text of a single PDF page.

    Attributes
    ----------
    text:
        Raw extracted text (may be empty for image-only pages).
    source_name:
        Base name of the file the page came from.
    page_number:
        1-based page position within the file.
    """

    text: str
    source_name: str
    page_number: int


@dataclass(frozen=True)
class Chunk:
    """A bounded text window, the unit of embedding and indexing.

    Attributes
    ----------
    text:
        Window contents, never longer than the configured window size.
    source_name:
        File the window was cut from; a chunk never spans two files.
    page_number:
        Page containing the window's first character.
    sequence_index:
        Position of the chunk within the whole ingestion run, starting at 0.
    """

    text: str
    source_name: str
    page_number: int
    sequence_index: int

    def chunk_id(self, store_id: str) -> str:
        """Stable vector-store id, ``{store_id}-{sequence_index}``."""
        return f"{store_id}-{self.sequence_index}"

    def metadata(self) -> dict[str, Any]:
        # Chroma metadata values must be flat str/int/float/bool
        return {
            "source": self.source_name,
            "page": self.page_number,
            "sequence_index": self.sequence_index,
        }
