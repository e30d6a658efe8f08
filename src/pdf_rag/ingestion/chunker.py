"""Sliding-window text chunking with page provenance."""

from __future__ import annotations

import bisect
import logging

from pdf_rag.config import PipelineConfig
from pdf_rag.ingestion.models import Chunk, PageUnit

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n"


def _group_by_source(pages: list[PageUnit]) -> dict[str, list[PageUnit]]:
    """Collect pages per source, sources in order of first appearance."""
    groups: dict[str, list[PageUnit]] = {}
    for page in pages:
        groups.setdefault(page.source_name, []).append(page)
    return groups


def _join_pages(pages: list[PageUnit]) -> tuple[str, list[int], list[int]]:
    """Concatenate page texts, returning ``(text, start_offsets, page_numbers)``."""
    ordered = sorted(pages, key=lambda p: p.page_number)
    parts: list[str] = []
    starts: list[int] = []
    numbers: list[int] = []
    offset = 0
    for i, page in enumerate(ordered):
        if i:
            parts.append(PAGE_SEPARATOR)
            offset += len(PAGE_SEPARATOR)
        starts.append(offset)
        numbers.append(page.page_number)
        parts.append(page.text)
        offset += len(page.text)
    return "".join(parts), starts, numbers


def _windows(text: str, window_size: int, step: int) -> list[tuple[int, str]]:
    """Return ``(start_offset, window_text)`` pairs covering *text* completely."""
    if not text:
        return []
    windows: list[tuple[int, str]] = []
    start = 0
    while True:
        windows.append((start, text[start : start + window_size]))
        if start + window_size >= len(text):
            break
        start += step
    return windows


def split_pages(pages: list[PageUnit], window_size: int = 2000, overlap: int = 400) -> list[Chunk]:
    """Split *pages* into overlapping fixed-size windows.

    Parameters
    ----------
    pages:
        Page units from the loader. Pages of one file need not be adjacent;
        files are chunked in order of first appearance.
    window_size:
        Maximum number of characters per chunk.
    overlap:
        Characters shared by consecutive chunks of the same file.
        Must be smaller than *window_size*; callers normally validate this
        once through :class:`~pdf_rag.config.PipelineConfig`.

    Returns
    -------
    list[Chunk]
        Chunks with ``sequence_index`` running 0, 1, 2, … across all files.
    """
    step = window_size - overlap
    chunks: list[Chunk] = []
    for source_name, group in _group_by_source(pages).items():
        text, starts, numbers = _join_pages(group)
        for start, window in _windows(text, window_size, step):
            owner = bisect.bisect_right(starts, start) - 1
            chunks.append(
                Chunk(
                    text=window,
                    source_name=source_name,
                    page_number=numbers[owner],
                    sequence_index=len(chunks),
                )
            )
    return chunks


class Chunker:
    """Configured chunker; the window constraints were checked by *config*."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config or PipelineConfig()

    def split(self, pages: list[PageUnit]) -> list[Chunk]:
        chunks = split_pages(pages, self.config.window_size, self.config.overlap)
        logger.info("Created %d chunks from %d pages", len(chunks), len(pages))
        return chunks
