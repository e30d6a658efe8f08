"""Document loaders — thin wrappers around the LangChain PDF loader."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader

from pdf_rag.errors import EmptyCorpus, UnsupportedFormat
from pdf_rag.ingestion.models import PageUnit

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"


def is_pdf_name(name: str) -> bool:
    """Return ``True`` when *name* carries a ``.pdf`` extension (any case)."""
    return name.lower().endswith(".pdf")


def load_pdf(path: str | Path) -> list[PageUnit]:
    """Load a single PDF file, one :class:`PageUnit` per page.

    Pages that yield no text are kept so page accounting stays intact.

    Raises
    ------
    UnsupportedFormat
        The file is missing, lacks the PDF header, or cannot be parsed.
    """
    path = Path(path)
    try:
        with path.open("rb") as fh:
            header = fh.read(len(PDF_MAGIC))
    except OSError as exc:
        raise UnsupportedFormat(f"Cannot read {path.name}: {exc}") from exc
    if header != PDF_MAGIC:
        raise UnsupportedFormat(f"Invalid file type: {path.name}. Only PDFs are supported.")

    try:
        documents = PyPDFLoader(str(path)).load()
    except Exception as exc:
        raise UnsupportedFormat(f"Could not parse {path.name} as PDF: {exc}") from exc

    pages: list[PageUnit] = []
    for position, doc in enumerate(documents):
        page_index = doc.metadata.get("page", position)
        pages.append(
            PageUnit(
                text=doc.page_content or "",
                source_name=path.name,
                page_number=int(page_index) + 1,
            )
        )
    logger.debug("Loaded %d page(s) from %s", len(pages), path.name)
    return pages


def load_corpus(paths: Iterable[str | Path]) -> list[PageUnit]:
    """Load every PDF in *paths*, in order, into one flat page list.

    Raises
    ------
    EmptyCorpus
        No pages at all came out of the input set (including an empty set).
    """
    pages: list[PageUnit] = []
    file_count = 0
    for path in paths:
        pages.extend(load_pdf(path))
        file_count += 1

    if not pages:
        raise EmptyCorpus("No pages could be extracted from the provided PDFs")

    logger.info("Loaded %d pages from %d file(s)", len(pages), file_count)
    return pages
