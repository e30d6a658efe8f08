"""Exception taxonomy shared by the ingestion and query pipelines.

Every error carries an HTTP ``status_code`` so the serving layer can map it
without a lookup table.
"""

from __future__ import annotations


class RagStoreError(Exception):
    """Base class for all store / pipeline failures."""

    status_code = 500


class ValidationError(RagStoreError):
    """Missing or invalid input. Raised before anything is written."""

    status_code = 400


class UnsupportedFormat(ValidationError):
    """A file is not a readable PDF."""


class ExtractionError(RagStoreError):
    """No usable text could be extracted."""

    status_code = 422


class EmptyCorpus(ExtractionError):
    """The whole input set produced zero pages or zero chunks."""


class EmbeddingUnavailable(RagStoreError):
    """The embedding backend failed its preflight call."""

    status_code = 503


class IndexWriteFailure(RagStoreError):
    """The collection could not be created, or a batch failed and the run was rolled back."""


class IndexUnavailable(RagStoreError):
    """The vector index could not be read (backend down or collection missing)."""

    status_code = 503


class StoreNotFound(RagStoreError):
    """No store record exists for the requested id."""

    status_code = 404

    def __init__(self, store_id: str) -> None:
        super().__init__(f"Vector store not found: {store_id}")
        self.store_id = store_id


class GenerationError(RagStoreError):
    """The generation backend failed to produce an answer."""

    status_code = 502
