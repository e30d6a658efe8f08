"""Abstract store registry — one record per store, keyed by store id."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pdf_rag.registry.models import StoreRecord


class StoreRegistry(ABC):
    """Key-value persistence for :class:`StoreRecord` objects.

    The pipelines depend only on this interface, so the backing store
    (directory tree, database table …) can change without touching them.
    """

    @abstractmethod
    def get(self, store_id: str) -> StoreRecord | None:
        """Return the record for *store_id*, or ``None`` when unknown."""
        ...

    @abstractmethod
    def put(self, record: StoreRecord) -> None:
        """Create or replace the record keyed by ``record.id``."""
        ...

    @abstractmethod
    def delete(self, store_id: str) -> None:
        """Remove the record; raises :class:`~pdf_rag.errors.StoreNotFound` when unknown."""
        ...

    @abstractmethod
    def list(self) -> list[StoreRecord]:
        """Return every record, newest ``created_at`` first."""
        ...
