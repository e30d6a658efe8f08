"""
Registry — durable record of each store's identity, configuration and status.

Public surface
--------------
- :class:`StoreRegistry` — abstract key-value interface (get / put / delete / list).
- :class:`FileStoreRegistry` — one directory per store holding ``meta.json``.
- :class:`StoreRecord`, :class:`StoreStatus` — the persisted record.
"""

from pdf_rag.registry.base import StoreRegistry
from pdf_rag.registry.file_registry import FileStoreRegistry
from pdf_rag.registry.models import StoreRecord, StoreStatus

__all__ = [
    "FileStoreRegistry",
    "StoreRecord",
    "StoreRegistry",
    "StoreStatus",
]
