"""Directory-per-store registry backed by ``meta.json`` files."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from pdf_rag.config import settings
from pdf_rag.errors import StoreNotFound
from pdf_rag.registry.base import StoreRegistry
from pdf_rag.registry.models import StoreRecord

logger = logging.getLogger(__name__)

META_FILENAME = "meta.json"


class FileStoreRegistry(StoreRegistry):
    """Keep each store's record at ``<root>/<store_id>/meta.json``.

    Directories without a ``meta.json`` are not stores and are ignored by
    :meth:`list`.
    """

    def __init__(self, root: str | Path = settings.stores_dir) -> None:
        self.root = Path(root)

    def _store_dir(self, store_id: str) -> Path:
        # Store ids are generated uuids; reject anything that would escape root.
        if not store_id or Path(store_id).name != store_id or store_id in (".", ".."):
            raise StoreNotFound(store_id)
        return self.root / store_id

    def get(self, store_id: str) -> StoreRecord | None:
        meta_path = self._store_dir(store_id) / META_FILENAME
        if not meta_path.is_file():
            return None
        return StoreRecord.model_validate_json(meta_path.read_text(encoding="utf-8"))

    def put(self, record: StoreRecord) -> None:
        store_dir = self._store_dir(record.id)
        store_dir.mkdir(parents=True, exist_ok=True)
        payload = record.model_dump_json(by_alias=True, indent=2)

        fd, tmp_name = tempfile.mkstemp(dir=store_dir, prefix=".meta-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, store_dir / META_FILENAME)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, store_id: str) -> None:
        store_dir = self._store_dir(store_id)
        if not store_dir.is_dir():
            raise StoreNotFound(store_id)
        shutil.rmtree(store_dir)

    def list(self) -> list[StoreRecord]:
        if not self.root.is_dir():
            return []

        records: list[StoreRecord] = []
        for meta_path in self.root.glob(f"*/{META_FILENAME}"):
            try:
                records.append(StoreRecord.model_validate_json(meta_path.read_text(encoding="utf-8")))
            except (OSError, PydanticValidationError):
                logger.warning("Skipping unreadable store metadata %s", meta_path, exc_info=True)

        records.sort(key=lambda r: r.created_at, reverse=True)
        return records
