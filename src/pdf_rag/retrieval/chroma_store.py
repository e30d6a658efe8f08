"""Chroma implementation of the vector-index abstraction."""

from __future__ import annotations

import logging
from typing import Any

import chromadb

from pdf_rag.config import settings
from pdf_rag.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)

_METRIC_KEY = "hnsw:space"


def distance_to_score(distance: float, metric: str) -> float:
    """Convert a Chroma distance into a similarity where higher is better."""
    if metric in ("cosine", "ip"):
        # Chroma reports 1 - similarity for both spaces.
        return 1.0 - distance
    return 1.0 / (1.0 + distance)


class ChromaVectorIndex(VectorIndexBase):
    """Chroma-backed vector index, one collection per store.

    Parameters
    ----------
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    path:
        When set, use a local persistent client rooted here instead of HTTP.
    client:
        Pre-built Chroma client (tests pass an ``EphemeralClient``).
    """

    def __init__(
        self,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        path: str = settings.chroma_path,
        client: Any = None,
    ) -> None:
        if client is None:
            if path:
                logger.info("Opening persistent Chroma store at %s", path)
                client = chromadb.PersistentClient(path=path)
            else:
                logger.info("Connecting to Chroma DB at %s:%d", host, port)
                client = chromadb.HttpClient(host=host, port=port)
        self._client = client

    # -- VectorIndexBase overrides --------------------------------------------

    def create_collection(self, name: str, metric: str = "cosine") -> None:
        self._client.create_collection(name=name, metadata={_METRIC_KEY: metric})

    def delete_collection(self, name: str) -> None:
        if not self.collection_exists(name):
            return
        self._client.delete_collection(name=name)
        logger.info("Deleted Chroma collection %s", name)

    def collection_exists(self, name: str) -> bool:
        # Newer clients list names, older ones list Collection objects.
        names = {getattr(c, "name", c) for c in self._client.list_collections()}
        return name in names

    def upsert(
        self,
        name: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]],
    ) -> None:
        collection = self._client.get_collection(name=name)
        collection.upsert(
            ids=ids,
            embeddings=embeddings,
            documents=documents,
            metadatas=metadatas,
        )

    def query(self, name: str, embedding: list[float], *, k: int = 3) -> list[dict[str, Any]]:
        collection = self._client.get_collection(name=name)
        n_results = min(k, collection.count())
        if n_results <= 0:
            return []

        metric = (collection.metadata or {}).get(_METRIC_KEY, "l2")
        results = collection.query(
            query_embeddings=[embedding],
            n_results=n_results,
            include=["documents", "metadatas", "distances"],
        )

        hits: list[dict[str, Any]] = []
        ids = results.get("ids", [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        for doc_id, content, meta, dist in zip(ids, docs, metas, distances):
            hits.append(
                {
                    "id": doc_id,
                    "content": content or "",
                    "score": distance_to_score(dist, metric),
                    "metadata": dict(meta or {}),
                }
            )
        return hits

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
