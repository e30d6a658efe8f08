"""Embedding capability — factory and reachability check."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import lru_cache

from langchain_core.embeddings import Embeddings
from langchain_huggingface import HuggingFaceEmbeddings
from langchain_ollama import OllamaEmbeddings

from pdf_rag.config import settings
from pdf_rag.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)

OLLAMA_PREFIX = "ollama:"
PREFLIGHT_TEXT = "test"


@lru_cache(maxsize=8)
def get_embedding_function(model_name: str) -> Embeddings:
    """Return the embedding function identified by *model_name*.

    ``"ollama:<model>"`` selects a model served by Ollama at
    ``settings.ollama_base_url``; any other value is treated as a
    HuggingFace sentence-transformer id.  Instances are cached per name
    because loading a local model is expensive.
    """
    if model_name.startswith(OLLAMA_PREFIX):
        ollama_model = model_name[len(OLLAMA_PREFIX) :]
        logger.info("Using Ollama embeddings %r at %s", ollama_model, settings.ollama_base_url)
        return OllamaEmbeddings(model=ollama_model, base_url=settings.ollama_base_url)
    return HuggingFaceEmbeddings(model_name=model_name)


def load_embeddings(
    model_name: str, factory: Callable[[str], Embeddings] = get_embedding_function
) -> Embeddings:
    """Resolve *model_name* through *factory*.

    Raises
    ------
    EmbeddingUnavailable
        The factory could not build the model (unknown id, failed download,
        missing backend package).
    """
    try:
        return factory(model_name)
    except Exception as exc:
        logger.exception("Could not load embedding model %s", model_name)
        raise EmbeddingUnavailable(f"Embedding model '{model_name}' is unavailable: {exc}") from exc


def preflight(embeddings: Embeddings, model_name: str = "") -> None:
    """Make one trial embedding call so an unreachable backend fails fast.

    Raises
    ------
    EmbeddingUnavailable
        The trial call raised or returned an empty vector.
    """
    label = model_name or type(embeddings).__name__
    try:
        vector = embeddings.embed_query(PREFLIGHT_TEXT)
    except Exception as exc:
        logger.exception("Embedding preflight failed for %s", label)
        raise EmbeddingUnavailable(
            f"Cannot reach embedding backend for model '{label}'. "
            "Ensure the backend is running and the model is available."
        ) from exc
    if not vector:
        raise EmbeddingUnavailable(f"Embedding backend for model '{label}' returned an empty vector")
    logger.info("Embedding backend reachable (%s, dim=%d)", label, len(vector))
