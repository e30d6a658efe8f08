"""Chat model factory for answer synthesis.

``LLM_MODEL_NAME`` uses the same scheme as embedding model ids:

* ``ollama:<model>`` — native Ollama chat at ``OLLAMA_BASE_URL``.
* anything else — ``ChatOpenAI``; against the OpenAI cloud when
  ``LLM_BASE_URL`` is empty, otherwise against that OpenAI-compatible
  endpoint (vLLM, llama.cpp server, Ollama's ``/v1``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

from pdf_rag.config import settings
from pdf_rag.ingestion.embedder import OLLAMA_PREFIX

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)


def get_llm(model_name: str | None = None, temperature: float | None = None) -> BaseChatModel:
    """Return the chat model used to write answers.

    Parameters
    ----------
    model_name:
        Overrides ``settings.llm_model_name``.
    temperature:
        Overrides ``settings.llm_temperature``.
    """
    name = model_name or settings.llm_model_name
    temp = settings.llm_temperature if temperature is None else temperature

    if name.startswith(OLLAMA_PREFIX):
        ollama_model = name[len(OLLAMA_PREFIX) :]
        logger.info("Using Ollama chat model %r at %s", ollama_model, settings.ollama_base_url)
        return ChatOllama(model=ollama_model, base_url=settings.ollama_base_url, temperature=temp)

    if settings.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint %s for %r", settings.llm_base_url, name)
        # The client insists on a key even when the server ignores it
        return ChatOpenAI(
            model=name,
            temperature=temp,
            base_url=settings.llm_base_url,
            api_key=settings.openai_api_key or "EMPTY",
        )
    return ChatOpenAI(model=name, temperature=temp, api_key=settings.openai_api_key)
