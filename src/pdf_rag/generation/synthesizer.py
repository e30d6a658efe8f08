"""Answer synthesis — one grounded generation call over retrieved chunks."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from pdf_rag.errors import GenerationError
from pdf_rag.generation.prompts import build_answer_prompt

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from pdf_rag.retrieval.models import RetrievedChunk

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWER = "No relevant documents found in the vector store."


class AnswerSynthesizer:
    """Turn retrieved chunks into a cited answer.

    Parameters
    ----------
    llm:
        Chat model to invoke.  When *None*, the configured model from
        :func:`~pdf_rag.generation.llm.get_llm` is created on first use.
    """

    def __init__(self, llm: BaseChatModel | None = None) -> None:
        self._llm = llm

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            from pdf_rag.generation.llm import get_llm

            self._llm = get_llm()
        return self._llm

    def answer(self, query_text: str, retrieved: list[RetrievedChunk]) -> str:
        """Return the model's answer, or :data:`NO_RESULTS_ANSWER` when nothing was retrieved.

        Citation markers in the answer are passed through unchecked.
        """
        if not retrieved:
            return NO_RESULTS_ANSWER

        messages = build_answer_prompt(query_text, retrieved)
        t0 = time.monotonic()
        try:
            response = self.llm.invoke(messages)
        except Exception as exc:
            logger.exception("Answer generation failed")
            raise GenerationError(f"Answer generation failed: {exc}") from exc

        logger.info("Generated answer from %d chunks in %.1fs", len(retrieved), time.monotonic() - t0)
        content = response.content if isinstance(response.content, str) else str(response.content)
        return content.strip()
