"""Prompt templates for grounded answer generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from pdf_rag.retrieval.models import RetrievedChunk

CONTEXT_SEPARATOR = "\n\n---\n\n"

SYSTEM_PROMPT = """\
You are a helpful assistant that answers questions based on provided documents.
Always cite which document you're referencing. If the answer is not in the documents, say so clearly.
Keep answers concise and focused. Use numbered citations like [Document 1], [Document 2], etc.
"""


def format_context(retrieved: list[RetrievedChunk]) -> str:
    """Label each chunk ``[Document i - source]`` and join them."""
    parts: list[str] = []
    for i, chunk in enumerate(retrieved, 1):
        parts.append(f"[Document {i} - {chunk.source_name}]\n{chunk.text}")
    return CONTEXT_SEPARATOR.join(parts)


def build_answer_prompt(query: str, retrieved: list[RetrievedChunk]) -> list[BaseMessage]:
    """Assemble the system and user messages for one grounded answer.

    Parameters
    ----------
    query:
        The user question.
    retrieved:
        Ranked chunks, best first; their order fixes the citation numbers.

    Returns
    -------
    list[BaseMessage]
        A list of LangChain message objects ready for ``.invoke()``.
    """
    user_msg = (
        f"Context from documents:\n{format_context(retrieved)}\n\n"
        f"Question: {query}\n\n"
        "Please answer based only on the context provided above."
    )
    return [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=user_msg),
    ]
