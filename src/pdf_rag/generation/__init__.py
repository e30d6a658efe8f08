"""
Generation — chat model access, prompts and grounded answer synthesis.
"""

from pdf_rag.generation.synthesizer import NO_RESULTS_ANSWER, AnswerSynthesizer

__all__ = ["NO_RESULTS_ANSWER", "AnswerSynthesizer"]
