"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

SUPPORTED_METRICS = ("cosine", "l2", "ip")


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for local servers)")
    llm_model_name: str = Field(default="qwen2:7b", description="LLM model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for the LLM API. Leave empty to use OpenAI cloud. "
            "Set to any OpenAI-compatible endpoint for local serving, e.g. "
            "'http://localhost:11434/v1' for Ollama."
        ),
    )
    llm_temperature: float = 0.0

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    ollama_base_url: str = "http://localhost:11434"

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_path: str = Field(
        default="",
        description="Directory for a local persistent Chroma store. Empty means use the HTTP server.",
    )

    # Store registry / run workspaces
    stores_dir: str = "chroma_data"
    work_dir: str = Field(default="", description="Parent directory for ingestion workspaces (system temp when empty)")

    # Pipeline
    chunk_size: int = 2000
    chunk_overlap: int = 400
    batch_size: int = 50
    distance_metric: str = "cosine"
    default_top_k: int = 3

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


class PipelineConfig(BaseModel):
    """Explicit knobs for the chunker, the batch indexer and retrieval.

    Built once and handed to the components at construction, so every
    constraint is checked here rather than on each call.
    """

    window_size: int = 2000
    overlap: int = 400
    batch_size: int = 50
    metric: str = "cosine"
    default_top_k: int = 3

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_bounds(self) -> PipelineConfig:
        if self.window_size <= 0:
            raise ValueError(f"window_size must be positive, got {self.window_size}")
        if self.overlap < 0:
            raise ValueError(f"overlap must be >= 0, got {self.overlap}")
        if self.overlap >= self.window_size:
            raise ValueError(f"overlap ({self.overlap}) must be < window_size ({self.window_size})")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.metric not in SUPPORTED_METRICS:
            raise ValueError(f"Unsupported metric {self.metric!r}; expected one of {SUPPORTED_METRICS}")
        if self.default_top_k <= 0:
            raise ValueError(f"default_top_k must be positive, got {self.default_top_k}")
        return self

    @property
    def step(self) -> int:
        """Characters the chunk window advances per step."""
        return self.window_size - self.overlap

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> PipelineConfig:
        source = source or settings
        return cls(
            window_size=source.chunk_size,
            overlap=source.chunk_overlap,
            batch_size=source.batch_size,
            metric=source.distance_metric,
            default_top_k=source.default_top_k,
        )


def configure_logging(level: str | None = None) -> None:
    """Install a basic root handler at *level* (defaults to ``settings.log_level``)."""
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Singleton — import `settings` wherever needed.
settings = Settings()
