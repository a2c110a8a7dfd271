from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Configuration for the host pipeline: ingestion, retrieval and model adapters."""

    model_config = SettingsConfigDict(
        env_prefix="KB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Chunking
    chunk_size: int = Field(default=800, gt=0, description="Target chunk length in characters.")
    chunk_overlap: int = Field(default=100, ge=0, description="Maximum overlap between chunks.")

    # Retrieval
    top_k: int = Field(default=5, ge=0, description="Chunks handed to the answer model.")

    # Ingestion
    supported_suffixes: List[str] = Field(
        default_factory=lambda: [".txt", ".md"],
        description="File suffixes accepted for ingestion (plain text only).",
    )
    embed_workers: int = Field(default=1, ge=1, description="Concurrent embedding calls per document.")
    summary_max_chars: int = Field(
        default=5000,
        gt=0,
        description="Leading characters of a document sent to the summary model.",
    )

    # Model adapters
    embedding_model: str = Field(default="BAAI/bge-m3", description="BGE-M3 checkpoint name.")
    generation_model: str = Field(default="openai/gpt-oss-120b", description="Groq model id.")
    generation_temperature: float = Field(default=0.3, ge=0.0, le=2.0)


def get_settings() -> PipelineSettings:
    """Return settings read from the environment and .env."""
    settings = PipelineSettings()
    if settings.chunk_overlap >= settings.chunk_size:
        raise ValueError("KB_CHUNK_OVERLAP must be less than KB_CHUNK_SIZE")
    return settings


__all__ = ["PipelineSettings", "get_settings"]
