"""
Core RAG logic for the knowledge-base assistant.

This package contains:
- Data models for chunks and embedded chunks
- Boundary-aware chunking with overlap
- Cosine-similarity ranking and top-K retrieval
- An append-only in-memory knowledge base and document ingestion

The BGE-M3 embedding adapter lives in `rag_core.embeddings` and is imported
explicitly by hosts that install the `bge` extra.
"""

from .chunking import chunk_text
from .errors import (
    DimensionMismatch,
    EmbeddingUnavailable,
    GenerationUnavailable,
    RagCoreError,
    UnsupportedDocument,
)
from .knowledge_base import KnowledgeBase
from .models import Chunk, EmbeddedChunk, ScoredChunk
from .retrieval import cosine_similarity, rank, top_k

__all__ = [
    "Chunk",
    "DimensionMismatch",
    "EmbeddedChunk",
    "EmbeddingUnavailable",
    "GenerationUnavailable",
    "KnowledgeBase",
    "RagCoreError",
    "ScoredChunk",
    "UnsupportedDocument",
    "chunk_text",
    "cosine_similarity",
    "rank",
    "top_k",
]
