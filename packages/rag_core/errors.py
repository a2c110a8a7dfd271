"""
Exceptions raised by the RAG core and its host-side adapters.
"""

from __future__ import annotations


class RagCoreError(Exception):
    """Base exception for all knowledge-base errors."""


class DimensionMismatch(RagCoreError, ValueError):
    """
    Two embedding vectors of different length were compared or mixed.

    Raised when:
    - similarity is computed over vectors of unequal length
    - an embedding is appended to a knowledge base built with another dimensionality

    This always indicates a configuration error (e.g. two embedding models mixed
    in one knowledge base) and must reach the caller.
    """

    def __init__(self, expected: int, actual: int, message: str | None = None):
        super().__init__(message or f"Vector dimensions must match: {expected} != {actual}")
        self.expected = expected
        self.actual = actual


class EmbeddingUnavailable(RagCoreError):
    """
    The embedding backend could not produce a vector.

    Raised when:
    - the model cannot be loaded
    - the provider is unreachable, rejects credentials or rate-limits the call
    """

    def __init__(self, message: str, text_preview: str | None = None):
        super().__init__(message)
        self.text_preview = text_preview


class GenerationUnavailable(RagCoreError):
    """The answer-generation backend failed (transport, auth or rate limit)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedDocument(RagCoreError):
    """A document was offered for ingestion in a format the pipeline cannot read."""

    def __init__(self, name: str, suffix: str):
        super().__init__(f"Unsupported file type: {name}. Only plain-text documents are supported.")
        self.name = name
        self.suffix = suffix


__all__ = [
    "RagCoreError",
    "DimensionMismatch",
    "EmbeddingUnavailable",
    "GenerationUnavailable",
    "UnsupportedDocument",
]
