"""
Shared test fixtures and configuration for pytest.
"""

import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

# Add packages directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "packages"))

from rag_core.errors import EmbeddingUnavailable  # noqa: E402
from rag_core.knowledge_base import KnowledgeBase  # noqa: E402
from rag_core.models import Chunk, EmbeddedChunk  # noqa: E402


VOCABULARY = ["cat", "dog", "fish", "bird", "tree"]


class KeywordEmbedder:
    """
    Deterministic stand-in for an embedding model.

    Each dimension counts occurrences of one vocabulary word, so texts about
    the same animal end up close in cosine space. Texts listed in `fail_on`
    raise EmbeddingUnavailable.
    """

    def __init__(self, fail_on: Optional[Iterable[str]] = None):
        self.fail_on = set(fail_on or [])
        self.calls: List[str] = []

    def __call__(self, text: str) -> List[float]:
        self.calls.append(text)
        for marker in self.fail_on:
            if marker in text:
                raise EmbeddingUnavailable("rate limited", text_preview=text[:20])
        lower = text.lower()
        return [float(lower.count(word)) for word in VOCABULARY]


class RecordingGenerator:
    """Stand-in for the streaming answer model."""

    def __init__(self, fragments: Optional[List[str]] = None):
        self.fragments = fragments or ["Cats ", "purr."]
        self.calls: List[Dict] = []

    def __call__(self, question: str, chunks: List[Chunk]):
        self.calls.append({"question": question, "chunks": list(chunks)})
        for fragment in self.fragments:
            yield fragment


@pytest.fixture
def embedded_chunk():
    """Factory for embedded chunks with placeholder content."""

    def _make(chunk_id: str, vector: List[float], source_id: str = "doc.txt") -> EmbeddedChunk:
        return EmbeddedChunk(id=chunk_id, source_id=source_id, content=f"content of {chunk_id}", embedding=vector)

    return _make


@pytest.fixture
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def make_embedder():
    """Factory for keyword embedders, optionally failing on given markers."""
    return KeywordEmbedder


@pytest.fixture
def generator() -> RecordingGenerator:
    return RecordingGenerator()


@pytest.fixture
def knowledge_base() -> KnowledgeBase:
    return KnowledgeBase()


@pytest.fixture
def animal_text() -> str:
    return (
        "The cat sleeps on the sofa all afternoon.\n\n"
        "A dog barks at the mailman every morning.\n\n"
        "The fish swims in circles inside its bowl."
    )
