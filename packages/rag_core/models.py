from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """A bounded, contiguous segment of one source document."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identifier unique within one ingestion run.")
    source_id: str = Field(..., description="Name of the originating document.")
    content: str = Field(..., min_length=1, description="Normalized chunk text.")


class EmbeddedChunk(Chunk):
    """Chunk enriched with the vector produced by the external embedding step."""

    embedding: List[float] = Field(
        ...,
        description="Fixed-length embedding vector for `content`.",
    )

    @property
    def dimension(self) -> int:
        return len(self.embedding)

    def to_chunk(self) -> Chunk:
        """Return the plain chunk without its vector."""
        return Chunk(id=self.id, source_id=self.source_id, content=self.content)

    @classmethod
    def from_chunk(cls, chunk: Chunk, embedding: List[float]) -> "EmbeddedChunk":
        return cls(
            id=chunk.id,
            source_id=chunk.source_id,
            content=chunk.content,
            embedding=[float(v) for v in embedding],
        )


class ScoredChunk(BaseModel):
    """Chunk paired with its similarity to a query. Only lives during ranking."""

    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    score: float = Field(..., ge=-1.0, le=1.0)


__all__ = ["Chunk", "EmbeddedChunk", "ScoredChunk"]
