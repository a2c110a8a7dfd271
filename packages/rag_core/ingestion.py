"""
Document ingestion: chunk, embed and publish into a knowledge base.

Embedding failures are isolated per chunk: a chunk whose embedding call raises
`EmbeddingUnavailable` is logged, reported in `failed_chunks` and left out of
the knowledge base while the rest of the document is still indexed.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .chunking import DEFAULT_OVERLAP, DEFAULT_TARGET_SIZE, chunk_text
from .errors import EmbeddingUnavailable, GenerationUnavailable, UnsupportedDocument
from .knowledge_base import KnowledgeBase
from .models import Chunk, EmbeddedChunk

_log = logging.getLogger(__name__)

Embedder = Callable[[str], Sequence[float]]
Summarizer = Callable[[str], str]

DEFAULT_SUPPORTED_SUFFIXES = (".txt", ".md")


class IngestReport(BaseModel):
    """Outcome of ingesting one document."""

    source_id: str = Field(..., description="Name of the ingested document.")
    status: Literal["indexed", "error"] = Field(
        ...,
        description="'indexed' once the document was processed, 'error' if it could not be read.",
    )
    chunk_count: int = Field(default=0, description="Embedded chunks added to the knowledge base.")
    failed_chunks: List[str] = Field(
        default_factory=list,
        description="Ids of chunks left out because their embedding failed.",
    )
    description: Optional[str] = Field(default=None, description="Short summary of the document.")


def _embed_one(chunk: Chunk, embed: Embedder) -> Optional[EmbeddedChunk]:
    try:
        vector = embed(chunk.content)
    except EmbeddingUnavailable as exc:
        _log.error("Failed to embed chunk %s of %s: %s", chunk.id, chunk.source_id, exc, exc_info=True)
        return None
    return EmbeddedChunk.from_chunk(chunk, vector)


def embed_chunks(
    chunks: Sequence[Chunk],
    embed: Embedder,
    max_workers: int = 1,
) -> Tuple[List[EmbeddedChunk], List[str]]:
    """
    Embed every chunk, isolating failures.

    With max_workers > 1 the embedding calls are issued concurrently; the
    returned list keeps chunk order regardless of completion order.

    Returns:
        (embedded chunks, ids of chunks whose embedding failed)
    """
    if max_workers > 1 and len(chunks) > 1:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="embed") as executor:
            results = list(executor.map(lambda c: _embed_one(c, embed), chunks))
    else:
        results = [_embed_one(c, embed) for c in chunks]

    embedded: list[EmbeddedChunk] = []
    failed: list[str] = []
    for chunk, result in zip(chunks, results):
        if result is None:
            failed.append(chunk.id)
        else:
            embedded.append(result)
    return embedded, failed


def ingest_text(
    text: str,
    source_id: str,
    embed: Embedder,
    base: KnowledgeBase,
    *,
    target_size: int = DEFAULT_TARGET_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    max_workers: int = 1,
    summarize: Optional[Summarizer] = None,
) -> IngestReport:
    """
    Chunk a document, embed its chunks and publish them into `base`.

    The whole document is embedded before anything is appended, so readers of
    the knowledge base never see a partially ingested document.
    """
    chunks = chunk_text(text, source_id, target_size=target_size, overlap=overlap)
    _log.info("Chunked %s into %d chunks", source_id, len(chunks))

    embedded, failed = embed_chunks(chunks, embed, max_workers=max_workers)
    if failed:
        _log.warning("%d of %d chunks of %s could not be embedded", len(failed), len(chunks), source_id)

    base.extend(embedded)

    description = None
    if summarize is not None and text.strip():
        try:
            description = summarize(text) or None
        except GenerationUnavailable as exc:
            _log.warning("Failed to generate summary for %s: %s", source_id, exc)

    _log.info("Indexed %s: %d chunks added (knowledge base total=%d)", source_id, len(embedded), len(base))
    return IngestReport(
        source_id=source_id,
        status="indexed",
        chunk_count=len(embedded),
        failed_chunks=failed,
        description=description,
    )


def check_supported(path: Path, supported_suffixes: Iterable[str] = DEFAULT_SUPPORTED_SUFFIXES) -> None:
    """Raise UnsupportedDocument unless the file suffix is in the allow-list."""
    suffix = path.suffix.lower()
    if suffix not in {s.lower() for s in supported_suffixes}:
        raise UnsupportedDocument(path.name, suffix)


def ingest_file(
    path: Path,
    embed: Embedder,
    base: KnowledgeBase,
    *,
    supported_suffixes: Iterable[str] = DEFAULT_SUPPORTED_SUFFIXES,
    target_size: int = DEFAULT_TARGET_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    max_workers: int = 1,
    summarize: Optional[Summarizer] = None,
) -> IngestReport:
    """
    Ingest one plain-text file, using its file name as the source id.

    Raises:
        UnsupportedDocument: If the suffix is not an accepted plain-text type.
    """
    path = Path(path)
    check_supported(path, supported_suffixes)

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _log.error("Failed to read %s: %s", path, exc, exc_info=True)
        return IngestReport(source_id=path.name, status="error")

    return ingest_text(
        text,
        path.name,
        embed,
        base,
        target_size=target_size,
        overlap=overlap,
        max_workers=max_workers,
        summarize=summarize,
    )


__all__ = [
    "DEFAULT_SUPPORTED_SUFFIXES",
    "Embedder",
    "IngestReport",
    "Summarizer",
    "check_supported",
    "embed_chunks",
    "ingest_file",
    "ingest_text",
]
