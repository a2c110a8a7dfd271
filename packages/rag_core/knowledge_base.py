from __future__ import annotations

import logging
import threading
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import DimensionMismatch
from .models import EmbeddedChunk

_log = logging.getLogger(__name__)


class KnowledgeBase:
    """
    Append-only, in-memory collection of embedded chunks.

    Writers append whole batches under a lock and publish a new immutable
    tuple; readers work on whatever tuple was published when they called
    `snapshot()`, so a retrieval never observes a half-appended document.
    """

    def __init__(self, chunks: Optional[Iterable[EmbeddedChunk]] = None):
        self._lock = threading.Lock()
        self._chunks: Tuple[EmbeddedChunk, ...] = ()
        self._dimension: Optional[int] = None
        if chunks is not None:
            self.extend(chunks)

    @property
    def dimension(self) -> Optional[int]:
        """Embedding length shared by every chunk, or None while empty."""
        return self._dimension

    def extend(self, chunks: Iterable[EmbeddedChunk]) -> int:
        """
        Append a batch of embedded chunks and publish them atomically.

        Returns:
            Number of chunks appended.

        Raises:
            DimensionMismatch: If any chunk's embedding length differs from the
                base's dimensionality (or from the rest of the batch). Nothing is
                appended in that case.
        """
        batch = list(chunks)
        if not batch:
            return 0

        with self._lock:
            dimension = self._dimension if self._dimension is not None else batch[0].dimension
            for chunk in batch:
                if chunk.dimension != dimension:
                    raise DimensionMismatch(dimension, chunk.dimension)

            self._chunks = self._chunks + tuple(batch)
            self._dimension = dimension
            total = len(self._chunks)

        _log.debug("Appended %d chunks to knowledge base (total=%d)", len(batch), total)
        return len(batch)

    def add(self, chunk: EmbeddedChunk) -> None:
        self.extend([chunk])

    def snapshot(self) -> Tuple[EmbeddedChunk, ...]:
        """Return the currently published, immutable view of the base."""
        return self._chunks

    def sources(self) -> List[str]:
        """Distinct source ids in first-seen order."""
        seen: dict[str, None] = {}
        for chunk in self._chunks:
            seen.setdefault(chunk.source_id, None)
        return list(seen)

    def __len__(self) -> int:
        return len(self._chunks)

    def __iter__(self) -> Iterator[EmbeddedChunk]:
        return iter(self.snapshot())

    def __bool__(self) -> bool:
        return bool(self._chunks)


__all__ = ["KnowledgeBase"]
