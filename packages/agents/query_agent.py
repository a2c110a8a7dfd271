from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional

from pydantic import BaseModel, Field

from rag_core.ingestion import Embedder
from rag_core.knowledge_base import KnowledgeBase
from rag_core.models import Chunk
from rag_core.retrieval import DEFAULT_TOP_K, top_k

_log = logging.getLogger(__name__)

AnswerGenerator = Callable[[str, List[Chunk]], Iterable[str]]


class QueryPlan(BaseModel):
    """Agent's internal plan for answering a question."""

    question: str
    k: int = Field(default=DEFAULT_TOP_K, ge=0)


@dataclass
class AgentAnswer:
    """Chunks used as context plus the lazily streamed answer text."""

    question: str
    related_chunks: List[Chunk]
    fragments: Iterator[str] = field(repr=False)

    def text(self) -> str:
        """Consume the fragment stream and return the full answer."""
        return "".join(self.fragments)

    def sources(self) -> List[str]:
        seen: dict[str, None] = {}
        for chunk in self.related_chunks:
            seen.setdefault(chunk.source_id, None)
        return list(seen)


class KnowledgeQueryAgent:
    """
    Answer questions over a knowledge base.

    Embeds the question, ranks a snapshot of the knowledge base and hands the
    top chunks to the answer generator. Embedding and generation are injected
    so the agent stays independent of any particular provider.
    """

    def __init__(
        self,
        base: KnowledgeBase,
        embed: Embedder,
        generate: AnswerGenerator,
        k: int = DEFAULT_TOP_K,
    ):
        self.base = base
        self.embed = embed
        self.generate = generate
        self.k = k

    def plan(self, question: str, k: Optional[int] = None) -> QueryPlan:
        question = question.strip()
        if not question:
            raise ValueError("question must not be empty")
        return QueryPlan(question=question, k=self.k if k is None else k)

    def retrieve(self, plan: QueryPlan) -> List[Chunk]:
        snapshot = self.base.snapshot()
        if not snapshot:
            _log.info("Knowledge base is empty; answering without context")
            return []

        query_vec = self.embed(plan.question)
        chunks = top_k(query_vec, snapshot, k=plan.k)
        _log.info("Retrieved %d chunks from %d candidates", len(chunks), len(snapshot))
        return chunks

    def answer(self, question: str, k: Optional[int] = None) -> AgentAnswer:
        plan = self.plan(question, k=k)
        chunks = self.retrieve(plan)
        fragments = iter(self.generate(plan.question, chunks))
        return AgentAnswer(question=plan.question, related_chunks=chunks, fragments=fragments)


__all__ = ["AgentAnswer", "AnswerGenerator", "KnowledgeQueryAgent", "QueryPlan"]
