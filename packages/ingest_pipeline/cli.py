from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Optional, Tuple

import click

from rag_core.chunking import chunk_text
from rag_core.errors import EmbeddingUnavailable, GenerationUnavailable, UnsupportedDocument
from rag_core.ingestion import check_supported, ingest_file
from rag_core.knowledge_base import KnowledgeBase

from .config import get_settings

_log = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """CLI entrypoint for the knowledge-base assistant."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@main.command("chunk")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--size", type=int, default=None, help="Target chunk size in characters.")
@click.option("--overlap", type=int, default=None, help="Maximum overlap in characters.")
def chunk_cmd(path: Path, size: Optional[int], overlap: Optional[int]) -> None:
    """
    Chunk a plain-text document and print the chunks as JSON lines.

    Needs no embedding or generation backend.
    """
    settings = get_settings()
    try:
        check_supported(path, settings.supported_suffixes)
    except UnsupportedDocument as exc:
        raise click.ClickException(str(exc)) from exc

    target_size = size if size is not None else settings.chunk_size
    chunk_overlap = overlap if overlap is not None else settings.chunk_overlap

    text = path.read_text(encoding="utf-8")
    try:
        chunks = chunk_text(text, path.name, target_size=target_size, overlap=chunk_overlap)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    _log.info("Created %d chunks from %s", len(chunks), path.name)
    for chunk in chunks:
        click.echo(chunk.model_dump_json())


@main.command("ask")
@click.argument("question")
@click.option(
    "--doc",
    "docs",
    multiple=True,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Document to load into the knowledge base (repeatable).",
)
@click.option("-k", "k", type=int, default=None, help="Number of chunks used as context.")
@click.option("--summaries/--no-summaries", default=False, help="Generate a short summary per document.")
def ask(question: str, docs: Tuple[Path, ...], k: Optional[int], summaries: bool) -> None:
    """
    Ingest documents into an in-memory knowledge base and answer QUESTION.

    Embeds with BGE-M3 and streams the answer from Groq.
    """
    # Heavy model/provider imports are done lazily to keep `chunk` light.
    from agents.llm import stream_answer, summarize
    from agents.query_agent import KnowledgeQueryAgent
    from rag_core.embeddings import embed_text

    settings = get_settings()
    embed = partial(embed_text, model_name=settings.embedding_model)
    summarizer = (
        partial(summarize, model=settings.generation_model, max_chars=settings.summary_max_chars)
        if summaries
        else None
    )

    base = KnowledgeBase()
    for doc in docs:
        try:
            report = ingest_file(
                doc,
                embed,
                base,
                supported_suffixes=settings.supported_suffixes,
                target_size=settings.chunk_size,
                overlap=settings.chunk_overlap,
                max_workers=settings.embed_workers,
                summarize=summarizer,
            )
        except UnsupportedDocument as exc:
            click.echo(str(exc), err=True)
            continue

        line = f"{report.source_id}: {report.status}, {report.chunk_count} chunks"
        if report.failed_chunks:
            line += f" ({len(report.failed_chunks)} failed)"
        if report.description:
            line += f" - {report.description}"
        click.echo(line, err=True)

    agent = KnowledgeQueryAgent(
        base,
        embed,
        partial(stream_answer, model=settings.generation_model, temperature=settings.generation_temperature),
        k=settings.top_k if k is None else k,
    )

    try:
        answer = agent.answer(question)
        for fragment in answer.fragments:
            click.echo(fragment, nl=False)
    except (EmbeddingUnavailable, GenerationUnavailable) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo()

    if answer.related_chunks:
        click.echo("\nSources:")
        for source in answer.sources():
            click.echo(f"  - {source}")


if __name__ == "__main__":
    main()
