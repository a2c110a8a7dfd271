from __future__ import annotations

from typing import Iterator, List

from dotenv import load_dotenv
from groq import Groq, GroqError

from rag_core.errors import GenerationUnavailable
from rag_core.models import Chunk

# Load .env once when module is imported so that GROQ_API_KEY can be defined
# in a persisted config file rather than every shell session.
load_dotenv()

DEFAULT_MODEL_ID = "openai/gpt-oss-120b"
DEFAULT_TEMPERATURE = 0.3
SUMMARY_MAX_CHARS = 5000

SYSTEM_PROMPT = """You are an intelligent knowledge assistant. Your goal is to answer the user's question accurately using ONLY the provided context below.

Instructions:
1. Analyze the Context provided.
2. Answer the User Question based on that Context.
3. If the answer is not found in the Context, politely state that you cannot answer based on the available information.
4. Do not make up facts not present in the Context.
5. Cite the source file name if possible.
"""

SUMMARY_PROMPT = "You are a helpful assistant. Summarize the provided text in 5-8 words. Be concise."

# Lazily initialise the Groq client so that missing credentials only surface
# when a completion is actually requested.
_client: Groq | None = None


def _get_client() -> Groq:
    """Return a singleton Groq client, initialising it on first use."""
    global _client
    if _client is None:
        try:
            _client = Groq()  # GROQ_API_KEY is read from the environment
        except GroqError as exc:
            raise GenerationUnavailable(f"Groq client unavailable: {exc}") from exc
    return _client


def _unavailable(exc: GroqError) -> GenerationUnavailable:
    status_code = getattr(exc, "status_code", None)
    if status_code == 429:
        message = "Rate limit exceeded. Please wait a moment and try again."
    elif status_code == 401:
        message = "Invalid API key. Please check your configuration."
    else:
        message = f"Generation failed: {exc}"
    return GenerationUnavailable(message, status_code=status_code)


def build_context_block(chunks: List[Chunk]) -> str:
    """Format chunks into a single context block for the LLM."""
    return "\n\n---\n\n".join(f"[Source: {ch.source_id}]\n{ch.content}" for ch in chunks)


def build_user_prompt(question: str, chunks: List[Chunk]) -> str:
    return f"Context:\n{build_context_block(chunks)}\n\nUser Question: {question}"


def stream_answer(
    question: str,
    chunks: List[Chunk],
    model: str = DEFAULT_MODEL_ID,
    temperature: float = DEFAULT_TEMPERATURE,
) -> Iterator[str]:
    """
    Stream an answer grounded in `chunks` as text fragments.

    The returned generator is finite and not restartable; nothing is sent to
    Groq until the first fragment is requested.
    """
    client = _get_client()
    try:
        stream = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(question, chunks)},
            ],
            temperature=temperature,
            stream=True,
        )
        for event in stream:
            if not event.choices:
                continue
            fragment = event.choices[0].delta.content
            if fragment:
                yield fragment
    except GroqError as exc:
        raise _unavailable(exc) from exc


def summarize(
    text: str,
    model: str = DEFAULT_MODEL_ID,
    max_chars: int = SUMMARY_MAX_CHARS,
) -> str:
    """Return a 5-8 word summary of the leading `max_chars` characters of text."""
    client = _get_client()
    try:
        resp = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SUMMARY_PROMPT},
                {"role": "user", "content": f"Text to summarize: {text[:max_chars]}"},
            ],
            stream=False,
        )
    except GroqError as exc:
        raise _unavailable(exc) from exc
    content = resp.choices[0].message.content
    return (content or "").strip()


__all__ = [
    "DEFAULT_MODEL_ID",
    "SYSTEM_PROMPT",
    "build_context_block",
    "build_user_prompt",
    "stream_answer",
    "summarize",
]
