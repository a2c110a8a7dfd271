from __future__ import annotations

import logging
import re
from typing import List, Tuple

from .models import Chunk

_log = logging.getLogger(__name__)

DEFAULT_TARGET_SIZE = 800
DEFAULT_OVERLAP = 100

# Paragraphs shorter than target_size * PARAGRAPH_UNIT_RATIO are kept whole;
# longer ones are split into sentences.
PARAGRAPH_UNIT_RATIO = 0.5

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
WHITESPACE = re.compile(r"\s+")
# A sentence ends at a run of . ! ? followed by whitespace or end of text.
# Text without terminal punctuation runs to the end of the paragraph.
SENTENCE_PATTERN = re.compile(r"\S.*?(?:[.!?]+(?=\s|$)|$)")


def make_chunk_id(source_id: str, ordinal: int) -> str:
    """Deterministic chunk id from the source name and the chunk's position."""
    return f"{source_id}-{ordinal}"


def _split_into_paragraphs(text: str) -> List[str]:
    """
    Split text on blank lines and normalise every paragraph.

    Line endings are unified first, then each paragraph is trimmed and its
    internal whitespace collapsed to single spaces. Empty paragraphs are dropped.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")

    paragraphs: list[str] = []
    for raw in PARAGRAPH_BREAK.split(normalized):
        paragraph = WHITESPACE.sub(" ", raw).strip()
        if paragraph:
            paragraphs.append(paragraph)
    return paragraphs


def _split_into_sentences(paragraph: str) -> List[str]:
    sentences: list[str] = []
    for match in SENTENCE_PATTERN.finditer(paragraph):
        sentence = match.group(0).strip()
        if sentence:
            sentences.append(sentence)
    return sentences


def _hard_split(unit: str, target_size: int) -> List[str]:
    """Slice an oversized unit into consecutive pieces of at most target_size."""
    pieces: list[str] = []
    for start in range(0, len(unit), target_size):
        piece = unit[start : start + target_size].strip()
        if piece:
            pieces.append(piece)
    return pieces


def split_into_units(text: str, target_size: int = DEFAULT_TARGET_SIZE) -> List[str]:
    """
    Break text into the atomic units that get packed into chunks.

    Short paragraphs stay whole for contextual coherence. Longer paragraphs
    become sentence units, and any unit still longer than target_size is
    hard-split so no unit ever exceeds it.
    """
    threshold = target_size * PARAGRAPH_UNIT_RATIO
    units: list[str] = []

    for paragraph in _split_into_paragraphs(text):
        if len(paragraph) < threshold:
            units.append(paragraph)
            continue

        for sentence in _split_into_sentences(paragraph):
            if len(sentence) > target_size:
                units.extend(_hard_split(sentence, target_size))
            else:
                units.append(sentence)

    return units


def _overlap_prefix(units: List[str], overlap: int) -> Tuple[List[str], int]:
    """
    Collect whole trailing units of a closed chunk that fit in `overlap` chars.

    Returns the units in original order and their running length, which counts
    one separator per unit the same way the packer does.
    """
    prefix: list[str] = []
    length = 0
    for unit in reversed(units):
        if length + len(unit) > overlap:
            break
        prefix.insert(0, unit)
        length += len(unit) + 1
    return prefix, length


def pack_units(
    units: List[str],
    target_size: int = DEFAULT_TARGET_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> List[str]:
    """
    Greedily pack units into chunk texts joined by single spaces.

    When the next unit would overflow target_size the current chunk is closed
    and the next one is seeded with an overlap prefix taken from its tail.
    """
    contents: list[str] = []
    current: list[str] = []
    current_length = 0

    for unit in units:
        if current and current_length + len(unit) + 1 > target_size:
            contents.append(" ".join(current))

            prefix, prefix_length = _overlap_prefix(current, overlap)
            # The seeded chunk must still fit; drop the oldest overlap units first.
            while prefix and prefix_length + len(unit) > target_size:
                prefix_length -= len(prefix.pop(0)) + 1

            current = prefix + [unit]
            current_length = prefix_length + len(unit) + 1
        else:
            current.append(unit)
            current_length += len(unit) + 1

    if current:
        contents.append(" ".join(current))

    return contents


def chunk_text(
    text: str,
    source_id: str,
    target_size: int = DEFAULT_TARGET_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> List[Chunk]:
    """
    Split a document into overlapping, boundary-aware chunks.

    Args:
        text: Raw document text.
        source_id: Name of the originating document; used to tag and id chunks.
        target_size: Maximum chunk length in characters.
        overlap: Maximum length of trailing context repeated at the start of
            the following chunk.

    Returns:
        Chunks in document order. Empty or whitespace-only text yields [].

    Raises:
        ValueError: If target_size <= 0 or overlap is outside [0, target_size).
    """
    if target_size <= 0:
        raise ValueError("target_size must be positive")
    if overlap < 0:
        raise ValueError("overlap must be non-negative")
    if overlap >= target_size:
        raise ValueError("overlap must be less than target_size")

    if not text or not text.strip():
        return []

    units = split_into_units(text, target_size=target_size)
    contents = pack_units(units, target_size=target_size, overlap=overlap)

    chunks = [
        Chunk(id=make_chunk_id(source_id, ordinal), source_id=source_id, content=content)
        for ordinal, content in enumerate(contents)
    ]
    _log.debug("Chunked %s into %d units and %d chunks", source_id, len(units), len(chunks))
    return chunks


__all__ = [
    "DEFAULT_OVERLAP",
    "DEFAULT_TARGET_SIZE",
    "PARAGRAPH_UNIT_RATIO",
    "chunk_text",
    "make_chunk_id",
    "pack_units",
    "split_into_units",
]
