"""
Unit tests for boundary-aware chunking.

Tests for:
- Paragraph and sentence unit detection
- Greedy packing and overlap bookkeeping
- Size guarantees and content preservation
- Deterministic chunk ids
"""

import re

import pytest

from rag_core.chunking import (
    PARAGRAPH_UNIT_RATIO,
    chunk_text,
    make_chunk_id,
    pack_units,
    split_into_units,
)


def _non_whitespace(text: str) -> str:
    return re.sub(r"\s+", "", text)


def _is_subsequence(needle: str, haystack: str) -> bool:
    it = iter(haystack)
    return all(ch in it for ch in needle)


LONG_TEXT = (
    "Retrieval augmented generation combines search with language models. "
    "Documents are split into chunks before they are embedded! "
    "Each chunk should hold a complete thought? "
    "Overlap carries context across boundaries.\n\n"
    "Short paragraph here.\n\n"
    + "A sentence that keeps going without any terminal punctuation " * 6
    + "\r\n\r\n"
    "Final paragraph. It has two sentences."
)


class TestSplitIntoUnits:
    """Tests for paragraph/sentence unit detection."""

    def test_short_paragraphs_stay_whole(self):
        """Paragraphs below half the target size are single units."""
        units = split_into_units("First one. Still first.\n\nSecond one.", target_size=800)

        assert units == ["First one. Still first.", "Second one."]

    def test_long_paragraph_splits_into_sentences(self):
        """Paragraphs at or above the threshold become sentence units."""
        paragraph = "Alpha beta gamma. Delta epsilon! Zeta eta? Theta"
        units = split_into_units(paragraph, target_size=20)

        assert units == ["Alpha beta gamma.", "Delta epsilon!", "Zeta eta?", "Theta"]

    def test_threshold_is_exclusive(self):
        """A paragraph exactly at the threshold is split into sentences."""
        target = 40
        exact = "Aaaaaaaa. Bbbbbbbbbb"
        assert len(exact) == target * PARAGRAPH_UNIT_RATIO

        assert split_into_units(exact, target_size=target) == ["Aaaaaaaa.", "Bbbbbbbbbb"]
        assert split_into_units(exact[:-1], target_size=target) == [exact[:-1]]

    def test_punctuation_inside_words_does_not_split(self):
        """Only punctuation followed by whitespace or end of text ends a sentence."""
        units = split_into_units("Pi is roughly 3.14 in value. Version v1.2.3 shipped!", target_size=60)

        assert units == ["Pi is roughly 3.14 in value.", "Version v1.2.3 shipped!"]

    def test_punctuation_runs_stay_with_sentence(self):
        units = split_into_units("Really?! Yes... Absolutely.", target_size=12)

        assert units == ["Really?!", "Yes...", "Absolutely."]

    def test_whitespace_is_collapsed(self):
        units = split_into_units("  Many\t\tspaces   and\nline breaks  ", target_size=800)

        assert units == ["Many spaces and line breaks"]

    def test_blank_line_with_spaces_separates_paragraphs(self):
        units = split_into_units("One.\n   \t\nTwo.", target_size=800)

        assert units == ["One.", "Two."]

    def test_carriage_returns_are_normalized(self):
        units = split_into_units("One.\r\n\r\nTwo.\r\rThree.", target_size=800)

        assert units == ["One.", "Two.", "Three."]

    def test_oversized_sentence_is_hard_split(self):
        """A single sentence longer than the target is sliced into target-sized pieces."""
        sentence = "x" * 25
        units = split_into_units(sentence, target_size=10)

        assert units == ["x" * 10, "x" * 10, "x" * 5]


class TestPackUnits:
    """Tests for greedy packing with overlap."""

    def test_all_units_fit(self):
        assert pack_units(["aaa", "bbb"], target_size=20, overlap=5) == ["aaa bbb"]

    def test_overflow_starts_new_chunk_with_overlap(self):
        """The unit-level overlap prefix repeats whole trailing units."""
        units = ["aaaa", "bbbb", "cccc", "dddd"]
        contents = pack_units(units, target_size=10, overlap=4)

        assert contents == ["aaaa bbbb", "bbbb cccc", "cccc dddd"]

    def test_zero_overlap(self):
        contents = pack_units(["aaaa", "bbbb", "cccc"], target_size=10, overlap=0)

        assert contents == ["aaaa bbbb", "cccc"]

    def test_unit_larger_than_overlap_gives_no_prefix(self):
        """No eligible trailing unit means the next chunk starts fresh."""
        contents = pack_units(["aaaaaaaa", "bbbbbbbb"], target_size=10, overlap=5)

        assert contents == ["aaaaaaaa", "bbbbbbbb"]

    def test_overlap_prefix_dropped_when_it_would_overflow(self):
        """A seeded chunk never exceeds the target size."""
        contents = pack_units(["aa", "bbbbbbbbbb"], target_size=10, overlap=5)

        assert contents == ["aa", "bbbbbbbbbb"]
        assert all(len(c) <= 10 for c in contents)


class TestChunkText:
    """Tests for the chunk_text entry point."""

    def test_two_short_paragraphs_make_one_chunk(self):
        """Both short paragraphs are joined by a single space."""
        chunks = chunk_text(
            "Paragraph one is short.\n\nParagraph two is also short.",
            "doc.txt",
            800,
            100,
        )

        assert len(chunks) == 1
        assert chunks[0].content == "Paragraph one is short. Paragraph two is also short."
        assert chunks[0].source_id == "doc.txt"
        assert chunks[0].id == "doc.txt-0"

    @pytest.mark.parametrize("text", ["", "   ", "\n\n\t\r\n"])
    def test_empty_or_whitespace_text(self, text):
        assert chunk_text(text, "doc.txt") == []

    def test_invalid_target_size(self):
        with pytest.raises(ValueError, match="target_size must be positive"):
            chunk_text("text", "doc.txt", target_size=0, overlap=0)

    def test_negative_overlap(self):
        with pytest.raises(ValueError, match="overlap must be non-negative"):
            chunk_text("text", "doc.txt", target_size=100, overlap=-1)

    def test_overlap_too_large(self):
        with pytest.raises(ValueError, match="overlap must be less than target_size"):
            chunk_text("text", "doc.txt", target_size=100, overlap=100)

    @pytest.mark.parametrize("target_size,overlap", [(60, 0), (60, 20), (120, 40), (200, 100), (800, 100)])
    def test_no_chunk_exceeds_target_size(self, target_size, overlap):
        chunks = chunk_text(LONG_TEXT, "long.md", target_size=target_size, overlap=overlap)

        assert chunks
        for chunk in chunks:
            assert 0 < len(chunk.content) <= target_size

    @pytest.mark.parametrize("target_size,overlap", [(60, 0), (60, 20), (120, 40), (800, 100)])
    def test_no_content_dropped(self, target_size, overlap):
        """Every non-whitespace character appears, in order, across the chunks."""
        chunks = chunk_text(LONG_TEXT, "long.md", target_size=target_size, overlap=overlap)
        joined = "".join(_non_whitespace(c.content) for c in chunks)

        assert _is_subsequence(_non_whitespace(LONG_TEXT), joined)

    def test_no_content_dropped_without_overlap_is_exact(self):
        """With zero overlap the chunks reconstruct the text exactly (modulo whitespace)."""
        chunks = chunk_text(LONG_TEXT, "long.md", target_size=80, overlap=0)
        joined = "".join(_non_whitespace(c.content) for c in chunks)

        assert joined == _non_whitespace(LONG_TEXT)

    def test_adjacent_chunks_share_bounded_overlap(self):
        """Consecutive chunks share a non-empty suffix/prefix no longer than overlap."""
        text = " ".join(f"Sentence number {i} ends here." for i in range(40))
        overlap = 60
        chunks = chunk_text(text, "doc.txt", target_size=200, overlap=overlap)

        assert len(chunks) > 1
        for previous, current in zip(chunks, chunks[1:]):
            shared = 0
            for size in range(min(len(previous.content), len(current.content)), 0, -1):
                if previous.content.endswith(current.content[:size]):
                    shared = size
                    break
            assert 0 < shared <= overlap

    def test_ids_are_ordinal_and_unique(self):
        chunks = chunk_text(LONG_TEXT, "long.md", target_size=60, overlap=20)

        assert [c.id for c in chunks] == [make_chunk_id("long.md", i) for i in range(len(chunks))]
        assert len({c.id for c in chunks}) == len(chunks)
        assert all(c.source_id == "long.md" for c in chunks)

    def test_determinism(self):
        first = chunk_text(LONG_TEXT, "long.md", target_size=90, overlap=30)
        second = chunk_text(LONG_TEXT, "long.md", target_size=90, overlap=30)

        assert first == second

    def test_pathological_single_sentence(self):
        """A huge unpunctuated run is force-sliced rather than left oversized."""
        text = "word" * 500
        chunks = chunk_text(text, "blob.txt", target_size=100, overlap=10)

        assert len(chunks) == 20
        assert all(len(c.content) == 100 for c in chunks)
