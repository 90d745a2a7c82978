"""Tests for word-safe text chunking."""

from __future__ import annotations

import pytest

from transcript_bot.core.chunker import chunk_text


class TestChunkText:
    """Tests for chunk_text boundaries and invariants."""

    def test_short_text_is_one_chunk(self):
        assert chunk_text("hello world", 100) == ["hello world"]

    def test_exact_fit_is_one_chunk(self):
        # "aaaa bbbb" is 9 characters
        assert chunk_text("aaaa bbbb", 9) == ["aaaa bbbb"]

    def test_joining_space_counts(self):
        assert chunk_text("aaaa bbbb", 8) == ["aaaa", "bbbb"]

    def test_empty_text(self):
        assert chunk_text("", 10) == []

    def test_whitespace_only_text(self):
        assert chunk_text("  \n\t ", 10) == []

    def test_whitespace_runs_collapse(self):
        assert chunk_text("a   b\n\nc", 100) == ["a b c"]

    def test_oversized_word_is_own_chunk(self):
        assert chunk_text("a " + "x" * 20 + " b", 5) == ["a", "x" * 20, "b"]

    def test_words_are_never_split(self):
        text = "alpha beta gamma delta epsilon zeta eta theta"
        words = set(text.split())
        for chunk in chunk_text(text, 11):
            assert set(chunk.split()) <= words

    def test_every_chunk_within_limit(self):
        text = " ".join("word{}".format(i) for i in range(500))
        chunks = chunk_text(text, 50)
        assert all(0 < len(c) <= 50 for c in chunks)

    def test_rejoined_chunks_equal_normalized_text(self):
        text = "the  quick brown\tfox jumps over\nthe lazy dog " * 30
        chunks = chunk_text(text, 37)
        assert " ".join(chunks) == " ".join(text.split())

    def test_chunk_count_for_uniform_words(self):
        # 9-character words: two per 19-character chunk
        text = " ".join(["abcdefghi"] * 10)
        assert len(chunk_text(text, 19)) == 5

    @pytest.mark.parametrize("max_size", [0, -1])
    def test_non_positive_max_size_rejected(self, max_size):
        with pytest.raises(ValueError):
            chunk_text("hello", max_size)
