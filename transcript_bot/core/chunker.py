"""Word-safe splitting of prose into size-bounded chunks.

WHY: The language service accepts prompts of limited size, and chat
front ends limit message length. Long transcripts must be cut into
pieces without ever splitting a word.

HOW: Greedy accumulation over whitespace-separated words. A word that
would push the current chunk past max_size seals the chunk and starts
the next one.

RULES:
- Words are split on any whitespace; runs of whitespace collapse
- Chunk text is its words joined by single spaces (no trailing space)
- Every chunk is <= max_size unless it holds a single longer word,
  which is kept whole as its own chunk
- Empty chunks are never produced; empty or blank text yields []
- " ".join(chunks) == " ".join(text.split())
"""

from __future__ import annotations

from typing import List


def chunk_text(text: str, max_size: int) -> List[str]:
    """Split text into ordered, word-safe chunks of at most max_size characters.

    Args:
        text: Prose to split.
        max_size: Maximum characters per chunk (must be positive).

    Returns:
        Chunks in original order.
    """
    if max_size <= 0:
        raise ValueError("max_size must be positive, got {}".format(max_size))

    chunks: List[str] = []
    current: List[str] = []
    current_len = 0

    for word in text.split():
        # +1 for the joining space, except before the first word
        added = len(word) + (1 if current else 0)
        if current and current_len + added > max_size:
            chunks.append(" ".join(current))
            current = []
            current_len = 0
            added = len(word)
        current.append(word)
        current_len += added

    if current:
        chunks.append(" ".join(current))
    return chunks
