"""Rolling-caption deduplication: SRT markup in, continuous prose out.

WHY: Machine-generated captions are rendered as a rolling window. Each
timed block repeats most of the previous block's lines and adds one or
two new ones to simulate scrolling text. Concatenating every block's
text repeats each spoken line several times. This module collapses the
rolling window back into non-repeating prose.

HOW: The SRT text is scanned line by line. Text lines collect into the
current block until the next timestamp line arrives. At each timestamp
the current block is compared with the caption window (the unique lines
seen since the last flush). If they share no line the window is flushed
to the transcript and restarted; either way the block's lines are then
merged into the window. The window decision lives in merge_window(), a
pure function, so the heuristic can be tested and tuned without I/O.

RULES:
- Lines are trimmed before classification; blank lines are skipped
- "HH:MM:SS,mmm --> HH:MM:SS,mmm" lines are block boundaries, never text
- Lines that parse as a plain integer are sequence numbers, never text
- A line appears in the window at most once, in first-seen order
- Window and block "intersect" when they share at least one line
  (full containment either way counts too)
- No shared line → flush window (space-joined) and start a new one
- At end of input: flush the window, then append only the lines of the
  last block that the window does not already contain
- The result is trimmed
- This is a heuristic: unrelated blocks that happen to repeat a short
  phrase are merged into one window
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

# 00:00:00,000 --> 00:00:01,429
_TIMESTAMP_RE = re.compile(r"^\d{2}:\d{2}:\d{2},\d{3} --> \d{2}:\d{2}:\d{2},\d{3}$")

_SEQUENCE_RE = re.compile(r"^[+-]?\d+$")


class LineKind(str, enum.Enum):
    """Classification of one trimmed line of SRT input."""

    BLANK = "blank"
    TIMESTAMP = "timestamp"
    SEQUENCE = "sequence"
    TEXT = "text"


def classify_line(line: str) -> LineKind:
    """Classify a trimmed SRT line."""
    if not line:
        return LineKind.BLANK
    if _TIMESTAMP_RE.match(line):
        return LineKind.TIMESTAMP
    if _SEQUENCE_RE.match(line):
        return LineKind.SEQUENCE
    return LineKind.TEXT


@dataclass
class WindowMerge:
    """Result of comparing one caption block with the current window.

    RULES:
    - window: the window after the block has been merged in
    - flushed: lines to emit now, in order; empty when nothing is flushed
    """

    window: List[str]
    flushed: List[str] = field(default_factory=list)


def _ordered_unique(lines: Iterable[str]) -> Dict[str, None]:
    return dict.fromkeys(lines)


def lines_intersect(window: Iterable[str], block: Iterable[str]) -> bool:
    """True when the two line sets share at least one line."""
    return not set(window).isdisjoint(block)


def merge_window(window: Iterable[str], block: Iterable[str]) -> WindowMerge:
    """Merge one caption block into the window, flushing when they are disjoint.

    WHY: Auto-captions often spread one phrase across several blocks
    that overlap pairwise. Flushing only when the overlap disappears
    collapses such a run into a single emitted phrase.

    HOW: If window and block share no line, the old window becomes the
    flushed output and the new window starts empty. The block's lines
    are then appended in order, skipping lines already present.

    Args:
        window: Current window lines, unique and in first-seen order.
        block: Lines of the block that just ended.

    Returns:
        WindowMerge with the new window and the lines to flush.
    """
    current = _ordered_unique(window)
    incoming = _ordered_unique(block)

    flushed: List[str] = []
    if not lines_intersect(current, incoming):
        flushed = list(current)
        current = {}

    for line in incoming:
        current.setdefault(line, None)

    return WindowMerge(window=list(current), flushed=flushed)


def remaining_lines(window: Iterable[str], block: Iterable[str]) -> List[str]:
    """Lines of ``block`` not already in ``window``, in block order."""
    seen = set(window)
    return [line for line in _ordered_unique(block) if line not in seen]


def reconstruct(raw_srt: str) -> str:
    """Turn raw SRT caption text into deduplicated prose.

    Args:
        raw_srt: Complete contents of an SRT subtitle file.

    Returns:
        The reconstructed transcript, trimmed, words separated by spaces.
    """
    parts: List[str] = []
    window: List[str] = []
    block: Dict[str, None] = {}

    for raw_line in raw_srt.splitlines():
        line = raw_line.strip()
        kind = classify_line(line)

        if kind is LineKind.TIMESTAMP:
            if block:
                merge = merge_window(window, block)
                if merge.flushed:
                    parts.append(" ".join(merge.flushed))
                    parts.append(" ")
                window = merge.window
                block = {}
        elif kind is LineKind.TEXT:
            block.setdefault(line, None)

    # Add the remaining lines
    if window:
        parts.append(" ".join(window))
        parts.append(" ")
        parts.append(" ".join(remaining_lines(window, block)))
    elif block:
        parts.append(" ".join(block))

    return "".join(parts).strip()
