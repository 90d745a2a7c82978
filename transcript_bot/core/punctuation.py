"""Heuristic for deciding whether caption prose lacks punctuation.

WHY: Auto-generated captions usually arrive as one long unpunctuated
stream, while manually authored tracks are already punctuated. Sending
well-punctuated text through the correction service wastes requests.

HOW: Counts ASCII letters/digits and ASCII punctuation characters and
compares their ratio with a threshold. A high ratio means few
punctuation marks per character of text.

RULES:
- Only alphanumerics → inf; only punctuation → 0.0; neither → nan
- needs_punctuation() is True only for ratio > threshold (nan never is)
"""

from __future__ import annotations

import math
import string

_ALPHANUMERIC = frozenset(string.ascii_letters + string.digits)
_PUNCTUATION = frozenset(string.punctuation)


def alphanumeric_ratio(text: str) -> float:
    """Ratio of alphanumeric to punctuation characters in text."""
    alnum = sum(1 for ch in text if ch in _ALPHANUMERIC)
    punct = sum(1 for ch in text if ch in _PUNCTUATION)
    if punct == 0:
        return math.inf if alnum else math.nan
    return alnum / punct


def needs_punctuation(text: str, threshold: float) -> bool:
    ratio = alphanumeric_ratio(text)
    return not math.isnan(ratio) and ratio > threshold
