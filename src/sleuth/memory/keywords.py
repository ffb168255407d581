"""Keyword extraction for memory relevance scoring.

Handles English and Russian text: lower-cased, anything that is not a
latin/cyrillic letter or digit becomes a separator, words of four or more
characters survive unless they are stop words.
"""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^a-zа-яё0-9\s]")

STOP_WORDS: frozenset[str] = frozenset({
    # English
    "that", "this", "with", "from", "have", "been", "will", "should",
    "could", "would", "must", "they", "their", "about", "which", "there",
    "were", "what", "when", "find", "need", "search", "look",
    # Russian
    "найти", "нужно", "искать", "поиск", "должен", "может", "также",
    "через", "более", "после", "перед",
})


def extract_keywords(text: str) -> frozenset[str]:
    """Return the normalized keyword set for ``text``."""
    words = _NON_WORD.sub(" ", text.lower()).split()
    return frozenset(w for w in words if len(w) > 3 and w not in STOP_WORDS)


def overlap(a: frozenset[str], b: frozenset[str]) -> int:
    """Number of keywords shared by two keyword sets."""
    return len(a & b)
