"""Heuristic keyword extraction.

Picks up to three frequent noun-like words from a text without any NLP
dependency. Best effort only: the result is never validated and the
function never raises.
"""

import re
from collections import Counter

from textlens.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_KEYWORD_LIMIT = 3
MIN_WORD_LENGTH = 3

STOPWORDS: frozenset[str] = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
        "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
        "to", "was", "will", "with", "this", "but", "they", "have", "had",
        "what", "when", "where", "who", "which", "why", "how", "all", "each",
        "every", "both", "few", "more", "most", "other", "some", "such", "or",
    }
)

NOUN_SUFFIXES: tuple[str, ...] = (
    "tion", "ness", "ment", "ance", "ence", "ship", "ty", "ity",
)

_NON_WORD = re.compile(r"[^\w]")
_PUNCTUATION = re.compile(r"[^\w\s]")


def is_likely_noun(word: str) -> bool:
    """Guess whether ``word`` (original casing, punctuation stripped) is a noun."""
    # Anything not lowercase at the start counts, digits included
    if len(word) > 1 and word[0] == word[0].upper():
        return True
    return word.lower().endswith(NOUN_SUFFIXES)


def extract_keywords(text: str, limit: int = DEFAULT_KEYWORD_LIMIT) -> list[str]:
    """Return up to ``limit`` of the most frequent noun-like words.

    Words shorter than three characters and stopwords are ignored. When no
    word looks like a noun, all remaining content words are ranked instead.
    Ties keep first-appearance order.
    """
    nouns: list[str] = []
    content_words: list[str] = []

    for token in text.split():
        stripped = _NON_WORD.sub("", token)
        word = stripped.lower()
        if len(word) < MIN_WORD_LENGTH or word in STOPWORDS:
            continue
        if is_likely_noun(stripped):
            nouns.append(word)

    # Punctuation separates words here, so "well-known" yields "well" and "known"
    for word in _PUNCTUATION.sub(" ", text.lower()).split():
        if len(word) >= MIN_WORD_LENGTH and word not in STOPWORDS:
            content_words.append(word)

    ranked = Counter(nouns or content_words).most_common(limit)
    keywords = [word for word, _ in ranked]

    logger.debug("Keywords extracted", count=len(keywords), keywords=keywords)
    return keywords
