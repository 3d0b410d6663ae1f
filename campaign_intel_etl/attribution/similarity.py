"""Trigram similarity compatible with PostgreSQL's pg_trgm ``similarity()``."""

import re

_WORD_SPLIT = re.compile(r"[^0-9a-z]+")


def trigrams(value: str | None) -> set[str]:
    """
    Extract the pg_trgm trigram set of a string.

    Each alphanumeric word is lower-cased and padded with two spaces in front
    and one behind before being cut into overlapping three-character grams.

    Args:
        value: Input text (None and empty strings yield no trigrams)

    Returns:
        Set of trigrams
    """
    if not value:
        return set()

    grams: set[str] = set()
    for word in _WORD_SPLIT.split(value.lower()):
        if not word:
            continue
        padded = f"  {word} "
        grams.update(padded[i : i + 3] for i in range(len(padded) - 2))
    return grams


def trigram_similarity(left: str | None, right: str | None) -> float:
    """
    Jaccard similarity of two strings' trigram sets.

    Args:
        left: First string
        right: Second string

    Returns:
        Similarity in [0, 1]; 0.0 when either side has no trigrams
    """
    left_grams = trigrams(left)
    right_grams = trigrams(right)
    if not left_grams or not right_grams:
        return 0.0

    shared = len(left_grams & right_grams)
    return shared / len(left_grams | right_grams)
