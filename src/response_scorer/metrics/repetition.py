from __future__ import annotations

from collections import Counter
from typing import Sequence

from ..textutils import tokenize_words

MIN_TOKENS = 6


def count_bigram_repeats(tokens: Sequence[str]) -> int:
    """Number of adjacent bigram occurrences beyond the first of each kind."""
    bigrams = Counter(zip(tokens, tokens[1:]))
    return sum(count - 1 for count in bigrams.values() if count > 1)


def repetition_score(text: str) -> float:
    """1.0 for no repeated bigrams, falling to 0.0 as repeats pile up."""
    tokens = tokenize_words(text)
    if len(tokens) < MIN_TOKENS:
        return 1.0
    repeats = count_bigram_repeats(tokens)
    penalty = min(1.0, repeats / max(1, len(tokens) / 12))
    return 1 - penalty
