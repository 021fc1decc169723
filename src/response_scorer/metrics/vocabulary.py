from __future__ import annotations

import math
from collections import Counter

from ..textutils import clamp01, content_words, tokenize_words

# Score that very small samples are pulled toward.
NEUTRAL_BASELINE = 0.2


def vocabulary_richness(text: str) -> float:
    """Lexical diversity of content words from type-token ratio and hapax share."""
    words = content_words(tokenize_words(text))
    total = len(words)
    if total == 0:
        return 0.0

    counts = Counter(words)
    unique = len(counts)
    ttr = unique / total
    hapax = sum(1 for count in counts.values() if count == 1) / max(1, unique)

    length_damp = min(1.0, math.log10(total + 10) / 2)
    base = clamp01(0.7 * ttr + 0.3 * hapax)
    return clamp01(base * length_damp + NEUTRAL_BASELINE * (1 - length_damp))
