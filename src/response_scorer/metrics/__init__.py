from __future__ import annotations

from .coherence import coherence_score
from .length import length_score, target_length
from .readability import fk_grade, readability_score, syllable_count
from .repetition import count_bigram_repeats, repetition_score
from .vocabulary import vocabulary_richness

__all__ = [
    "coherence_score",
    "length_score",
    "target_length",
    "fk_grade",
    "readability_score",
    "syllable_count",
    "count_bigram_repeats",
    "repetition_score",
    "vocabulary_richness",
]
