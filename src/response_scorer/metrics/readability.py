from __future__ import annotations

import re

from ..config import ReadabilitySettings
from ..models import ReadabilityResult
from ..textutils import clamp01, split_sentences, tokenize_words

NON_LETTER_RE = re.compile(r"[^a-z]")
TRAILING_E_RE = re.compile(r"e$")
VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")


def syllable_count(word: str) -> int:
    """Approximate syllables as vowel groups, ignoring a silent trailing e."""
    letters = NON_LETTER_RE.sub("", word.lower())
    if not letters:
        return 0
    groups = VOWEL_GROUP_RE.findall(TRAILING_E_RE.sub("", letters))
    return max(1, len(groups))


def fk_grade(text: str) -> float:
    """Flesch-Kincaid grade level."""
    tokens = tokenize_words(text)
    words = len(tokens) or 1
    sentences = len(split_sentences(text)) or 1
    syllables = sum(syllable_count(token) for token in tokens)
    return 0.39 * (words / sentences) + 11.8 * (syllables / words) - 15.59


def readability_score(
    text: str, settings: ReadabilitySettings | None = None
) -> ReadabilityResult:
    settings = settings or ReadabilitySettings()
    grade = fk_grade(text)
    distance = abs(grade - settings.target_grade) / settings.span
    return ReadabilityResult(score=clamp01(1 - min(1.0, distance)), grade=grade)
