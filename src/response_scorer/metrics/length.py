from __future__ import annotations

import math

from ..config import LengthFitSettings
from ..textutils import clamp, clamp01, split_paragraphs, split_sentences, tokenize_words

# Responses shorter than this are scaled down linearly.
SHORT_RESPONSE_WORDS = 40


def target_length(requirement_count: int, settings: LengthFitSettings) -> int:
    """Expected response length in words for a prompt with this many requirements."""
    count = min(settings.requirement_cap, requirement_count or 1)
    raw = settings.base_words + settings.words_per_requirement * count
    return int(clamp(raw, settings.min_target, settings.max_target))


def length_penalty(words: int, target: int) -> float:
    """Relative distance outside the [0.5x, 1.8x] hard band around the target."""
    hard_min = math.floor(target * 0.5)
    hard_max = math.ceil(target * 1.8)
    if words < hard_min:
        return (hard_min - words) / hard_min
    if words > hard_max:
        return (words - hard_max) / hard_max
    return 0.0


def length_score(
    text: str,
    requirement_count: int,
    settings: LengthFitSettings | None = None,
) -> float:
    """
    Score how well the response length fits what the prompt asks for.

    A Gaussian centred on the target length, whose width grows with the
    target, is damped for very short answers, penalized outside a hard band,
    and nudged by sentences-per-paragraph structure.
    """
    settings = settings or LengthFitSettings()
    words = len(tokenize_words(text))
    if words == 0:
        return 0.0

    target = target_length(requirement_count, settings)
    ratio = words / target
    sigma = min(0.9, 0.28 + 0.0004 * target)
    score = math.exp(-((ratio - 1) ** 2) / (2 * sigma * sigma))

    if words < SHORT_RESPONSE_WORDS:
        score *= words / SHORT_RESPONSE_WORDS

    penalty = length_penalty(words, target)

    sentence_count = len(split_sentences(text))
    paragraph_count = len(split_paragraphs(text)) or 1
    structure = clamp01(sentence_count / paragraph_count / 6)

    return clamp01(score * (1 - 0.6 * penalty) * (0.9 + 0.1 * structure))
