from __future__ import annotations

import logging
import math
from typing import Mapping

from .config import MetricWeights, ScoringConfig
from .metrics import (
    coherence_score,
    length_score,
    readability_score,
    repetition_score,
    vocabulary_richness,
)
from .models import MetricDetails, ResponseMetrics
from .requirements import extract_requirements
from .textutils import clamp, clamp01, split_sentences, tokenize_words

logger = logging.getLogger(__name__)

WeightOverrides = Mapping[str, float | None] | MetricWeights


def resolve_weights(
    weights: WeightOverrides | None, base: MetricWeights | None = None
) -> MetricWeights:
    """Merge caller overrides over the base weights (defaults when omitted)."""
    base = base or MetricWeights()
    if isinstance(weights, MetricWeights):
        return weights
    return base.merged(weights)


def weighted_sum(
    coherence: float,
    length: float,
    vocab: float,
    repetition: float,
    readability: float,
    weights: MetricWeights,
) -> float:
    return (
        coherence * weights.coherence
        + length * weights.length
        + vocab * weights.vocab
        + repetition * weights.repetition
        + readability * weights.readability
    )


def overall_score(total: float) -> int:
    """Scale a weighted sum to an integer in [0, 100], rounding halves up."""
    return int(clamp(math.floor(total * 100 + 0.5), 0, 100))


def score_response(
    response: str,
    prompt: str,
    weights: WeightOverrides | None = None,
    config: ScoringConfig | None = None,
) -> ResponseMetrics:
    """
    Score a generated response against the prompt that produced it.

    Every call recomputes tokens, sentences and requirements from scratch,
    so the result depends only on the arguments.
    """
    config = config or ScoringConfig()
    resolved = resolve_weights(weights, config.weights)

    requirements = extract_requirements(prompt)
    coherence = coherence_score(response)
    length = length_score(response, len(requirements), config.length)
    vocab = vocabulary_richness(response)
    repetition = repetition_score(response)
    readability = readability_score(response, config.readability)

    total = weighted_sum(
        coherence, length, vocab, repetition, readability.score, resolved
    )
    metrics = ResponseMetrics(
        coherence_score=clamp01(coherence),
        length_score=clamp01(length),
        vocabulary_richness_score=clamp01(vocab),
        repetition_penalty=clamp01(repetition),
        readability_score=clamp01(readability.score),
        overall_score=overall_score(total),
        details=MetricDetails(
            sentence_count=len(split_sentences(response)),
            word_count=len(tokenize_words(response)),
            requirements=requirements,
            fk_grade=readability.grade,
        ),
    )
    logger.debug(
        "Scored response words=%s requirements=%s overall=%s",
        metrics.details.word_count,
        len(requirements),
        metrics.overall_score,
    )
    return metrics
