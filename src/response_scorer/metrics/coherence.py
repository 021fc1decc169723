from __future__ import annotations

import statistics
from typing import AbstractSet, List

from ..textutils import (
    clamp01,
    content_words,
    count_list_lines,
    has_headings,
    is_wall_of_text,
    split_paragraphs,
    split_sentences,
    tokenize_words,
)

# "in" and "conclusion" are matched as separate tokens, so any sentence
# containing "in" counts as a transition.
TRANSITION_WORDS = frozenset(
    {
        "however",
        "therefore",
        "thus",
        "consequently",
        "furthermore",
        "moreover",
        "meanwhile",
        "nevertheless",
        "alternatively",
        "additionally",
        "similarly",
        "conversely",
        "instead",
        "accordingly",
        "finally",
        "first",
        "second",
        "third",
        "overall",
        "in",
        "conclusion",
        "next",
    }
)

WALL_OF_TEXT_PENALTY = 0.1
IDEAL_SENTENCES_PER_PARAGRAPH = 4


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    union = len(a | b) or 1
    return len(a & b) / union


def has_transition(sentence: str) -> bool:
    return any(token in TRANSITION_WORDS for token in tokenize_words(sentence))


def adjacent_similarities(sentences: List[str]) -> List[float]:
    """Jaccard similarity of content words for each adjacent sentence pair."""
    word_sets = [set(content_words(tokenize_words(s))) for s in sentences]
    return [jaccard(a, b) for a, b in zip(word_sets, word_sets[1:])]


def structure_bonus(text: str, sentence_count: int, paragraph_count: int) -> float:
    """Reward headings, list items and paragraphs of about four sentences."""
    avg_sent_per_para = sentence_count / max(1, paragraph_count)
    bonus = 0.12 if has_headings(text) else 0.0
    bonus += min(0.12, count_list_lines(text) * 0.02)
    bonus += (
        clamp01(1 - abs(avg_sent_per_para - IDEAL_SENTENCES_PER_PARAGRAPH) / 6) * 0.1
    )
    return bonus


def coherence_score(text: str) -> float:
    """
    Estimate how well consecutive sentences hang together.

    Combines lexical overlap between neighbouring sentences (and how steady
    that overlap is), the share of sentences carrying a transition word, and
    a bonus for visible structure. Single-sentence text gets a flat baseline.
    """
    sentences = split_sentences(text)
    if len(sentences) <= 1:
        return 0.6 if len(tokenize_words(text)) > 40 else 0.5

    sims = adjacent_similarities(sentences)
    mean = statistics.fmean(sims)
    variance = statistics.pvariance(sims, mu=mean)
    stability = 1 - min(1.0, variance * 3)

    paragraphs = split_paragraphs(text)
    para_penalty = (
        WALL_OF_TEXT_PENALTY if any(is_wall_of_text(p) for p in paragraphs) else 0.0
    )

    transitions = sum(1 for sentence in sentences if has_transition(sentence))
    trans_score = min(1.0, transitions / max(1, len(sentences) - 1))

    cohesion = clamp01(
        0.6 * mean
        + 0.2 * stability
        + 0.1 * trans_score
        + structure_bonus(text, len(sentences), len(paragraphs))
    )
    return clamp01(cohesion - para_penalty)
