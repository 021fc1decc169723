from __future__ import annotations

import re
from typing import Iterable, List

NON_WORD_RE = re.compile(r"[^a-z0-9\s-]")
WHITESPACE_RE = re.compile(r"\s+")
SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+|\n+")
PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")

HEADING_RE = re.compile(r"(?:^|\n)#{1,6}\s+\S|(?:^|\n)\d+\.\s+\S|(?:^|\n)[-•*]\s+\S")
LIST_LINE_RE = re.compile(r"(?:^|\n)(?:[-•*]|\d+\.)\s+\S")

# Paragraphs longer than this with no line break read as a wall of text.
WALL_OF_TEXT_CHARS = 600

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "of", "to", "in", "for", "on", "with",
        "is", "are", "be", "as", "by", "that", "this", "it", "you", "your",
        "we", "our", "at", "from", "how", "what", "why", "when", "where",
        "which", "but", "if", "then", "so", "than", "can", "could", "should",
        "would", "about", "into", "over", "under", "more", "most", "some",
        "any", "such", "no", "not", "only", "own", "same", "too", "very",
    }
)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into the closed interval [low, high]."""
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def tokenize_words(text: str) -> List[str]:
    """Lowercase text and split it into word tokens, keeping hyphenated compounds."""
    cleaned = NON_WORD_RE.sub(" ", text.lower())
    return [token for token in WHITESPACE_RE.split(cleaned) if token]


def split_sentences(text: str) -> List[str]:
    """
    Split text on sentence terminators followed by whitespace, or on newlines.
    Text without any boundary degrades to a single sentence; blank text to none.
    """
    sentences = [part.strip() for part in SENTENCE_SPLIT_RE.split(text)]
    sentences = [sentence for sentence in sentences if sentence]
    if sentences:
        return sentences
    stripped = text.strip()
    return [stripped] if stripped else []


def split_paragraphs(text: str) -> List[str]:
    """Split text on blank-line runs, dropping empty segments."""
    return [paragraph for paragraph in PARAGRAPH_SPLIT_RE.split(text) if paragraph]


def content_words(tokens: Iterable[str]) -> List[str]:
    """Filter out stopwords and tokens of two characters or fewer."""
    return [token for token in tokens if token not in STOPWORDS and len(token) > 2]


def has_headings(text: str) -> bool:
    """True when any line opens with a markdown heading, numbered item or bullet."""
    return HEADING_RE.search(text) is not None


def count_list_lines(text: str) -> int:
    return len(LIST_LINE_RE.findall(text))


def is_wall_of_text(paragraph: str) -> bool:
    return len(paragraph) > WALL_OF_TEXT_CHARS and "\n" not in paragraph
