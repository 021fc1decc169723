from __future__ import annotations

import re
from typing import List, Sequence

LINE_SPLIT_RE = re.compile(r"\r?\n")
BULLET_RE = re.compile(r"^[-*•]\s+")
NUMBERED_RE = re.compile(r"^\d+\.\s+")
LIST_MARKER_RE = re.compile(r"^(?:[-*•]|\d+\.)\s+")

IMPERATIVE_VERBS = (
    "write",
    "create",
    "explain",
    "compare",
    "list",
    "design",
    "implement",
    "show",
    "build",
    "summarize",
    "analyze",
    "evaluate",
    "provide",
    "outline",
    "generate",
)
IMPERATIVE_RE = re.compile(r"^(?:" + "|".join(IMPERATIVE_VERBS) + r")\b", re.IGNORECASE)


def starts_with_list_marker(line: str) -> bool:
    """True for bullet (``-``, ``*``, ``•``) or numbered (``1.``) list items."""
    return BULLET_RE.match(line) is not None or NUMBERED_RE.match(line) is not None


def starts_with_imperative(line: str) -> bool:
    return IMPERATIVE_RE.match(line) is not None


def strip_list_marker(line: str) -> str:
    return LIST_MARKER_RE.sub("", line, count=1)


def extract_requirements(prompt: str) -> List[str]:
    """
    Break a prompt into discrete requirements.

    List items are recorded without their marker, imperative lines are kept
    whole, and everything else is ignored. When nothing matches, the whole
    prompt is the single requirement; a blank prompt has none.
    """
    if not prompt.strip():
        return []

    lines = [line.strip() for line in LINE_SPLIT_RE.split(prompt)]
    requirements: List[str] = []
    for line in lines:
        if not line:
            continue
        if starts_with_list_marker(line):
            requirements.append(strip_list_marker(line))
        elif starts_with_imperative(line):
            requirements.append(line)

    return requirements or [prompt]


def requirement_count(requirements: Sequence[str], cap: int) -> int:
    """Number of requirements used for sizing, at least 1 and at most cap."""
    return min(cap, len(requirements) or 1)
