from __future__ import annotations

from datetime import datetime, timezone

from response_scorer.models import CompletionResult, ParameterSet, TokenUsage

STRUCTURED_RESPONSE = """# Caching strategies

Caching keeps frequently used data close to the code that needs it. However, stale entries can cause subtle bugs. Therefore every cache needs an eviction policy.

- Time-based expiry removes entries after a fixed interval.
- Size-based eviction drops the least recently used entries first.
- Explicit invalidation clears entries when the source data changes.

In conclusion, pick the simplest policy that keeps data fresh enough for your users. Measure hit rates before tuning anything further."""

BULLET_PROMPT = """Explain how HTTP caching works.
- Describe the Cache-Control header
- Compare ETag and Last-Modified validation
- Provide one example response"""

FIXED_TIMESTAMP = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def distinct_words(count: int) -> list[str]:
    """Return count distinct alphabetic content words."""
    letters = "abcdefghijklmnopqrstuvwxyz"
    return [f"word{letters[i // 26]}{letters[i % 26]}" for i in range(count)]


class FakeCompletionBackend:
    """Returns canned texts in order and records the parameters it saw."""

    def __init__(self, texts: list[str]) -> None:
        self._texts = list(texts)
        self.calls: list[tuple[str, ParameterSet]] = []

    def complete(self, prompt: str, parameters: ParameterSet) -> CompletionResult:
        self.calls.append((prompt, parameters))
        index = len(self.calls) - 1
        return CompletionResult(
            id=f"resp-{index}",
            text=self._texts[index % len(self._texts)],
            model="fake-model",
            latency_ms=10 * (index + 1),
            usage=TokenUsage(prompt_tokens=5, completion_tokens=20, total_tokens=25),
        )
