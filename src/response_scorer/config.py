from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Type, TypeVar

import yaml

T = TypeVar("T")


@dataclass(slots=True)
class MetricWeights:
    """Per-metric multipliers for the composite score. Not normalized."""

    coherence: float = 0.3
    length: float = 0.2
    vocab: float = 0.25
    repetition: float = 0.1
    readability: float = 0.15

    def merged(self, overrides: Mapping[str, float | None] | None) -> "MetricWeights":
        """Return a copy with overrides applied; unknown keys and None values are ignored."""
        if not overrides:
            return replace(self)
        allowed = {f.name for f in fields(MetricWeights)}
        updates = {
            key: float(value)
            for key, value in overrides.items()
            if key in allowed and value is not None
        }
        return replace(self, **updates)

    def to_dict(self) -> dict[str, float]:
        return dict(asdict(self))


@dataclass(slots=True)
class LengthFitSettings:
    """Target-length model for the length-fit metric."""

    base_words: int = 100
    words_per_requirement: int = 60
    min_target: int = 60
    max_target: int = 1200
    requirement_cap: int = 10


@dataclass(slots=True)
class ReadabilitySettings:
    """Flesch-Kincaid grade band that scores 1.0 at its center."""

    target_grade: float = 10.0
    span: float = 6.0


@dataclass(slots=True)
class CompletionSettings:
    """Configuration block for the OpenAI-compatible chat-completion client."""

    model: str = "llama-3.3-70b-versatile"
    base_url: str | None = "https://api.groq.com/openai/v1"
    api_key: str | None = None
    api_key_env: str = "GROQ_API_KEY"
    system_prompt: str | None = None
    request_timeout: float = 60.0
    max_retries: int = 3
    backoff_base: float = 0.4
    backoff_cap: float = 4.0
    jitter: float = 0.25


@dataclass(slots=True)
class ScoringConfig:
    """Configuration options for scoring and parameter sweeps."""

    weights: MetricWeights = field(default_factory=MetricWeights)
    length: LengthFitSettings = field(default_factory=LengthFitSettings)
    readability: ReadabilitySettings = field(default_factory=ReadabilitySettings)
    completion: CompletionSettings = field(default_factory=CompletionSettings)

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


_NESTED_BLOCKS: dict[str, type] = {
    "weights": MetricWeights,
    "length": LengthFitSettings,
    "readability": ReadabilitySettings,
    "completion": CompletionSettings,
}


def _build_block(cls: Type[T], data: Mapping[str, Any]) -> T:
    allowed = {f.name for f in fields(cls)}
    filtered = {key: data[key] for key in data if key in allowed}
    return cls(**filtered)


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    for name, cls in _NESTED_BLOCKS.items():
        if name not in data:
            continue
        value = data[name]
        if isinstance(value, cls):
            kwargs[name] = value
        elif isinstance(value, Mapping):
            kwargs[name] = _build_block(cls, value)
    return kwargs


def config_from_dict(data: Mapping[str, Any] | None) -> ScoringConfig:
    """Build a ScoringConfig from a dictionary-like input."""
    if data is None:
        return ScoringConfig()
    return ScoringConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> ScoringConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> ScoringConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return ScoringConfig()
    return config_from_yaml(path)
