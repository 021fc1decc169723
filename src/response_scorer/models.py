from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping


@dataclass(slots=True)
class ReadabilityResult:
    """Readability sub-score plus the raw (unclamped) Flesch-Kincaid grade."""

    score: float
    grade: float


@dataclass(slots=True)
class MetricDetails:
    """Diagnostics attached to every scored response."""

    sentence_count: int
    word_count: int
    requirements: List[str]
    fk_grade: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "sentenceCount": self.sentence_count,
            "wordCount": self.word_count,
            "requirements": list(self.requirements),
            "fkGrade": self.fk_grade,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MetricDetails":
        return cls(
            sentence_count=int(data.get("sentenceCount", 0)),
            word_count=int(data.get("wordCount", 0)),
            requirements=list(data.get("requirements", [])),
            fk_grade=float(data.get("fkGrade", 0.0)),
        )


@dataclass(slots=True)
class ResponseMetrics:
    """Five sub-scores in [0, 1], the composite score in [0, 100] and diagnostics."""

    coherence_score: float
    length_score: float
    vocabulary_richness_score: float
    repetition_penalty: float
    readability_score: float
    overall_score: int
    details: MetricDetails

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase keys stored alongside responses."""
        return {
            "coherenceScore": self.coherence_score,
            "lengthScore": self.length_score,
            "vocabularyRichnessScore": self.vocabulary_richness_score,
            "repetitionPenalty": self.repetition_penalty,
            "readabilityScore": self.readability_score,
            "overallScore": self.overall_score,
            "details": self.details.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResponseMetrics":
        return cls(
            coherence_score=float(data["coherenceScore"]),
            length_score=float(data["lengthScore"]),
            vocabulary_richness_score=float(data["vocabularyRichnessScore"]),
            repetition_penalty=float(data["repetitionPenalty"]),
            readability_score=float(data["readabilityScore"]),
            overall_score=int(data["overallScore"]),
            details=MetricDetails.from_dict(data.get("details") or {}),
        )


@dataclass(slots=True)
class ParameterSet:
    """Sampling parameters for a single generation call."""

    temperature: float
    top_p: float
    max_tokens: int
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    stop: List[str] | None = None
    seed: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "topP": self.top_p,
            "maxTokens": self.max_tokens,
            "frequencyPenalty": self.frequency_penalty,
            "presencePenalty": self.presence_penalty,
            "stop": self.stop,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParameterSet":
        return cls(
            temperature=float(data["temperature"]),
            top_p=float(data["topP"]),
            max_tokens=int(data["maxTokens"]),
            frequency_penalty=data.get("frequencyPenalty"),
            presence_penalty=data.get("presencePenalty"),
            stop=data.get("stop"),
            seed=data.get("seed"),
        )


@dataclass(slots=True)
class TokenUsage:
    """Token accounting reported by the completion endpoint, when available."""

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None

    def to_dict(self) -> dict[str, int | None]:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "TokenUsage":
        data = data or {}
        return cls(
            prompt_tokens=data.get("promptTokens"),
            completion_tokens=data.get("completionTokens"),
            total_tokens=data.get("totalTokens"),
        )


@dataclass(slots=True)
class CompletionResult:
    """Text returned by one chat-completion call."""

    id: str
    text: str
    model: str
    latency_ms: int
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(slots=True)
class ExperimentResponse:
    """A generated response, the parameters that produced it, and its metrics."""

    id: str
    prompt: str
    response: str
    parameters: ParameterSet
    metrics: ResponseMetrics
    model: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    latency_ms: int | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "prompt": self.prompt,
            "response": self.response,
        }
        payload.update(self.parameters.to_dict())
        payload.update(
            {
                "model": self.model,
                "timestamp": self.timestamp.isoformat(),
                "latencyMs": self.latency_ms,
                "usage": self.usage.to_dict(),
                "metrics": self.metrics.to_dict(),
            }
        )
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExperimentResponse":
        return cls(
            id=str(data["id"]),
            prompt=data.get("prompt", ""),
            response=data.get("response", ""),
            parameters=ParameterSet.from_dict(data),
            metrics=ResponseMetrics.from_dict(data["metrics"]),
            model=data.get("model"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            latency_ms=data.get("latencyMs"),
            usage=TokenUsage.from_dict(data.get("usage")),
        )


@dataclass(slots=True)
class ExperimentSet:
    """All responses generated for one prompt across a parameter sweep."""

    id: str
    prompt: str
    responses: List[ExperimentResponse] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    model: str | None = None
    weights: dict[str, float] | None = None
    parameter_sets: List[ParameterSet] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "timestamp": self.timestamp.isoformat(),
            "model": self.model,
            "weights": self.weights,
            "parameterSpace": {
                "parameterSets": [p.to_dict() for p in self.parameter_sets]
            },
            "responses": [r.to_dict() for r in self.responses],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExperimentSet":
        space = data.get("parameterSpace") or {}
        return cls(
            id=str(data["id"]),
            prompt=data.get("prompt", ""),
            responses=[ExperimentResponse.from_dict(r) for r in data.get("responses", [])],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            model=data.get("model"),
            weights=data.get("weights"),
            parameter_sets=[
                ParameterSet.from_dict(p) for p in space.get("parameterSets", [])
            ],
        )
