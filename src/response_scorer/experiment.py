from __future__ import annotations

import logging
import math
import uuid
from typing import List, Protocol, Sequence, Tuple

from .config import ScoringConfig
from .models import (
    CompletionResult,
    ExperimentResponse,
    ExperimentSet,
    ParameterSet,
)
from .scoring import WeightOverrides, resolve_weights, score_response

logger = logging.getLogger(__name__)

MIN_SWEEP_STEPS = 2
MAX_SWEEP_STEPS = 10


class CompletionBackend(Protocol):
    """Anything that turns a prompt plus sampling parameters into text."""

    def complete(self, prompt: str, parameters: ParameterSet) -> CompletionResult:
        ...


def build_parameter_sweep(
    temperature_range: Tuple[float, float],
    top_p_range: Tuple[float, float],
    max_tokens: int,
    steps: int = 3,
) -> List[ParameterSet]:
    """
    Build a two-leg sweep: temperature across its range with top_p held at its
    maximum, then top_p across its range with temperature held at its maximum.
    """
    t_min, t_max = temperature_range
    p_min, p_max = top_p_range
    safe_steps = max(MIN_SWEEP_STEPS, min(MAX_SWEEP_STEPS, int(steps or MIN_SWEEP_STEPS)))
    safe_max_tokens = max(1, math.floor(max_tokens or 1))
    fractions = [i / (safe_steps - 1) for i in range(safe_steps)]

    sweep: List[ParameterSet] = []
    for frac in fractions:
        sweep.append(
            ParameterSet(
                temperature=round(t_min + (t_max - t_min) * frac, 2),
                top_p=float(p_max),
                max_tokens=safe_max_tokens,
            )
        )
    for frac in fractions:
        sweep.append(
            ParameterSet(
                temperature=round(float(t_max), 2),
                top_p=p_min + (p_max - p_min) * frac,
                max_tokens=safe_max_tokens,
            )
        )
    return sweep


def run_experiment(
    prompt: str,
    parameter_sets: Sequence[ParameterSet],
    client: CompletionBackend,
    config: ScoringConfig | None = None,
    weights: WeightOverrides | None = None,
) -> ExperimentSet:
    """Generate one response per parameter set, scoring each as it arrives."""
    config = config or ScoringConfig()
    resolved = resolve_weights(weights, config.weights)
    experiment = ExperimentSet(
        id=uuid.uuid4().hex,
        prompt=prompt,
        model=config.completion.model,
        weights=resolved.to_dict(),
        parameter_sets=list(parameter_sets),
    )

    total = len(parameter_sets)
    for index, parameters in enumerate(parameter_sets, start=1):
        logger.info(
            "Generating %s/%s temperature=%s top_p=%s max_tokens=%s",
            index,
            total,
            parameters.temperature,
            parameters.top_p,
            parameters.max_tokens,
        )
        completion = client.complete(prompt, parameters)
        metrics = score_response(completion.text, prompt, resolved, config)
        experiment.responses.append(
            ExperimentResponse(
                id=completion.id,
                prompt=prompt,
                response=completion.text,
                parameters=parameters,
                metrics=metrics,
                model=completion.model,
                latency_ms=completion.latency_ms,
                usage=completion.usage,
            )
        )

    logger.info("Experiment %s finished with %s responses", experiment.id, total)
    return experiment


def rank_responses(experiment: ExperimentSet) -> List[ExperimentResponse]:
    """Responses ordered by overall score, best first; ties keep sweep order."""
    return sorted(
        experiment.responses,
        key=lambda response: response.metrics.overall_score,
        reverse=True,
    )
