import pytest

from response_scorer.config import MetricWeights, ScoringConfig
from response_scorer.experiment import (
    build_parameter_sweep,
    rank_responses,
    run_experiment,
)
from response_scorer.scoring import score_response
from tests.utils import BULLET_PROMPT, STRUCTURED_RESPONSE, FakeCompletionBackend


def test_build_parameter_sweep_two_legs():
    """Temperature sweeps at max top_p, then top_p sweeps at max temperature."""
    sweep = build_parameter_sweep((0.3, 0.7), (0.3, 0.7), 100, 3)
    assert len(sweep) == 6
    assert [p.temperature for p in sweep[:3]] == pytest.approx([0.3, 0.5, 0.7])
    assert all(p.top_p == pytest.approx(0.7) for p in sweep[:3])
    assert all(p.temperature == pytest.approx(0.7) for p in sweep[3:])
    assert [p.top_p for p in sweep[3:]] == pytest.approx([0.3, 0.5, 0.7])
    assert all(p.max_tokens == 100 for p in sweep)


def test_build_parameter_sweep_clamps_inputs():
    assert len(build_parameter_sweep((0.0, 1.0), (0.5, 1.0), 50, 1)) == 4
    assert len(build_parameter_sweep((0.0, 1.0), (0.5, 1.0), 50, 50)) == 20
    assert build_parameter_sweep((0.0, 1.0), (0.5, 1.0), 0, 2)[0].max_tokens == 1


def test_run_experiment_scores_every_response():
    backend = FakeCompletionBackend([STRUCTURED_RESPONSE, "Too short."])
    sweep = build_parameter_sweep((0.2, 0.8), (0.5, 0.9), 64, 2)

    experiment = run_experiment(BULLET_PROMPT, sweep, backend)

    assert len(experiment.responses) == len(sweep) == len(backend.calls)
    assert experiment.prompt == BULLET_PROMPT
    assert experiment.parameter_sets == sweep
    assert experiment.weights == MetricWeights().to_dict()
    first = experiment.responses[0]
    assert first.id == "resp-0"
    assert first.parameters == sweep[0]
    assert first.latency_ms == 10
    assert first.usage.total_tokens == 25
    assert first.metrics == score_response(STRUCTURED_RESPONSE, BULLET_PROMPT)


def test_run_experiment_applies_weight_overrides():
    backend = FakeCompletionBackend([""])
    sweep = build_parameter_sweep((0.2, 0.8), (0.5, 0.9), 64, 2)
    config = ScoringConfig()
    config.completion.model = "configured-model"

    experiment = run_experiment(
        "Explain recursion.", sweep, backend, config, {"coherence": 0.0}
    )

    assert experiment.model == "configured-model"
    assert experiment.weights["coherence"] == 0.0
    assert all(r.metrics.overall_score == 10 for r in experiment.responses)


def test_rank_responses_orders_best_first():
    backend = FakeCompletionBackend(["", STRUCTURED_RESPONSE, ""])
    sweep = build_parameter_sweep((0.2, 0.8), (0.5, 0.9), 64, 2)[:3]
    experiment = run_experiment(BULLET_PROMPT, sweep, backend)

    ranked = rank_responses(experiment)

    assert ranked[0].id == "resp-1"
    assert [r.id for r in ranked[1:]] == ["resp-0", "resp-2"]
    assert [r.id for r in experiment.responses] == ["resp-0", "resp-1", "resp-2"]
