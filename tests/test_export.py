import csv
import io
import json

from response_scorer.experiment import build_parameter_sweep, run_experiment
from response_scorer.export import (
    CSV_HEADERS,
    experiment_from_json,
    experiment_to_csv,
    experiment_to_json,
    format_percent,
    metrics_summary_rows,
)
from response_scorer.models import TokenUsage
from tests.utils import BULLET_PROMPT, STRUCTURED_RESPONSE, FakeCompletionBackend


def _experiment():
    backend = FakeCompletionBackend([STRUCTURED_RESPONSE, 'She said "hi",\nthen left.'])
    sweep = build_parameter_sweep((0.3, 0.7), (0.3, 0.7), 100, 2)
    return run_experiment(BULLET_PROMPT, sweep, backend)


def test_format_percent():
    assert format_percent(0.7333) == "73.3%"
    assert format_percent(1.5) == "100.0%"
    assert format_percent(-0.2) == "0.0%"


def test_experiment_to_csv_rows():
    """Quotes, commas and newlines survive; metrics land as JSON in the last column."""
    experiment = _experiment()
    experiment.responses[1].usage = TokenUsage()
    experiment.responses[1].latency_ms = None

    rows = list(csv.reader(io.StringIO(experiment_to_csv(experiment))))

    assert rows[0] == CSV_HEADERS
    assert len(rows) == 1 + len(experiment.responses)
    second = rows[2]
    assert second[0] == "resp-1"
    assert second[2] == 'She said "hi",\nthen left.'
    assert second[7:11] == ["", "", "", ""]
    metrics = json.loads(second[-1])
    assert metrics["overallScore"] == experiment.responses[1].metrics.overall_score


def test_experiment_json_round_trip():
    experiment = _experiment()
    payload = experiment_to_json(experiment)
    assert json.loads(payload)["set"]["responses"][0]["topP"] == experiment.responses[0].parameters.top_p
    assert experiment_from_json(payload) == experiment


def test_metrics_summary_rows_are_percentages():
    experiment = _experiment()
    rows = metrics_summary_rows(experiment)
    assert len(rows) == len(experiment.responses)
    best = max(experiment.responses, key=lambda r: r.metrics.overall_score)
    assert rows[0]["response_id"] == best.id
    assert rows[0]["overall"] == f"{float(best.metrics.overall_score):.1f}%"
    assert all(row["coherence"].endswith("%") for row in rows)
