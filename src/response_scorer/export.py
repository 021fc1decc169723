from __future__ import annotations

import csv
import io
import json
from typing import Any, List, TypedDict

from .experiment import rank_responses
from .models import ExperimentResponse, ExperimentSet

CSV_HEADERS = [
    "responseId",
    "prompt",
    "response",
    "temperature",
    "topP",
    "maxTokens",
    "timestamp",
    "latencyMs",
    "promptTokens",
    "completionTokens",
    "totalTokens",
    "metrics_json",
]


class MetricsSummaryRow(TypedDict):
    response_id: str
    temperature: float
    top_p: float
    overall: str
    coherence: str
    length: str
    vocabulary: str
    readability: str
    repetition: str
    fk_grade: str


def format_percent(value: float) -> str:
    """Render a [0, 1] score as a percentage string with one decimal."""
    pct = max(0.0, min(100.0, value * 100))
    return f"{pct:.1f}%"


def experiment_to_json(experiment: ExperimentSet) -> str:
    return json.dumps({"set": experiment.to_dict()}, indent=2)


def experiment_from_json(payload: str) -> ExperimentSet:
    """Parse the output of experiment_to_json (or a bare experiment mapping)."""
    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError("Experiment JSON must be an object.")
    return ExperimentSet.from_dict(data.get("set", data))


def experiment_to_csv(experiment: ExperimentSet) -> str:
    """One row per response; the full metrics payload goes in the last column as JSON."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for response in experiment.responses:
        writer.writerow(_csv_row(response))
    return buffer.getvalue()


def metrics_summary_rows(experiment: ExperimentSet) -> List[MetricsSummaryRow]:
    """Percentage view of each response's metrics, best overall score first."""
    rows: List[MetricsSummaryRow] = []
    for response in rank_responses(experiment):
        metrics = response.metrics
        rows.append(
            {
                "response_id": response.id,
                "temperature": response.parameters.temperature,
                "top_p": response.parameters.top_p,
                "overall": format_percent(metrics.overall_score / 100),
                "coherence": format_percent(metrics.coherence_score),
                "length": format_percent(metrics.length_score),
                "vocabulary": format_percent(metrics.vocabulary_richness_score),
                "readability": format_percent(metrics.readability_score),
                "repetition": format_percent(metrics.repetition_penalty),
                "fk_grade": f"{metrics.details.fk_grade:.1f}",
            }
        )
    return rows


def _csv_row(response: ExperimentResponse) -> List[Any]:
    usage = response.usage
    return [
        response.id,
        response.prompt,
        response.response,
        response.parameters.temperature,
        response.parameters.top_p,
        response.parameters.max_tokens,
        response.timestamp.isoformat(),
        _blank_if_none(response.latency_ms),
        _blank_if_none(usage.prompt_tokens),
        _blank_if_none(usage.completion_tokens),
        _blank_if_none(usage.total_tokens),
        json.dumps(response.metrics.to_dict()),
    ]


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value
