"""
response_scorer package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .config import (
    MetricWeights,
    ScoringConfig,
    config_from_dict,
    config_from_yaml,
    load_config,
)
from .experiment import build_parameter_sweep, rank_responses, run_experiment
from .models import MetricDetails, ResponseMetrics
from .requirements import extract_requirements
from .scoring import score_response

__all__ = [
    "MetricWeights",
    "ScoringConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "MetricDetails",
    "ResponseMetrics",
    "extract_requirements",
    "score_response",
    "build_parameter_sweep",
    "rank_responses",
    "run_experiment",
]

__version__ = "0.1.0"
