from __future__ import annotations

import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import Dict, List

import typer
import yaml

from .config import CompletionSettings, MetricWeights, ScoringConfig, load_config
from .experiment import build_parameter_sweep, run_experiment
from .export import (
    experiment_from_json,
    experiment_to_csv,
    experiment_to_json,
    metrics_summary_rows,
)
from .llm import CompletionClient, CompletionError, resolve_api_key
from .scoring import score_response

app = typer.Typer(help="LLM response quality scorer CLI.", no_args_is_help=True)

EXPORT_FORMATS = ("json", "csv", "table")


@app.callback()
def configure(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)."
    ),
) -> None:
    """Score LLM responses and run sampling-parameter sweeps."""
    try:
        logging.basicConfig(
            level=log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            force=True,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


@app.command()
def score(
    response_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    prompt: str | None = typer.Option(None, "--prompt", "-p", help="Prompt text."),
    prompt_path: Path | None = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="File holding the prompt."
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    weight: List[str] | None = typer.Option(
        None,
        "--weight",
        "-w",
        help="Weight override as KEY=VALUE (repeatable), e.g. coherence=0.5.",
    ),
) -> None:
    """Score a single response file and print the metrics as JSON."""
    cfg = load_config(config)
    response_text = response_path.read_text(encoding="utf-8")
    prompt_text = _resolve_prompt(prompt, prompt_path, required=False)
    overrides = _parse_weight_overrides(weight or [])
    metrics = score_response(response_text, prompt_text, overrides, cfg)
    typer.echo(json.dumps(metrics.to_dict(), indent=2))


@app.command()
def sweep(
    output_path: Path = typer.Option(..., file_okay=False),
    prompt: str | None = typer.Option(None, "--prompt", "-p", help="Prompt text."),
    prompt_path: Path | None = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="File holding the prompt."
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    temperature_min: float = typer.Option(0.3, help="Lowest temperature in the sweep."),
    temperature_max: float = typer.Option(0.7, help="Highest temperature in the sweep."),
    top_p_min: float = typer.Option(0.3, help="Lowest top_p in the sweep."),
    top_p_max: float = typer.Option(0.7, help="Highest top_p in the sweep."),
    max_tokens: int = typer.Option(100, help="max_tokens for every call."),
    steps: int = typer.Option(3, help="Points per sweep leg (clamped to 2-10)."),
    model: str | None = typer.Option(None, "--model", help="Model identifier."),
    base_url: str | None = typer.Option(
        None, "--base-url", help="OpenAI-compatible base URL."
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", help="Explicit API key (prefer env vars)."
    ),
    api_key_env: str | None = typer.Option(
        None, "--api-key-env", help="Environment variable to read the API key from."
    ),
    system_prompt: str | None = typer.Option(
        None, "--system-prompt", help="Optional system message."
    ),
    weight: List[str] | None = typer.Option(
        None, "--weight", "-w", help="Weight override as KEY=VALUE (repeatable)."
    ),
) -> None:
    """Run a temperature/top_p sweep against the LLM and save scored results."""
    cfg = load_config(config)
    _apply_completion_overrides(
        cfg.completion, model, base_url, api_key, api_key_env, system_prompt
    )
    prompt_text = _resolve_prompt(prompt, prompt_path, required=True)
    overrides = _parse_weight_overrides(weight or [])
    parameter_sets = build_parameter_sweep(
        (temperature_min, temperature_max),
        (top_p_min, top_p_max),
        max_tokens,
        steps,
    )

    try:
        client = CompletionClient(cfg.completion, api_key=resolve_api_key(cfg.completion))
        experiment = run_experiment(prompt_text, parameter_sets, client, cfg, overrides)
    except CompletionError as exc:
        typer.echo(f"Sweep aborted: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except RuntimeError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    output_path.mkdir(parents=True, exist_ok=True)
    json_path = output_path / "experiment.json"
    csv_path = output_path / "experiment.csv"
    json_path.write_text(experiment_to_json(experiment), encoding="utf-8")
    csv_path.write_text(experiment_to_csv(experiment), encoding="utf-8")
    typer.echo(
        f"Scored {len(experiment.responses)} responses; wrote {json_path} and {csv_path}"
    )


@app.command()
def export(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    output_format: str = typer.Option(
        "table", "--format", "-f", help="One of: json, csv, table."
    ),
) -> None:
    """Re-export a saved experiment without recomputing any scores."""
    normalized = output_format.lower().strip()
    if normalized not in EXPORT_FORMATS:
        raise typer.BadParameter(
            f"Unsupported format '{output_format}'.", param_hint="--format"
        )
    try:
        experiment = experiment_from_json(input_path.read_text(encoding="utf-8"))
    except (ValueError, KeyError) as exc:
        raise typer.BadParameter(
            f"Not a saved experiment: {exc}", param_hint="--input-path"
        ) from exc

    if normalized == "json":
        typer.echo(experiment_to_json(experiment))
    elif normalized == "csv":
        typer.echo(experiment_to_csv(experiment), nl=False)
    else:
        rows = metrics_summary_rows(experiment)
        if not rows:
            typer.echo("No responses.")
            return
        typer.echo("\t".join(rows[0].keys()))
        for row in rows:
            typer.echo("\t".join(str(value) for value in row.values()))


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = ScoringConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


def _resolve_prompt(prompt: str | None, prompt_path: Path | None, *, required: bool) -> str:
    """Pick the prompt from --prompt or --prompt-path (not both)."""
    if prompt is not None and prompt_path is not None:
        raise typer.BadParameter("Use either --prompt or --prompt-path, not both.")
    if prompt_path is not None:
        text = prompt_path.read_text(encoding="utf-8")
    else:
        text = prompt or ""
    if required and not text.strip():
        raise typer.BadParameter("A non-empty prompt is required.", param_hint="--prompt")
    return text


def _parse_weight_overrides(values: List[str]) -> Dict[str, float]:
    """Turn KEY=VALUE strings into a weight override mapping."""
    allowed = {f.name for f in fields(MetricWeights)}
    overrides: Dict[str, float] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        key = key.strip().lower()
        if not sep or key not in allowed:
            raise typer.BadParameter(
                f"Expected KEY=VALUE with KEY in {sorted(allowed)}, got '{raw}'.",
                param_hint="--weight",
            )
        try:
            overrides[key] = float(value)
        except ValueError as exc:
            raise typer.BadParameter(
                f"Weight for '{key}' must be a number, got '{value}'.",
                param_hint="--weight",
            ) from exc
    return overrides


def _apply_completion_overrides(
    settings: CompletionSettings,
    model: str | None,
    base_url: str | None,
    api_key: str | None,
    api_key_env: str | None,
    system_prompt: str | None,
) -> None:
    """Override completion settings from CLI flags."""
    if model:
        settings.model = model
    if base_url:
        settings.base_url = base_url
    if api_key:
        settings.api_key = api_key
    if api_key_env:
        settings.api_key_env = api_key_env
    if system_prompt:
        settings.system_prompt = system_prompt


if __name__ == "__main__":
    main()
