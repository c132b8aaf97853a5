from __future__ import annotations

import json
from typing import Callable, TypeVar

import typer
from dotenv import load_dotenv

from . import main
from .config import AppConfig
from .cli_formatter import (
    format_extract_result,
    format_report,
    format_verdicts,
    record_to_dict,
    report_to_dict,
    verdict_to_dict,
)
from ..core.domain.exceptions import ConfigurationError, ExternalToolMissingError, RepositoryError
from ..core.domain.models import AI_DETECTOR, STATIC_DETECTOR

load_dotenv()

app = typer.Typer(add_completion=False, no_args_is_help=True)

T = TypeVar("T")


def _cli_config(log_level: str | None = None) -> AppConfig:
    """Load config from the environment with console logging enabled."""
    config = AppConfig()
    update: dict[str, object] = {"console_output": True}
    if log_level:
        update["level"] = log_level.upper()
    return config.model_copy(update={"logging": config.logging.model_copy(update=update)})


def _reset_log(config: AppConfig, phase: str) -> None:
    log_file = config.directories.logs_dir / f"{phase}.jsonl"
    if log_file.exists():
        log_file.unlink()
    typer.echo(f"Log file: {log_file}", err=True)


def _guarded(fn: Callable[[], T]) -> T:
    """Run a facade call, mapping fatal errors to exit codes."""
    try:
        return fn()
    except RepositoryError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except (ConfigurationError, ExternalToolMissingError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


def _echo_json(data: object) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


@app.command()
def extract(
    repo: str = typer.Option(..., "--repo", "-r", help="GitHub repository URL or local path"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Only scan the newest N commits"),
    force_reclone: bool = typer.Option(False, "--force-reclone", help="Force re-clone repo cache"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Mine security fixes and rebuild the ground truth table."""
    config = _cli_config(log_level)
    _reset_log(config, "extract")
    typer.echo(f"Extracting ground truth: {repo}", err=True)

    records = _guarded(lambda: main.extract(repo, limit=limit, force_reclone=force_reclone, config=config))

    if json_output:
        _echo_json({"count": len(records), "records": [record_to_dict(r) for r in records]})
    else:
        typer.echo(format_extract_result(records))


@app.command(name="evaluate-ai")
def evaluate_ai(
    log_level: str = typer.Option("INFO", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Score the AI detector against the recorded ground truth."""
    config = _cli_config(log_level)
    _reset_log(config, "evaluate-ai")

    verdicts = _guarded(lambda: main.evaluate_ai(config=config))

    if json_output:
        _echo_json({"detector": AI_DETECTOR, "verdicts": [verdict_to_dict(v) for v in verdicts]})
    else:
        typer.echo(format_verdicts(AI_DETECTOR, verdicts))


@app.command(name="evaluate-static")
def evaluate_static(
    log_level: str = typer.Option("INFO", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Score the SonarQube static analyzer against the recorded ground truth."""
    config = _cli_config(log_level)
    _reset_log(config, "evaluate-static")

    verdicts = _guarded(lambda: main.evaluate_static(config=config))

    if json_output:
        _echo_json({"detector": STATIC_DETECTOR, "verdicts": [verdict_to_dict(v) for v in verdicts]})
    else:
        typer.echo(format_verdicts(STATIC_DETECTOR, verdicts))


@app.command()
def report(
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Summarize ground truth and detector verdicts.

    The JSON summary is also written to ``<home>/reports/report.json``.
    """
    config = AppConfig()
    result = main.report(config=config)
    data = report_to_dict(result)

    out_path = config.directories.reports_dir / "report.json"
    out_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    if json_output:
        _echo_json(data)
    else:
        typer.echo(format_report(result))
        typer.echo(f"Report saved: {out_path}")


@app.command()
def run(
    repo: str = typer.Option(..., "--repo", "-r", help="GitHub repository URL or local path"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Only scan the newest N commits"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level", case_sensitive=False),
):
    """Run extract, evaluate-ai, evaluate-static and report in order."""
    extract(repo=repo, limit=limit, force_reclone=False, log_level=log_level, json_output=False)
    evaluate_ai(log_level=log_level, json_output=False)
    evaluate_static(log_level=log_level, json_output=False)
    report(json_output=False)


@app.command()
def logs(
    phase: str = typer.Argument(None, help="Optional phase (extract, evaluate-ai, evaluate-static)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print raw JSONL records."),
):
    """Show phase logs - either one phase or a summary of all phases."""
    try:
        lines = main.logs(phase, verbose, config=AppConfig())
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    for line in lines:
        typer.echo(line)


if __name__ == "__main__":
    app()
