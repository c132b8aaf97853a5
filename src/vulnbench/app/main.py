from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import AppConfig
from .container import Container
from ..core.domain.exceptions import ConfigurationError, RepositoryError
from ..core.domain.models import BenchmarkReport, GroundTruthRecord, RepositoryInfo, Verdict


def _create_container(config: AppConfig | None = None, *, phase: str | None = None) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.
        phase: Pipeline phase; selects the JSONL log file

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        config = AppConfig()
    if phase is not None:
        config = config.for_phase(phase)

    container.config.from_pydantic(config)
    container.init_resources()

    return container


def _bind_repository(container: Container, info: RepositoryInfo, path: Path) -> None:
    container.config.set("runtime.workdir", Path(path))
    container.config.set("runtime.owner", info.owner)
    container.config.set("runtime.repo_name", info.name)


def _bind_recorded_repository(container: Container) -> RepositoryInfo:
    info = container.store().latest_repository_info()
    if info is None:
        raise RepositoryError("No repository recorded; run extract first")
    _bind_repository(container, info, Path(info.path))
    return info


def extract(
    repo: str,
    *,
    limit: Optional[int] = None,
    force_reclone: bool = False,
    config: AppConfig | None = None,
) -> list[GroundTruthRecord]:
    """Rebuild ground truth from the security fixes in a repository's history.

    Args:
        repo: GitHub URL or local path of a git working tree
        limit: Only scan the newest ``limit`` commits
        force_reclone: Drop and re-clone a cached remote repository
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        Ground truth records in the order they were produced

    Raises:
        RepositoryError: If the locator is not a GitHub URL or git working tree
    """
    container = _create_container(config, phase="extract")
    try:
        info, path = container.repository_provider().prepare(repo, force_reclone=force_reclone)
        _bind_repository(container, info, path)
        return container.extract_uc().execute(repository=info, limit=limit)
    finally:
        container.shutdown_resources()


def evaluate_ai(config: AppConfig | None = None) -> list[Verdict]:
    """Score the AI detector against the recorded ground truth.

    Raises:
        ConfigurationError: If no LLM API key is configured
        RepositoryError: If extract has not been run
    """
    container = _create_container(config, phase="evaluate-ai")
    try:
        if not container.config.llm.api_key():
            raise ConfigurationError("llm.api_key", "API key required via VULNBENCH_LLM__API_KEY")
        _bind_recorded_repository(container)
        return container.evaluate_ai_uc().execute()
    finally:
        container.shutdown_resources()


def evaluate_static(config: AppConfig | None = None) -> list[Verdict]:
    """Score the static analyzer against the recorded ground truth.

    Raises:
        ConfigurationError: If the SonarQube URL or token is missing
        ExternalToolMissingError: If the scanner command is not on PATH
        RepositoryError: If extract has not been run
    """
    container = _create_container(config, phase="evaluate-static")
    try:
        _bind_recorded_repository(container)
        return container.evaluate_static_uc().execute()
    finally:
        container.shutdown_resources()


def report(config: AppConfig | None = None) -> BenchmarkReport:
    """Summarize ground truth and verdicts from the database."""
    container = _create_container(config)
    try:
        return container.report_uc().execute()
    finally:
        container.shutdown_resources()


def logs(
    phase: str | None = None,
    verbose: bool = False,
    config: AppConfig | None = None,
) -> list[str]:
    """Show phase logs.

    Args:
        phase: Optional phase name. If None, shows a summary of all phases.
        verbose: Return raw JSONL lines instead of a summary
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        List of log lines
    """
    container = _create_container(config)
    try:
        return container.logs_uc().execute(phase, verbose)
    finally:
        container.shutdown_resources()
