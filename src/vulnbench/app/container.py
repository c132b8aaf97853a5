from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional

from dependency_injector import containers, providers

from ..core.domain.models import AI_DETECTOR, STATIC_DETECTOR
from ..core.ports import ChangeRequestLookupPort, LoggerPort
from ..core.services import (
    ClassificationEngine,
    DetectionNormalizer,
    DiffAnalyzer,
    EvaluationOrchestrator,
    GroundTruthBuilder,
    JsonExtractor,
    OriginResolver,
    build_tie_break,
)
from ..core.usecases.evaluate import EvaluateAIUseCase, EvaluateStaticUseCase
from ..core.usecases.extract import ExtractGroundTruthUseCase
from ..core.usecases.logs import LogsUseCase
from ..core.usecases.report import ReportUseCase
from ..infra.ai_detector import LLMVulnerabilityDetector
from ..infra.change_requests import GitHubPullRequestLookup, NullChangeRequestLookup
from ..infra.classifier import SecurityMessageClassifier
from ..infra.git_repo import GitRepository
from ..infra.llm import LLM
from ..infra.log_store import LogStore
from ..infra.logging import RunLogger
from ..infra.repository import RepositoryProvider
from ..infra.sonarqube import SonarQubeScanner
from ..infra.store import SQLiteStore


def _open_store(db_path: Path) -> Iterator[SQLiteStore]:
    store = SQLiteStore(db_path=db_path)
    try:
        yield store
    finally:
        store.close()


def _optional_llm(
    *,
    provider: str,
    model: str,
    api_key: Optional[str],
    logger: LoggerPort,
) -> Optional[LLM]:
    # CWE inference is optional; patterns still classify without a key
    if not api_key:
        return None
    return LLM(provider=provider, model=model, api_key=api_key, logger=logger)


def _change_request_lookup(
    *,
    owner: Optional[str],
    repo: Optional[str],
    token: Optional[str],
    logger: LoggerPort,
) -> ChangeRequestLookupPort:
    if not owner or not repo:
        return NullChangeRequestLookup()
    return GitHubPullRequestLookup(owner=owner, repo=repo, token=token, logger=logger)


class Container(containers.DeclarativeContainer):
    """DI container; configuration is loaded with ``config.from_pydantic(AppConfig)``."""

    config = providers.Configuration()

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        RunLogger,
        phase=config.runtime.phase,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    # Adapters
    repository_provider = providers.Singleton(
        RepositoryProvider,
        repos_dir=config.directories.repos_dir,
    )

    vcs = providers.Singleton(
        GitRepository,
        workdir=config.runtime.workdir,
    )

    store = providers.Resource(
        _open_store,
        db_path=config.directories.database_path,
    )

    log_store = providers.Singleton(
        LogStore,
        logs_dir=config.directories.logs_dir,
    )

    llm = providers.Factory(
        LLM,
        provider=config.llm.provider_name,
        model=config.llm.model_name,
        api_key=config.llm.api_key,
        logger=logger,
        max_output_tokens=config.llm.max_output_tokens,
    )

    classifier_llm = providers.Callable(
        _optional_llm,
        provider=config.llm.provider_name,
        model=config.llm.classifier_model_name,
        api_key=config.llm.api_key,
        logger=logger,
    )

    classifier = providers.Singleton(
        SecurityMessageClassifier,
        llm=classifier_llm,
        logger=logger,
    )

    change_requests = providers.Singleton(
        _change_request_lookup,
        owner=config.runtime.owner,
        repo=config.runtime.repo_name,
        token=config.github.token,
        logger=logger,
    )

    json_extractor = providers.Singleton(JsonExtractor)

    ai_detector = providers.Factory(
        LLMVulnerabilityDetector,
        llm=llm,
        logger=logger,
        max_output_tokens=config.llm.max_output_tokens,
        json_extractor=json_extractor,
    )

    static_analyzer = providers.Factory(
        SonarQubeScanner,
        url=config.sonarqube.url,
        token=config.sonarqube.token,
        logger=logger,
        organization=config.sonarqube.organization,
        scanner_command=config.sonarqube.scanner_command,
        page_size=config.sonarqube.page_size,
    )

    # Domain services
    diff_analyzer = providers.Factory(DiffAnalyzer, vcs=vcs)

    tie_break = providers.Factory(
        build_tie_break,
        config.tracing.tie_break,
        vcs=vcs,
    )

    origin_resolver = providers.Factory(
        OriginResolver,
        vcs=vcs,
        strategy=tie_break,
        logger=logger,
    )

    ground_truth_builder = providers.Factory(
        GroundTruthBuilder,
        vcs=vcs,
        classifier=classifier,
        change_requests=change_requests,
        diff_analyzer=diff_analyzer,
        origin_resolver=origin_resolver,
        store=store,
        logger=logger,
    )

    normalizer = providers.Singleton(
        DetectionNormalizer,
        classifier=classifier,
        logger=logger,
    )

    ai_engine = providers.Factory(
        ClassificationEngine,
        detector=AI_DETECTOR,
        label="AI",
        store=store,
        logger=logger,
    )

    static_engine = providers.Factory(
        ClassificationEngine,
        detector=STATIC_DETECTOR,
        label="SonarQube",
        store=store,
        logger=logger,
    )

    orchestrator = providers.Factory(
        EvaluationOrchestrator,
        vcs=vcs,
        ground_truth=store,
        normalizer=normalizer,
        logger=logger,
    )

    # Use cases
    extract_uc = providers.Factory(
        ExtractGroundTruthUseCase,
        vcs=vcs,
        builder=ground_truth_builder,
        store=store,
        logger=logger,
    )

    evaluate_ai_uc = providers.Factory(
        EvaluateAIUseCase,
        orchestrator=orchestrator,
        detector=ai_detector,
        engine=ai_engine,
    )

    evaluate_static_uc = providers.Factory(
        EvaluateStaticUseCase,
        orchestrator=orchestrator,
        provider=static_analyzer,
        engine=static_engine,
    )

    report_uc = providers.Factory(
        ReportUseCase,
        ground_truth=store,
        verdicts=store,
    )

    logs_uc = providers.Factory(
        LogsUseCase,
        log_store=log_store,
    )
