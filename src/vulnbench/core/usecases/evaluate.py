from __future__ import annotations

from ..domain.models import Verdict
from ..ports import AIDetectorPort, StaticAnalysisPort
from ..services import ClassificationEngine, EvaluationOrchestrator


class EvaluateAIUseCase:
    """Use case for scoring the AI detector against persisted ground truth."""

    def __init__(
        self,
        *,
        orchestrator: EvaluationOrchestrator,
        detector: AIDetectorPort,
        engine: ClassificationEngine,
    ) -> None:
        self._orchestrator = orchestrator
        self._detector = detector
        self._engine = engine

    def execute(self) -> list[Verdict]:
        return self._orchestrator.run_ai(detector=self._detector, engine=self._engine)


class EvaluateStaticUseCase:
    """Use case for scoring the static analyzer against persisted ground truth.

    Raises ExternalToolMissingError or ConfigurationError before any commit is
    checked out when the scanner cannot run.
    """

    def __init__(
        self,
        *,
        orchestrator: EvaluationOrchestrator,
        provider: StaticAnalysisPort,
        engine: ClassificationEngine,
    ) -> None:
        self._orchestrator = orchestrator
        self._provider = provider
        self._engine = engine

    def execute(self) -> list[Verdict]:
        return self._orchestrator.run_static(provider=self._provider, engine=self._engine)
