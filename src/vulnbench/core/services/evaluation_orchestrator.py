from __future__ import annotations

from typing import Callable, Iterable

from ..domain.exceptions import VersionControlError
from ..domain.models import (
    DetectionStatus,
    DetectorOutcome,
    Finding,
    GroundTruthRecord,
    NormalizedDetection,
    Verdict,
)
from ..ports import (
    AIDetectorPort,
    GroundTruthStorePort,
    LoggerPort,
    StaticAnalysisPort,
    VersionControlPort,
)
from .classification_engine import ClassificationEngine
from .detection_normalizer import DetectionNormalizer


def group_by_origin(records: Iterable[GroundTruthRecord]) -> dict[str, list[GroundTruthRecord]]:
    """Group records by original commit, keeping first-seen commit order."""
    grouped: dict[str, list[GroundTruthRecord]] = {}
    for record in records:
        grouped.setdefault(record.original_commit_id, []).append(record)
    return grouped


class EvaluationOrchestrator:
    """Runs one detector over every original commit recorded in ground truth.

    Commits are processed serially: each one is checked out in the shared
    working tree before its files are read or scanned. The tree is returned to
    the ref it was on when the run started.
    """

    def __init__(
        self,
        *,
        vcs: VersionControlPort,
        ground_truth: GroundTruthStorePort,
        normalizer: DetectionNormalizer,
        logger: LoggerPort,
    ) -> None:
        self._vcs = vcs
        self._ground_truth = ground_truth
        self._normalizer = normalizer
        self._logger = logger

    def run_ai(self, *, detector: AIDetectorPort, engine: ClassificationEngine) -> list[Verdict]:
        def detect(commit: str) -> Callable[[str], NormalizedDetection]:
            cache: dict[str, NormalizedDetection] = {}

            def for_file(path: str) -> NormalizedDetection:
                if path not in cache:
                    cache[path] = self._analyze_file(detector, commit, path)
                return cache[path]

            return for_file

        return self._run(engine=engine, detect=detect, clean=False)

    def run_static(self, *, provider: StaticAnalysisPort, engine: ClassificationEngine) -> list[Verdict]:
        provider.ensure_available()

        def detect(commit: str) -> Callable[[str], NormalizedDetection]:
            outcome = provider.scan(commit, self._vcs.workdir)
            if outcome.status is not DetectionStatus.SUCCESS:
                self._logger.warning(
                    "scan_failed",
                    detector=provider.name,
                    commit=commit,
                    status=outcome.status.value,
                    cause=outcome.cause,
                )
                failed = NormalizedDetection.skipped(outcome.status, outcome.cause or "scan failed")
                return lambda path: failed

            grouped = self._normalizer.from_static_issues(outcome.payload or [])
            self._logger.info(
                "scan_completed",
                detector=provider.name,
                commit=commit,
                detected={path: [f.cwe_id for f in items] for path, items in grouped.items()},
            )
            return lambda path: self._static_file(grouped, path)

        return self._run(engine=engine, detect=detect, clean=True)

    def _run(
        self,
        *,
        engine: ClassificationEngine,
        detect: Callable[[str], Callable[[str], NormalizedDetection]],
        clean: bool,
    ) -> list[Verdict]:
        records = self._ground_truth.list_ground_truth()
        by_commit = group_by_origin(records)
        self._logger.info(
            "evaluation_started",
            detector=engine.detector,
            records=len(records),
            commits=len(by_commit),
        )

        verdicts: list[Verdict] = []
        start_ref = self._vcs.current_ref()
        try:
            for commit, entries in by_commit.items():
                verdicts.extend(self._evaluate_commit(engine, commit, entries, detect, clean))
        finally:
            try:
                self._vcs.checkout(start_ref)
            except VersionControlError:
                self._logger.exception("restore_checkout_failed", ref=start_ref)

        self._logger.info("evaluation_finished", detector=engine.detector, verdicts=len(verdicts))
        return verdicts

    def _evaluate_commit(
        self,
        engine: ClassificationEngine,
        commit: str,
        entries: list[GroundTruthRecord],
        detect: Callable[[str], Callable[[str], NormalizedDetection]],
        clean: bool,
    ) -> list[Verdict]:
        self._logger.info("checkout_original", detector=engine.detector, commit=commit)
        try:
            if clean:
                self._vcs.reset_clean()
            self._vcs.checkout(commit)
        except VersionControlError as e:
            skipped = NormalizedDetection.skipped(DetectionStatus.ERROR, f"checkout failed: {e}")
            return [engine.evaluate(record, skipped) for record in entries]

        for_file = detect(commit)
        return [engine.evaluate(record, for_file(record.file_path)) for record in entries]

    def _analyze_file(self, detector: AIDetectorPort, commit: str, path: str) -> NormalizedDetection:
        try:
            content = self._vcs.read_file(path)
        except FileNotFoundError:
            return NormalizedDetection.skipped(DetectionStatus.ERROR, "file not found in original commit")
        except (OSError, UnicodeDecodeError) as e:
            self._logger.warning("file_read_failed", commit=commit, file=path, cause=str(e))
            return NormalizedDetection.skipped(DetectionStatus.ERROR, "failed to read file content")

        outcome: DetectorOutcome = detector.analyze(content)
        if outcome.status is not DetectionStatus.SUCCESS:
            self._logger.warning(
                "detector_unavailable",
                detector=detector.name,
                commit=commit,
                file=path,
                status=outcome.status.value,
                cause=outcome.cause,
            )
        return self._normalizer.from_ai_response(path, outcome)

    def _static_file(self, grouped: dict[str, tuple[Finding, ...]], path: str) -> NormalizedDetection:
        if not self._vcs.file_exists(path):
            return NormalizedDetection.skipped(DetectionStatus.ERROR, "file not found in original commit")
        return self._normalizer.for_file(grouped, path)
