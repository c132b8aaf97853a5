from __future__ import annotations

from ..domain.cwe import cwe_equals
from ..domain.models import (
    EvaluationResult,
    GroundTruthRecord,
    NormalizedDetection,
    Verdict,
)
from ..ports import LoggerPort, VerdictStorePort


class ClassificationEngine:
    """Scores one detector's findings against ground truth records.

    Precedence, first match wins:

    1. the file could not be analyzed (access, read or detector failure, or an
       inconclusive detector response) -> SKIPPED
    2. a finding carries the expected CWE -> TP
    3. any other finding was reported -> FP, represented by the first finding
    4. nothing was reported -> FN

    Classification is a pure function of (record, detection); ``evaluate``
    additionally upserts the verdict under the record's natural key.
    """

    def __init__(
        self,
        *,
        detector: str,
        label: str,
        store: VerdictStorePort,
        logger: LoggerPort,
    ) -> None:
        self._detector = detector
        self._label = label
        self._store = store
        self._logger = logger

    @property
    def detector(self) -> str:
        return self._detector

    def classify(self, record: GroundTruthRecord, detection: NormalizedDetection) -> Verdict:
        if not detection.analyzable:
            return self._verdict(
                record,
                EvaluationResult.SKIPPED,
                f"Skipped: {detection.cause or detection.status.value}",
            )

        for finding in detection.findings:
            if cwe_equals(finding.cwe_id, record.cwe_id):
                return self._verdict(
                    record,
                    EvaluationResult.TP,
                    f"Correctly detected vulnerability ({record.cwe_id})",
                    detected=finding.line_range,
                )

        if detection.findings:
            first = detection.findings[0]
            return self._verdict(
                record,
                EvaluationResult.FP,
                f"False positive: {self._label} reported {first.cwe_id}, expected {record.cwe_id}",
                detected=first.line_range,
            )

        return self._verdict(
            record,
            EvaluationResult.FN,
            f"Missed vulnerability: {record.cwe_id}",
        )

    def evaluate(self, record: GroundTruthRecord, detection: NormalizedDetection) -> Verdict:
        verdict = self.classify(record, detection)
        self._store.upsert_verdict(self._detector, verdict)
        log = self._logger.warning if verdict.result is EvaluationResult.SKIPPED else self._logger.info
        log(
            "verdict_saved",
            detector=self._detector,
            vulnerability_id=verdict.vulnerability_id,
            file=verdict.file_path,
            cwe_id=verdict.cwe_id,
            original_commit=verdict.original_commit_id,
            result=verdict.result.value,
            rationale=verdict.rationale,
        )
        return verdict

    def _verdict(
        self,
        record: GroundTruthRecord,
        result: EvaluationResult,
        rationale: str,
        *,
        detected: tuple[int, ...] | None = None,
    ) -> Verdict:
        return Verdict(
            vulnerability_id=record.vulnerability_id,
            file_path=record.file_path,
            cwe_id=record.cwe_id,
            fix_commit_id=record.fix_commit_id,
            original_commit_id=record.original_commit_id,
            vulnerability_type=record.vulnerability_type,
            result=result,
            rationale=rationale,
            detected_line_range=tuple(detected) if detected is not None else None,
        )
