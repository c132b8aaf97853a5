from __future__ import annotations

from collections import Counter
from typing import Sequence

from ..domain.models import BenchmarkReport, DETECTORS, DetectorSummary, VerdictCounts
from ..ports import GroundTruthStorePort, VerdictStorePort


class ReportUseCase:
    """Use case for summarizing persisted ground truth and verdicts.

    Counts are keyed by the CWE id stored with each verdict. Only verdicts
    whose natural key is still in the ground truth are counted. Rows appear in
    the store's key order, so repeated runs give identical reports.
    """

    def __init__(
        self,
        *,
        ground_truth: GroundTruthStorePort,
        verdicts: VerdictStorePort,
        detectors: Sequence[str] = DETECTORS,
    ) -> None:
        self._ground_truth = ground_truth
        self._verdicts = verdicts
        self._detectors = tuple(detectors)

    def execute(self) -> BenchmarkReport:
        records = self._ground_truth.list_ground_truth()
        keys = {r.key for r in records}
        by_cwe = Counter(r.cwe_id for r in records)
        by_type = Counter(r.vulnerability_type for r in records if r.vulnerability_type)

        summaries: list[DetectorSummary] = []
        for detector in self._detectors:
            summary = DetectorSummary(detector=detector)
            for verdict in self._verdicts.list_verdicts(detector):
                if verdict.key not in keys:
                    continue
                summary.totals.add(verdict.result)
                summary.by_cwe.setdefault(verdict.cwe_id or "UNKNOWN", VerdictCounts()).add(verdict.result)
            summary.by_cwe = dict(sorted(summary.by_cwe.items()))
            summaries.append(summary)

        return BenchmarkReport(
            ground_truth_total=len(records),
            ground_truth_by_cwe=dict(sorted(by_cwe.items())),
            ground_truth_by_type=dict(sorted(by_type.items())),
            detectors=summaries,
        )
