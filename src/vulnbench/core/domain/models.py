from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class RepositoryInfo:
    """Repository metadata recorded by the extraction phase.

    Later phases read it back to locate the local clone.
    """
    owner: str | None
    name: str
    url: str
    path: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}" if self.owner else self.name


@dataclass(frozen=True)
class FixingCommit:
    """A historical commit taken from the repository log."""
    hash: str
    message: str
    parent_hash: str | None


@dataclass(frozen=True)
class OriginCommit:
    """Commit that introduced the lines a later fix changed."""
    hash: str
    message: str


@dataclass(frozen=True)
class SecurityInfo:
    """Security classification of a commit message."""
    cwe_ids: tuple[str, ...] = ()
    security_related: bool = False
    vulnerability_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class GroundTruthRecord:
    """One real historical vulnerability for one file and one CWE.

    Identified by the natural key (vulnerability_id, file_path, cwe_id).
    """
    vulnerability_id: str
    file_path: str
    cwe_id: str
    fix_commit_id: str
    fix_message: str
    original_commit_id: str
    original_message: str
    vulnerability_type: str | None = None

    def __post_init__(self) -> None:
        if not self.cwe_id or not self.cwe_id.strip():
            raise ValueError("GroundTruthRecord requires a non-empty cwe_id")

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.vulnerability_id, self.file_path, self.cwe_id)


@dataclass(frozen=True)
class Finding:
    """A detector's reported vulnerability for one file."""
    cwe_id: str
    file_path: str
    line_range: tuple[int, ...] = ()
    description: str = ""


class EvaluationResult(str, Enum):
    TP = "TP"
    FP = "FP"
    FN = "FN"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class Verdict:
    """Outcome of comparing one detector's findings with one ground truth record."""
    vulnerability_id: str
    file_path: str
    cwe_id: str
    fix_commit_id: str
    original_commit_id: str
    vulnerability_type: str | None
    result: EvaluationResult
    rationale: str
    detected_line_range: tuple[int, ...] | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.vulnerability_id, self.file_path, self.cwe_id)


class DetectionStatus(str, Enum):
    SUCCESS = "success"
    INCONCLUSIVE = "inconclusive"
    ERROR = "error"


@dataclass(frozen=True)
class DetectorOutcome:
    """Response of a detector call.

    Detectors report failures through ``status`` and ``cause`` instead of raising,
    so the classification precedence decides what a failure means.
    """
    status: DetectionStatus
    payload: Any = None
    cause: str | None = None

    @classmethod
    def success(cls, payload: Any) -> "DetectorOutcome":
        return cls(status=DetectionStatus.SUCCESS, payload=payload)

    @classmethod
    def inconclusive(cls, cause: str) -> "DetectorOutcome":
        return cls(status=DetectionStatus.INCONCLUSIVE, cause=cause)

    @classmethod
    def error(cls, cause: str) -> "DetectorOutcome":
        return cls(status=DetectionStatus.ERROR, cause=cause)


@dataclass(frozen=True)
class NormalizedDetection:
    """Findings for one file, or the reason no findings could be produced."""
    status: DetectionStatus
    findings: tuple[Finding, ...] = ()
    cause: str | None = None

    @property
    def analyzable(self) -> bool:
        return self.status is DetectionStatus.SUCCESS

    @classmethod
    def of(cls, findings: list[Finding] | tuple[Finding, ...]) -> "NormalizedDetection":
        return cls(status=DetectionStatus.SUCCESS, findings=tuple(findings))

    @classmethod
    def skipped(cls, status: DetectionStatus, cause: str) -> "NormalizedDetection":
        return cls(status=status, cause=cause)


@dataclass
class VerdictCounts:
    TP: int = 0
    FP: int = 0
    FN: int = 0
    SKIPPED: int = 0

    def add(self, result: EvaluationResult) -> None:
        setattr(self, result.value, getattr(self, result.value) + 1)

    @property
    def total(self) -> int:
        return self.TP + self.FP + self.FN + self.SKIPPED

    @property
    def precision(self) -> float | None:
        denom = self.TP + self.FP
        return self.TP / denom if denom else None

    @property
    def recall(self) -> float | None:
        denom = self.TP + self.FN
        return self.TP / denom if denom else None


@dataclass
class DetectorSummary:
    detector: str
    totals: VerdictCounts = field(default_factory=VerdictCounts)
    by_cwe: dict[str, VerdictCounts] = field(default_factory=dict)


@dataclass
class BenchmarkReport:
    ground_truth_total: int
    ground_truth_by_cwe: dict[str, int]
    ground_truth_by_type: dict[str, int]
    detectors: list[DetectorSummary]


AI_DETECTOR = "ai"
STATIC_DETECTOR = "sonarqube"
DETECTORS: tuple[str, ...] = (AI_DETECTOR, STATIC_DETECTOR)
