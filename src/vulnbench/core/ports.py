from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Protocol, Sequence

from .domain.models import (
    DetectorOutcome,
    FixingCommit,
    GroundTruthRecord,
    RepositoryInfo,
    SecurityInfo,
    Verdict,
)


class VersionControlPort(Protocol):
    """Port for git history operations on the mined repository.

    All operations act on one shared working tree; callers must not interleave
    checkouts with reads of another revision.
    """

    @property
    def workdir(self) -> Path:
        ...

    def log(self, limit: Optional[int] = None) -> list[FixingCommit]:
        """Return commits reachable from HEAD, newest first."""
        ...

    def diff(self, commit_a: str, commit_b: str, path: Optional[str] = None) -> str:
        """Return unified diff text from commit_a to commit_b, optionally for one path."""
        ...

    def changed_files(self, commit_a: str, commit_b: str) -> list[str]:
        """Return post-image paths of files changed between two commits."""
        ...

    def blame(self, revision: str, path: str, lines: Sequence[int]) -> list[tuple[int, str]]:
        """Return (line number, commit hash) pairs attributing each requested line."""
        ...

    def show_message(self, commit: str) -> str:
        ...

    def commit_time(self, commit: str) -> int:
        """Return the committer timestamp (epoch seconds)."""
        ...

    def checkout(self, commit: str) -> None:
        ...

    def reset_clean(self) -> None:
        """Discard local modifications and untracked files in the working tree."""
        ...

    def read_file(self, path: str) -> str:
        """Read a file from the working tree at the checked out revision.

        Raises FileNotFoundError when the path does not exist at that revision.
        """
        ...

    def file_exists(self, path: str) -> bool:
        ...

    def current_ref(self) -> str:
        """Return the branch name, or commit hash when detached."""
        ...


class RepositoryProviderPort(Protocol):
    """Port for locating or cloning the repository under study."""

    def prepare(self, locator: str) -> tuple[RepositoryInfo, Path]:
        ...


class SecurityMessageClassifierPort(Protocol):
    def classify(self, message: str) -> SecurityInfo:
        ...

    def infer_cwe(self, message: str) -> Optional[str]:
        """Infer a single CWE id from free text; None when no CWE can be named."""
        ...


class ChangeRequestLookupPort(Protocol):
    def find_for_commit(self, commit: str) -> Optional[str]:
        """Return the identifier of a pull request containing the commit, if any."""
        ...


class AIDetectorPort(Protocol):
    name: str

    def analyze(self, content: str) -> DetectorOutcome:
        """Analyze one file's content.

        SUCCESS payload: {"vulnerabilities": [{"cwe_id", "line_numbers", "description"}]}.
        """
        ...


class StaticAnalysisPort(Protocol):
    name: str

    def ensure_available(self) -> None:
        """Raise ExternalToolMissingError or ConfigurationError when the scan cannot run."""
        ...

    def scan(self, revision: str, workdir: Path) -> DetectorOutcome:
        """Scan the checked out tree.

        SUCCESS payload: list of issues {"component", "cwe"?, "message"}.
        """
        ...


class LLMPort(Protocol):
    """Port for plain prompt completion."""

    def complete(
        self,
        *,
        prompt: str,
        system: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        ...


class GroundTruthStorePort(Protocol):
    def reset_ground_truth(self) -> None:
        ...

    def upsert_ground_truth(self, record: GroundTruthRecord) -> None:
        ...

    def list_ground_truth(self) -> list[GroundTruthRecord]:
        ...

    def prune_orphan_verdicts(self) -> int:
        """Delete verdicts whose ground truth key is gone; return how many."""
        ...

    def save_repository_info(self, info: RepositoryInfo) -> None:
        ...

    def latest_repository_info(self) -> Optional[RepositoryInfo]:
        ...


class VerdictStorePort(Protocol):
    def upsert_verdict(self, detector: str, verdict: Verdict) -> None:
        ...

    def list_verdicts(self, detector: str) -> list[Verdict]:
        ...


class LogStorePort(Protocol):
    """Port for reading phase log files."""

    def read_log(self, phase: str, verbose: bool) -> list[str]:
        ...

    def summarize_all(self) -> list[str]:
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Keyword arguments are attached to the record as structured fields.
    """

    def debug(self, message: str, **kwargs: Any) -> None:
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        ...

    def exception(self, message: str, **kwargs: Any) -> None:
        ...
