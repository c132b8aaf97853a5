from __future__ import annotations

from typing import Iterable, Optional

from ..domain.exceptions import VersionControlError
from ..domain.models import FixingCommit, GroundTruthRecord, OriginCommit, SecurityInfo
from ..ports import (
    ChangeRequestLookupPort,
    GroundTruthStorePort,
    LoggerPort,
    SecurityMessageClassifierPort,
    VersionControlPort,
)
from .diff_analyzer import DiffAnalyzer
from .origin_resolver import OriginResolver


class GroundTruthBuilder:
    """Builds ground truth records from security-fixing commits.

    For every file a fix touched, the lines it added are traced back through
    blame on the parent revision to the commit that introduced them. One record
    is produced per (file, CWE) pair and upserted into the store.
    """

    def __init__(
        self,
        *,
        vcs: VersionControlPort,
        classifier: SecurityMessageClassifierPort,
        change_requests: ChangeRequestLookupPort,
        diff_analyzer: DiffAnalyzer,
        origin_resolver: OriginResolver,
        store: GroundTruthStorePort,
        logger: LoggerPort,
    ) -> None:
        self._vcs = vcs
        self._classifier = classifier
        self._change_requests = change_requests
        self._diff_analyzer = diff_analyzer
        self._origin_resolver = origin_resolver
        self._store = store
        self._logger = logger
        self._origin_cache: dict[str, OriginCommit] = {}
        self._vuln_id_cache: dict[str, str] = {}

    def run(self, commits: Iterable[FixingCommit]) -> list[GroundTruthRecord]:
        """Process commits one at a time and return every record produced."""
        records: list[GroundTruthRecord] = []
        for commit in commits:
            records.extend(self.process_commit(commit))
        return records

    def process_commit(self, commit: FixingCommit) -> list[GroundTruthRecord]:
        info = self._classifier.classify(commit.message)
        if not info.security_related:
            return []

        if commit.parent_hash is None:
            self._logger.info("fix_without_parent", commit=commit.hash)
            return []

        if not info.cwe_ids:
            self._logger.warning(
                "no_cwe_identified",
                commit=commit.hash,
                fix_message=commit.message.strip(),
            )
            return []

        try:
            files = self._vcs.changed_files(commit.parent_hash, commit.hash)
        except VersionControlError as e:
            self._logger.error("changed_files_failed", commit=commit.hash, cause=str(e))
            return []

        records: list[GroundTruthRecord] = []
        for path in files:
            try:
                records.extend(self._process_file(commit, commit.parent_hash, path, info))
            except VersionControlError as e:
                self._logger.warning(
                    "file_trace_failed",
                    commit=commit.hash,
                    file=path,
                    cause=str(e).strip(),
                )
        return records

    def _process_file(
        self,
        commit: FixingCommit,
        parent: str,
        path: str,
        info: SecurityInfo,
    ) -> list[GroundTruthRecord]:
        lines = self._diff_analyzer.changed_lines(
            commit=commit.hash, parent=parent, path=path
        )
        if not lines:
            self._logger.debug("no_added_lines", commit=commit.hash, file=path)
            return []

        origin_hash = self._origin_resolver.resolve(
            path=path,
            fix_commit=commit.hash,
            parent=parent,
            lines=lines,
        )
        if origin_hash is None:
            self._logger.info("origin_unresolved", commit=commit.hash, file=path)
            return []

        origin = self._origin(origin_hash)
        vulnerability_id = self._vulnerability_id(origin_hash)
        vulnerability_type = ", ".join(info.vulnerability_types) or None
        fix_message = commit.message.strip()

        records = []
        for cwe_id in info.cwe_ids:
            record = GroundTruthRecord(
                vulnerability_id=vulnerability_id,
                file_path=path,
                cwe_id=cwe_id,
                fix_commit_id=commit.hash,
                fix_message=fix_message,
                original_commit_id=origin.hash,
                original_message=origin.message,
                vulnerability_type=vulnerability_type,
            )
            self._store.upsert_ground_truth(record)
            records.append(record)

        self._logger.info(
            "gt_records_saved",
            commit=commit.hash,
            file=path,
            origin=origin.hash,
            vulnerability_id=vulnerability_id,
            cwe_ids=list(info.cwe_ids),
            changed_lines=lines.to_list(),
        )
        return records

    def _origin(self, origin_hash: str) -> OriginCommit:
        origin = self._origin_cache.get(origin_hash)
        if origin is None:
            origin = OriginCommit(hash=origin_hash, message=self._vcs.show_message(origin_hash).strip())
            self._origin_cache[origin_hash] = origin
        return origin

    def _vulnerability_id(self, origin_hash: str) -> str:
        cached = self._vuln_id_cache.get(origin_hash)
        if cached is not None:
            return cached
        change_request: Optional[str] = self._change_requests.find_for_commit(origin_hash)
        vulnerability_id = str(change_request) if change_request else f"commit-{origin_hash}"
        self._vuln_id_cache[origin_hash] = vulnerability_id
        return vulnerability_id
