from __future__ import annotations

from typing import Optional

from ..domain.models import GroundTruthRecord, RepositoryInfo
from ..ports import GroundTruthStorePort, LoggerPort, VersionControlPort
from ..services import GroundTruthBuilder


class ExtractGroundTruthUseCase:
    """Use case for rebuilding the ground truth table from repository history.

    The table is cleared first so a rerun reflects only the current history and
    tie-break policy. Verdicts left without a ground truth record are dropped
    afterwards.
    """

    def __init__(
        self,
        *,
        vcs: VersionControlPort,
        builder: GroundTruthBuilder,
        store: GroundTruthStorePort,
        logger: LoggerPort,
    ) -> None:
        self._vcs = vcs
        self._builder = builder
        self._store = store
        self._logger = logger

    def execute(self, *, repository: RepositoryInfo, limit: Optional[int] = None) -> list[GroundTruthRecord]:
        self._store.save_repository_info(repository)
        self._store.reset_ground_truth()

        commits = self._vcs.log(limit)
        self._logger.info(
            "extraction_started",
            repository=repository.slug,
            path=repository.path,
            commits=len(commits),
            limit=limit,
        )

        records = self._builder.run(commits)
        pruned = self._store.prune_orphan_verdicts()

        self._logger.info(
            "extraction_finished",
            repository=repository.slug,
            records=len(records),
            files=len({r.file_path for r in records}),
            origins=len({r.original_commit_id for r in records}),
            pruned_verdicts=pruned,
        )
        return records
