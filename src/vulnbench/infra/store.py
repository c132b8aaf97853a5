from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Optional

from ..core.domain.models import (
    DETECTORS,
    EvaluationResult,
    GroundTruthRecord,
    RepositoryInfo,
    Verdict,
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS repository_info (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner TEXT,
    repo TEXT NOT NULL,
    url TEXT NOT NULL,
    path TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS ground_truth (
    vulnerability_id TEXT NOT NULL,
    file_path TEXT NOT NULL,
    cwe_id TEXT NOT NULL,
    fix_commit_hash TEXT NOT NULL,
    fix_commit_message TEXT,
    original_commit_hash TEXT NOT NULL,
    original_commit_message TEXT,
    vulnerability_type TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (vulnerability_id, file_path, cwe_id)
);
"""

_RESULTS_SCHEMA = """
CREATE TABLE IF NOT EXISTS {table} (
    vulnerability_id TEXT NOT NULL,
    file_path TEXT NOT NULL,
    cwe_id TEXT NOT NULL,
    fix_commit_hash TEXT NOT NULL,
    original_commit_hash TEXT NOT NULL,
    vulnerability_type TEXT,
    evaluation_result TEXT NOT NULL,
    evaluation_details TEXT,
    detected_line_numbers TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (vulnerability_id, file_path, cwe_id)
);
"""


def results_table(detector: str) -> str:
    if detector not in DETECTORS:
        raise ValueError(f"Unknown detector: {detector!r}")
    return f"{detector}_results"


class SQLiteStore:
    """SQLite persistence for ground truth and per-detector verdicts.

    Writes are INSERT OR REPLACE on the natural key
    (vulnerability_id, file_path, cwe_id), so reruns overwrite instead of
    appending. Reads return rows in key order.
    """

    def __init__(self, *, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row
        with self._conn:
            self._conn.executescript(_SCHEMA)
            for detector in DETECTORS:
                self._conn.executescript(_RESULTS_SCHEMA.format(table=results_table(detector)))

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        self._conn.close()

    # repository info

    def save_repository_info(self, info: RepositoryInfo) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT INTO repository_info (owner, repo, url, path) VALUES (?, ?, ?, ?)",
                (info.owner, info.name, info.url, info.path),
            )

    def latest_repository_info(self) -> Optional[RepositoryInfo]:
        row = self._conn.execute(
            "SELECT owner, repo, url, path FROM repository_info ORDER BY id DESC LIMIT 1"
        ).fetchone()
        if row is None:
            return None
        return RepositoryInfo(owner=row["owner"], name=row["repo"], url=row["url"], path=row["path"])

    # ground truth

    def reset_ground_truth(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM ground_truth")

    def upsert_ground_truth(self, record: GroundTruthRecord) -> None:
        with self._conn:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO ground_truth (
                    vulnerability_id, file_path, cwe_id, fix_commit_hash,
                    fix_commit_message, original_commit_hash, original_commit_message,
                    vulnerability_type
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.vulnerability_id,
                    record.file_path,
                    record.cwe_id,
                    record.fix_commit_id,
                    record.fix_message,
                    record.original_commit_id,
                    record.original_message,
                    record.vulnerability_type,
                ),
            )

    def list_ground_truth(self) -> list[GroundTruthRecord]:
        rows = self._conn.execute(
            """
            SELECT * FROM ground_truth
            ORDER BY original_commit_hash, vulnerability_id, file_path, cwe_id
            """
        ).fetchall()
        return [
            GroundTruthRecord(
                vulnerability_id=row["vulnerability_id"],
                file_path=row["file_path"],
                cwe_id=row["cwe_id"],
                fix_commit_id=row["fix_commit_hash"],
                fix_message=row["fix_commit_message"] or "",
                original_commit_id=row["original_commit_hash"],
                original_message=row["original_commit_message"] or "",
                vulnerability_type=row["vulnerability_type"],
            )
            for row in rows
        ]

    def prune_orphan_verdicts(self) -> int:
        removed = 0
        with self._conn:
            for detector in DETECTORS:
                table = results_table(detector)
                cur = self._conn.execute(
                    f"""
                    DELETE FROM {table}
                    WHERE NOT EXISTS (
                        SELECT 1 FROM ground_truth g
                        WHERE g.vulnerability_id = {table}.vulnerability_id
                          AND g.file_path = {table}.file_path
                          AND g.cwe_id = {table}.cwe_id
                    )
                    """
                )
                removed += cur.rowcount
        return removed

    # verdicts

    def upsert_verdict(self, detector: str, verdict: Verdict) -> None:
        table = results_table(detector)
        lines = (
            json.dumps(list(verdict.detected_line_range))
            if verdict.detected_line_range is not None
            else None
        )
        with self._conn:
            self._conn.execute(
                f"""
                INSERT OR REPLACE INTO {table} (
                    vulnerability_id, file_path, cwe_id,
                    fix_commit_hash, original_commit_hash, vulnerability_type,
                    evaluation_result, evaluation_details, detected_line_numbers
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    verdict.vulnerability_id,
                    verdict.file_path,
                    verdict.cwe_id,
                    verdict.fix_commit_id,
                    verdict.original_commit_id,
                    verdict.vulnerability_type,
                    verdict.result.value,
                    verdict.rationale,
                    lines,
                ),
            )

    def list_verdicts(self, detector: str) -> list[Verdict]:
        table = results_table(detector)
        rows = self._conn.execute(
            f"SELECT * FROM {table} ORDER BY vulnerability_id, file_path, cwe_id"
        ).fetchall()
        verdicts = []
        for row in rows:
            raw_lines = row["detected_line_numbers"]
            verdicts.append(
                Verdict(
                    vulnerability_id=row["vulnerability_id"],
                    file_path=row["file_path"],
                    cwe_id=row["cwe_id"],
                    fix_commit_id=row["fix_commit_hash"],
                    original_commit_id=row["original_commit_hash"],
                    vulnerability_type=row["vulnerability_type"],
                    result=EvaluationResult(row["evaluation_result"]),
                    rationale=row["evaluation_details"] or "",
                    detected_line_range=tuple(json.loads(raw_lines)) if raw_lines is not None else None,
                )
            )
        return verdicts
