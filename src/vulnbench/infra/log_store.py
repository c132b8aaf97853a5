from __future__ import annotations

from pathlib import Path

from .logging.log_summary import (
    format_phase_summary,
    format_summary_table,
    summarize_log,
    summarize_logs,
)


class LogStore:
    """Reads phase JSONL log files written by RunLogger."""

    def __init__(self, *, logs_dir: Path) -> None:
        self._logs_dir = logs_dir

    def read_log(self, phase: str, verbose: bool) -> list[str]:
        """Return raw lines (verbose) or a summary of one phase log.

        Raises:
            FileNotFoundError: If the phase has no log file
        """
        log_fp = self._logs_dir / f"{phase}.jsonl"
        if not log_fp.exists():
            raise FileNotFoundError(f"Log file not found: {log_fp}")

        if verbose:
            return log_fp.read_text(encoding="utf-8").splitlines()
        return format_phase_summary(summarize_log(log_fp))

    def summarize_all(self) -> list[str]:
        return format_summary_table(summarize_logs(self._logs_dir))
