from __future__ import annotations

from ..ports import LogStorePort


class LogsUseCase:
    def __init__(self, *, log_store: LogStorePort) -> None:
        self._log_store = log_store

    def execute(self, phase: str | None, verbose: bool) -> list[str]:
        if phase:
            return self._log_store.read_log(phase, verbose)
        return self._log_store.summarize_all()
