from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from dependency_injector.resources import Resource

from .handlers import build_json_file_handler, build_human_console_handler


class RunLogger(Resource):
    """Structured logger for one pipeline phase.

    Writes ``<logs_dir>/<phase>.jsonl`` when a phase is given and optionally
    mirrors events to the console in a human-readable form. Keyword arguments
    of each call become fields of the JSON record.
    """

    def init(
        self,
        *,
        phase: str | None = None,
        logs_dir: Path,
        logger_name: str = "vulnbench",
        console_output: bool = False,
        level: str = "INFO",
    ) -> "RunLogger":
        """Initialize handlers.

        Args:
            phase: Phase name (extract, evaluate-ai, ...); enables the JSONL file handler
            logs_dir: Directory to store log files
            logger_name: Logger name
            console_output: Whether to enable console output
            level: Logging level (DEBUG, INFO, WARNING, ERROR)

        Returns:
            Self for dependency_injector Resource pattern
        """
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers: list[logging.Handler] = []

        if phase:
            file_handler = build_json_file_handler(logs_dir / f"{phase}.jsonl", level=numeric_level)
            self._logger.addHandler(file_handler)
            self._handlers.append(file_handler)

        if console_output:
            console_handler = build_human_console_handler(level=numeric_level)
            self._logger.addHandler(console_handler)
            self._handlers.append(console_handler)

        return self

    def shutdown(self, resource: "RunLogger") -> None:
        """Flush and close handlers so log files can be read or removed."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, extra=kwargs or None)

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, extra=kwargs or None)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, extra=kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._logger.error(message, extra=kwargs or None, exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        self._logger.exception(message, extra=kwargs or None)
