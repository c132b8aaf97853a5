from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

# LogRecord attributes that are not structured event fields
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JSONFormatter(JsonFormatter):
    """JSON formatter using python-json-logger.

    Every log call becomes one JSON object: timestamp, level, logger, the event
    name as ``message`` and the keyword fields passed by the caller.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("timestamp", self.formatTime(record, "%Y-%m-%dT%H:%M:%S"))
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()


class HumanReadableFormatter(logging.Formatter):
    """Console formatter: event name followed by its fields as key=value pairs."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in _RESERVED}
        if not fields:
            return base
        rendered = " ".join(f"{k}={v}" for k, v in fields.items())
        return f"{base} {rendered}"
