from .app.main import extract, evaluate_ai, evaluate_static, report, logs

__all__ = [
    "extract",
    "evaluate_ai",
    "evaluate_static",
    "report",
    "logs",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
