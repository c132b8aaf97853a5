"""Domain exceptions for vulnbench."""

from __future__ import annotations


class VulnbenchError(Exception):
    """Base class for errors raised by vulnbench."""


class ConfigurationError(VulnbenchError):
    """Raised when required credentials or service URLs are missing.

    Fatal for the phase that needs them: running without them would produce
    misleading partial verdicts.
    """

    def __init__(self, setting: str, message: str | None = None) -> None:
        self.setting = setting
        if message is None:
            message = f"Missing required setting: {setting}"
        super().__init__(message)


class ExternalToolMissingError(VulnbenchError):
    """Raised when a required executable is not available on PATH."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"Required tool not found in PATH: {tool}")


class RepositoryError(VulnbenchError):
    """Raised when the repository locator cannot be resolved or opened."""


class ContextLimitExceeded(VulnbenchError):
    """Raised by LLM adapters when the provider rejects the prompt size."""


class VersionControlError(VulnbenchError):
    """Raised when a git operation on the mined repository fails."""
