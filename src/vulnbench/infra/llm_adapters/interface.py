from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import LLMResponse


@runtime_checkable
class LLMAdapter(Protocol):
    """Minimal interface for running one prompt against a provider."""

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_output_tokens: int = 800,
    ) -> LLMResponse:
        """Run a request and return normalized text + token usage.

        Raises ContextLimitExceeded when the provider rejects the prompt size.
        """
        raise NotImplementedError
