from __future__ import annotations

import openai
from openai import OpenAI

from ...core.domain.exceptions import ContextLimitExceeded
from .types import LLMResponse, TokenUsage

_CONTEXT_MARKERS = ("context_length_exceeded", "maximum context length")


def is_context_limit_error(err: openai.APIError) -> bool:
    code = getattr(err, "code", None)
    if code == "context_length_exceeded":
        return True
    text = str(err).lower()
    return any(marker in text for marker in _CONTEXT_MARKERS)


class OpenAIAdapter:
    """OpenAI Responses API adapter (gpt-4.1, gpt-5, o3, etc.)."""

    def __init__(self, model: str, api_key: str) -> None:
        self.model = model
        self._client = OpenAI(api_key=api_key)

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_output_tokens: int = 800,
    ) -> LLMResponse:
        try:
            response = self._client.responses.create(
                model=self.model,
                input=prompt,
                instructions=system,
                max_output_tokens=max(max_output_tokens, 16),
            )
        except openai.BadRequestError as e:
            if is_context_limit_error(e):
                raise ContextLimitExceeded(str(e)) from e
            raise

        usage = None
        u = response.usage
        if u is not None:
            iu = u.input_tokens
            ou = u.output_tokens
            tt = u.total_tokens if u.total_tokens is not None else (iu or 0) + (ou or 0)
            usage = TokenUsage(input_tokens=iu, output_tokens=ou, total_tokens=tt)
        return LLMResponse(text=response.output_text or "", usage=usage)
