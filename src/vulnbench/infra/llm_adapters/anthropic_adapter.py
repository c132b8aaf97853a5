from __future__ import annotations

from typing import List

import anthropic

from ...core.domain.exceptions import ContextLimitExceeded
from .types import LLMResponse, TokenUsage


class AnthropicAdapter:
    """Anthropic Messages API adapter."""

    def __init__(self, model: str, api_key: str) -> None:
        self.model = model
        self._client = anthropic.Anthropic(api_key=api_key)

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_output_tokens: int = 800,
    ) -> LLMResponse:
        kwargs = {}
        if system:
            kwargs["system"] = system
        try:
            message = self._client.messages.create(
                model=self.model,
                max_tokens=max_output_tokens,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except anthropic.BadRequestError as e:
            if "prompt is too long" in str(e).lower():
                raise ContextLimitExceeded(str(e)) from e
            raise

        # message.content is a list of content blocks; only text blocks are joined
        texts: List[str] = [block.text for block in message.content if getattr(block, "type", None) == "text"]
        u = message.usage
        iu = u.input_tokens if u is not None else None
        ou = u.output_tokens if u is not None else None
        tt = (iu or 0) + (ou or 0) if (iu is not None or ou is not None) else None
        usage = TokenUsage(input_tokens=iu, output_tokens=ou, total_tokens=tt)
        return LLMResponse(text="".join(texts), usage=usage)
