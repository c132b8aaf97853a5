from __future__ import annotations

from typing import Optional

from .llm_adapters import get_adapter
from ..core.ports import LoggerPort


class LLM:
    def __init__(
        self,
        *,
        provider: str,
        model: str,
        api_key: str,
        logger: LoggerPort,
        max_output_tokens: int = 4096,
    ) -> None:
        self._provider = provider
        self._model = model
        self._api_key = api_key
        self._logger = logger
        self._max_output_tokens = max_output_tokens

    @property
    def model(self) -> str:
        return self._model

    def complete(
        self,
        *,
        prompt: str,
        system: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        self._logger.debug(
            "llm_input",
            provider=self._provider,
            model=self._model,
            prompt_len=len(prompt),
        )

        adapter = get_adapter(self._provider, self._model, self._api_key)
        resp = adapter.run(
            prompt,
            system=system,
            max_output_tokens=max_output_tokens or self._max_output_tokens,
        )
        text = resp.text

        usage = resp.usage
        if usage is not None:
            self._logger.info(
                "llm_usage",
                provider=self._provider,
                model=self._model,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                total_tokens=usage.total_tokens,
            )

        self._logger.debug(
            "llm_output",
            provider=self._provider,
            model=self._model,
            raw_text_len=len(text),
            raw_text=text,
        )
        return text
