from __future__ import annotations

from typing import Optional

import anthropic
import openai

from ..core.domain.cwe import parse_cwe_answer
from ..core.domain.exceptions import VulnbenchError
from ..core.domain.models import SecurityInfo
from ..core.domain.prompt import build_fix_message_cwe_prompt, build_issue_message_cwe_prompt
from ..core.domain.security_patterns import match_security_patterns
from ..core.ports import LLMPort, LoggerPort

# Provider failures that degrade an inference to "no CWE"
LLM_ERRORS = (openai.OpenAIError, anthropic.AnthropicError, VulnbenchError)


class SecurityMessageClassifier:
    """Classifies commit and issue messages by security relevance and CWE.

    Pattern matching comes first. When a message is security related but names
    no CWE, a single-CWE inference is requested from the LLM. Without an LLM,
    or when the LLM fails, no CWE is inferred.
    """

    def __init__(
        self,
        *,
        llm: Optional[LLMPort],
        logger: LoggerPort,
        max_output_tokens: int = 16,
    ) -> None:
        self._llm = llm
        self._logger = logger
        self._max_output_tokens = max_output_tokens

    def classify(self, message: str) -> SecurityInfo:
        match = match_security_patterns(message)
        cwe_ids = match.cwe_ids.to_list()

        if not cwe_ids and match.security_related:
            inferred = self._ask(build_fix_message_cwe_prompt(message=message))
            if inferred:
                cwe_ids.append(inferred)
            self._logger.info("fix_cwe_inferred", cwe=inferred, inferred=inferred is not None)

        return SecurityInfo(
            cwe_ids=tuple(cwe_ids),
            security_related=match.security_related,
            vulnerability_types=match.vulnerability_types.to_tuple(),
        )

    def infer_cwe(self, message: str) -> Optional[str]:
        if not message:
            return None
        return self._ask(build_issue_message_cwe_prompt(message=message))

    def _ask(self, prompt: str) -> Optional[str]:
        if self._llm is None:
            return None
        try:
            answer = self._llm.complete(prompt=prompt, max_output_tokens=self._max_output_tokens)
        except LLM_ERRORS as e:
            self._logger.error("cwe_inference_failed", cause=str(e))
            return None
        return parse_cwe_answer(answer)
