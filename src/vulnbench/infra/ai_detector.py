from __future__ import annotations

import anthropic
import openai

from ..core.domain.exceptions import ContextLimitExceeded
from ..core.domain.models import AI_DETECTOR, DetectorOutcome
from ..core.domain.prompt import DETECTOR_SYSTEM_PROMPT, build_detection_prompt
from ..core.ports import LLMPort, LoggerPort
from ..core.services.json_extractor import JsonExtractor


class LLMVulnerabilityDetector:
    """AI detector that asks an LLM for the vulnerabilities in one file.

    Provider failures are returned as outcomes: a context window overflow is
    INCONCLUSIVE, any other provider or parsing failure is ERROR.
    """

    name = AI_DETECTOR

    def __init__(
        self,
        *,
        llm: LLMPort,
        logger: LoggerPort,
        max_output_tokens: int = 4096,
        json_extractor: JsonExtractor | None = None,
    ) -> None:
        self._llm = llm
        self._logger = logger
        self._max_output_tokens = max_output_tokens
        self._json_extractor = json_extractor or JsonExtractor()

    def analyze(self, content: str) -> DetectorOutcome:
        try:
            raw = self._llm.complete(
                prompt=build_detection_prompt(content=content),
                system=DETECTOR_SYSTEM_PROMPT,
                max_output_tokens=self._max_output_tokens,
            )
        except ContextLimitExceeded:
            return DetectorOutcome.inconclusive("context length exceeded model limits")
        except (openai.OpenAIError, anthropic.AnthropicError) as e:
            self._logger.error("ai_detector_failed", cause=str(e))
            return DetectorOutcome.error(f"AI error - {e}")

        parsed = self._json_extractor.extract(raw)
        if parsed is None:
            self._logger.warning("ai_response_unparsed", raw_text_len=len(raw))
            return DetectorOutcome.error("AI error - response is not a JSON object")
        return DetectorOutcome.success(parsed)
