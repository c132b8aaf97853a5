from __future__ import annotations

import json
import re
from typing import Any, Optional

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```\s*$", re.DOTALL)


class JsonExtractor:
    """Domain service for pulling a JSON object out of an LLM reply.

    Replies may be wrapped in a markdown code fence or surrounded by prose.
    """

    def extract(self, text: str) -> Optional[dict[str, Any]]:
        """Return the first top-level JSON object found in text, or None."""
        body = text.strip()
        fenced = _FENCE_RE.match(body)
        if fenced:
            body = fenced.group(1).strip()

        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            parsed = None

        if parsed is None:
            start = body.find("{")
            end = body.rfind("}")
            if start == -1 or end <= start:
                return None
            try:
                parsed = json.loads(body[start:end + 1])
            except json.JSONDecodeError:
                return None

        return parsed if isinstance(parsed, dict) else None
