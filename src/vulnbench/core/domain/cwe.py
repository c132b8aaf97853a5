from __future__ import annotations

import re

UNKNOWN_CWE = "UNKNOWN"

_CWE_ID_RE = re.compile(r"^CWE-\d+$", re.IGNORECASE)


def normalize_cwe(value: str | None) -> str:
    """Return the comparable form of a CWE identifier.

    "CWE-79", "cwe-79" and "79" all normalize to "79".
    """
    text = (value or "").strip().lower()
    if text.startswith("cwe-"):
        text = text[len("cwe-"):]
    return text.strip()


def cwe_equals(a: str | None, b: str | None) -> bool:
    na = normalize_cwe(a)
    return bool(na) and na == normalize_cwe(b)


def parse_cwe_answer(answer: str | None) -> str | None:
    """Accept an LLM answer only when it is exactly one CWE identifier."""
    text = (answer or "").strip().strip('"').strip("'").strip()
    if _CWE_ID_RE.match(text):
        return text.upper()
    return None
