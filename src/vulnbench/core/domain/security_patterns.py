"""Commit-message patterns that indicate a security fix."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .ordered_set import OrderedSet


@dataclass(frozen=True)
class VulnerabilityTypePattern:
    label: str
    pattern: re.Pattern[str]
    cwe: str


CWE_PATTERN = re.compile(r"CWE-(\d+)", re.IGNORECASE)

OWASP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"OWASP[-\s]?A[1-9][0-9]?", re.IGNORECASE),  # Top 10
    re.compile(r"OWASP[-\s]?M[1-9][0-9]?", re.IGNORECASE),  # Mobile Top 10
)

KEYWORD_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"fix(?:es|ed)?\s+(?:security|vulnerability|exploit|bug)", re.IGNORECASE),
    re.compile(r"(?:security|vulnerability)\s+(?:fix|patch|update)", re.IGNORECASE),
    re.compile(r"CVE-\d{4}-\d{4,}", re.IGNORECASE),
    re.compile(r"GHSA-[a-zA-Z0-9-]+", re.IGNORECASE),
    re.compile(r"hotfix", re.IGNORECASE),
    re.compile(r"secure\s+coding", re.IGNORECASE),
    re.compile(r"security\s+issue", re.IGNORECASE),
)

VULNERABILITY_TYPES: tuple[VulnerabilityTypePattern, ...] = tuple(
    VulnerabilityTypePattern(label, re.compile(rx, re.IGNORECASE), cwe)
    for label, rx, cwe in (
        ("SQL injection", r"(?:SQL|NoSQL)\s+injection", "CWE-89"),
        ("cross-site scripting", r"XSS|cross[-\s]?site\s+scripting", "CWE-79"),
        ("cross-site request forgery", r"CSRF|cross[-\s]?site\s+request\s+forgery", "CWE-352"),
        ("buffer overflow", r"buffer\s+overflow", "CWE-120"),
        ("race condition", r"race\s+condition", "CWE-362"),
        ("path traversal", r"path\s+traversal", "CWE-22"),
        ("command injection", r"command\s+injection", "CWE-78"),
        ("deserialization", r"deserialization", "CWE-502"),
        ("authentication bypass", r"authentication\s+bypass", "CWE-287"),
        ("authorization bypass", r"authorization\s+bypass", "CWE-285"),
        ("directory listing", r"directory\s+listing", "CWE-548"),
        ("hardcoded credentials", r"hardcoded\s+(?:password|credential)", "CWE-798"),
        ("insecure cookie", r"insecure\s+cookie", "CWE-614"),
        ("unvalidated redirect", r"unvalidated\s+redirect", "CWE-601"),
    )
)


@dataclass
class PatternMatch:
    cwe_ids: OrderedSet[str]
    vulnerability_types: OrderedSet[str]
    security_related: bool


def match_security_patterns(message: str) -> PatternMatch:
    """Scan a commit message for CWE ids, OWASP ids, keywords and vulnerability types.

    CWE ids are collected in the order they are found: explicit CWE references,
    then OWASP identifiers, then CWEs implied by vulnerability type names.
    """
    cwe_ids: OrderedSet[str] = OrderedSet()
    types: OrderedSet[str] = OrderedSet()
    related = False

    for m in CWE_PATTERN.finditer(message):
        cwe_ids.add(f"CWE-{m.group(1)}")
        related = True

    for pattern in OWASP_PATTERNS:
        for m in pattern.finditer(message):
            cwe_ids.add(m.group(0).upper())
            related = True

    if any(p.search(message) for p in KEYWORD_PATTERNS):
        related = True

    for vt in VULNERABILITY_TYPES:
        if vt.pattern.search(message):
            cwe_ids.add(vt.cwe)
            types.add(vt.label)
            related = True

    return PatternMatch(cwe_ids=cwe_ids, vulnerability_types=types, security_related=related)
