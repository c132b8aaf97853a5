from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from ..domain.cwe import UNKNOWN_CWE, normalize_cwe
from ..domain.models import DetectionStatus, DetectorOutcome, Finding, NormalizedDetection
from ..ports import LoggerPort, SecurityMessageClassifierPort


def _line_range(value: Any) -> tuple[int, ...]:
    if value is None:
        return ()
    if isinstance(value, (int, str)):
        value = [value]
    out: list[int] = []
    for item in value:
        try:
            out.append(int(item))
        except (TypeError, ValueError):
            continue
    return tuple(out)


def strip_component_key(component: str) -> str:
    """Turn a SonarQube component key ("project:path/to/file") into a repository path."""
    _, sep, rest = component.partition(":")
    return rest if sep else component


class DetectionNormalizer:
    """Maps detector-specific output shapes onto Finding sequences.

    AI detector output arrives per file; static analyzer issues arrive per
    revision and are grouped by file here. Detector failures stay visible as a
    non-success NormalizedDetection so they end up SKIPPED, never FN.
    """

    def __init__(
        self,
        *,
        classifier: SecurityMessageClassifierPort,
        logger: LoggerPort,
    ) -> None:
        self._classifier = classifier
        self._logger = logger
        self._inferred: dict[str, str] = {}

    def from_ai_response(self, file_path: str, outcome: DetectorOutcome) -> NormalizedDetection:
        if outcome.status is not DetectionStatus.SUCCESS:
            return NormalizedDetection.skipped(outcome.status, outcome.cause or outcome.status.value)

        payload = outcome.payload
        if not isinstance(payload, Mapping) or not isinstance(payload.get("vulnerabilities"), list):
            return NormalizedDetection.skipped(
                DetectionStatus.ERROR, "malformed detector response: missing 'vulnerabilities' list"
            )

        findings: list[Finding] = []
        for item in payload["vulnerabilities"]:
            if not isinstance(item, Mapping):
                continue
            findings.append(
                Finding(
                    cwe_id=str(item.get("cwe_id") or UNKNOWN_CWE).strip(),
                    file_path=file_path,
                    line_range=_line_range(item.get("line_numbers")),
                    description=str(item.get("description") or ""),
                )
            )
        return NormalizedDetection.of(findings)

    def from_static_issues(self, issues: Iterable[Mapping[str, Any]]) -> dict[str, tuple[Finding, ...]]:
        """Group static analyzer issues by file, inferring missing CWEs from the message."""
        grouped: dict[str, list[Finding]] = {}
        for issue in issues:
            component = str(issue.get("component") or issue.get("file") or "")
            if not component:
                continue
            path = strip_component_key(component)
            message = str(issue.get("message") or "")
            cwe = self._static_cwe(issue.get("cwe"), message)
            grouped.setdefault(path, []).append(
                Finding(
                    cwe_id=cwe,
                    file_path=path,
                    line_range=_issue_lines(issue),
                    description=message,
                )
            )
        return {path: tuple(items) for path, items in grouped.items()}

    def for_file(
        self,
        grouped: Mapping[str, tuple[Finding, ...]],
        file_path: str,
    ) -> NormalizedDetection:
        return NormalizedDetection.of(grouped.get(file_path, ()))

    def _static_cwe(self, raw: Any, message: str) -> str:
        cwe = _first_cwe(raw)
        if cwe and normalize_cwe(cwe) != normalize_cwe(UNKNOWN_CWE):
            return cwe if cwe.upper().startswith("CWE-") else f"CWE-{cwe}"
        return self._infer(message)

    def _infer(self, message: str) -> str:
        if not message:
            return UNKNOWN_CWE
        cached = self._inferred.get(message)
        if cached is not None:
            return cached
        inferred: Optional[str] = self._classifier.infer_cwe(message)
        result = inferred or UNKNOWN_CWE
        self._inferred[message] = result
        self._logger.debug("issue_cwe_inferred", issue_message=message, cwe=result)
        return result


def _first_cwe(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, (list, tuple)):
        return str(raw[0]).strip() if raw else None
    text = str(raw).strip()
    return text or None


def _issue_lines(issue: Mapping[str, Any]) -> tuple[int, ...]:
    text_range = issue.get("textRange")
    if isinstance(text_range, Mapping):
        start = text_range.get("startLine")
        end = text_range.get("endLine", start)
        return _line_range([start, end])
    return _line_range(issue.get("line"))
