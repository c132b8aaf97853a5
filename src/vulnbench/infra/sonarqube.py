from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Any, Optional

import requests

from ..core.domain.exceptions import ConfigurationError, ExternalToolMissingError
from ..core.domain.models import STATIC_DETECTOR, DetectorOutcome
from ..core.ports import LoggerPort

PROPERTIES_FILE = "sonar-project.properties"

_BASE_PROPERTIES = (
    "sonar.sources=.",
    "sonar.exclusions=**/*.java",
    "sonar.c.file.suffixes=-",
    "sonar.cpp.file.suffixes=-",
    "sonar.objc.file.suffixes=-",
    "sonar.coverage.exclusions=**",
    "sonar.coverageReportPaths=",
    "sonar.verbose=false",
)


def project_key(revision: str) -> str:
    return f"autogen_{revision}"


def render_properties(revision: str, organization: Optional[str] = None) -> str:
    lines = [f"sonar.projectKey={project_key(revision)}", *_BASE_PROPERTIES]
    if organization:
        lines.append(f"sonar.organization={organization}")
    return "\n".join(lines) + "\n"


class SonarQubeScanner:
    """Static analysis provider backed by sonar-scanner and the SonarQube web API.

    Each revision is scanned as its own project (``autogen_<revision>``); the
    generated properties file is removed from the working tree afterwards.
    """

    name = STATIC_DETECTOR

    def __init__(
        self,
        *,
        url: Optional[str],
        token: Optional[str],
        logger: LoggerPort,
        organization: Optional[str] = None,
        scanner_command: str = "sonar-scanner",
        page_size: int = 500,
        timeout: float = 30.0,
    ) -> None:
        self._url = url.rstrip("/") if url else url
        self._token = token
        self._logger = logger
        self._organization = organization
        self._scanner_command = scanner_command
        self._page_size = page_size
        self._timeout = timeout

    def ensure_available(self) -> None:
        if not self._url:
            raise ConfigurationError("sonarqube.url")
        if not self._token:
            raise ConfigurationError("sonarqube.token")
        if shutil.which(self._scanner_command) is None:
            raise ExternalToolMissingError(self._scanner_command)

    def scan(self, revision: str, workdir: Path) -> DetectorOutcome:
        prop_path = Path(workdir) / PROPERTIES_FILE
        prop_path.write_text(render_properties(revision, self._organization), encoding="utf-8")
        try:
            try:
                subprocess.run(
                    [self._scanner_command],
                    cwd=str(workdir),
                    check=True,
                    capture_output=True,
                    text=True,
                )
            except (subprocess.CalledProcessError, OSError) as e:
                self._logger.error("sonar_scan_failed", commit=revision, cause=str(e))
                return DetectorOutcome.error(f"SonarQube scan failed: {e}")

            try:
                issues = self.fetch_issues(project_key(revision))
            except (requests.RequestException, ValueError) as e:
                self._logger.error("sonar_fetch_failed", commit=revision, cause=str(e))
                return DetectorOutcome.error(f"Could not fetch SonarQube results: {e}")
        finally:
            prop_path.unlink(missing_ok=True)

        self._logger.info("sonar_issues_fetched", commit=revision, issues=len(issues))
        return DetectorOutcome.success(issues)

    def fetch_issues(self, key: str) -> list[dict[str, Any]]:
        """Page through vulnerability issues reported for one project key."""
        issues: list[dict[str, Any]] = []
        page = 1
        while True:
            resp = requests.get(
                f"{self._url}/api/issues/search",
                params={
                    "componentKeys": key,
                    "types": "VULNERABILITY",
                    "ps": self._page_size,
                    "p": page,
                },
                auth=(self._token or "", ""),
                timeout=self._timeout,
            )
            resp.raise_for_status()
            data = resp.json()
            batch = data.get("issues")
            if not batch:
                break
            issues.extend(batch)
            total = int((data.get("paging") or {}).get("total", len(issues)))
            if len(issues) >= total:
                break
            page += 1
        return issues
