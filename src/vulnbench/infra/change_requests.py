from __future__ import annotations

from typing import Optional

import requests

from ..core.ports import LoggerPort

GITHUB_API_URL = "https://api.github.com"


class GitHubPullRequestLookup:
    """Finds the pull request that merged a commit through the GitHub REST API.

    Lookup failures are logged and treated as "no pull request"; the builder
    then falls back to a commit-based vulnerability id.
    """

    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        token: Optional[str],
        logger: LoggerPort,
        api_url: str = GITHUB_API_URL,
        timeout: float = 15.0,
    ) -> None:
        self._owner = owner
        self._repo = repo
        self._token = token
        self._logger = logger
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    def find_for_commit(self, commit: str) -> Optional[str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        url = f"{self._api_url}/repos/{self._owner}/{self._repo}/commits/{commit}/pulls"

        try:
            resp = requests.get(url, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            self._logger.warning("pr_lookup_failed", commit=commit, cause=str(e))
            return None

        if resp.status_code == 404:
            return None
        if not resp.ok:
            self._logger.warning("pr_lookup_failed", commit=commit, status_code=resp.status_code)
            return None

        try:
            pulls = resp.json()
        except ValueError as e:
            self._logger.warning("pr_lookup_failed", commit=commit, cause=f"invalid JSON: {e}")
            return None

        if not isinstance(pulls, list) or not pulls or not isinstance(pulls[0], dict):
            return None
        number = pulls[0].get("number")
        return str(number) if number is not None else None


class NullChangeRequestLookup:
    """Lookup for repositories with no hosting service, such as local clones."""

    def find_for_commit(self, commit: str) -> Optional[str]:
        return None
