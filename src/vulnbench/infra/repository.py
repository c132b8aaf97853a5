from __future__ import annotations

import re
import shutil
from pathlib import Path

from git import Repo
from git.exc import GitCommandError

from ..core.domain.exceptions import RepositoryError
from ..core.domain.models import RepositoryInfo

_GITHUB_RE = re.compile(r"github\.com[/:]([^/]+)/([^/]+?)(?:\.git)?/?$")


def parse_github_url(url: str) -> tuple[str, str]:
    """Return (owner, repo) from a GitHub https or ssh URL.

    Raises:
        RepositoryError: If the URL does not name a GitHub repository
    """
    m = _GITHUB_RE.search(url.strip())
    if not m:
        raise RepositoryError(f"Invalid GitHub repository URL: {url}")
    return m.group(1), m.group(2)


def _is_remote(locator: str) -> bool:
    return locator.startswith(("http://", "https://", "git@"))


class RepositoryProvider:
    """Locates the repository under study, cloning remote URLs into the cache."""

    def __init__(self, *, repos_dir: Path) -> None:
        self._repos_dir = repos_dir

    def prepare(self, locator: str, *, force_reclone: bool = False) -> tuple[RepositoryInfo, Path]:
        """Return repository metadata and the local working tree for locator.

        Remote GitHub URLs are cloned into ``repos_dir/<name>`` when absent.
        Local paths must already be git working trees.
        """
        if _is_remote(locator):
            owner, name = parse_github_url(locator)
            path = self._ensure_clone(locator, name, force_reclone)
            return RepositoryInfo(owner=owner, name=name, url=locator, path=str(path)), path

        path = Path(locator).expanduser().resolve()
        if not (path / ".git").exists():
            raise RepositoryError(f"Repository path is not a git working tree: {path}")
        return RepositoryInfo(owner=None, name=path.name, url=str(path), path=str(path)), path

    def _ensure_clone(self, url: str, name: str, force_reclone: bool) -> Path:
        base = self._repos_dir / name
        if force_reclone and base.exists():
            shutil.rmtree(base)
        if not base.exists():
            base.parent.mkdir(parents=True, exist_ok=True)
            try:
                Repo.clone_from(url, base)
            except GitCommandError as e:
                raise RepositoryError(f"Failed to clone {url}: {e}") from e
        return base
