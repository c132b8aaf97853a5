from __future__ import annotations

import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..core.domain.exceptions import RepositoryError, VersionControlError
from ..core.domain.models import FixingCommit

_PORCELAIN_HEADER_RE = re.compile(r"^([0-9a-f]{40}) (\d+) (\d+)(?: \d+)?$")


@contextmanager
def _git_errors() -> Iterator[None]:
    try:
        yield
    except (GitCommandError, ValueError) as e:
        raise VersionControlError(str(e)) from e


def line_ranges(lines: Sequence[int]) -> list[tuple[int, int]]:
    """Collapse sorted line numbers into inclusive (start, end) ranges."""
    ranges: list[tuple[int, int]] = []
    for n in sorted(set(lines)):
        if ranges and n == ranges[-1][1] + 1:
            ranges[-1] = (ranges[-1][0], n)
        else:
            ranges.append((n, n))
    return ranges


def parse_blame_porcelain(text: str) -> list[tuple[int, str]]:
    """Return (final line number, commit hash) pairs from ``git blame --porcelain`` output."""
    out: list[tuple[int, str]] = []
    for line in text.splitlines():
        m = _PORCELAIN_HEADER_RE.match(line)
        if m:
            out.append((int(m.group(3)), m.group(1)))
    return out


class GitRepository:
    """Version control adapter over one local clone using GitPython.

    Every method works on the single working tree at ``workdir``.
    """

    def __init__(self, *, workdir: Path) -> None:
        self._workdir = Path(workdir)
        try:
            self._repo = Repo(self._workdir)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryError(f"Not a git repository: {self._workdir}") from e

    @property
    def workdir(self) -> Path:
        return self._workdir

    def log(self, limit: Optional[int] = None) -> list[FixingCommit]:
        with _git_errors():
            commits = self._repo.iter_commits("HEAD", max_count=limit) if limit else self._repo.iter_commits("HEAD")
            return [
                FixingCommit(
                    hash=c.hexsha,
                    message=str(c.message),
                    parent_hash=c.parents[0].hexsha if c.parents else None,
                )
                for c in commits
            ]

    def diff(self, commit_a: str, commit_b: str, path: Optional[str] = None) -> str:
        with _git_errors():
            if path is None:
                return self._repo.git.diff(commit_a, commit_b)
            return self._repo.git.diff(commit_a, commit_b, "--", path)

    def changed_files(self, commit_a: str, commit_b: str) -> list[str]:
        with _git_errors():
            # -z keeps non-ASCII paths unquoted
            out = self._repo.git.diff("--name-only", "-z", commit_a, commit_b)
        return [name for name in out.split("\0") if name]

    def blame(self, revision: str, path: str, lines: Sequence[int]) -> list[tuple[int, str]]:
        """Blame the requested lines of path at revision.

        Lines past the end of the file at that revision, or a path that did not
        exist there, have no attribution and are left out of the result.
        """
        with _git_errors():
            try:
                content = self._repo.git.show(f"{revision}:{path}")
            except GitCommandError:
                return []
            total = len(content.splitlines())
            wanted = [n for n in lines if 1 <= n <= total]
            if not wanted:
                return []

            args: list[str] = ["--porcelain"]
            for start, end in line_ranges(wanted):
                args.extend(["-L", f"{start},{end}"])
            out = self._repo.git.blame(*args, revision, "--", path)
        return parse_blame_porcelain(out)

    def show_message(self, commit: str) -> str:
        with _git_errors():
            return str(self._repo.commit(commit).message)

    def commit_time(self, commit: str) -> int:
        with _git_errors():
            return int(self._repo.commit(commit).committed_date)

    def checkout(self, commit: str) -> None:
        with _git_errors():
            self._repo.git.checkout(commit)

    def reset_clean(self) -> None:
        with _git_errors():
            self._repo.git.reset("--hard")
            self._repo.git.clean("-f", "-d")

    def read_file(self, path: str) -> str:
        return (self._workdir / path).read_text(encoding="utf-8")

    def file_exists(self, path: str) -> bool:
        return (self._workdir / path).is_file()

    def current_ref(self) -> str:
        try:
            return self._repo.active_branch.name
        except TypeError:
            # detached HEAD
            return self._repo.head.commit.hexsha
