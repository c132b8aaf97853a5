from __future__ import annotations

from typing import Callable, Iterable, Optional, Protocol

from ..domain.ordered_set import OrderedSet
from ..ports import LoggerPort, VersionControlPort


class TieBreakStrategy(Protocol):
    """Selects one origin commit out of several attributed ones.

    Implementations must define a total order over commit hashes so the choice
    does not depend on the order blame lists them.
    """

    name: str

    def select(self, candidates: OrderedSet[str]) -> str:
        ...


class LexicalMaxTieBreak:
    """Pick the lexically greatest commit hash.

    Hashes carry no chronology, so this is reproducible but arbitrary.
    """

    name = "lexical-max"

    def select(self, candidates: OrderedSet[str]) -> str:
        return max(candidates)


class _CommitTimeTieBreak:
    name = ""
    _latest = False

    def __init__(self, commit_time: Callable[[str], int]) -> None:
        self._commit_time = commit_time

    def select(self, candidates: OrderedSet[str]) -> str:
        ordered = sorted(candidates, key=lambda h: (self._commit_time(h), h))
        return ordered[-1] if self._latest else ordered[0]


class EarliestCommitTieBreak(_CommitTimeTieBreak):
    """Pick the commit with the oldest committer timestamp; hash breaks ties."""

    name = "earliest"


class LatestCommitTieBreak(_CommitTimeTieBreak):
    """Pick the commit with the newest committer timestamp; hash breaks ties."""

    name = "latest"
    _latest = True


TIE_BREAK_STRATEGIES = ("lexical-max", "earliest", "latest")


def build_tie_break(name: str, *, vcs: VersionControlPort) -> TieBreakStrategy:
    """Factory that returns the tie-break strategy registered under name."""
    if name == "lexical-max":
        return LexicalMaxTieBreak()
    if name == "earliest":
        return EarliestCommitTieBreak(vcs.commit_time)
    if name == "latest":
        return LatestCommitTieBreak(vcs.commit_time)
    raise ValueError(f"tie-break must be one of {', '.join(TIE_BREAK_STRATEGIES)}; got {name!r}")


class OriginResolver:
    """Resolves the commit that introduced the lines a fix changed.

    Blame runs on the parent of the fixing commit, limited to the changed lines.
    Lines attributed to the fixing commit itself carry no prior origin and are
    ignored.
    """

    def __init__(
        self,
        *,
        vcs: VersionControlPort,
        strategy: TieBreakStrategy,
        logger: LoggerPort,
    ) -> None:
        self._vcs = vcs
        self._strategy = strategy
        self._logger = logger

    @property
    def strategy(self) -> TieBreakStrategy:
        return self._strategy

    def attributed_commits(
        self,
        *,
        path: str,
        fix_commit: str,
        parent: str,
        lines: Iterable[int],
    ) -> OrderedSet[str]:
        line_list = sorted(set(lines))
        if not line_list:
            return OrderedSet()
        attributed: OrderedSet[str] = OrderedSet()
        for _line, commit in self._vcs.blame(parent, path, line_list):
            if commit != fix_commit:
                attributed.add(commit)
        return attributed

    def resolve(
        self,
        *,
        path: str,
        fix_commit: str,
        parent: str,
        lines: Iterable[int],
    ) -> Optional[str]:
        """Return the origin commit hash, or None when no prior commit is attributed."""
        candidates = self.attributed_commits(
            path=path, fix_commit=fix_commit, parent=parent, lines=lines
        )
        if not candidates:
            return None

        origin = self._strategy.select(candidates)
        if len(candidates) > 1:
            self._logger.debug(
                "origin_tie_break",
                file=path,
                fix_commit=fix_commit,
                strategy=self._strategy.name,
                candidates=sorted(candidates),
                selected=origin,
            )
        return origin
