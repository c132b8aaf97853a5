"""Tests for OriginResolver and tie-break strategies."""
import pytest

from vulnbench.core.domain.ordered_set import OrderedSet
from vulnbench.core.services import (
    EarliestCommitTieBreak,
    LatestCommitTieBreak,
    LexicalMaxTieBreak,
    OriginResolver,
    build_tie_break,
)

from fakes import FakeLogger, FakeVcs


def _resolver(blame, strategy=None, times=None):
    vcs = FakeVcs(blame={("parent", "f.py"): blame}, times=times or {})
    logger = FakeLogger()
    return OriginResolver(vcs=vcs, strategy=strategy or LexicalMaxTieBreak(), logger=logger), vcs, logger


def test_single_attribution():
    resolver, vcs, _ = _resolver({5: "aaa"})

    assert resolver.resolve(path="f.py", fix_commit="fix", parent="parent", lines=[5]) == "aaa"
    assert vcs.blame_calls == [("parent", "f.py", [5])]


def test_fix_commit_and_missing_lines_are_excluded():
    resolver, _, _ = _resolver({1: "fix", 2: "bbb"})

    assert resolver.attributed_commits(path="f.py", fix_commit="fix", parent="parent", lines=[1, 2, 99]) == {"bbb"}


def test_no_attribution_returns_none():
    resolver, vcs, _ = _resolver({1: "fix"})

    assert resolver.resolve(path="f.py", fix_commit="fix", parent="parent", lines=[1]) is None
    assert resolver.resolve(path="f.py", fix_commit="fix", parent="parent", lines=[]) is None


def test_tie_break_is_order_independent():
    resolver, _, logger = _resolver({1: "111", 2: "fff", 3: "999"})

    forward = resolver.resolve(path="f.py", fix_commit="fix", parent="parent", lines=[1, 2, 3])
    backward = resolver.resolve(path="f.py", fix_commit="fix", parent="parent", lines=[3, 2, 1])

    assert forward == backward == "fff"
    assert logger.fields("origin_tie_break")[0]["candidates"] == ["111", "999", "fff"]


def test_lexical_max_permutations():
    strategy = LexicalMaxTieBreak()

    assert strategy.select(OrderedSet(["a1", "c3", "b2"])) == strategy.select(OrderedSet(["c3", "b2", "a1"])) == "c3"


def test_commit_time_strategies():
    times = {"old": 100, "new": 300, "mid": 200, "twin": 100}.get

    candidates = OrderedSet(["mid", "new", "twin", "old"])

    # equal timestamps fall back to the hash
    assert EarliestCommitTieBreak(times).select(candidates) == "old"
    assert LatestCommitTieBreak(times).select(candidates) == "new"


def test_build_tie_break_by_name():
    vcs = FakeVcs(times={"a": 1})

    assert build_tie_break("lexical-max", vcs=vcs).name == "lexical-max"
    assert build_tie_break("earliest", vcs=vcs).name == "earliest"
    assert build_tie_break("latest", vcs=vcs).name == "latest"
    with pytest.raises(ValueError):
        build_tie_break("random", vcs=vcs)
