import pytest
from git import Repo

from vulnbench.core.domain.exceptions import RepositoryError
from vulnbench.infra.repository import RepositoryProvider, parse_github_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://github.com/acme/shop", ("acme", "shop")),
        ("https://github.com/acme/shop.git", ("acme", "shop")),
        ("git@github.com:acme/shop.git", ("acme", "shop")),
    ],
)
def test_parse_github_url(url, expected):
    assert parse_github_url(url) == expected


def test_parse_github_url_rejects_other_hosts():
    with pytest.raises(RepositoryError):
        parse_github_url("https://gitlab.com/acme")


def test_local_working_tree(tmp_path):
    repo_dir = tmp_path / "shop"
    Repo.init(repo_dir).close()

    info, path = RepositoryProvider(repos_dir=tmp_path / "repos").prepare(str(repo_dir))

    assert path == repo_dir.resolve()
    assert info.owner is None
    assert info.name == "shop"
    assert info.slug == "shop"


def test_local_path_must_be_git(tmp_path):
    (tmp_path / "plain").mkdir()

    with pytest.raises(RepositoryError):
        RepositoryProvider(repos_dir=tmp_path / "repos").prepare(str(tmp_path / "plain"))


def test_remote_clone_is_cached(tmp_path, monkeypatch):
    import vulnbench.infra.repository as mod

    clones = []

    def fake_clone(url, dest):
        clones.append(url)
        Repo.init(dest).close()

    monkeypatch.setattr(mod.Repo, "clone_from", staticmethod(fake_clone))
    provider = RepositoryProvider(repos_dir=tmp_path / "repos")

    info, path = provider.prepare("https://github.com/acme/shop")
    provider.prepare("https://github.com/acme/shop")

    assert clones == ["https://github.com/acme/shop"]
    assert path == tmp_path / "repos" / "shop"
    assert info.slug == "acme/shop"

    provider.prepare("https://github.com/acme/shop", force_reclone=True)
    assert len(clones) == 2
