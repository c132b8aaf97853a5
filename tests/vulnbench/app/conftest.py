"""Shared fixtures for app-level tests."""
from pathlib import Path

import pytest
from dependency_injector import providers
from git import Repo

from vulnbench.app.config import AppConfig, DirectoryConfig, LLMConfig, SonarQubeConfig
from vulnbench.app.container import Container
from vulnbench.core.domain.models import DetectorOutcome

from fakes import FakeAIDetector, FakeStaticAnalyzer

VULNERABLE = "".join(f"line {n}\n" for n in range(1, 11)) + "db.execute('SELECT * FROM users WHERE name=' + name)\n"
FIXED = "".join(f"line {n}\n" for n in range(1, 11)) + "db.execute('SELECT * FROM users WHERE name=?', (name,))\n"


def create_history(tmp_path: Path) -> tuple[Path, str, str]:
    """Git repo where a CWE-89 fix edits a line introduced by an earlier commit."""
    repo_dir = tmp_path / "shop"
    repo = Repo.init(repo_dir)

    (repo_dir / "app").mkdir()
    (repo_dir / "app" / "db.py").write_text(VULNERABLE, encoding="utf-8")
    repo.index.add(["app/db.py"])
    origin = repo.index.commit("add login query").hexsha

    (repo_dir / "README.md").write_text("shop\n", encoding="utf-8")
    repo.index.add(["README.md"])
    repo.index.commit("docs")

    (repo_dir / "app" / "db.py").write_text(FIXED, encoding="utf-8")
    repo.index.add(["app/db.py"])
    fix = repo.index.commit("Fix CWE-89 SQL injection in login").hexsha

    repo.close()
    return repo_dir, origin, fix


@pytest.fixture
def history(tmp_path):
    return create_history(tmp_path)


@pytest.fixture
def test_config(tmp_path):
    """Create test configuration with explicit values."""
    return AppConfig(
        directories=DirectoryConfig(home=tmp_path / "home"),
        llm=LLMConfig(api_key="test-key", provider_name="openai", model_name="gpt-4o"),
        sonarqube=SonarQubeConfig(url="https://sonar.example.test", token="squ_test"),
    )


def sqli_detector() -> FakeAIDetector:
    return FakeAIDetector(default=DetectorOutcome.success(
        {"vulnerabilities": [{"cwe_id": "CWE-89", "line_numbers": [40, 45], "description": "concatenated SQL"}]}
    ))


@pytest.fixture
def mocked_container(monkeypatch):
    """Patch Container in the facade so detectors never reach the network."""
    ai = sqli_detector()
    static = FakeStaticAnalyzer()

    def create_mock_container():
        c = Container()
        c.ai_detector.override(providers.Object(ai))
        c.static_analyzer.override(providers.Object(static))
        c.classifier_llm.override(providers.Object(None))
        return c

    monkeypatch.setattr("vulnbench.app.main.Container", create_mock_container)
    return ai, static
