import pytest
from pydantic import ValidationError

from vulnbench.app.config import AppConfig, TracingConfig


def test_defaults(tmp_path):
    config = AppConfig()

    assert config.directories.home == tmp_path / "home"
    assert config.llm.provider_name == "openai"
    assert config.tracing.tie_break == "lexical-max"
    assert config.sonarqube.scanner_command == "sonar-scanner"
    assert config.runtime.phase is None


def test_nested_env_vars(monkeypatch):
    monkeypatch.setenv("VULNBENCH_LLM__API_KEY", "sk-env")
    monkeypatch.setenv("VULNBENCH_TRACING__TIE_BREAK", "earliest")
    monkeypatch.setenv("VULNBENCH_SONARQUBE__PAGE_SIZE", "100")

    config = AppConfig()

    assert config.llm.api_key == "sk-env"
    assert config.tracing.tie_break == "earliest"
    assert config.sonarqube.page_size == 100


def test_unprefixed_env_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("LEVEL", "DEBUG")
    monkeypatch.setenv("API_KEY", "leaked")

    config = AppConfig()

    assert config.logging.level == "INFO"
    assert config.llm.api_key is None


def test_computed_directories(tmp_path):
    config = AppConfig()
    home = tmp_path / "home"

    assert config.directories.repos_dir == home / "repos"
    assert config.directories.logs_dir.is_dir()
    assert config.directories.reports_dir.is_dir()
    assert config.directories.database_path == home / "security_analysis.db"


def test_unknown_tie_break_rejected():
    with pytest.raises(ValidationError):
        TracingConfig(tie_break="coin-flip")


def test_for_phase_copies_config():
    config = AppConfig()

    phased = config.for_phase("extract", console_output=True)

    assert phased.runtime.phase == "extract"
    assert phased.logging.console_output is True
    assert config.runtime.phase is None


def test_config_is_frozen():
    config = AppConfig()

    with pytest.raises(ValidationError):
        config.llm = None
