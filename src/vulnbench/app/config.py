from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs
from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.services.origin_resolver import TIE_BREAK_STRATEGIES


APP_NAME = "vulnbench"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_cache_dir)


class DirectoryConfig(BaseModel):
    """Directory configuration with computed paths."""

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all vulnbench data",
    )

    database: Path | None = Field(
        default=None,
        description="SQLite database file (defaults to <home>/security_analysis.db)",
    )

    @computed_field
    @property
    def repos_dir(self) -> Path:
        """Clone directory for mined repositories."""
        path = self.home / "repos"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def logs_dir(self) -> Path:
        """Logs directory for phase logs."""
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def reports_dir(self) -> Path:
        """Directory for saved benchmark reports."""
        path = self.home / "reports"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def database_path(self) -> Path:
        if self.database is not None:
            return self.database
        self.home.mkdir(parents=True, exist_ok=True)
        return self.home / "security_analysis.db"


class LLMConfig(BaseModel):
    """LLM configuration."""

    api_key: str | None = Field(
        default=None,
        description="LLM API key (supports OpenAI, Anthropic)",
    )

    provider_name: str = Field(
        default="openai",
        description="LLM provider (openai, anthropic)",
    )

    model_name: str = Field(
        default="gpt-4o",
        description="Model used by the AI detector",
    )

    classifier_model_name: str = Field(
        default="gpt-4o-mini",
        description="Model used for CWE inference from commit and issue messages",
    )

    max_output_tokens: int = Field(
        default=4096,
        description="Output token budget for a detector call",
    )


class GitHubConfig(BaseModel):
    """GitHub configuration."""

    token: str | None = Field(
        default=None,
        description="GitHub personal access token for pull request lookup",
    )


class SonarQubeConfig(BaseModel):
    """SonarQube server and scanner configuration."""

    url: str | None = Field(default=None, description="SonarQube server URL")
    token: str | None = Field(default=None, description="SonarQube user token")
    organization: str | None = Field(default=None, description="SonarCloud organization key")
    scanner_command: str = Field(default="sonar-scanner", description="Scanner executable")
    page_size: int = Field(default=500, description="Issues fetched per API page")


class TracingConfig(BaseModel):
    """Provenance tracing settings."""

    tie_break: str = Field(
        default="lexical-max",
        description="Origin selection among several blamed commits (lexical-max, earliest, latest)",
    )

    @field_validator("tie_break")
    @classmethod
    def _known_strategy(cls, value: str) -> str:
        if value not in TIE_BREAK_STRATEGIES:
            raise ValueError(f"tie_break must be one of {', '.join(TIE_BREAK_STRATEGIES)}")
        return value


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level")
    console_output: bool = Field(default=False, description="Mirror log events to stderr")
    logger_name: str = Field(default="vulnbench", description="Logger name")


class RuntimeConfig(BaseModel):
    """Values fixed per invocation rather than read from the environment."""

    phase: str | None = None
    workdir: Path | None = None
    owner: str | None = None
    repo_name: str | None = None


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with VULNBENCH_ prefix.
    Use double underscore for nested config: VULNBENCH_LLM__API_KEY

    Example env vars:
        # Required for evaluate-ai
        export VULNBENCH_LLM__API_KEY=sk-xxxxxxxxxxxxx

        # Required for evaluate-static
        export VULNBENCH_SONARQUBE__URL=https://sonarcloud.io
        export VULNBENCH_SONARQUBE__TOKEN=squ_xxxxxxxxxxxxx

        # Optional (with defaults)
        export VULNBENCH_GITHUB__TOKEN=ghp_xxxxxxxxxxxxx
        export VULNBENCH_LLM__PROVIDER_NAME=openai
        export VULNBENCH_TRACING__TIE_BREAK=lexical-max
        export VULNBENCH_DIRECTORIES__HOME=/custom/path
    """

    model_config = SettingsConfigDict(
        env_prefix="VULNBENCH_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    sonarqube: SonarQubeConfig = Field(default_factory=SonarQubeConfig)
    tracing: TracingConfig = Field(default_factory=TracingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    def for_phase(self, phase: str, *, console_output: bool | None = None) -> "AppConfig":
        """Return a copy configured for one pipeline phase."""
        update: dict[str, object] = {"runtime": self.runtime.model_copy(update={"phase": phase})}
        if console_output is not None:
            update["logging"] = self.logging.model_copy(update={"console_output": console_output})
        return self.model_copy(update=update)
