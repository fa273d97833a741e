"""carfind Configuration.

Environment Variables:
    CARFIND_OLLAMA_ENDPOINT: Ollama API endpoint URL (OLLAMA_URL also accepted)
    CARFIND_OLLAMA_MODEL: Ollama model used for prompt parsing
    CARFIND_REQUEST_TIMEOUT: Remote parse timeout in seconds
    CARFIND_REMOTE_ENABLED: Set to false to always parse deterministically
    CARFIND_MIN_CONFIDENCE_THRESHOLD: Minimum confidence to run a search
    CARFIND_MAX_YEAR_DIFF: How many years back a year is still valid
    CARFIND_MAX_PROMPT_LENGTH: Prompts are truncated to this many characters
    CARFIND_DEBUG: Enable DEBUG logging (read by the CLI)
"""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.prompt_search.types import (
    DEFAULT_MAX_PROMPT_LENGTH,
    DEFAULT_MAX_YEAR_DIFF,
    DEFAULT_MIN_CONFIDENCE,
    PromptSearchConfig,
)

CONFIG_DIR_NAME = ".carfind"
CONFIG_FILE_NAME = "config.yaml"

# Keys persisted to config.yaml
FILE_KEYS = (
    "ollama_endpoint",
    "ollama_model",
    "request_timeout",
    "remote_enabled",
    "min_confidence_threshold",
    "max_year_diff",
    "max_prompt_length",
)


class AppConfig(BaseSettings):
    """Application configuration with environment variable support.

    Configuration is loaded from environment variables with CARFIND_ prefix.
    For example, CARFIND_OLLAMA_ENDPOINT sets ollama_endpoint.

    Precedence (highest to lowest):
        1. Environment variables (CARFIND_*, OLLAMA_URL)
        2. Config file (.carfind/config.yaml)
        3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CARFIND_",
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=(),
    )

    project_path: Path = Field(default_factory=Path.cwd)

    # Remote parsing backend
    ollama_endpoint: str = Field(
        default="http://ollama:11434",
        validation_alias=AliasChoices("CARFIND_OLLAMA_ENDPOINT", "OLLAMA_URL", "ollama_endpoint"),
    )
    ollama_model: str = "llama3.2"
    request_timeout: float = Field(default=10.0, gt=0)
    remote_enabled: bool = True

    # Prompt parsing
    min_confidence_threshold: float = Field(default=DEFAULT_MIN_CONFIDENCE, ge=0.0, le=1.0)
    max_year_diff: int = Field(default=DEFAULT_MAX_YEAR_DIFF, ge=0)
    max_prompt_length: int = Field(default=DEFAULT_MAX_PROMPT_LENGTH, gt=0)

    @classmethod
    def load(cls, path: Path) -> "AppConfig":
        """Load configuration from .carfind/config.yaml if it exists.

        File values fill in anything not set through the environment.

        Args:
            path: Project path to load configuration for

        Returns:
            AppConfig with file values applied (or defaults if no file exists)
        """
        from ruamel.yaml import YAML

        config = cls(project_path=path)
        config_file = path / CONFIG_DIR_NAME / CONFIG_FILE_NAME

        if config_file.exists():
            yaml = YAML()
            with config_file.open() as f:
                data = yaml.load(f)

            if data:
                overrides = {
                    key: data[key]
                    for key in FILE_KEYS
                    if key in data and key not in config.model_fields_set
                }
                if overrides:
                    config = cls(project_path=path, **{**_explicit(config), **overrides})

        return config

    def save(self) -> None:
        """Save configuration to .carfind/config.yaml in the project path."""
        from ruamel.yaml import YAML

        config_dir = self.project_path / CONFIG_DIR_NAME
        config_dir.mkdir(parents=True, exist_ok=True)
        config_file = config_dir / CONFIG_FILE_NAME

        yaml = YAML()
        yaml.default_flow_style = False

        data = {key: getattr(self, key) for key in FILE_KEYS}

        with config_file.open("w") as f:
            yaml.dump(data, f)

    def to_prompt_search_config(self) -> PromptSearchConfig:
        """Derive prompt parsing tunables."""
        return PromptSearchConfig(
            min_confidence_threshold=self.min_confidence_threshold,
            max_year_diff=self.max_year_diff,
            max_prompt_length=self.max_prompt_length,
        )


def _explicit(config: AppConfig) -> dict:
    """Fields that were set explicitly (environment or constructor)."""
    return {key: getattr(config, key) for key in config.model_fields_set if key != "project_path"}


__all__ = ["AppConfig", "CONFIG_DIR_NAME", "CONFIG_FILE_NAME"]
