from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal, Self

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from patchpoint.constants import (
    DEFAULT_BASE_DELAY,
    DEFAULT_BATCH_SIZE,
    DEFAULT_INTER_BATCH_DELAY,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER_ENDPOINT,
    DEFAULT_PROVIDER_TIMEOUT,
    MAX_OUTPUT_TOKENS,
    MAX_TOKENS_PER_GROUP,
)
from patchpoint.exceptions import ConfigError
from patchpoint.logging import get_logger

__all__ = [
    "PatchpointConfig",
    "GitHubConfig",
    "ProviderConfig",
    "RetryConfig",
    "BatchingConfig",
    "ReviewConfig",
    "load_config",
    "get_user_config_path",
    "PROJECT_CONFIG_FILENAME",
]

logger = get_logger(__name__)

PROJECT_CONFIG_FILENAME = "patchpoint.yaml"

#: Project config file chosen by load_config, read by the settings sources hook
_project_config_path: ContextVar[Path | None] = ContextVar(
    "patchpoint_project_config_path", default=None
)


class GitHubConfig(BaseModel):
    """Settings for GitHub integration.

    Attributes:
        repo: Default ``owner/name`` repository for the review command.
        rate_limit: Requests per hour; None disables client-side limiting.
    """

    repo: str | None = None
    rate_limit: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_repo_format(self) -> Self:
        if self.repo is not None and self.repo.count("/") != 1:
            raise ValueError(
                f"github.repo must look like 'owner/name', got {self.repo!r}"
            )
        return self


class ProviderConfig(BaseModel):
    """Settings for the OpenAI-compatible AI endpoint.

    Attributes:
        endpoint: Base URL; ``/chat/completions`` is appended.
        model: Model identifier sent with every request.
        api_key: Bearer token. Usually set via PATCHPOINT_PROVIDER__API_KEY.
        max_output_tokens: Maximum tokens in one answer.
        temperature: Sampling temperature.
        timeout_seconds: Total HTTP timeout per request.
        requests_per_minute: Optional client-side rate limit.
    """

    endpoint: str = DEFAULT_PROVIDER_ENDPOINT
    model: str = DEFAULT_MODEL
    api_key: SecretStr | None = None
    max_output_tokens: int = Field(default=MAX_OUTPUT_TOKENS, gt=0, le=200000)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=DEFAULT_PROVIDER_TIMEOUT, gt=0.0)
    requests_per_minute: int | None = Field(default=None, gt=0)


class RetryConfig(BaseModel):
    """Backoff settings shared by AI and GitHub calls."""

    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0, le=10)
    base_delay: float = Field(default=DEFAULT_BASE_DELAY, ge=0.0)
    max_delay: float = Field(default=DEFAULT_MAX_DELAY, ge=0.0)

    @model_validator(mode="after")
    def check_delays(self) -> Self:
        if self.max_delay < self.base_delay:
            logger.warning(
                "retry_max_delay_below_base",
                base_delay=self.base_delay,
                max_delay=self.max_delay,
            )
        return self


class BatchingConfig(BaseModel):
    """Settings for grouping files and pacing AI calls."""

    max_tokens_per_group: int = Field(default=MAX_TOKENS_PER_GROUP, gt=0)
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1, le=20)
    inter_batch_delay: float = Field(default=DEFAULT_INTER_BATCH_DELAY, ge=0.0)


class ReviewConfig(BaseModel):
    """Settings for what ends up on the pull request.

    Attributes:
        event: Review event used for inline reviews.
        deduplicate: Drop comments repeating the same path, position and body.
        include_summary: Put the AI's overall summary in the review body.
    """

    event: Literal["COMMENT", "REQUEST_CHANGES", "APPROVE"] = "COMMENT"
    deduplicate: bool = False
    include_summary: bool = True


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source that reads one YAML file."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file is None or not yaml_file.exists():
            return
        try:
            with open(yaml_file) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {yaml_file}: {e}") from e
        if loaded is None:
            logger.warning("config_file_empty", path=str(yaml_file))
        elif not isinstance(loaded, dict):
            raise ConfigError(
                f"Top level of {yaml_file} must be a mapping",
                value=type(loaded).__name__,
            )
        else:
            self._config_data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._config_data


class PatchpointConfig(BaseSettings):
    """Root configuration object containing all Patchpoint settings."""

    model_config = SettingsConfigDict(
        env_prefix="PATCHPOINT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    batching: BatchingConfig = Field(default_factory=BatchingConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order settings sources, earliest wins.

        1. Explicit init kwargs
        2. Environment variables (PATCHPOINT_*)
        3. Project YAML (./patchpoint.yaml or the path given to load_config)
        4. User YAML (~/.config/patchpoint/config.yaml)
        """
        project_path = (
            _project_config_path.get() or Path.cwd() / PROJECT_CONFIG_FILENAME
        )
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_user_config_path() -> Path:
    """Return ``~/.config/patchpoint/config.yaml``."""
    return Path.home() / ".config" / "patchpoint" / "config.yaml"


def load_config(config_path: Path | None = None) -> PatchpointConfig:
    """Load configuration: defaults, then user YAML, project YAML and env.

    Args:
        config_path: Project config file. Defaults to ./patchpoint.yaml.

    Returns:
        The merged configuration.

    Raises:
        ConfigError: If a file is unreadable or a value fails validation.
    """
    if config_path is None:
        config_path = Path.cwd() / PROJECT_CONFIG_FILENAME
    if not config_path.exists():
        logger.info("no_project_config", path=str(config_path))

    token = _project_config_path.set(config_path)
    try:
        return PatchpointConfig()
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
    finally:
        _project_config_path.reset(token)
