"""Unit tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from patchpoint.config import (
    PROJECT_CONFIG_FILENAME,
    PatchpointConfig,
    get_user_config_path,
    load_config,
)
from patchpoint.constants import MAX_TOKENS_PER_GROUP
from patchpoint.exceptions import ConfigError


@pytest.fixture
def workspace(isolated_home: Path, clean_env: None, temp_dir: Path) -> Path:
    return temp_dir


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults(self, workspace: Path) -> None:
        config = load_config()

        assert config.batching.max_tokens_per_group == MAX_TOKENS_PER_GROUP
        assert config.retry.max_retries == 3
        assert config.review.event == "COMMENT"
        assert config.review.deduplicate is False
        assert config.provider.api_key is None
        assert config.verbosity == "warning"

    def test_project_yaml(self, workspace: Path) -> None:
        (workspace / PROJECT_CONFIG_FILENAME).write_text(
            "github:\n  repo: acme/shop\nbatching:\n  batch_size: 5\nverbosity: debug\n"
        )

        config = load_config()

        assert config.github.repo == "acme/shop"
        assert config.batching.batch_size == 5
        assert config.verbosity == "debug"

    def test_explicit_path(self, workspace: Path) -> None:
        path = workspace / "custom.yaml"
        path.write_text("review:\n  event: REQUEST_CHANGES\n")

        assert load_config(path).review.event == "REQUEST_CHANGES"

    def test_env_overrides_yaml(
        self, workspace: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (workspace / PROJECT_CONFIG_FILENAME).write_text("retry:\n  max_retries: 5\n")
        monkeypatch.setenv("PATCHPOINT_RETRY__MAX_RETRIES", "1")
        monkeypatch.setenv("PATCHPOINT_PROVIDER__API_KEY", "sk-env")

        config = load_config()

        assert config.retry.max_retries == 1
        assert config.provider.api_key is not None
        assert config.provider.api_key.get_secret_value() == "sk-env"

    def test_user_config_is_lowest_priority(
        self, workspace: Path, isolated_home: Path
    ) -> None:
        user_config = get_user_config_path()
        user_config.parent.mkdir(parents=True)
        user_config.write_text("batching:\n  batch_size: 7\n  inter_batch_delay: 1.5\n")
        (workspace / PROJECT_CONFIG_FILENAME).write_text("batching:\n  batch_size: 2\n")

        config = load_config()

        assert user_config.is_relative_to(isolated_home)
        assert config.batching.batch_size == 2
        assert config.batching.inter_batch_delay == 1.5

    def test_invalid_value_names_field(self, workspace: Path) -> None:
        (workspace / PROJECT_CONFIG_FILENAME).write_text("batching:\n  batch_size: 0\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert exc_info.value.field == "batching.batch_size"

    def test_invalid_repo_format(self, workspace: Path) -> None:
        (workspace / PROJECT_CONFIG_FILENAME).write_text(
            "github:\n  repo: just-a-name\n"
        )

        with pytest.raises(ConfigError, match="owner/name"):
            load_config()

    def test_invalid_yaml(self, workspace: Path) -> None:
        (workspace / PROJECT_CONFIG_FILENAME).write_text("github: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config()

    def test_non_mapping_top_level(self, workspace: Path) -> None:
        (workspace / PROJECT_CONFIG_FILENAME).write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config()


class TestPatchpointConfig:
    """Tests for direct construction."""

    def test_init_kwargs(self, isolated_home: Path, clean_env: None) -> None:
        config = PatchpointConfig(review={"include_summary": False})

        assert config.review.include_summary is False
