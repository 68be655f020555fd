"""
Unit tests for configuration system.

These tests verify that the configuration system works correctly
and can load settings from environment variables.
"""

import pytest
from pydantic import ValidationError

from chronicle.config import Config, LogConfig, RepositoryConfig


def test_config_has_defaults() -> None:
    """Test that Config initializes with sensible defaults."""
    config = Config()

    assert config.repository.default_branch == "main"
    assert config.repository.default_log_limit == 10
    assert config.repository.short_id_length == 7
    assert config.repository.id_strategy == "uuid"

    assert config.logging.level == "INFO"
    assert config.logging.enable_file_logging is False


def test_repository_config_default_messages() -> None:
    """Test RepositoryConfig default messages."""
    repo_config = RepositoryConfig()

    assert repo_config.commit_message == "Update"
    assert repo_config.merge_label == "merged"
    assert repo_config.squash_message == "Squashed commits"
    assert repo_config.stash_message == "WIP"


def test_log_config_defaults() -> None:
    """Test LogConfig default values."""
    log_config = LogConfig()

    assert log_config.level == "INFO"
    assert log_config.rotation == "100 MB"
    assert log_config.retention == "1 month"
    assert log_config.log_dir == "logs"
    assert log_config.enable_console_logging is True


def test_repository_config_rejects_non_positive_limit() -> None:
    """Test that the log limit must be positive."""
    with pytest.raises(ValidationError):
        RepositoryConfig(default_log_limit=0)


def test_repository_config_rejects_unknown_strategy() -> None:
    """Test that only known id strategies are accepted."""
    with pytest.raises(ValidationError):
        RepositoryConfig(id_strategy="random")


def test_repository_config_rejects_empty_branch() -> None:
    """Test that the default branch name cannot be empty."""
    with pytest.raises(ValidationError):
        RepositoryConfig(default_branch="")


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test loading configuration from environment variables."""
    monkeypatch.setenv("CHRONICLE_DEFAULT_BRANCH", "trunk")
    monkeypatch.setenv("CHRONICLE_LOG_LIMIT", "25")
    monkeypatch.setenv("CHRONICLE_SHORT_ID_LENGTH", "10")
    monkeypatch.setenv("CHRONICLE_ID_STRATEGY", "counter")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_DIR", "/tmp/chronicle-logs")

    config = Config.from_env()

    assert config.repository.default_branch == "trunk"
    assert config.repository.default_log_limit == 25
    assert config.repository.short_id_length == 10
    assert config.repository.id_strategy == "counter"
    assert config.logging.level == "DEBUG"
    assert config.logging.log_dir == "/tmp/chronicle-logs"


def test_config_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that from_env falls back to defaults when variables are unset."""
    for name in (
        "CHRONICLE_DEFAULT_BRANCH",
        "CHRONICLE_LOG_LIMIT",
        "CHRONICLE_SHORT_ID_LENGTH",
        "CHRONICLE_ID_STRATEGY",
        "LOG_LEVEL",
        "LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)

    config = Config.from_env()

    assert config.repository == RepositoryConfig()
    assert config.logging.level == "INFO"


def test_config_from_env_invalid_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that an invalid log level is rejected."""
    monkeypatch.setenv("LOG_LEVEL", "LOUD")

    with pytest.raises(ValidationError):
        Config.from_env()


def test_global_config_exported() -> None:
    """Test that the global config is available from the package."""
    import chronicle

    assert isinstance(chronicle.config, Config)
