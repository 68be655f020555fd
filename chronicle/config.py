"""
Configuration management for Chronicle.

This module provides centralized configuration for all components:
- Repository defaults (branch, messages, identifiers)
- Logging settings
"""

import os
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

IdStrategy = Literal["uuid", "counter", "hash"]
LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RepositoryConfig(BaseModel):
    """Defaults applied by every repository."""

    default_branch: str = Field(
        default="main", min_length=1, description="Branch a new repository starts on"
    )
    default_log_limit: int = Field(
        default=10, gt=0, description="Number of entries log() returns by default"
    )
    short_id_length: int = Field(
        default=7, gt=0, description="Length of abbreviated ids in generated messages"
    )
    id_strategy: IdStrategy = Field(
        default="uuid", description="Identifier generator used when none is injected"
    )
    commit_message: str = Field(default="Update", description="Default commit message")
    merge_label: str = Field(
        default="merged", description="Default source label in merge messages"
    )
    squash_message: str = Field(
        default="Squashed commits", description="Default squash commit message"
    )
    stash_message: str = Field(default="WIP", description="Default stash message")


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: LogLevel = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[component]}</cyan> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>",
        description="Log message format",
    )
    rotation: str = Field(default="100 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(default="logs", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=False, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )


class Config(BaseModel):
    """Main configuration object for Chronicle."""

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            repository=RepositoryConfig(
                default_branch=os.getenv("CHRONICLE_DEFAULT_BRANCH", "main"),
                default_log_limit=int(os.getenv("CHRONICLE_LOG_LIMIT", "10")),
                short_id_length=int(os.getenv("CHRONICLE_SHORT_ID_LENGTH", "7")),
                id_strategy=cast(IdStrategy, os.getenv("CHRONICLE_ID_STRATEGY", "uuid")),
            ),
            logging=LogConfig(
                level=cast(LogLevel, os.getenv("LOG_LEVEL", "INFO")),
                log_dir=os.getenv("LOG_DIR", "logs"),
            ),
        )


# Global configuration instance
# This can be imported throughout the codebase
config = Config.from_env()
