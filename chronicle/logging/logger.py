"""
Logging infrastructure for Chronicle.

Provides structured logging with:
- Component-specific loggers (repository, reconcile)
- Console and rotating file sinks
- Per-component log files
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger

COMPONENT_FILES = {
    "repository": "repository.log",
    "reconcile": "reconcile.log",
}


class ChronicleLogger:
    """
    Logger setup for applications embedding Chronicle.

    Features:
    - Structured logging with context
    - Log rotation and retention
    - Separate files for repository and reconciliation records
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        rotation: str = "100 MB",
        retention: str = "1 month",
        level: str = "INFO",
        format_string: Optional[str] = None,
        enable_file_logging: bool = False,
        enable_console_logging: bool = True,
    ):
        """
        Initialize the Chronicle logger.

        Args:
            log_dir: Directory for log files
            rotation: When to rotate log files
            retention: How long to keep old logs
            level: Default log level
            format_string: Custom format string
            enable_file_logging: Whether to log to files
            enable_console_logging: Whether to log to console
        """
        self.log_dir = log_dir or Path("logs")
        self.rotation = rotation
        self.retention = retention
        self.level = level

        self.format_string = format_string or (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

        # Records logged without bind() still need a component for the format
        logger.configure(extra={"component": "system"})
        logger.remove()

        if enable_console_logging:
            logger.add(
                sys.stderr,
                format=self.format_string,
                level=level,
                colorize=True,
            )

        if enable_file_logging:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._add_file_handlers()

        self.logger = logger.bind(component="system")

    def _add_file_handlers(self) -> None:
        """Add the main, per-component and error log files."""
        logger.add(
            self.log_dir / "chronicle.log",
            format=self.format_string,
            level=self.level,
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )

        for component, filename in COMPONENT_FILES.items():
            logger.add(
                self.log_dir / filename,
                format=self.format_string,
                level="DEBUG",
                rotation=self.rotation,
                retention=self.retention,
                compression="zip",
                filter=lambda record, c=component: record["extra"].get("component") == c,
            )

        logger.add(
            self.log_dir / "errors.log",
            format=self.format_string,
            level="ERROR",
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )

    def get_logger(self, component: str) -> Any:
        """
        Get a logger bound to a specific component.

        Args:
            component: Component name (e.g., "repository", "reconcile")

        Returns:
            Logger instance bound to the component
        """
        return logger.bind(component=component)


def get_chronicle_logger(component: str = "system") -> Any:
    """
    Get a component-specific logger.

    Example:
        >>> log = get_chronicle_logger("reconcile")
        >>> log.info("Pulled {count} commits", count=3)
    """
    return logger.bind(component=component)


def log_repository_operation(logger_instance: Any, operation: str, **kwargs: Any) -> None:
    """
    Log a repository operation.

    Args:
        logger_instance: Logger to use
        operation: Operation type (e.g., "merge", "merge_complete")
        **kwargs: Additional context
    """
    logger_instance.debug(
        "Repository operation: {operation}",
        operation=operation,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **kwargs,
    )


# Global logger instance
_chronicle_logger: Optional[ChronicleLogger] = None


def initialize_logging(
    log_dir: Optional[Path] = None, level: str = "INFO", **kwargs: Any
) -> ChronicleLogger:
    """
    Initialize the Chronicle logging system.

    Library code never calls this; applications call it once at startup.

    Args:
        log_dir: Directory for log files
        level: Default log level
        **kwargs: Additional configuration for ChronicleLogger

    Returns:
        Configured ChronicleLogger instance
    """
    global _chronicle_logger
    _chronicle_logger = ChronicleLogger(log_dir=log_dir, level=level, **kwargs)
    return _chronicle_logger


def get_logger_instance() -> Optional[ChronicleLogger]:
    """Get the global logger instance."""
    return _chronicle_logger
