"""
Logging infrastructure for Chronicle.

Provides structured logging setup and decorators for tracking operations.
"""

from .logger import (
    ChronicleLogger,
    get_chronicle_logger,
    initialize_logging,
    get_logger_instance,
    log_repository_operation,
)

from .decorators import (
    track_operation,
    performance_monitor,
)

__all__ = [
    # Logger
    "ChronicleLogger",
    "get_chronicle_logger",
    "initialize_logging",
    "get_logger_instance",
    "log_repository_operation",
    # Decorators
    "track_operation",
    "performance_monitor",
]
