"""
Decorators for automatic logging of repository operations.

These decorators enable traceability without cluttering business logic.
"""

import functools
import inspect
import time
from typing import Any, Callable

from .logger import get_chronicle_logger, log_repository_operation


def track_operation(operation_type: str, component: str = "reconcile") -> Callable:
    """
    Decorator to track repository operations.

    Logs the start, completion and failure of the wrapped call. Errors are
    re-raised unchanged.

    Args:
        operation_type: Type of operation (e.g., "merge", "pull", "sync")
        component: Logger component the records are bound to

    Example:
        >>> @track_operation("pull")
        ... def pull(local, remote, strategy="merge"):
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_chronicle_logger(component)

            bound_args = signature.bind(*args, **kwargs)
            bound_args.apply_defaults()

            operation_id = time.time()
            log_repository_operation(
                log,
                operation=operation_type,
                operation_id=operation_id,
                function=func.__name__,
                arguments={k: repr(v)[:100] for k, v in bound_args.arguments.items()},
            )

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log_repository_operation(
                    log,
                    operation=f"{operation_type}_error",
                    operation_id=operation_id,
                    function=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                    success=False,
                )
                raise

            log_repository_operation(
                log,
                operation=f"{operation_type}_complete",
                operation_id=operation_id,
                function=func.__name__,
                success=True,
            )
            return result

        return wrapper

    return decorator


def performance_monitor(threshold_ms: float = 1000.0) -> Callable:
    """
    Decorator to monitor function performance.

    Logs warning if execution exceeds threshold.

    Args:
        threshold_ms: Warning threshold in milliseconds

    Example:
        >>> @performance_monitor(threshold_ms=500)
        ... def compare(local, remote):
        ...     return compare_forks(local, remote)
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_chronicle_logger("system")
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception:
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                log.debug(
                    "Function failed: {function}",
                    function=func.__name__,
                    elapsed_ms=elapsed_ms,
                )
                raise

            elapsed_ms = (time.perf_counter() - start_time) * 1000
            if elapsed_ms > threshold_ms:
                log.warning(
                    "Performance threshold exceeded: {function}",
                    function=func.__name__,
                    elapsed_ms=elapsed_ms,
                    threshold_ms=threshold_ms,
                )
            else:
                log.debug(
                    "Function executed: {function}",
                    function=func.__name__,
                    elapsed_ms=elapsed_ms,
                )
            return result

        return wrapper

    return decorator
