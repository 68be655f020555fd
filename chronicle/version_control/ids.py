"""
Commit identifier generation and timestamps.

Identifiers must be unique across every repository that may later be merged
with another. Generators are services: forks and clones share the generator
of the repository they were derived from instead of copying it.
"""

import hashlib
import itertools
import json
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

Clock = Callable[[], str]


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


class IdGenerator(ABC):
    """Produces commit identifiers."""

    @abstractmethod
    def next_id(self, data: Any = None, parent: Optional[str] = None) -> str:
        """
        Produce a new identifier.

        Args:
            data: Snapshot being committed (content-based generators use it)
            parent: Parent commit id, if any

        Returns:
            Identifier never returned before by this generator
        """

    def reserve(self, ids: Iterable[str]) -> None:
        """
        Mark identifiers as taken, e.g. after importing or copying commits.

        Generators whose ids cannot collide with existing ones ignore this.
        """


class UuidIdGenerator(IdGenerator):
    """Random 128-bit identifiers rendered as hex."""

    def next_id(self, data: Any = None, parent: Optional[str] = None) -> str:
        return uuid.uuid4().hex


class CounterIdGenerator(IdGenerator):
    """
    Monotonic identifiers of the form ``{prefix}{n}``.

    Deterministic, which makes it the generator of choice in tests. A fresh
    counter restarts at ``start``, so reserve() must see the ids of any
    imported state before new commits are made.
    """

    def __init__(self, prefix: str = "c", start: int = 1):
        self.prefix = prefix
        self._next = start
        self._lock = threading.Lock()

    def next_id(self, data: Any = None, parent: Optional[str] = None) -> str:
        with self._lock:
            value = self._next
            self._next += 1
        return f"{self.prefix}{value}"

    def reserve(self, ids: Iterable[str]) -> None:
        """Skip past every ``{prefix}{n}`` id already in use."""
        highest = None
        for commit_id in ids:
            suffix = commit_id[len(self.prefix):]
            if commit_id.startswith(self.prefix) and suffix.isdigit():
                highest = max(int(suffix), highest or 0)
        if highest is None:
            return
        with self._lock:
            self._next = max(self._next, highest + 1)


class HashIdGenerator(IdGenerator):
    """
    Content-derived identifiers.

    The digest covers the snapshot, the parent id, a per-generator seed and a
    monotonic salt, so committing identical data twice still yields distinct
    ids.
    """

    def __init__(self, length: int = 16):
        self.length = length
        self._seed = uuid.uuid4().hex
        self._salt = itertools.count()
        self._lock = threading.Lock()

    def next_id(self, data: Any = None, parent: Optional[str] = None) -> str:
        with self._lock:
            salt = next(self._salt)
        payload = json.dumps(
            {"data": data, "parent": parent, "seed": self._seed, "salt": salt},
            sort_keys=True,
        )
        return hashlib.sha256(payload.encode()).hexdigest()[: self.length]


def create_id_generator(strategy: str = "uuid") -> IdGenerator:
    """
    Build an identifier generator by strategy name.

    Args:
        strategy: One of "uuid", "counter", "hash"

    Returns:
        New generator instance

    Raises:
        ValueError: If the strategy is unknown
    """
    if strategy == "uuid":
        return UuidIdGenerator()
    if strategy == "counter":
        return CounterIdGenerator()
    if strategy == "hash":
        return HashIdGenerator()
    raise ValueError(f"Unknown id strategy: {strategy}")
