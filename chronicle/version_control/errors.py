"""
Custom exceptions for the version control engine.

Every operation validates its inputs before touching repository state, so
catching one of these means the repository is unchanged.
"""

from __future__ import annotations

from typing import Any


class VersionControlError(Exception):
    """Base exception for all version control errors."""

    pass


class InvalidSnapshotError(VersionControlError):
    """Value cannot be stored as a snapshot."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value


class CommitNotFoundError(VersionControlError):
    """Commit id is not present in the commit store."""

    def __init__(self, commit_id: str, where: str | None = None):
        suffix = f" in {where}" if where else ""
        super().__init__(f"Commit {commit_id} not found{suffix}")
        self.commit_id = commit_id


class DuplicateCommitIdError(VersionControlError):
    """Generated commit id is already stored."""

    def __init__(self, commit_id: str):
        super().__init__(f"Commit {commit_id} already exists")
        self.commit_id = commit_id


class BranchOrCommitNotFoundError(VersionControlError):
    """Checkout target matches neither a branch nor a commit."""

    def __init__(self, target: str):
        super().__init__(f"Branch or commit '{target}' not found")
        self.target = target


class BranchAlreadyExistsError(VersionControlError):
    """Branch name is already registered."""

    def __init__(self, branch: str):
        super().__init__(f"Branch '{branch}' already exists")
        self.branch = branch


class EmptySourceError(VersionControlError):
    """Source repository of a merge has no commits."""

    def __init__(self, message: str = "Cannot merge empty version control"):
        super().__init__(message)


class UnknownStrategyError(VersionControlError):
    """Pull strategy is not supported."""

    def __init__(self, strategy: str):
        super().__init__(f"Unknown pull strategy: {strategy!r}")
        self.strategy = strategy


class UnresolvableConflictError(VersionControlError):
    """Diverged histories with no usable conflict resolution."""

    def __init__(self, resolution: str):
        super().__init__(f"Cannot auto-resolve conflicts with resolution {resolution!r}")
        self.resolution = resolution


class NotEnoughCommitsError(VersionControlError):
    """Fewer than two commits are available to squash."""

    def __init__(self, available: int):
        super().__init__(f"Not enough commits to squash (found {available})")
        self.available = available


class NoStashAvailableError(VersionControlError):
    """Stash stack is empty."""

    def __init__(self, message: str = "No stash available"):
        super().__init__(message)


class StashNotFoundError(VersionControlError):
    """Stash index is out of range."""

    def __init__(self, index: int):
        super().__init__(f"Stash at index {index} not found")
        self.index = index


class ImportFormatError(VersionControlError):
    """Serialized repository text cannot be parsed."""

    pass
