"""
Record types for version control.

Defines commits, history entries, branch listings and stash entries along
with their serialized (export) form.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional
import json

from .snapshot import copy_snapshot


@dataclass(frozen=True)
class Commit:
    """
    An immutable snapshot in the version history.

    Attributes:
        commit_id: Unique identifier
        data: Full snapshot value (not a delta)
        message: Commit message
        timestamp: Creation time (ISO-8601)
        parent_id: Preceding commit, None for a root commit
        branch: Branch active when the commit was created (informational)
        squashed_commits: Ids folded into this commit by a squash
    """

    commit_id: str
    data: Any
    message: str
    timestamp: str
    parent_id: Optional[str] = None
    branch: str = "main"
    squashed_commits: Optional[List[str]] = None

    def short_id(self, length: int = 7) -> str:
        """Abbreviated commit id."""
        return self.commit_id[:length]

    def copy(self) -> "Commit":
        """Commit with its own copy of the snapshot."""
        return replace(
            self,
            data=copy_snapshot(self.data),
            squashed_commits=(
                list(self.squashed_commits) if self.squashed_commits is not None else None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert commit to dictionary for serialization."""
        result = {
            "id": self.commit_id,
            "data": copy_snapshot(self.data),
            "message": self.message,
            "timestamp": self.timestamp,
            "parent": self.parent_id,
            "branch": self.branch,
        }
        if self.squashed_commits is not None:
            result["squashedCommits"] = list(self.squashed_commits)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commit":
        """Create commit from dictionary."""
        squashed = data.get("squashedCommits")
        return cls(
            commit_id=data["id"],
            data=copy_snapshot(data.get("data")),
            message=data.get("message", ""),
            timestamp=data.get("timestamp", ""),
            parent_id=data.get("parent"),
            branch=data.get("branch", "main"),
            squashed_commits=list(squashed) if squashed is not None else None,
        )

    def to_json(self) -> str:
        """Convert commit to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "Commit":
        """Create commit from JSON string."""
        return cls.from_dict(json.loads(json_str))


@dataclass(frozen=True)
class LogEntry:
    """One line of commit history."""

    commit_id: str
    message: str
    timestamp: str
    branch: str

    @classmethod
    def from_commit(cls, commit: Commit) -> "LogEntry":
        return cls(
            commit_id=commit.commit_id,
            message=commit.message,
            timestamp=commit.timestamp,
            branch=commit.branch,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.commit_id,
            "message": self.message,
            "timestamp": self.timestamp,
            "branch": self.branch,
        }


@dataclass(frozen=True)
class BranchInfo:
    """Branch listing entry."""

    name: str
    current: bool
    head: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "current": self.current, "head": self.head}


@dataclass
class StashEntry:
    """
    An uncommitted snapshot held outside the commit graph.

    Attributes:
        data: Stashed snapshot
        message: Stash description
        timestamp: When the entry was pushed
        branch: Branch active at stash time
        head: HEAD commit at stash time
    """

    data: Any
    message: str
    timestamp: str
    branch: str
    head: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert stash entry to dictionary for serialization."""
        return {
            "data": copy_snapshot(self.data),
            "message": self.message,
            "timestamp": self.timestamp,
            "branch": self.branch,
            "head": self.head,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StashEntry":
        """Create stash entry from dictionary."""
        return cls(
            data=copy_snapshot(data.get("data")),
            message=data.get("message", ""),
            timestamp=data.get("timestamp", ""),
            branch=data.get("branch", "main"),
            head=data.get("head"),
        )


@dataclass(frozen=True)
class StashInfo:
    """Stash metadata without the payload."""

    index: int
    message: str
    timestamp: str
    branch: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "message": self.message,
            "timestamp": self.timestamp,
            "branch": self.branch,
        }


@dataclass
class ForkInfo:
    """Summary of a repository's shape, used when comparing forks."""

    total_commits: int
    branches: List[str]
    current_branch: str
    head: Optional[str]
    latest_commit: Optional[Commit] = None

    def summary(self) -> str:
        """Generate human-readable summary."""
        head = self.head[:8] if self.head else "(none)"
        return (
            f"{self.total_commits} commits, {len(self.branches)} branches, "
            f"on {self.current_branch} at {head}"
        )
