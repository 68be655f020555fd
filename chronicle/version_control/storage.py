"""
In-memory storage for version control.

Holds the commit store and the branch table of a single repository:
- commits: commit_id -> Commit, append-only
- branches: branch_name -> commit_id (or None before the first commit)
- current branch name and HEAD
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from .errors import CommitNotFoundError
from .models import Commit


class CommitView(Mapping[str, Commit]):
    """Read-only mapping over a commit store that hands out copies."""

    def __init__(self, commits: Dict[str, Commit]) -> None:
        self._commits = commits

    def __getitem__(self, commit_id: str) -> Commit:
        return self._commits[commit_id].copy()

    def __iter__(self) -> Iterator[str]:
        return iter(self._commits)

    def __len__(self) -> int:
        return len(self._commits)

    def __contains__(self, commit_id: object) -> bool:
        return commit_id in self._commits


class CommitStore:
    """
    Append-only mapping from commit id to commit.

    Stored commits are never replaced or removed. Callers hand over commits
    that own their snapshot; commits taken from another store are copied.
    """

    def __init__(self) -> None:
        self._commits: Dict[str, Commit] = {}

    def __len__(self) -> int:
        return len(self._commits)

    def __contains__(self, commit_id: object) -> bool:
        return commit_id in self._commits

    def __iter__(self) -> Iterator[str]:
        return iter(self._commits)

    def save_commit(self, commit: Commit) -> bool:
        """
        Save a commit to the store.

        Args:
            commit: Commit to save

        Returns:
            True if stored, False if the id was already present
        """
        if commit.commit_id in self._commits:
            return False
        self._commits[commit.commit_id] = commit
        return True

    def load_commit(self, commit_id: Optional[str]) -> Optional[Commit]:
        """
        Load a commit from the store.

        Args:
            commit_id: ID of commit to load

        Returns:
            Commit if found, None otherwise
        """
        if commit_id is None:
            return None
        return self._commits.get(commit_id)

    def require_commit(self, commit_id: str, where: Optional[str] = None) -> Commit:
        """Load a commit, raising CommitNotFoundError if it is absent."""
        commit = self.load_commit(commit_id)
        if commit is None:
            raise CommitNotFoundError(commit_id, where=where)
        return commit

    def has_commit(self, commit_id: Optional[str]) -> bool:
        return commit_id is not None and commit_id in self._commits

    def list_commits(self) -> List[str]:
        """List all commit IDs in insertion order."""
        return list(self._commits)

    def iter_history(self, start: Optional[str]) -> Iterator[Commit]:
        """
        Walk parent links from a commit, newest first.

        Stops at a root commit. A chain that revisits a commit (only possible
        after importing corrupt state) ends at the repeat.

        Raises:
            CommitNotFoundError: If the chain references a missing commit
        """
        seen = set()
        current = start
        while current is not None and current not in seen:
            seen.add(current)
            commit = self.require_commit(current)
            yield commit
            current = commit.parent_id

    def view(self) -> Mapping[str, Commit]:
        """Read-only mapping over the stored commits; lookups return copies."""
        return CommitView(self._commits)

    def copy_missing_from(
        self, other: "CommitStore", commit_ids: Optional[Iterable[str]] = None
    ) -> List[str]:
        """
        Copy commits this store lacks from another store.

        Args:
            other: Store to copy from
            commit_ids: Restrict the copy to these ids (default: every id in other)

        Returns:
            IDs that were copied, in copy order
        """
        copied: List[str] = []
        for commit_id in commit_ids if commit_ids is not None else other.list_commits():
            if commit_id in self._commits:
                continue
            commit = other.require_commit(commit_id)
            self._commits[commit_id] = commit.copy()
            copied.append(commit_id)
        return copied

    def to_dict(self) -> Dict[str, Any]:
        return {commit_id: commit.to_dict() for commit_id, commit in self._commits.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CommitStore":
        """Rebuild a store from its serialized form, without integrity checks."""
        store = cls()
        for commit_id, raw in data.items():
            raw = dict(raw)
            raw.setdefault("id", commit_id)
            store._commits[commit_id] = Commit.from_dict(raw)
        return store

    def copy(self) -> "CommitStore":
        """Independent deep copy of the store."""
        store = CommitStore()
        store._commits = {
            commit_id: commit.copy() for commit_id, commit in self._commits.items()
        }
        return store


class BranchTable:
    """
    Branch pointers, the current branch and HEAD.

    In the steady state HEAD equals the current branch's pointer. Checking
    out a bare commit id moves HEAD alone (detached); the next advance()
    writes HEAD back into the current branch.
    """

    def __init__(self, default_branch: str = "main") -> None:
        self.default_branch = default_branch
        self._branches: Dict[str, Optional[str]] = {default_branch: None}
        self.current_branch: str = default_branch
        self.head: Optional[str] = None

    def save_branch(self, branch_name: str, commit_id: Optional[str]) -> None:
        """Point a branch at a commit, creating it if needed."""
        self._branches[branch_name] = commit_id

    def load_branch(self, branch_name: str) -> Optional[str]:
        """Commit a branch points at (None if unset or unknown)."""
        return self._branches.get(branch_name)

    def has_branch(self, branch_name: str) -> bool:
        return branch_name in self._branches

    def list_branches(self) -> List[str]:
        return list(self._branches)

    def advance(self, commit_id: Optional[str]) -> None:
        """Move HEAD and the current branch pointer together."""
        self.head = commit_id
        self._branches[self.current_branch] = commit_id

    def switch(self, branch_name: str) -> None:
        """Make an existing branch current and move HEAD to its pointer."""
        self.current_branch = branch_name
        self.head = self._branches.get(branch_name)

    @property
    def is_detached(self) -> bool:
        return self.head != self._branches.get(self.current_branch)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return dict(self._branches)

    @classmethod
    def from_state(
        cls,
        branches: Mapping[str, Optional[str]],
        current_branch: str,
        head: Optional[str],
        default_branch: str = "main",
    ) -> "BranchTable":
        """Rebuild a table from serialized state, without integrity checks."""
        table = cls(default_branch)
        table._branches = dict(branches)
        table.current_branch = current_branch
        table.head = head
        return table

    def copy(self) -> "BranchTable":
        return BranchTable.from_state(
            self._branches, self.current_branch, self.head, self.default_branch
        )
