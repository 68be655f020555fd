"""
Embeddable version control for structured data.

Provides git-like operations over in-memory snapshots: commits, branches,
history, diffs, stashes, forks, and reconciliation with other repositories.
"""

import json
from typing import Any, Dict, List, Mapping, Optional

from chronicle.config import RepositoryConfig, config as global_config
from chronicle.logging import get_chronicle_logger

from . import fork as fork_ops
from . import reconcile
from .diff import SnapshotDiff, compute_diff
from .errors import (
    BranchAlreadyExistsError,
    BranchOrCommitNotFoundError,
    DuplicateCommitIdError,
    ImportFormatError,
    NotEnoughCommitsError,
)
from .fork import CommonAncestor, ForkComparison
from .ids import Clock, IdGenerator, create_id_generator, utc_timestamp
from .models import BranchInfo, Commit, ForkInfo, LogEntry, StashInfo
from .reconcile import ReconcileResult
from .snapshot import copy_snapshot, snapshots_equal
from .stash import StashStack
from .storage import BranchTable, CommitStore

_EXPORT_KEYS = ("commits", "branches", "currentBranch", "HEAD")

logger = get_chronicle_logger("repository")


class Repository:
    """
    Git-like version control for snapshot values.

    Provides operations for:
    - Committing snapshots and reading them back
    - Branching, checkout and history
    - Revert and squash
    - Stashing uncommitted snapshots
    - Forking, comparing and reconciling with other repositories
    - Export/import of the complete state

    Every repository owns its commit store, branch table and stash stack.
    Only the identifier generator and clock are shared with forks and clones.
    """

    def __init__(
        self,
        initial_data: Any = None,
        *,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        config: Optional[RepositoryConfig] = None,
    ):
        """
        Initialize a repository.

        Args:
            initial_data: If not None, committed as "Initial commit"
            id_generator: Source of commit ids (default: from config.id_strategy)
            clock: Timestamp source (default: UTC ISO-8601)
            config: Repository settings (default: global configuration)
        """
        self.config = config or global_config.repository
        self.id_generator = id_generator or create_id_generator(self.config.id_strategy)
        self.clock = clock or utc_timestamp

        self.store = CommitStore()
        self.refs = BranchTable(self.config.default_branch)
        self.stash_stack = StashStack()

        if initial_data is not None:
            self.commit(initial_data, "Initial commit")

    def __repr__(self) -> str:
        head = self.head[:8] if self.head else None
        return (
            f"Repository(branch={self.current_branch!r}, head={head!r}, "
            f"commits={len(self.store)})"
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def head(self) -> Optional[str]:
        return self.refs.head

    @property
    def current_branch(self) -> str:
        return self.refs.current_branch

    @property
    def branches(self) -> Dict[str, Optional[str]]:
        """Copy of the branch table."""
        return self.refs.to_dict()

    @property
    def commits(self) -> Mapping[str, Commit]:
        """Read-only view of the commit store; each lookup returns a copy."""
        return self.store.view()

    @property
    def is_detached(self) -> bool:
        """True when HEAD differs from the current branch's pointer."""
        return self.refs.is_detached

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    def commit(self, data: Any, message: Optional[str] = None) -> str:
        """
        Commit a snapshot on the current branch.

        The new commit's parent is the current HEAD, and both HEAD and the
        current branch move to it. After checking out a bare commit id this
        rewrites the current branch to continue from that commit.

        Args:
            data: Snapshot to store (copied)
            message: Commit message

        Returns:
            Commit ID

        Raises:
            DuplicateCommitIdError: If the generator returns a stored id

        Example:
            >>> repo = Repository({"a": 1})
            >>> commit_id = repo.commit({"a": 2}, "update")
        """
        snapshot = copy_snapshot(data)
        message = message if message is not None else self.config.commit_message
        parent_id = self.refs.head

        commit = Commit(
            commit_id=self.id_generator.next_id(snapshot, parent_id),
            data=snapshot,
            message=message,
            timestamp=self.clock(),
            parent_id=parent_id,
            branch=self.refs.current_branch,
        )
        self._append(commit)

        logger.info(
            "Committed {short_id}: {commit_message}",
            short_id=commit.commit_id[:8],
            commit_message=message,
            commit_id=commit.commit_id,
            branch=commit.branch,
        )
        return commit.commit_id

    def _append(self, commit: Commit) -> None:
        if self.store.has_commit(commit.commit_id):
            raise DuplicateCommitIdError(commit.commit_id)
        self.store.save_commit(commit)
        self.refs.advance(commit.commit_id)

    def get_data(self) -> Any:
        """Copy of HEAD's snapshot, or None if there are no commits."""
        commit = self.store.load_commit(self.refs.head)
        if commit is None:
            return None
        return copy_snapshot(commit.data)

    def get_commit(self, commit_id: str) -> Any:
        """
        Copy of a commit's snapshot.

        Raises:
            CommitNotFoundError: If the commit does not exist
        """
        return copy_snapshot(self.store.require_commit(commit_id).data)

    def revert(self, commit_id: str) -> str:
        """
        Commit an older snapshot again as a new commit.

        History is not rewritten.

        Returns:
            ID of the revert commit
        """
        data = self.get_commit(commit_id)
        revert_id = self.commit(
            data, f"Revert to {commit_id[: self.config.short_id_length]}"
        )
        logger.warning(
            "Reverted to {short_id}",
            short_id=commit_id[:8],
            new_commit=revert_id,
        )
        return revert_id

    def squash(self, count: int, message: Optional[str] = None) -> str:
        """
        Fold recent commits into a single commit carrying HEAD's snapshot.

        History is read with ``log(count + 1)``; the new commit is parented
        on the parent of the last entry read, and the ids of the ``count``
        newest commits are kept on it for audit. Intermediate snapshots are
        discarded.

        Args:
            count: Number of commits from HEAD to squash
            message: Message for the squashed commit

        Returns:
            ID of the squashed commit

        Raises:
            NotEnoughCommitsError: If fewer than two commits are available
        """
        history = self.log(count + 1)
        if len(history) <= 1:
            raise NotEnoughCommitsError(len(history))

        base = self.store.require_commit(history[min(count, len(history) - 1)].commit_id)
        squashed_ids = [entry.commit_id for entry in history[:count]]
        snapshot = self.get_data()

        commit = Commit(
            commit_id=self.id_generator.next_id(snapshot, base.parent_id),
            data=snapshot,
            message=message if message is not None else self.config.squash_message,
            timestamp=self.clock(),
            parent_id=base.parent_id,
            branch=self.refs.current_branch,
            squashed_commits=squashed_ids,
        )
        self._append(commit)

        logger.info(
            "Squashed {count} commits into {short_id}",
            count=len(squashed_ids),
            short_id=commit.commit_id[:8],
            squashed=squashed_ids,
        )
        return commit.commit_id

    # ------------------------------------------------------------------
    # Branches and history
    # ------------------------------------------------------------------

    def checkout(self, target: str) -> Any:
        """
        Check out a branch or a commit.

        A branch name switches the current branch and moves HEAD to its
        pointer. A commit id moves HEAD only (detached HEAD).

        Returns:
            Snapshot at the new HEAD

        Raises:
            BranchOrCommitNotFoundError: If target is neither
        """
        if self.refs.has_branch(target):
            self.refs.switch(target)
            logger.info("Checked out branch: {branch}", branch=target)
            return self.get_data()

        if self.store.has_commit(target):
            self.refs.head = target
            logger.warning(
                "Checked out commit (detached HEAD): {short_id}",
                short_id=target[:8],
                branch=self.refs.current_branch,
            )
            return self.get_data()

        raise BranchOrCommitNotFoundError(target)

    def branch(self, name: str) -> str:
        """
        Create a branch at the current HEAD.

        The current branch is not changed.

        Raises:
            BranchAlreadyExistsError: If the name is taken
        """
        if self.refs.has_branch(name):
            raise BranchAlreadyExistsError(name)
        self.refs.save_branch(name, self.refs.head)
        logger.info(
            "Created branch: {branch} at {short_id}",
            branch=name,
            short_id=(self.refs.head or "")[:8],
        )
        return name

    def switch_branch(self, name: str) -> None:
        """Switch to a branch, creating it at HEAD if it does not exist."""
        if not self.refs.has_branch(name):
            self.branch(name)
        self.refs.switch(name)

    def list_branches(self) -> List[BranchInfo]:
        """List all branches with their pointers."""
        return [
            BranchInfo(name=name, current=name == self.refs.current_branch, head=head)
            for name, head in self.refs.to_dict().items()
        ]

    def log(self, limit: Optional[int] = None) -> List[LogEntry]:
        """
        Get commit history from HEAD, newest first.

        Args:
            limit: Maximum number of entries (default from config; use
                history() for everything)

        Returns:
            History entries in reverse chronological order
        """
        if limit is None:
            limit = self.config.default_log_limit

        entries: List[LogEntry] = []
        if limit <= 0:
            return entries
        for commit in self.store.iter_history(self.refs.head):
            entries.append(LogEntry.from_commit(commit))
            if len(entries) >= limit:
                break
        return entries

    def history(self) -> List[LogEntry]:
        """Complete history from HEAD, newest first."""
        return [
            LogEntry.from_commit(commit)
            for commit in self.store.iter_history(self.refs.head)
        ]

    def diff(self, commit_id1: str, commit_id2: str) -> SnapshotDiff:
        """
        Diff the snapshots of two commits.

        Raises:
            CommitNotFoundError: If either commit does not exist
        """
        return compute_diff(self.get_commit(commit_id1), self.get_commit(commit_id2))

    def is_dirty(self, current_data: Any) -> bool:
        """Check whether data differs from HEAD's snapshot."""
        if self.refs.head is None:
            return current_data is not None
        return not snapshots_equal(self.get_data(), current_data)

    # ------------------------------------------------------------------
    # Stash
    # ------------------------------------------------------------------

    def stash(self, data: Any, message: Optional[str] = None) -> int:
        """
        Save a snapshot without committing it.

        Returns:
            Index of the new stash entry
        """
        index = self.stash_stack.push(
            data,
            message if message is not None else self.config.stash_message,
            timestamp=self.clock(),
            branch=self.refs.current_branch,
            head=self.refs.head,
        )
        logger.info(
            "Stashed entry {index} on {branch}", index=index, branch=self.current_branch
        )
        return index

    def stash_pop(self) -> Any:
        """Remove the most recent stash entry and return its snapshot."""
        return self.stash_stack.pop()

    def stash_apply(self, index: int = -1) -> Any:
        """Return a copy of a stash entry's snapshot without removing it."""
        return self.stash_stack.apply(index)

    def stash_list(self) -> List[StashInfo]:
        """Metadata for all stash entries."""
        return self.stash_stack.list()

    # ------------------------------------------------------------------
    # Forks
    # ------------------------------------------------------------------

    def _copy(self) -> "Repository":
        copied = Repository(
            id_generator=self.id_generator, clock=self.clock, config=self.config
        )
        copied.store = self.store.copy()
        copied.refs = self.refs.copy()
        return copied

    def clone(self) -> "Repository":
        """Independent copy of commits, branches, current branch and HEAD."""
        return self._copy()

    def fork(self, name: Optional[str] = None) -> "Repository":
        """
        Create an independent copy, optionally on a new branch.

        With a name and at least one commit, the fork records a commit on
        the current branch and then moves to a new branch ``name`` at it.

        Args:
            name: Branch created in the fork

        Returns:
            The forked repository
        """
        forked = self._copy()

        if name and self.refs.head is not None:
            fork_commit = forked.commit(
                forked.get_data(), f"Forked from {self.current_branch} as {name}"
            )
            forked.refs.save_branch(name, fork_commit)
            forked.refs.current_branch = name

        logger.info(
            "Forked repository at {short_id}",
            short_id=(self.refs.head or "")[:8],
            fork_branch=name,
        )
        return forked

    def get_fork_info(self) -> ForkInfo:
        """Commit count, branches and HEAD of this repository."""
        latest = self.store.load_commit(self.refs.head)
        return ForkInfo(
            total_commits=len(self.store),
            branches=self.refs.list_branches(),
            current_branch=self.refs.current_branch,
            head=self.refs.head,
            latest_commit=latest.copy() if latest else None,
        )

    def find_common_ancestor(self, other: "Repository") -> Optional[CommonAncestor]:
        ancestor = fork_ops.find_common_ancestor(self, other)
        return ancestor.copy() if ancestor else None

    def get_ahead_commits(self, other: "Repository") -> List[Commit]:
        return [commit.copy() for commit in fork_ops.get_ahead_commits(self, other)]

    def get_behind_commits(self, other: "Repository") -> List[Commit]:
        return [commit.copy() for commit in fork_ops.get_behind_commits(self, other)]

    def compare_forks(self, other: "Repository") -> ForkComparison:
        return fork_ops.compare_forks(self, other).copy()

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def merge(self, other: "Repository", label: Optional[str] = None) -> str:
        return reconcile.merge(self, other, label)

    def cherry_pick(self, other: "Repository", commit_id: str) -> str:
        return reconcile.cherry_pick(self, other, commit_id)

    def rebase(self, target: "Repository") -> ReconcileResult:
        return reconcile.rebase(self, target)

    def pull(self, other: "Repository", strategy: str = "merge") -> ReconcileResult:
        return reconcile.pull(self, other, strategy)

    def push(self, other: "Repository") -> ReconcileResult:
        return reconcile.push(self, other)

    def sync(
        self, other: "Repository", conflict_resolution: str = "ours"
    ) -> ReconcileResult:
        return reconcile.sync(self, other, conflict_resolution)

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Complete state as plain data."""
        return {
            "commits": self.store.to_dict(),
            "branches": self.refs.to_dict(),
            "currentBranch": self.refs.current_branch,
            "HEAD": self.refs.head,
            "stashStack": self.stash_stack.to_list(),
        }

    def export(self) -> str:
        """Complete state as a JSON string."""
        return json.dumps(self.to_dict())

    def load_dict(self, data: Mapping[str, Any]) -> None:
        """
        Replace all state with serialized state.

        References between commits and branches are not checked; dangling
        ones surface as CommitNotFoundError when traversed.

        Raises:
            ImportFormatError: If a top-level key is missing
        """
        missing = [key for key in _EXPORT_KEYS if key not in data]
        if missing:
            raise ImportFormatError(f"Missing keys in serialized repository: {missing}")

        store = CommitStore.from_dict(data["commits"] or {})
        refs = BranchTable.from_state(
            data["branches"] or {},
            data["currentBranch"],
            data["HEAD"],
            self.config.default_branch,
        )
        stash_stack = StashStack.from_list(data.get("stashStack") or [])

        self.store, self.refs, self.stash_stack = store, refs, stash_stack
        self.id_generator.reserve(store.list_commits())
        logger.info(
            "Imported repository with {count} commits",
            count=len(store),
            branch=refs.current_branch,
        )

    def import_(self, json_str: str) -> None:
        """
        Replace all state with an export string.

        Raises:
            ImportFormatError: If the text is not a JSON object
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ImportFormatError(f"Invalid repository export: {e}") from e
        if not isinstance(data, dict):
            raise ImportFormatError("Repository export must be a JSON object")
        self.load_dict(data)

    @classmethod
    def from_export(cls, json_str: str, **kwargs: Any) -> "Repository":
        """Build a repository from an export string."""
        repo = cls(**kwargs)
        repo.import_(json_str)
        return repo
