"""
Version control for structured snapshot data.

Provides git-like operations for tracking, branching, comparing and
reconciling in-memory repositories.
"""

from .snapshot import (
    SnapshotValue,
    copy_snapshot,
    snapshots_equal,
    is_collection,
    iter_entries,
)

from .ids import (
    IdGenerator,
    UuidIdGenerator,
    CounterIdGenerator,
    HashIdGenerator,
    create_id_generator,
    utc_timestamp,
)

from .models import (
    Commit,
    LogEntry,
    BranchInfo,
    StashEntry,
    StashInfo,
    ForkInfo,
)

from .diff import (
    SnapshotDiff,
    PathChange,
    ChangeType,
    compute_diff,
)

from .errors import (
    VersionControlError,
    InvalidSnapshotError,
    CommitNotFoundError,
    DuplicateCommitIdError,
    BranchOrCommitNotFoundError,
    BranchAlreadyExistsError,
    EmptySourceError,
    UnknownStrategyError,
    UnresolvableConflictError,
    NotEnoughCommitsError,
    NoStashAvailableError,
    StashNotFoundError,
    ImportFormatError,
)

from .storage import CommitStore, BranchTable
from .stash import StashStack

from .fork import (
    CommonAncestor,
    ForkComparison,
    find_common_ancestor,
    get_ahead_commits,
    get_behind_commits,
    compare_forks,
)

from .reconcile import (
    PULL_STRATEGIES,
    CONFLICT_RESOLUTIONS,
    ReconcileResult,
    merge,
    cherry_pick,
    rebase,
    pull,
    push,
    sync,
)

from .repository import Repository

__all__ = [
    # Snapshot
    "SnapshotValue",
    "copy_snapshot",
    "snapshots_equal",
    "is_collection",
    "iter_entries",
    # Identifiers
    "IdGenerator",
    "UuidIdGenerator",
    "CounterIdGenerator",
    "HashIdGenerator",
    "create_id_generator",
    "utc_timestamp",
    # Records
    "Commit",
    "LogEntry",
    "BranchInfo",
    "StashEntry",
    "StashInfo",
    "ForkInfo",
    # Diff
    "SnapshotDiff",
    "PathChange",
    "ChangeType",
    "compute_diff",
    # Errors
    "VersionControlError",
    "InvalidSnapshotError",
    "CommitNotFoundError",
    "DuplicateCommitIdError",
    "BranchOrCommitNotFoundError",
    "BranchAlreadyExistsError",
    "EmptySourceError",
    "UnknownStrategyError",
    "UnresolvableConflictError",
    "NotEnoughCommitsError",
    "NoStashAvailableError",
    "StashNotFoundError",
    "ImportFormatError",
    # Storage
    "CommitStore",
    "BranchTable",
    "StashStack",
    # Fork comparison
    "CommonAncestor",
    "ForkComparison",
    "find_common_ancestor",
    "get_ahead_commits",
    "get_behind_commits",
    "compare_forks",
    # Reconciliation
    "PULL_STRATEGIES",
    "CONFLICT_RESOLUTIONS",
    "ReconcileResult",
    "merge",
    "cherry_pick",
    "rebase",
    "pull",
    "push",
    "sync",
    # Repository
    "Repository",
]
