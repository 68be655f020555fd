"""
Reconciliation between two repositories: merge, cherry-pick, rebase, pull,
push and sync.

Every operation starts from a fork comparison and then copies missing
commits between commit stores and/or appends new commits. Merges and
rebases always produce ordinary single-parent commits carrying a whole
snapshot; nothing here reconciles individual fields.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from chronicle.logging import get_chronicle_logger, track_operation

from .errors import EmptySourceError, UnknownStrategyError, UnresolvableConflictError
from .fork import compare_forks
from .models import Commit

if TYPE_CHECKING:
    from .repository import Repository

PULL_STRATEGIES = ("merge", "rebase")
CONFLICT_RESOLUTIONS = ("ours", "theirs")

logger = get_chronicle_logger("reconcile")


@dataclass
class ReconcileResult:
    """
    Outcome of a rebase, pull, push or sync.

    Attributes:
        success: Whether the operation completed
        message: Human-readable outcome
        changes: Number of remote commits taken in (pull) or sent (sync push)
        merge_commit: ID of the merge commit, if one was created
        replayed_commits: Number of commits replayed by a rebase
        commits: Commits to push, newest first (push only)
        can_fast_forward: Whether the remote could fast-forward (push only)
        conflicts: True when both sides had unique commits
    """

    success: bool
    message: str
    changes: int = 0
    merge_commit: Optional[str] = None
    replayed_commits: int = 0
    commits: List[Commit] = field(default_factory=list)
    can_fast_forward: Optional[bool] = None
    conflicts: bool = False


@track_operation("merge")
def merge(
    local: "Repository",
    remote: "Repository",
    label: Optional[str] = None,
    prefer: str = "theirs",
) -> str:
    """
    Merge another repository into local.

    Copies every commit local lacks, then appends one merge commit on
    local's current branch. With ``prefer="theirs"`` the merge commit
    carries remote's HEAD snapshot; with ``prefer="ours"`` it keeps local's.

    Args:
        local: Repository receiving the merge
        remote: Repository merged from
        label: Name recorded in the merge message
        prefer: Which side's snapshot the merge commit carries

    Returns:
        ID of the merge commit

    Raises:
        EmptySourceError: If remote has no HEAD
    """
    if remote.head is None:
        raise EmptySourceError()
    if prefer not in CONFLICT_RESOLUTIONS:
        raise ValueError(f"prefer must be one of {CONFLICT_RESOLUTIONS}, got {prefer!r}")
    label = label or local.config.merge_label

    comparison = compare_forks(local, remote)
    data = remote.get_data() if prefer == "theirs" else local.get_data()

    copied = local.store.copy_missing_from(remote.store)
    local.id_generator.reserve(copied)
    merge_id = local.commit(data, f"Merge from {label}")

    logger.info(
        "Merged {label} into {branch} as {short_id}",
        label=label,
        branch=local.current_branch,
        short_id=merge_id[:8],
        copied_commits=len(copied),
        ahead=comparison.ahead,
        behind=comparison.behind,
        prefer=prefer,
    )
    return merge_id


@track_operation("cherry_pick")
def cherry_pick(local: "Repository", remote: "Repository", commit_id: str) -> str:
    """
    Re-commit a single remote commit's snapshot on local.

    Only the picked snapshot is committed; no other remote commit is copied.

    Raises:
        CommitNotFoundError: If remote does not have the commit
    """
    source = remote.store.require_commit(commit_id, where="source")
    short_id = source.short_id(local.config.short_id_length)
    return local.commit(source.data, f"Cherry-pick: {source.message} ({short_id})")


@track_operation("rebase")
def rebase(local: "Repository", target: "Repository") -> ReconcileResult:
    """
    Replay local's unique commits on top of target's HEAD.

    Each replayed commit carries its original snapshot verbatim, so the
    final data equals the last replayed snapshot.

    Args:
        local: Repository being rebased
        target: Repository providing the new base

    Returns:
        ReconcileResult with the number of replayed commits
    """
    comparison = compare_forks(local, target)

    if not comparison.diverged:
        return ReconcileResult(success=True, message="Already up to date")

    local.id_generator.reserve(local.store.copy_missing_from(target.store))
    local.refs.current_branch = target.current_branch
    local.refs.advance(target.head)

    replayed = [
        local.commit(commit.data, f"{commit.message} (rebased)")
        for commit in reversed(comparison.ahead_commits)
    ]

    logger.info(
        "Rebased {count} commits onto {short_id}",
        count=len(replayed),
        short_id=(target.head or "")[:8],
        branch=local.current_branch,
    )
    return ReconcileResult(
        success=True,
        message="Rebase successful",
        replayed_commits=len(replayed),
    )


@track_operation("pull")
def pull(
    local: "Repository", remote: "Repository", strategy: str = "merge"
) -> ReconcileResult:
    """
    Bring remote's commits into local.

    Fast-forwards when local has nothing of its own; otherwise merges or
    rebases according to ``strategy``.

    Raises:
        UnknownStrategyError: If strategy is not "merge" or "rebase"
    """
    if strategy not in PULL_STRATEGIES:
        raise UnknownStrategyError(strategy)

    comparison = compare_forks(local, remote)

    if not comparison.diverged and comparison.behind == 0:
        return ReconcileResult(success=True, message="Already up to date")

    if comparison.can_fast_forward:
        local.id_generator.reserve(local.store.copy_missing_from(remote.store))
        local.refs.advance(remote.head)
        logger.info(
            "Fast-forwarded {branch} to {short_id}",
            branch=local.current_branch,
            short_id=(remote.head or "")[:8],
            changes=comparison.behind,
        )
        return ReconcileResult(
            success=True, message="Fast-forward", changes=comparison.behind
        )

    if strategy == "merge":
        merge_id = merge(local, remote, "pull")
        return ReconcileResult(
            success=True,
            message="Merge successful",
            merge_commit=merge_id,
            changes=comparison.behind,
        )
    return rebase(local, remote)


@track_operation("push")
def push(local: "Repository", remote: "Repository") -> ReconcileResult:
    """
    Report the commits local would send to remote.

    Neither repository is modified; the reported commits are copies and
    applying them is up to the caller.
    """
    comparison = compare_forks(local, remote)

    if comparison.ahead == 0:
        return ReconcileResult(success=True, message="Nothing to push")

    return ReconcileResult(
        success=True,
        message=f"Ready to push {comparison.ahead} commits",
        commits=[commit.copy() for commit in comparison.ahead_commits],
        can_fast_forward=comparison.behind == 0,
    )


@track_operation("sync")
def sync(
    local: "Repository", remote: "Repository", conflict_resolution: str = "ours"
) -> ReconcileResult:
    """
    Bring two repositories into agreement.

    Only diverged histories are reconciled; when at most one side has
    unique commits nothing is changed, so fast-forwards are left to pull
    and push. Diverged histories resolve as:

    - "ours": merge keeping local's snapshot
    - "theirs": pull remote's snapshot

    The ahead == 0 and behind == 0 branches below cannot be reached once
    the histories have diverged.

    Raises:
        UnresolvableConflictError: If both sides have commits and the
            resolution is neither "ours" nor "theirs"
    """
    comparison = compare_forks(local, remote)

    if not comparison.diverged:
        return ReconcileResult(success=True, message="Already in sync")

    if comparison.ahead == 0:
        return pull(local, remote)

    if comparison.behind == 0:
        outgoing = [commit.commit_id for commit in reversed(comparison.ahead_commits)]
        copied = remote.store.copy_missing_from(local.store, outgoing)
        remote.id_generator.reserve(copied)
        remote.refs.advance(local.head)
        logger.info(
            "Pushed {count} commits to {branch}",
            count=comparison.ahead,
            branch=remote.current_branch,
        )
        return ReconcileResult(
            success=True,
            message=f"Pushed {comparison.ahead} commits",
            changes=comparison.ahead,
        )

    if conflict_resolution == "ours":
        merge_id = merge(local, remote, "sync", prefer="ours")
        return ReconcileResult(
            success=True,
            message="Synced (kept our changes)",
            merge_commit=merge_id,
            changes=comparison.behind,
            conflicts=True,
        )
    if conflict_resolution == "theirs":
        result = pull(local, remote)
        result.conflicts = True
        return result

    raise UnresolvableConflictError(conflict_resolution)
