"""
Fork comparison between two repositories.

Pure functions over two repositories' commit stores: they locate the
nearest shared commit and classify each side's unique commits. Neither
repository is modified. Results reference the stored commits; the
Repository methods wrapping these functions return copies.
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, List, Optional

from chronicle.logging import performance_monitor

from .models import Commit

if TYPE_CHECKING:
    from .repository import Repository


@dataclass(frozen=True)
class CommonAncestor:
    """Nearest commit on one side's HEAD chain that the other side also has."""

    commit_id: str
    commit: Commit
    diverged_at: str

    def copy(self) -> "CommonAncestor":
        return replace(self, commit=self.commit.copy())


@dataclass
class ForkComparison:
    """
    Ahead/behind classification of two repositories.

    Attributes:
        common_ancestor: Shared commit, None when histories are unrelated
        ahead_commits: Local commits after the ancestor, newest first
        behind_commits: Remote commits after the ancestor, newest first
    """

    common_ancestor: Optional[CommonAncestor]
    ahead_commits: List[Commit] = field(default_factory=list)
    behind_commits: List[Commit] = field(default_factory=list)

    @property
    def ahead(self) -> int:
        return len(self.ahead_commits)

    @property
    def behind(self) -> int:
        return len(self.behind_commits)

    @property
    def diverged(self) -> bool:
        return self.ahead > 0 and self.behind > 0

    @property
    def can_fast_forward(self) -> bool:
        return self.ahead == 0 and self.behind > 0

    @property
    def up_to_date(self) -> bool:
        return self.ahead == 0 and self.behind == 0

    def copy(self) -> "ForkComparison":
        """Comparison whose commits own their snapshots."""
        return ForkComparison(
            common_ancestor=self.common_ancestor.copy() if self.common_ancestor else None,
            ahead_commits=[commit.copy() for commit in self.ahead_commits],
            behind_commits=[commit.copy() for commit in self.behind_commits],
        )

    def summary(self) -> str:
        """Generate a summary of the comparison."""
        if self.common_ancestor is None:
            base = "no common ancestor"
        else:
            base = f"common ancestor {self.common_ancestor.commit_id[:8]}"
        state = "diverged" if self.diverged else (
            "can fast-forward" if self.can_fast_forward else "not diverged"
        )
        return f"{self.ahead} ahead, {self.behind} behind, {base}, {state}"


def find_common_ancestor(
    local: "Repository", remote: "Repository"
) -> Optional[CommonAncestor]:
    """
    Find the nearest commit on local's HEAD chain that remote also stores.

    Only local's current chain is searched: an ancestor reachable solely
    from another local branch is not found.

    Args:
        local: Repository whose HEAD chain is walked
        remote: Repository whose store is searched

    Returns:
        CommonAncestor, or None if no shared commit exists
    """
    if len(local.store) == 0 or len(remote.store) == 0:
        return None

    for commit in local.store.iter_history(local.head):
        if commit.commit_id in remote.store:
            return CommonAncestor(
                commit_id=commit.commit_id,
                commit=commit,
                diverged_at=commit.timestamp,
            )
    return None


def get_ahead_commits(local: "Repository", remote: "Repository") -> List[Commit]:
    """
    Commits on local's HEAD chain after the common ancestor, newest first.

    Without a common ancestor the whole of local's history is returned.
    """
    ancestor = find_common_ancestor(local, remote)
    stop_at = ancestor.commit_id if ancestor else None

    ahead: List[Commit] = []
    for commit in local.store.iter_history(local.head):
        if commit.commit_id == stop_at:
            break
        ahead.append(commit)
    return ahead


def get_behind_commits(local: "Repository", remote: "Repository") -> List[Commit]:
    """Commits remote has after the common ancestor, newest first."""
    return get_ahead_commits(remote, local)


@performance_monitor(threshold_ms=500)
def compare_forks(local: "Repository", remote: "Repository") -> ForkComparison:
    """
    Compare two repositories.

    Args:
        local: Repository doing the comparison
        remote: Repository being compared against

    Returns:
        ForkComparison with ancestor, ahead/behind lists and derived flags
    """
    return ForkComparison(
        common_ancestor=find_common_ancestor(local, remote),
        ahead_commits=get_ahead_commits(local, remote),
        behind_commits=get_behind_commits(local, remote),
    )
