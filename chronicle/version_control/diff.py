"""
Diff computation for comparing snapshots.

Walks two snapshot trees in parallel and reports added, removed and
modified paths. Sequences are compared position by position, exactly like
mappings keyed by index.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List
from enum import Enum

from .snapshot import copy_snapshot, is_collection, iter_entries, snapshots_equal


class ChangeType(str, Enum):
    """Type of change in a diff."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass
class PathChange:
    """A change at a single dotted path."""

    change_type: ChangeType
    path: str
    old_value: Any = None
    new_value: Any = None

    def summary(self) -> str:
        """Get a one-line summary of this change."""
        label = self.path or "(root)"
        if self.change_type == ChangeType.ADDED:
            return f"+ {label}: {self.new_value!r}"
        elif self.change_type == ChangeType.REMOVED:
            return f"- {label}: {self.old_value!r}"
        return f"M {label}: {self.old_value!r} -> {self.new_value!r}"

    def to_dict(self) -> Dict[str, Any]:
        if self.change_type == ChangeType.ADDED:
            return {"path": self.path, "value": self.new_value}
        if self.change_type == ChangeType.REMOVED:
            return {"path": self.path, "value": self.old_value}
        return {"path": self.path, "old": self.old_value, "new": self.new_value}


@dataclass
class SnapshotDiff:
    """
    Complete diff between two snapshots.

    Entries keep discovery order: removals in the old snapshot's key order,
    then additions and modifications in the new snapshot's key order.
    """

    added: List[PathChange] = field(default_factory=list)
    removed: List[PathChange] = field(default_factory=list)
    modified: List[PathChange] = field(default_factory=list)

    def has_changes(self) -> bool:
        """Check if there are any changes."""
        return bool(self.added or self.removed or self.modified)

    def count_by_type(self) -> Dict[str, int]:
        """Count changes by type."""
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "modified": len(self.modified),
        }

    def extend(self, other: "SnapshotDiff") -> None:
        """Append another diff's entries to this one."""
        self.added.extend(other.added)
        self.removed.extend(other.removed)
        self.modified.extend(other.modified)

    def summary(self) -> str:
        """Generate a summary of the diff."""
        if not self.has_changes():
            return "No changes"

        counts = self.count_by_type()
        parts = []
        if counts["added"] > 0:
            parts.append(f"{counts['added']} added")
        if counts["removed"] > 0:
            parts.append(f"{counts['removed']} removed")
        if counts["modified"] > 0:
            parts.append(f"{counts['modified']} modified")

        return ", ".join(parts)

    def format(self) -> str:
        """Format diff for display."""
        lines = [f"Summary: {self.summary()}"]
        for change in self.removed + self.added + self.modified:
            lines.append(f"  {change.summary()}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Plain ``{added, removed, modified}`` representation."""
        return {
            "added": [change.to_dict() for change in self.added],
            "removed": [change.to_dict() for change in self.removed],
            "modified": [change.to_dict() for change in self.modified],
        }


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def compute_diff(old: Any, new: Any, path: str = "") -> SnapshotDiff:
    """
    Compute diff between two snapshots.

    Two leaf values produce at most one modification at ``path``. Otherwise
    both sides are walked as keyed collections; a leaf facing a collection
    contributes no keys, so its counterpart's keys show up as added or
    removed.

    Args:
        old: Old snapshot
        new: New snapshot
        path: Dotted path of the values being compared

    Returns:
        SnapshotDiff showing all changes
    """
    diff = SnapshotDiff()

    if not is_collection(old) and not is_collection(new):
        if not snapshots_equal(old, new):
            diff.modified.append(
                PathChange(
                    ChangeType.MODIFIED,
                    path,
                    old_value=copy_snapshot(old),
                    new_value=copy_snapshot(new),
                )
            )
        return diff

    old_entries = dict(iter_entries(old))
    new_entries = dict(iter_entries(new))

    for key, value in old_entries.items():
        if key not in new_entries:
            diff.removed.append(
                PathChange(
                    ChangeType.REMOVED, _join(path, key), old_value=copy_snapshot(value)
                )
            )

    for key, value in new_entries.items():
        child_path = _join(path, key)
        if key not in old_entries:
            diff.added.append(
                PathChange(ChangeType.ADDED, child_path, new_value=copy_snapshot(value))
            )
            continue

        old_value = old_entries[key]
        if snapshots_equal(old_value, value):
            continue

        if is_collection(old_value) and is_collection(value):
            diff.extend(compute_diff(old_value, value, child_path))
        else:
            diff.modified.append(
                PathChange(
                    ChangeType.MODIFIED,
                    child_path,
                    old_value=copy_snapshot(old_value),
                    new_value=copy_snapshot(value),
                )
            )

    return diff
