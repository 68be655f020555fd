"""
Stash stack for uncommitted snapshots.
"""

from typing import Any, Iterable, List, Mapping, Optional

from .errors import NoStashAvailableError, StashNotFoundError
from .models import StashEntry, StashInfo
from .snapshot import copy_snapshot


class StashStack:
    """
    LIFO stack of snapshots held outside the commit graph.

    Entries are stored as private copies and handed back as copies.
    """

    def __init__(self, entries: Optional[Iterable[StashEntry]] = None):
        self._entries: List[StashEntry] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def push(
        self,
        data: Any,
        message: str,
        timestamp: str,
        branch: str,
        head: Optional[str],
    ) -> int:
        """
        Push a snapshot onto the stack.

        Returns:
            Index of the new entry
        """
        self._entries.append(
            StashEntry(
                data=copy_snapshot(data),
                message=message,
                timestamp=timestamp,
                branch=branch,
                head=head,
            )
        )
        return len(self._entries) - 1

    def pop(self) -> Any:
        """
        Remove the most recent entry and return its data.

        Raises:
            NoStashAvailableError: If the stack is empty
        """
        if not self._entries:
            raise NoStashAvailableError("No stash to pop")
        return self._entries.pop().data

    def apply(self, index: int = -1) -> Any:
        """
        Return a copy of an entry's data without removing it.

        Args:
            index: Entry index; negative values count from the most recent

        Raises:
            NoStashAvailableError: If the stack is empty
            StashNotFoundError: If the index is out of range
        """
        if not self._entries:
            raise NoStashAvailableError()
        if not -len(self._entries) <= index < len(self._entries):
            raise StashNotFoundError(index)
        return copy_snapshot(self._entries[index].data)

    def list(self) -> List[StashInfo]:
        """Metadata for every entry, oldest first."""
        return [
            StashInfo(
                index=i,
                message=entry.message,
                timestamp=entry.timestamp,
                branch=entry.branch,
            )
            for i, entry in enumerate(self._entries)
        ]

    def to_list(self) -> List[dict]:
        return [entry.to_dict() for entry in self._entries]

    @classmethod
    def from_list(cls, data: Iterable[Mapping[str, Any]]) -> "StashStack":
        return cls(StashEntry.from_dict(dict(raw)) for raw in data)
