"""
Snapshot values stored in commits.

A snapshot is a tree built from a closed set of JSON-like types:
None, bool, int, float, str, sequences and string-keyed mappings.
Commits always hold their own private copy of a snapshot.
"""

from typing import Any, Dict, Iterator, List, Tuple, Union

from .errors import InvalidSnapshotError

SnapshotValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

_SCALAR_TYPES = (bool, int, float, str)


def is_collection(value: Any) -> bool:
    """Check whether a value is a sequence or mapping snapshot."""
    return isinstance(value, (dict, list, tuple))


def copy_snapshot(value: Any) -> SnapshotValue:
    """
    Deep copy a snapshot value, validating it along the way.

    Tuples are normalized to lists so that stored data matches what an
    export/import round trip produces.

    Args:
        value: Value to copy

    Returns:
        Independent copy of the value

    Raises:
        InvalidSnapshotError: If the value contains unsupported types
    """
    if value is None or isinstance(value, _SCALAR_TYPES):
        return value
    if isinstance(value, (list, tuple)):
        return [copy_snapshot(item) for item in value]
    if isinstance(value, dict):
        copied: Dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidSnapshotError(
                    f"Snapshot mapping keys must be strings, got {type(key).__name__}",
                    value=key,
                )
            copied[key] = copy_snapshot(item)
        return copied
    raise InvalidSnapshotError(
        f"Unsupported snapshot type: {type(value).__name__}", value=value
    )


def snapshots_equal(a: Any, b: Any) -> bool:
    """
    Structural equality over snapshot values.

    Booleans never compare equal to numbers, and sequences compare equal
    regardless of whether they are lists or tuples.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(snapshots_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(snapshots_equal(a[key], b[key]) for key in a)
    if is_collection(a) or is_collection(b):
        return False
    if type(a) is not type(b) and not (
        isinstance(a, (int, float)) and isinstance(b, (int, float))
    ):
        return False
    return a == b


def iter_entries(value: Any) -> Iterator[Tuple[str, Any]]:
    """
    Enumerate the children of a snapshot as (key, child) pairs.

    Sequence positions are reported as string indices so that mappings and
    sequences are walked the same way. Leaf values have no children.
    """
    if isinstance(value, dict):
        yield from value.items()
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            yield str(index), item
