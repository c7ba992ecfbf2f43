"""Fail-fast iterator over a block list."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import ConcurrentModificationError, IteratorStateError

if TYPE_CHECKING:
    from .block_list import BlockList


class BlockListIterator:
    """Forward-only iterator that detects structural changes it did not make.

    The iterator snapshots the list's revision on creation. Every call
    compares the live revision against that snapshot first and raises
    ``ConcurrentModificationError`` on a mismatch; once that happens the
    iterator stays invalid. Removing through the iterator itself keeps it
    valid.
    """

    def __init__(self, owner: BlockList) -> None:
        self._owner = owner
        self._position = 0
        self._expected_revision = owner.revision
        self._can_remove = False

    def _check_revision(self) -> None:
        actual = self._owner.revision
        if actual != self._expected_revision:
            raise ConcurrentModificationError(self._expected_revision, actual)

    @property
    def position(self) -> int:
        """Logical index of the next element to yield."""
        return self._position

    def __iter__(self) -> BlockListIterator:
        return self

    def has_next(self) -> bool:
        self._check_revision()
        return self._position < len(self._owner)

    def __next__(self) -> Any:
        self._check_revision()
        if self._position >= len(self._owner):
            raise StopIteration
        value = self._owner.get(self._position)
        self._position += 1
        self._can_remove = True
        return value

    def remove(self) -> None:
        """Remove the element most recently returned by ``__next__``.

        The following element moves into the vacated position, so iteration
        continues with it.

        Raises:
            ConcurrentModificationError: If the list changed behind this iterator
            IteratorStateError: If no element has been returned since the
                last ``remove``
        """
        self._check_revision()
        if not self._can_remove:
            raise IteratorStateError("remove() requires a preceding call to next()")
        self._position -= 1
        self._owner.remove_at(self._position)
        self._expected_revision = self._owner.revision
        self._can_remove = False
