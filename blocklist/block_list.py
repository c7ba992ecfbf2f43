"""
Block list: a mutable sequence stored in fixed-size blocks.

Elements are partitioned across an ordered sequence of fixed-capacity
blocks (see ``blocks.index``). Growing never reallocates the whole
sequence and inserting or removing in the middle only shifts elements
within one block, at the price of a block scan to resolve positions.

Usage:

    >>> from blocklist import BlockList
    >>> bl = BlockList(block_size=5)
    >>> bl.add_all(f"Hello{i}" for i in range(20))
    True
    >>> bl.insert(5, "Inserted")
    >>> bl.get(5)
    'Inserted'

The list is not thread safe. Structural changes made while an iterator
is active are detected by that iterator, not prevented.
"""

from __future__ import annotations

import copy as _copy
from collections.abc import Callable, Container, Iterable, Iterator, MutableSequence
from typing import Any, Generic, TypeVar

import numpy as np

from .blocks.index import BlockIndex
from .config import DEFAULT_BLOCK_COUNT, DEFAULT_BLOCK_SIZE, BlockListConfig
from .exceptions import UnsupportedOperationError
from .iterator import BlockListIterator

T = TypeVar("T")


class BlockList(MutableSequence[T], Generic[T]):
    """Mutable sequence backed by a block index.

    ``get``/``set``/``insert``/``remove_at`` take strict indexes in
    ``[0, size)`` (``[0, size]`` for ``insert``). The subscript forms
    (``bl[i]``, ``del bl[i]``, ``pop``) additionally accept negative
    indexes the way ``list`` does. Slices are not supported.

    Unlike ``list.remove``, ``remove(value)`` returns whether an element
    was removed and does not raise ``ValueError`` for absent values.
    Unlike ``list.insert``, ``insert`` does not clamp out-of-range
    indexes.
    """

    def __init__(
        self,
        values: Iterable[T] | None = None,
        *,
        initial_block_count: int = DEFAULT_BLOCK_COUNT,
        block_size: int = DEFAULT_BLOCK_SIZE,
        config: BlockListConfig | None = None,
    ) -> None:
        if config is not None:
            initial_block_count = config.initial_block_count
            block_size = config.block_size
        self._index = BlockIndex(initial_block_count, block_size)
        if values is not None:
            self.add_all(values)

    @classmethod
    def from_config(cls, config: BlockListConfig, values: Iterable[T] | None = None) -> BlockList[T]:
        return cls(values, config=config)

    @classmethod
    def from_blocks(cls, chunks: list[list[T]], block_size: int) -> BlockList[T]:
        """Rebuild a list from its block layout (see ``iter_blocks``)."""
        result = cls(block_size=block_size)
        result._index = BlockIndex.from_chunks(chunks, block_size)
        return result

    # Introspection

    @property
    def config(self) -> BlockListConfig:
        return self._index.config

    @property
    def block_size(self) -> int:
        return self._index.block_size

    @property
    def block_count(self) -> int:
        return len(self._index.blocks)

    @property
    def revision(self) -> int:
        """Structural modification counter."""
        return self._index.revision

    def fill_counts(self) -> list[int]:
        """Fill count of every block, in block order."""
        return self._index.fill_counts()

    def iter_blocks(self) -> Iterator[list[T]]:
        """Yield the live elements of each non-empty block, in block order."""
        for blk in self._index.blocks:
            if blk.fill == 0:
                break
            yield blk.live()

    # Size

    def size(self) -> int:
        return self._index.size

    def __len__(self) -> int:
        return self._index.size

    def is_empty(self) -> bool:
        return self._index.size == 0

    # Positional access

    def _normalize(self, index: int) -> int:
        if not isinstance(index, int):
            if isinstance(index, slice):
                raise UnsupportedOperationError("slicing")
            raise TypeError(f"indices must be integers, not {type(index).__name__}")
        if index < 0:
            index += self._index.size
        return index

    def get(self, index: int) -> T:
        """Return the element at ``index``.

        Raises:
            BlockIndexError: If ``index`` is outside ``[0, size)``
        """
        ptr = self._index.locate(index)
        return self._index.blocks[ptr.block].items[ptr.offset]

    def set(self, index: int, value: T) -> T:
        """Replace the element at ``index`` and return the previous one.

        Not a structural change: active iterators stay valid.
        """
        return self._index.replace(self._index.locate(index), value)

    def __getitem__(self, index: int) -> T:
        return self.get(self._normalize(index))

    def __setitem__(self, index: int, value: T) -> None:
        self.set(self._normalize(index), value)

    def __delitem__(self, index: int) -> None:
        self.remove_at(self._normalize(index))

    # Insertion

    def add(self, value: T) -> bool:
        """Append ``value``. Always succeeds."""
        self._index.insert(self._index.size, value)
        return True

    def append(self, value: T) -> None:
        self._index.insert(self._index.size, value)

    def insert(self, index: int, value: T) -> None:
        """Insert ``value`` before position ``index``.

        Unlike ``list.insert`` the index is not clamped.

        Raises:
            BlockIndexError: If ``index`` is outside ``[0, size]``
        """
        self._index.insert(index, value)

    def add_all(self, values: Iterable[T]) -> bool:
        """Append every value in order. Returns whether anything was added."""
        if values is self:
            values = list(values)
        added = False
        for value in values:
            self._index.insert(self._index.size, value)
            added = True
        return added

    def extend(self, values: Iterable[T]) -> None:
        self.add_all(values)

    def add_all_at(self, index: int, values: Iterable[T]) -> bool:
        """Insert every value in order, the first one at ``index``."""
        if values is self:
            values = list(values)
        added = False
        for value in values:
            self._index.insert(index, value)
            index += 1
            added = True
        return added

    # Removal

    def remove_at(self, index: int) -> T:
        """Remove and return the element at ``index``.

        Raises:
            BlockIndexError: If ``index`` is outside ``[0, size)``
        """
        return self._index.remove(self._index.locate(index))

    def pop(self, index: int = -1) -> T:
        return self.remove_at(self._normalize(index))

    def remove(self, value: Any) -> bool:
        """Remove the first occurrence of ``value``.

        Returns:
            Whether an element was removed; absent values are not an error
        """
        pos = self.index_of(value)
        if pos < 0:
            return False
        self.remove_at(pos)
        return True

    def remove_all(self, values: Iterable[Any]) -> bool:
        """Remove every element equal to one of ``values``.

        Returns:
            Whether the list changed
        """
        contains = _membership(list(values) if values is self else values)
        return self._index.remove_if(contains) > 0

    def retain_all(self, values: Iterable[Any]) -> bool:
        """Keep only the elements equal to one of ``values``.

        Returns:
            Whether the list changed
        """
        contains = _membership(list(values) if values is self else values)
        return self._index.remove_if(lambda item: not contains(item)) > 0

    def clear(self) -> None:
        """Drop every element and restore the initial block configuration."""
        self._index.reset()

    # Search

    def index_of(self, value: Any) -> int:
        """Position of the first element equal to ``value``, or -1."""
        for pos, item in enumerate(self._index):
            if item == value:
                return pos
        return -1

    def last_index_of(self, value: Any) -> int:
        """Position of the last element equal to ``value``, or -1."""
        pos = self._index.size - 1
        for item in reversed(self._index):
            if item == value:
                return pos
            pos -= 1
        return -1

    def index(self, value: Any, start: int = 0, stop: int | None = None) -> int:
        if start == 0 and stop is None:
            pos = self.index_of(value)
            if pos < 0:
                raise ValueError(f"{value!r} is not in list")
            return pos
        return super().index(value, start, stop)

    def contains(self, value: Any) -> bool:
        return self.index_of(value) >= 0

    def __contains__(self, value: object) -> bool:
        return self.index_of(value) >= 0

    def contains_all(self, values: Iterable[Any]) -> bool:
        return all(self.contains(value) for value in values)

    def count(self, value: Any) -> int:
        return sum(1 for item in self._index if item == value)

    # Iteration

    def iterator(self) -> BlockListIterator:
        """Return a fail-fast iterator over the elements."""
        return BlockListIterator(self)

    def __iter__(self) -> Iterator[T]:
        return BlockListIterator(self)

    def list_iterator(self, index: int = 0) -> Iterator[T]:
        raise UnsupportedOperationError("list_iterator")

    def sub_list(self, start: int, stop: int) -> BlockList[T]:
        raise UnsupportedOperationError("sub_list")

    # Conversion

    def to_array(self, buffer: Any = None) -> Any:
        """Copy the elements into a flat container, in order.

        Without ``buffer`` a new list is returned. A buffer that is large
        enough is filled in place and returned; slots past ``size`` are left
        untouched. A buffer that is too small is replaced by a new container
        of the same kind: a ``numpy.ndarray`` with the buffer's dtype, or a
        list.
        """
        size = self._index.size
        if buffer is None:
            return list(self._index)

        if len(buffer) < size:
            if isinstance(buffer, np.ndarray):
                buffer = np.empty(size, dtype=buffer.dtype)
            else:
                buffer = [None] * size

        for pos, item in enumerate(self._index):
            buffer[pos] = item
        return buffer

    def copy(self) -> BlockList[T]:
        """Return a shallow copy with the same configuration and fresh blocks."""
        return type(self)(self._index, config=self.config)

    def __copy__(self) -> BlockList[T]:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> BlockList[T]:
        result = type(self)(config=self.config)
        memo[id(self)] = result
        for item in self._index:
            result.append(_copy.deepcopy(item, memo))
        return result

    # Comparison and display

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BlockList):
            return NotImplemented
        if self is other:
            return True
        if len(self) != len(other):
            return False
        # None == None holds, so None elements at the same position match
        return all(a == b for a, b in zip(self._index, other._index))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._index)!r})"

    def __str__(self) -> str:
        """Elements comma-joined, one line per non-empty block."""
        return "\n".join(
            ",".join(str(item) for item in blk) for blk in self._index.blocks if blk.fill
        )


def _membership(values: Iterable[Any]) -> Callable[[Any], bool]:
    """Membership test over ``values`` that tolerates unhashable elements.

    Hash-based containers such as ``set`` and ``dict`` raise ``TypeError``
    when asked about an unhashable element; those lookups fall back to an
    equality scan so a bulk filter never stops halfway.
    """
    # One-shot iterables cannot answer repeated membership tests
    if not isinstance(values, Container) or isinstance(values, Iterator):
        values = list(values)
    if isinstance(values, list):
        return values.__contains__

    scan: list[Any] | None = None

    def contains(item: Any) -> bool:
        nonlocal scan
        try:
            return item in values
        except TypeError:
            if not isinstance(values, Iterable):
                raise
            if scan is None:
                scan = list(values)
            return any(item == value for value in scan)

    return contains
