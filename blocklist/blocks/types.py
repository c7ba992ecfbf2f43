"""
Leaf storage types for block lists.

A block is a fixed-capacity run of element slots plus a fill count.
Only the leading ``fill`` slots hold live elements; the rest hold None.
The fill count is a field of its own, so every slot is free to hold
any value, None included.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BlockPointer:
    """Resolved location of a logical index.

    Attributes:
        block: Position of the block within the block sequence
        offset: Slot within that block
    """

    block: int
    offset: int


@dataclass(eq=False)
class Block:
    """A fixed-capacity leaf block.

    Attributes:
        items: Pre-allocated slots, ``len(items)`` is the block capacity
        fill: Number of live elements in the leading slots
    """

    items: list[Any] = field(repr=False)
    fill: int = 0

    @classmethod
    def allocate(cls, capacity: int) -> Block:
        """Create an empty block with ``capacity`` slots."""
        return cls(items=[None] * capacity)

    @property
    def capacity(self) -> int:
        return len(self.items)

    @property
    def is_full(self) -> bool:
        return self.fill == len(self.items)

    @property
    def is_empty(self) -> bool:
        return self.fill == 0

    def live(self) -> list[Any]:
        """Copy of the live elements."""
        return self.items[: self.fill]

    def __iter__(self) -> Iterator[Any]:
        items = self.items
        for s in range(self.fill):
            yield items[s]

    def insert(self, offset: int, value: Any) -> None:
        """Shift ``[offset, fill)`` right by one slot and write ``value``.

        The caller guarantees the block is not full.
        """
        fill = self.fill
        if offset < fill:
            self.items[offset + 1 : fill + 1] = self.items[offset:fill]
        self.items[offset] = value
        self.fill = fill + 1

    def remove(self, offset: int) -> Any:
        """Remove the element at ``offset`` and close the gap."""
        fill = self.fill
        value = self.items[offset]
        if offset < fill - 1:
            self.items[offset : fill - 1] = self.items[offset + 1 : fill]
        self.items[fill - 1] = None
        self.fill = fill - 1
        return value

    def move_tail(self, offset: int, target: Block) -> None:
        """Move live elements ``[offset, fill)`` to the front of empty ``target``."""
        moved = self.fill - offset
        target.items[:moved] = self.items[offset : self.fill]
        target.fill = moved
        self.items[offset : self.fill] = [None] * moved
        self.fill = offset

    def reset(self) -> None:
        """Drop all live elements."""
        self.items[: self.fill] = [None] * self.fill
        self.fill = 0
