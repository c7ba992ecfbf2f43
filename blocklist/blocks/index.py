"""
Block index: the structural core of a block list.

The index owns an ordered list of fixed-capacity blocks, the total
element count and the revision counter. Concatenating the live
elements of every block in order yields the logical sequence.

Layout invariants:
- ``0 <= block.fill <= block_size`` for every block
- empty blocks only appear after the last non-empty block
- ``size == sum(block.fill for block in blocks)``

Inserts and removals touch one block (two when a full block is split)
plus the block list itself; nothing ever moves the whole element set.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from ..config import DEFAULT_BLOCK_COUNT, DEFAULT_BLOCK_SIZE, BlockListConfig
from ..exceptions import BlockIndexError
from ..logging_utils import BlockListLoggerAdapter, get_blocklist_logger
from .types import Block, BlockPointer

logger = get_blocklist_logger("index")


class BlockIndex:
    """Ordered sequence of blocks with position resolution and capacity management.

    Every structural mutation bumps ``revision``; replacing a value in
    place does not.
    """

    def __init__(
        self,
        initial_block_count: int = DEFAULT_BLOCK_COUNT,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        # Validates both values
        self.config = BlockListConfig(
            initial_block_count=initial_block_count, block_size=block_size
        )
        self.block_size = block_size
        self.blocks: list[Block] = [Block.allocate(block_size) for _ in range(initial_block_count)]
        self.size = 0
        self.revision = 0
        self._log = BlockListLoggerAdapter(logger, self)

    @classmethod
    def from_chunks(cls, chunks: list[list[Any]], block_size: int) -> BlockIndex:
        """Build an index whose blocks hold exactly ``chunks``, in order.

        ``ceil(size / block_size)`` blocks (at least the default count) are
        allocated up front; more are grown when chunks are partially filled.

        Raises:
            ValueError: If a chunk is empty or larger than ``block_size``
        """
        size = sum(len(chunk) for chunk in chunks)
        index = cls(DEFAULT_BLOCK_COUNT, block_size)
        preallocated = max(-(-size // block_size), DEFAULT_BLOCK_COUNT)
        while len(index.blocks) < preallocated:
            index.blocks.append(Block.allocate(block_size))

        for b, chunk in enumerate(chunks):
            if not chunk or len(chunk) > block_size:
                raise ValueError(
                    f"chunk {b} holds {len(chunk)} elements, expected 1..{block_size}"
                )
            if b == len(index.blocks):
                index.grow()
            blk = index.blocks[b]
            blk.items[: len(chunk)] = chunk
            blk.fill = len(chunk)

        index.size = size
        return index

    # Position resolver

    def find_block(self, index: int, for_insert: bool = False) -> BlockPointer | None:
        """Map a logical index to the block and slot holding it.

        Scans forward from the first block when ``index`` lies in the first
        half of the sequence, backward from the last block otherwise.

        In insert mode ``index == size`` is accepted too, as is an index that
        lands exactly on the end of a block with spare room, so inserts
        extend an under-full block instead of splitting its neighbour.
        Empty tail blocks are skipped; an append no non-empty block can
        absorb yields None and is routed by ``insert``.

        Returns:
            The resolved pointer, or None when there is no such position
        """
        size = self.size
        if index < 0 or index > size or (index == size and not for_insert):
            return None

        blocks = self.blocks
        block_size = self.block_size

        if index < size // 2:
            offset = 0
            for b, blk in enumerate(blocks):
                next_offset = offset + blk.fill
                if index < next_offset or (
                    for_insert and index == next_offset and blk.fill < block_size
                ):
                    return BlockPointer(b, index - offset)
                offset = next_offset
        else:
            offset = size
            for b in range(len(blocks) - 1, -1, -1):
                blk = blocks[b]
                if blk.fill == 0:
                    continue
                next_offset = offset - blk.fill
                if next_offset <= index < offset or (
                    for_insert and index == offset and blk.fill < block_size
                ):
                    return BlockPointer(b, index - next_offset)
                offset = next_offset
        return None

    def locate(self, index: int) -> BlockPointer:
        """Resolve an existing position or raise ``BlockIndexError``."""
        ptr = self.find_block(index)
        if ptr is None:
            raise BlockIndexError(index, self.size)
        return ptr

    # Capacity manager

    def grow(self) -> int:
        """Append one empty block and return its position."""
        self.blocks.append(Block.allocate(self.block_size))
        self._log.debug("Grew block index")
        return len(self.blocks) - 1

    def split_block(self, block_index: int, offset: int) -> None:
        """Split a block at ``offset``.

        A new block is placed right after ``block_index`` and receives the
        live elements ``[offset, fill)``; the split block keeps ``[0, offset)``.
        """
        blk = self.blocks[block_index]
        tail = Block.allocate(self.block_size)
        blk.move_tail(offset, tail)
        self.blocks.insert(block_index + 1, tail)
        self._log.debug(
            "Split block",
            extra={
                "block": block_index,
                "offset": offset,
                "moved": tail.fill,
            },
        )

    def _append_pointer(self) -> BlockPointer:
        # First empty tail block, or a fresh one when every block holds data
        b = len(self.blocks)
        while b > 0 and self.blocks[b - 1].fill == 0:
            b -= 1
        if b == len(self.blocks):
            b = self.grow()
        return BlockPointer(b, 0)

    # Structural mutation

    def insert(self, index: int, value: Any) -> None:
        """Insert ``value`` so that it ends up at logical position ``index``.

        Raises:
            BlockIndexError: If ``index`` is outside ``[0, size]``
        """
        ptr = self.find_block(index, for_insert=True)
        if ptr is None:
            if index != self.size:
                raise BlockIndexError(index, self.size, allow_end=True)
            ptr = self._append_pointer()

        blk = self.blocks[ptr.block]
        if blk.is_full:
            self.split_block(ptr.block, ptr.offset)
        blk.insert(ptr.offset, value)
        self.size += 1
        self.revision += 1

    def remove(self, ptr: BlockPointer) -> Any:
        """Remove and return the element at a resolved pointer.

        A block emptied by the removal is moved to the tail of the block
        sequence for reuse.
        """
        blk = self.blocks[ptr.block]
        value = blk.remove(ptr.offset)
        if blk.fill == 0:
            del self.blocks[ptr.block]
            self.blocks.append(blk)
            self._log.debug("Recycled empty block", extra={"block": ptr.block})
        self.size -= 1
        self.revision += 1
        return value

    def remove_if(self, predicate: Callable[[Any], bool]) -> int:
        """Remove every element for which ``predicate`` is true.

        Relative order of the survivors is kept. ``predicate`` is evaluated
        for every element before anything is removed, so an exception from it
        leaves the index untouched. When a removal empties the current block
        the same block position is used again, since the following block has
        just moved into it.

        Returns:
            Number of elements removed
        """
        marks = [[bool(predicate(item)) for item in blk] for blk in self.blocks if blk.fill]

        removed = 0
        b = 0
        for doomed in marks:
            blk = self.blocks[b]
            s = 0
            for drop in doomed:
                if not drop:
                    s += 1
                    continue
                self.remove(BlockPointer(b, s))
                removed += 1
            if blk.fill:
                b += 1
        return removed

    def replace(self, ptr: BlockPointer, value: Any) -> Any:
        """Overwrite the element at ``ptr`` and return the old one.

        Not a structural change, so the revision is left alone.
        """
        blk = self.blocks[ptr.block]
        old = blk.items[ptr.offset]
        blk.items[ptr.offset] = value
        return old

    def reset(self) -> None:
        """Return to the initial configuration of empty blocks."""
        self.blocks = [
            Block.allocate(self.block_size) for _ in range(self.config.initial_block_count)
        ]
        self.size = 0
        self.revision += 1
        self._log.debug("Cleared block index")

    # Traversal

    def __iter__(self) -> Iterator[Any]:
        for blk in self.blocks:
            if blk.fill == 0:
                break
            yield from blk

    def __reversed__(self) -> Iterator[Any]:
        for blk in reversed(self.blocks):
            items = blk.items
            for s in range(blk.fill - 1, -1, -1):
                yield items[s]

    def fill_counts(self) -> list[int]:
        """Fill count of every block, in block order."""
        return [blk.fill for blk in self.blocks]
