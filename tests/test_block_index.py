"""Tests for the block index and leaf blocks."""

from __future__ import annotations

import pytest

from blocklist import BlockIndexError, ConfigurationError
from blocklist.blocks import Block, BlockIndex, BlockPointer


def build_index(count: int, block_size: int) -> BlockIndex:
    index = BlockIndex(block_size=block_size)
    for i in range(count):
        index.insert(index.size, i)
    return index


def values_of(index: BlockIndex) -> list:
    return list(index)


class TestBlock:
    """Tests for the Block leaf type."""

    def test_allocate(self) -> None:
        """A fresh block is empty with all slots None."""
        blk = Block.allocate(4)

        assert blk.capacity == 4
        assert blk.fill == 0
        assert blk.is_empty
        assert not blk.is_full
        assert blk.items == [None, None, None, None]

    def test_insert_shifts_tail(self) -> None:
        """Inserting in the middle shifts the live tail right."""
        blk = Block.allocate(4)
        blk.insert(0, "a")
        blk.insert(1, "c")
        blk.insert(1, "b")

        assert blk.live() == ["a", "b", "c"]
        assert blk.items[3] is None

    def test_remove_closes_gap(self) -> None:
        """Removing shifts the tail left and clears the freed slot."""
        blk = Block.allocate(4)
        for offset, value in enumerate("abcd"):
            blk.insert(offset, value)

        assert blk.is_full
        assert blk.remove(1) == "b"
        assert blk.live() == ["a", "c", "d"]
        assert blk.items[3] is None

    def test_move_tail(self) -> None:
        """Moving a tail hands over [offset, fill) to the target block."""
        blk = Block.allocate(4)
        for offset, value in enumerate("abcd"):
            blk.insert(offset, value)
        target = Block.allocate(4)

        blk.move_tail(1, target)

        assert blk.live() == ["a"]
        assert blk.items[1:] == [None, None, None]
        assert target.live() == ["b", "c", "d"]

    def test_none_is_a_value(self) -> None:
        """None can be stored; the fill count decides what is live."""
        blk = Block.allocate(2)
        blk.insert(0, None)

        assert blk.fill == 1
        assert list(blk) == [None]


class TestFindBlock:
    """Tests for position resolution."""

    def test_read_mode_bounds(self) -> None:
        """Read mode rejects negative indexes and index == size."""
        index = build_index(10, 4)

        assert index.find_block(-1) is None
        assert index.find_block(10) is None
        assert index.find_block(11) is None
        assert index.find_block(0) == BlockPointer(0, 0)
        assert index.find_block(9) == BlockPointer(2, 1)

    def test_forward_and_backward_agree(self) -> None:
        """Every position resolves to the slot that holds it."""
        index = build_index(23, 5)

        for i in range(23):
            ptr = index.find_block(i)
            assert index.blocks[ptr.block].items[ptr.offset] == i

    def test_insert_mode_accepts_end(self) -> None:
        """Insert mode accepts index == size in an under-full block."""
        index = build_index(3, 4)

        assert index.find_block(3) is None
        assert index.find_block(3, for_insert=True) == BlockPointer(0, 3)

    def test_insert_mode_end_of_full_list(self) -> None:
        """Appending to a full last block resolves to nothing."""
        index = build_index(8, 4)

        assert index.find_block(8, for_insert=True) is None
        assert index.find_block(9, for_insert=True) is None

    def test_insert_prefers_underfull_block_at_boundary(self) -> None:
        """A boundary after an under-full block extends that block."""
        index = build_index(12, 4)
        index.remove(index.locate(3))

        assert index.fill_counts() == [3, 4, 4]
        assert index.find_block(3, for_insert=True) == BlockPointer(0, 3)

        index.insert(3, "x")

        assert index.fill_counts() == [4, 4, 4]
        assert values_of(index) == [0, 1, 2, "x", 4, 5, 6, 7, 8, 9, 10, 11]

    def test_locate_raises(self) -> None:
        """locate() raises BlockIndexError for missing positions."""
        index = build_index(2, 4)

        with pytest.raises(BlockIndexError) as exc_info:
            index.locate(2)

        assert exc_info.value.index == 2
        assert exc_info.value.size == 2


class TestCapacity:
    """Tests for grow and split."""

    def test_append_grows(self) -> None:
        """Appending past the last full block grows the index."""
        index = build_index(3, 2)

        assert index.fill_counts() == [2, 1]

    def test_split_at_block_boundary(self) -> None:
        """Inserting at the start of a full block splits it at offset 0."""
        index = build_index(8, 4)

        index.insert(4, "x")

        assert index.fill_counts() == [4, 1, 4]
        assert values_of(index) == [0, 1, 2, 3, "x", 4, 5, 6, 7]

    def test_split_mid_block(self) -> None:
        """Inserting inside a full block splits at the insertion offset."""
        index = build_index(8, 4)

        index.insert(6, "x")

        assert index.fill_counts() == [4, 3, 2]
        assert values_of(index) == [0, 1, 2, 3, 4, 5, "x", 6, 7]

    def test_split_block_keeps_elements(self) -> None:
        """split_block divides live elements without losing any."""
        index = build_index(4, 4)

        index.split_block(0, 1)

        assert index.fill_counts() == [1, 3]
        assert values_of(index) == [0, 1, 2, 3]
        assert index.size == 4

    def test_insert_out_of_range(self) -> None:
        """Inserting outside [0, size] raises without side effects."""
        index = build_index(3, 4)
        revision = index.revision

        with pytest.raises(BlockIndexError):
            index.insert(4, "x")
        with pytest.raises(BlockIndexError):
            index.insert(-1, "x")

        assert index.size == 3
        assert index.revision == revision


class TestRemoval:
    """Tests for removal and compaction."""

    def test_emptied_block_moves_to_tail(self) -> None:
        """A block drained by removal is recycled at the tail."""
        index = build_index(6, 2)

        index.remove(index.locate(2))
        index.remove(index.locate(2))

        assert index.fill_counts() == [2, 2, 0]
        assert values_of(index) == [0, 1, 4, 5]

    def test_recycled_block_is_reused(self) -> None:
        """Appends fill the recycled tail block before growing."""
        index = build_index(6, 2)
        index.remove(index.locate(2))
        index.remove(index.locate(2))

        index.insert(index.size, 6)

        assert index.fill_counts() == [2, 2, 1]
        assert len(index.blocks) == 3
        assert values_of(index) == [0, 1, 4, 5, 6]

    def test_drain_and_refill(self) -> None:
        """Removing everything and appending again keeps the layout valid."""
        index = build_index(10, 3)
        while index.size:
            index.remove(index.locate(0))

        assert index.fill_counts() == [0, 0, 0, 0]

        for i in range(4):
            index.insert(index.size, i)

        assert index.fill_counts() == [3, 1, 0, 0]
        assert values_of(index) == [0, 1, 2, 3]

    def test_remove_if_revisits_position_after_emptied_block(self) -> None:
        """Consecutive drained blocks are not skipped."""
        index = build_index(10, 2)

        assert index.remove_if(lambda v: v % 2 == 0) == 5
        assert index.fill_counts() == [1, 1, 1, 1, 1]

        assert index.remove_if(lambda v: v in (1, 3)) == 2
        assert values_of(index) == [5, 7, 9]
        assert index.fill_counts() == [1, 1, 1, 0, 0]

    def test_remove_if_predicate_error_leaves_index_untouched(self) -> None:
        """A predicate that raises partway through removes nothing."""
        index = build_index(6, 2)
        revision = index.revision

        def predicate(value):
            if value == 3:
                raise RuntimeError("boom")
            return value < 3

        with pytest.raises(RuntimeError):
            index.remove_if(predicate)

        assert values_of(index) == [0, 1, 2, 3, 4, 5]
        assert index.fill_counts() == [2, 2, 2]
        assert index.revision == revision

    def test_remove_if_nothing_matches(self) -> None:
        """A filter that matches nothing leaves the revision alone."""
        index = build_index(5, 2)
        revision = index.revision

        assert index.remove_if(lambda v: False) == 0
        assert index.revision == revision

    def test_reversed(self) -> None:
        """Reverse traversal walks blocks and slots backwards."""
        index = build_index(7, 3)

        assert list(reversed(index)) == [6, 5, 4, 3, 2, 1, 0]


class TestRevisionAndReset:
    """Tests for revision tracking and reset."""

    def test_revision_counts_structural_changes(self) -> None:
        """Inserts and removals bump the revision, replace does not."""
        index = BlockIndex(block_size=4)
        index.insert(0, "a")
        index.insert(0, "b")
        assert index.revision == 2

        index.replace(index.locate(0), "c")
        assert index.revision == 2

        index.remove(index.locate(0))
        assert index.revision == 3

    def test_reset_restores_initial_blocks(self) -> None:
        """reset() returns to the configured number of empty blocks."""
        index = BlockIndex(initial_block_count=3, block_size=2)
        for i in range(10):
            index.insert(index.size, i)

        index.reset()

        assert index.fill_counts() == [0, 0, 0]
        assert index.size == 0

    def test_invalid_configuration(self) -> None:
        """Non-positive sizes are rejected."""
        with pytest.raises(ConfigurationError):
            BlockIndex(block_size=0)
        with pytest.raises(ConfigurationError):
            BlockIndex(initial_block_count=0)


class TestFromChunks:
    """Tests for rebuilding an index from a block layout."""

    def test_layout_preserved(self) -> None:
        """Chunks become blocks one to one."""
        index = BlockIndex.from_chunks([[1, 2], [3], [4, 5]], 2)

        assert index.size == 5
        assert index.fill_counts() == [2, 1, 2]
        assert values_of(index) == [1, 2, 3, 4, 5]

    def test_grows_past_preallocation(self) -> None:
        """Partially filled chunks need more blocks than ceil(size / block_size)."""
        index = BlockIndex.from_chunks([[1], [2], [3]], 4)

        assert index.fill_counts() == [1, 1, 1]

    def test_preallocates_for_size(self) -> None:
        """Full chunks use exactly the preallocated blocks."""
        index = BlockIndex.from_chunks([[1, 2, 3]], 3)

        assert index.fill_counts() == [3]

    def test_empty(self) -> None:
        """No chunks yields the default single empty block."""
        index = BlockIndex.from_chunks([], 8)

        assert index.fill_counts() == [0]
        assert index.size == 0

    @pytest.mark.parametrize("chunks", [[[1], []], [[1, 2, 3]]])
    def test_invalid_chunks(self, chunks) -> None:
        """Empty or oversized chunks are rejected."""
        with pytest.raises(ValueError):
            BlockIndex.from_chunks(chunks, 2)
