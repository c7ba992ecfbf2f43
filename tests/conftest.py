"""
Shared test configuration and fixtures.

Provides factories for pre-filled block lists and a layout checker
that verifies the block invariants after mutations.
"""

import logging

import pytest

from blocklist import BlockList

logger = logging.getLogger(__name__)


def hello_values(count: int, start: int = 0) -> list[str]:
    """The "Hello0".."HelloN" values used throughout the tests."""
    return [f"Hello{i}" for i in range(start, start + count)]


def assert_layout(bl: BlockList) -> None:
    """Check the structural invariants of a block list."""
    fills = bl.fill_counts()
    assert sum(fills) == len(bl)
    assert all(0 <= fill <= bl.block_size for fill in fills)

    # Empty blocks only at the tail
    seen_empty = False
    for fill in fills:
        if fill == 0:
            seen_empty = True
        else:
            assert not seen_empty, f"empty block before a non-empty one: {fills}"


@pytest.fixture
def make_hello_list():
    """
    Factory fixture building a list of "Hello<i>" strings.

    Usage: make_hello_list(70) or make_hello_list(20, block_size=5)
    """

    def _make(count: int, block_size: int = 32, start: int = 0) -> BlockList:
        bl = BlockList(block_size=block_size)
        for value in hello_values(count, start):
            bl.add(value)
        logger.debug("Built hello list", extra={"count": count, "block_size": block_size})
        return bl

    return _make


@pytest.fixture
def hello70(make_hello_list) -> BlockList:
    """Seventy elements in default-sized blocks."""
    return make_hello_list(70)
