"""
blocklist

A list implementation that stores its elements in fixed-size blocks.

Provides:
- BlockList, a MutableSequence whose inserts and removals only shift
  elements within one block
- Fail-fast iteration that detects structural changes made elsewhere
- Flat binary snapshots (bytes, streams and async file helpers)

Usage:

    >>> from blocklist import BlockList
    >>> bl = BlockList(block_size=5)
    >>> for i in range(20):
    ...     bl.add(f"Hello{i}")
    >>> bl.insert(14, "InsertA")
    >>> bl.fill_counts()
    [5, 5, 5, 1, 5]

Snapshots:

    from blocklist.snapshot import dumps, loads, save_snapshot, load_snapshot

    data = dumps(bl)
    assert loads(data) == bl
"""

from .block_list import BlockList
from .config import DEFAULT_BLOCK_COUNT, DEFAULT_BLOCK_SIZE, BlockListConfig
from .exceptions import (
    BlockIndexError,
    BlockListError,
    ConcurrentModificationError,
    ConfigurationError,
    IteratorStateError,
    SnapshotFormatError,
    SnapshotIOError,
    UnsupportedOperationError,
)
from .iterator import BlockListIterator
from .logging_utils import configure_structured_logging, get_blocklist_logger

__all__ = [
    # Core
    "BlockList",
    "BlockListIterator",
    # Configuration
    "BlockListConfig",
    "DEFAULT_BLOCK_COUNT",
    "DEFAULT_BLOCK_SIZE",
    # Logging
    "configure_structured_logging",
    "get_blocklist_logger",
    # Exceptions
    "BlockListError",
    "BlockIndexError",
    "ConcurrentModificationError",
    "IteratorStateError",
    "UnsupportedOperationError",
    "ConfigurationError",
    "SnapshotFormatError",
    "SnapshotIOError",
]

__version__ = "0.1.0"
