"""
Flat serialized snapshots of block lists.

A snapshot records the block size, the element count and each block's
fill count followed by its elements.
"""

from .codec import ElementCodec, JsonElementCodec, PickleElementCodec
from .file_ops import load_snapshot, save_snapshot
from .stream import dumps, loads, read_snapshot, write_snapshot

__all__ = [
    # Codecs
    "ElementCodec",
    "PickleElementCodec",
    "JsonElementCodec",
    # Streams
    "write_snapshot",
    "read_snapshot",
    "dumps",
    "loads",
    # Files
    "save_snapshot",
    "load_snapshot",
]
