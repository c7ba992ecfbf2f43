"""
Binary snapshot format for block lists.

Layout (all integers big-endian int32):

    block_size, size,
    then for each non-empty block in order:
        fill_count, followed by fill_count elements
    where each element is: length, then ``length`` codec-encoded bytes

Empty blocks only ever sit at the tail of a list, so the fill counts
written always add up to ``size`` and the reader stops once it has
read that many elements.
"""

from __future__ import annotations

import io
import struct
from typing import Any, BinaryIO

from ..block_list import BlockList
from ..exceptions import SnapshotFormatError
from ..logging_utils import get_blocklist_logger
from .codec import ElementCodec, PickleElementCodec

logger = get_blocklist_logger("snapshot")

_INT32 = struct.Struct(">i")


class _SnapshotReader:
    """Reads fixed-size fields from a stream, tracking the byte offset."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self.offset = 0

    def read_bytes(self, length: int, what: str) -> bytes:
        data = self._stream.read(length)
        if data is None or len(data) != length:
            raise SnapshotFormatError(f"truncated while reading {what}", self.offset)
        self.offset += length
        return data

    def read_int(self, what: str) -> int:
        return _INT32.unpack(self.read_bytes(_INT32.size, what))[0]


def write_snapshot(
    block_list: BlockList[Any], stream: BinaryIO, codec: ElementCodec | None = None
) -> int:
    """Write ``block_list`` to a binary stream.

    Returns:
        Number of bytes written
    """
    codec = codec or PickleElementCodec()
    written = stream.write(_INT32.pack(block_list.block_size))
    written += stream.write(_INT32.pack(len(block_list)))

    blocks = 0
    for chunk in block_list.iter_blocks():
        written += stream.write(_INT32.pack(len(chunk)))
        for item in chunk:
            payload = codec.encode(item)
            written += stream.write(_INT32.pack(len(payload)))
            written += stream.write(payload)
        blocks += 1

    logger.debug(
        "Wrote snapshot",
        extra={"size": len(block_list), "blocks": blocks, "bytes": written},
    )
    return written


def read_snapshot(stream: BinaryIO, codec: ElementCodec | None = None) -> BlockList[Any]:
    """Read a block list written by ``write_snapshot``.

    The block layout is reproduced as written.

    Raises:
        SnapshotFormatError: If the stream is truncated or inconsistent
    """
    codec = codec or PickleElementCodec()
    reader = _SnapshotReader(stream)

    block_size = reader.read_int("block size")
    if block_size < 1:
        raise SnapshotFormatError(f"block size must be positive, got {block_size}", 0)
    size = reader.read_int("size")
    if size < 0:
        raise SnapshotFormatError(f"size must not be negative, got {size}", _INT32.size)

    chunks: list[list[Any]] = []
    remaining = size
    while remaining > 0:
        fill_offset = reader.offset
        fill = reader.read_int("fill count")
        if fill < 0 or fill > block_size:
            raise SnapshotFormatError(
                f"fill count {fill} outside [0, {block_size}]", fill_offset
            )
        if fill > remaining:
            raise SnapshotFormatError(
                f"fill counts exceed declared size {size}", fill_offset
            )
        if fill == 0:
            continue

        chunk = []
        for _ in range(fill):
            length = reader.read_int("element length")
            if length < 0:
                raise SnapshotFormatError(f"negative element length {length}", reader.offset)
            element_offset = reader.offset
            payload = reader.read_bytes(length, "element")
            try:
                chunk.append(codec.decode(payload))
            except ValueError as e:
                raise SnapshotFormatError(f"undecodable element: {e}", element_offset) from e
        chunks.append(chunk)
        remaining -= fill

    logger.debug(
        "Read snapshot",
        extra={"size": size, "blocks": len(chunks), "bytes": reader.offset},
    )
    return BlockList.from_blocks(chunks, block_size)


def dumps(block_list: BlockList[Any], codec: ElementCodec | None = None) -> bytes:
    """Serialize ``block_list`` to bytes."""
    buffer = io.BytesIO()
    write_snapshot(block_list, buffer, codec)
    return buffer.getvalue()


def loads(data: bytes, codec: ElementCodec | None = None) -> BlockList[Any]:
    """Deserialize a block list from bytes."""
    return read_snapshot(io.BytesIO(data), codec)
