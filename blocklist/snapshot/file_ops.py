"""
Snapshot file operations.

Provides async save/load of block list snapshots with:
- Atomic writes using temp file + rename
- I/O failures surfaced as SnapshotIOError, chained to the OSError
"""

import os
import tempfile
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from ..block_list import BlockList
from ..exceptions import SnapshotIOError
from ..logging_utils import get_blocklist_logger
from .codec import ElementCodec
from .stream import dumps, loads

logger = get_blocklist_logger("snapshot")


async def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        await aiofiles.os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise SnapshotIOError("create_directory", str(path), e) from e


async def save_snapshot(
    path: Path | str, block_list: BlockList[Any], codec: ElementCodec | None = None
) -> int:
    """Write a snapshot file atomically using temp file + rename.

    Args:
        path: Target path for the snapshot
        block_list: List to snapshot
        codec: Element codec (default: pickle)

    Returns:
        Number of bytes written
    """
    path = Path(path)
    data = dumps(block_list, codec)
    await ensure_directory(path.parent)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=".tmp_",
        suffix=".blocklist",
    )
    try:
        os.close(fd)
        async with aiofiles.open(temp_path, "wb") as f:
            await f.write(data)
            await f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        await aiofiles.os.rename(temp_path, path)
    except OSError as e:
        # Clean up temp file on error
        try:
            await aiofiles.os.remove(temp_path)
        except OSError:
            pass
        raise SnapshotIOError("write_snapshot", str(path), e) from e

    logger.debug("Saved snapshot", extra={"path": str(path), "bytes": len(data)})
    return len(data)


async def load_snapshot(path: Path | str, codec: ElementCodec | None = None) -> BlockList[Any]:
    """Read a snapshot file.

    Args:
        path: Path to the snapshot
        codec: Element codec (default: pickle)

    Returns:
        The restored block list

    Raises:
        SnapshotIOError: If the file cannot be read
        SnapshotFormatError: If the contents are malformed
    """
    path = Path(path)
    try:
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
    except OSError as e:
        raise SnapshotIOError("read_snapshot", str(path), e) from e

    logger.debug("Loaded snapshot", extra={"path": str(path), "bytes": len(data)})
    return loads(data, codec)
