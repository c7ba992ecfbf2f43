"""
Block storage model.

Elements live in fixed-capacity leaf blocks; the block index keeps
those blocks in logical order and resolves positions to them.
"""

from .index import BlockIndex
from .types import Block, BlockPointer

__all__ = [
    "Block",
    "BlockPointer",
    "BlockIndex",
]
