"""
Custom exceptions for block lists.

All block list components raise these exceptions so callers can
catch a single base class, while the builtin bases keep the usual
``IndexError`` / ``ValueError`` handling working.
"""


class BlockListError(Exception):
    """Base exception for all block list errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BlockIndexError(BlockListError, IndexError):
    """Raised when an index falls outside the valid window."""

    def __init__(self, index: int, size: int, allow_end: bool = False):
        upper = "<=" if allow_end else "<"
        super().__init__(
            f"Index ({index}) is out of bounds [0 <= i {upper} {size}]",
            {"index": index, "size": size},
        )
        self.index = index
        self.size = size


class ConcurrentModificationError(BlockListError, RuntimeError):
    """Raised when a list is structurally modified behind an iterator's back."""

    def __init__(self, expected_revision: int, actual_revision: int):
        super().__init__(
            "Block list was modified during iteration",
            {"expected_revision": expected_revision, "actual_revision": actual_revision},
        )
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision


class IteratorStateError(BlockListError, RuntimeError):
    """Raised when an iterator operation is called in the wrong state."""


class UnsupportedOperationError(BlockListError, NotImplementedError):
    """Raised for list operations that block lists do not provide."""

    def __init__(self, operation: str):
        super().__init__(f"BlockList.{operation} is not supported", {"operation": operation})
        self.operation = operation


class ConfigurationError(BlockListError, ValueError):
    """Raised when configuration validation fails."""

    def __init__(self, field: str, reason: str, value: object = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = str(value)
        super().__init__(f"Invalid configuration for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class SnapshotFormatError(BlockListError):
    """Raised when a snapshot stream is malformed or truncated."""

    def __init__(self, reason: str, offset: int | None = None):
        details: dict = {"reason": reason}
        if offset is not None:
            details["offset"] = offset
        super().__init__(f"Malformed block list snapshot: {reason}", details)
        self.reason = reason
        self.offset = offset


class SnapshotIOError(BlockListError):
    """Raised when reading or writing a snapshot file fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Snapshot I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause
