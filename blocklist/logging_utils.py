"""
Logging for block list internals.

Components log structural events (grow, split, recycle, clear, snapshot
I/O) at DEBUG level on loggers under ``blocklist``. Index events go
through ``BlockListLoggerAdapter``, which stamps each record with the
state of the index at the moment of the event, so a log line can be
matched to the list's shape without re-deriving it.

``configure_structured_logging`` is opt-in; the library itself never
installs handlers.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .blocks.index import BlockIndex

PACKAGE_LOGGER = "blocklist"

# Everything a bare LogRecord carries; other attributes arrived via ``extra``
_RECORD_FIELDS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class StructuredJsonFormatter(logging.Formatter):
    """
    Renders block list records as one JSON object per line.

    Keys: ``time`` (record creation, UTC), ``level``, ``component`` (the
    logger name below ``blocklist``), ``event`` and then the record's
    context fields in sorted order. Values JSON cannot encode are written
    with ``repr``.
    """

    def format(self, record: logging.LogRecord) -> str:
        component = record.name
        if component.startswith(PACKAGE_LOGGER + "."):
            component = component[len(PACKAGE_LOGGER) + 1 :]

        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "component": component,
            "event": record.getMessage(),
        }
        context = sorted(
            key
            for key in record.__dict__
            if key not in _RECORD_FIELDS and not key.startswith("_")
        )
        for key in context:
            payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=repr)


class _StructuredHandler(logging.StreamHandler):
    """Marks the handler installed by ``configure_structured_logging``."""


def configure_structured_logging(
    level: int = logging.DEBUG, stream: IO[str] | None = None
) -> logging.Handler:
    """
    Send block list events to ``stream`` as JSON lines.

    Calling it again replaces the previously installed handler; handlers
    added by the application are left alone.

    Args:
        level: Level for the ``blocklist`` logger (default: DEBUG)
        stream: Text stream to write to (default: stdout)

    Returns:
        The installed handler
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in [h for h in logger.handlers if isinstance(h, _StructuredHandler)]:
        logger.removeHandler(existing)

    handler = _StructuredHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


def get_blocklist_logger(name: str) -> logging.Logger:
    """Logger named ``blocklist.{name}`` for one component."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


class BlockListLoggerAdapter(logging.LoggerAdapter):
    """
    Adds the live shape of a block index to every record.

    ``block_size``, ``size``, ``revision`` and ``block_count`` are read
    when the record is emitted, not when the adapter is created. Fields
    passed through ``extra`` take precedence.
    """

    def __init__(self, logger: logging.Logger, index: BlockIndex):
        super().__init__(logger, {"block_size": index.block_size})
        self.index = index

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        index = self.index
        kwargs["extra"] = {
            "block_size": index.block_size,
            "size": index.size,
            "revision": index.revision,
            "block_count": len(index.blocks),
            **(kwargs.get("extra") or {}),
        }
        return msg, kwargs
