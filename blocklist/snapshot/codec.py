"""
Element codecs for block list snapshots.

A snapshot stores every element as a length-prefixed byte string; the
codec decides how a value maps to those bytes.

``PickleElementCodec`` is the default and round-trips any picklable
value exactly. ``JsonElementCodec`` produces portable bytes but refuses
values that JSON cannot reproduce.
"""

from __future__ import annotations

import json
import pickle
from abc import ABC, abstractmethod
from typing import Any


class ElementCodec(ABC):
    """Abstract base for element serialization.

    ``decode`` should raise ``ValueError`` for bytes it cannot read; the
    snapshot reader reports those as ``SnapshotFormatError``.
    """

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Serialize one element."""
        pass

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """Deserialize one element."""
        pass


class PickleElementCodec(ElementCodec):
    """Pickle element codec.

    Tuples, non-string dict keys, datetimes and user classes all come
    back as the same type. Only load snapshots from trusted sources.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def encode(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self.protocol)
        except (pickle.PicklingError, AttributeError, TypeError) as e:
            raise TypeError(
                f"Element of type {type(value).__name__} cannot be pickled: {e}"
            ) from e

    def decode(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except Exception as e:
            raise ValueError(f"invalid pickle payload: {e}") from e


class JsonElementCodec(ElementCodec):
    """UTF-8 JSON element codec.

    Only values that read back equal are accepted, which rules out
    tuples, dicts with non-string keys and anything needing a custom
    encoder.

    Raises:
        TypeError: From ``encode`` for values JSON cannot serialize
        ValueError: From ``encode`` for values JSON would change
    """

    def encode(self, value: Any) -> bytes:
        text = json.dumps(value)
        if json.loads(text) != value:
            raise ValueError(
                f"Element {value!r} of type {type(value).__name__} does not survive JSON"
            )
        return text.encode("utf-8")

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))
