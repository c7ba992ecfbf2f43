"""
Construction-time configuration for block lists.

Configuration can be provided directly, via environment variables, or
from a YAML settings file:

Environment Variables:
    BLOCKLIST_INITIAL_BLOCK_COUNT: Blocks allocated up front (default: 1)
    BLOCKLIST_BLOCK_SIZE: Element capacity of every block (default: 32)

YAML (``blocklist`` section):

```yaml
blocklist:
  initial_block_count: 4
  block_size: 128
```
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

DEFAULT_BLOCK_COUNT = 1
DEFAULT_BLOCK_SIZE = 32

ENV_INITIAL_BLOCK_COUNT = "BLOCKLIST_INITIAL_BLOCK_COUNT"
ENV_BLOCK_SIZE = "BLOCKLIST_BLOCK_SIZE"


def _positive_int(field: str, value: Any) -> int:
    # bool is an int subclass but never a sensible size
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(field, "must be an integer", value)
    if value < 1:
        raise ConfigurationError(field, "must be a positive integer", value)
    return value


def _int_from_env(name: str, field: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(field, f"{name} is not an integer", raw) from None


@dataclass
class BlockListConfig:
    """Configuration for a block list.

    Attributes:
        initial_block_count: Number of empty blocks allocated on construction
            and restored by ``clear()``
        block_size: Fixed element capacity of every block
    """

    initial_block_count: int = DEFAULT_BLOCK_COUNT
    block_size: int = DEFAULT_BLOCK_SIZE

    def __post_init__(self) -> None:
        """Validate both fields."""
        _positive_int("initial_block_count", self.initial_block_count)
        _positive_int("block_size", self.block_size)

    @classmethod
    def from_env(cls) -> BlockListConfig:
        """Create configuration from environment variables.

        Unset variables fall back to the documented defaults.

        Raises:
            ConfigurationError: If a variable is set to a non-integer or
                non-positive value
        """
        return cls(
            initial_block_count=_int_from_env(
                ENV_INITIAL_BLOCK_COUNT, "initial_block_count", DEFAULT_BLOCK_COUNT
            ),
            block_size=_int_from_env(ENV_BLOCK_SIZE, "block_size", DEFAULT_BLOCK_SIZE),
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> BlockListConfig:
        """Load configuration from the ``blocklist`` section of a YAML file.

        A missing file, an empty file or a missing section yields defaults.
        """
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ConfigurationError("blocklist", "settings file must contain a mapping")

        section = config.get("blocklist") or {}
        if not isinstance(section, dict):
            raise ConfigurationError("blocklist", "section must be a mapping")
        return cls.from_dict(section)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BlockListConfig:
        """Deserialize from dictionary."""
        return cls(
            initial_block_count=data.get("initial_block_count", DEFAULT_BLOCK_COUNT),
            block_size=data.get("block_size", DEFAULT_BLOCK_SIZE),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "initial_block_count": self.initial_block_count,
            "block_size": self.block_size,
        }
