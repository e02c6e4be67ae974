"""Runtime configuration model for the inbound source.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CHECKPOINT_FILE_NAME,
    DEFAULT_DATA_ROOT,
    DEFAULT_LOG_LEVEL,
    LOG_LEVELS,
)
from core.errors import InboundConfigError


@dataclass(frozen=True)
class InboundConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for checkpoint metadata.
        checkpoint_file_name: Properties file holding committed offsets.
        log_level: Minimum structured log level.
    """

    data_root: Path
    checkpoint_file_name: str
    log_level: str

    @property
    def checkpoint_path(self) -> Path:
        """Return the properties checkpoint file location."""
        return self.data_root / self.checkpoint_file_name

    @classmethod
    def from_env(cls) -> "InboundConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            InboundConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("INBOUND_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        checkpoint_file_name = _parse_checkpoint_file_name(
            os.getenv("INBOUND_CHECKPOINT_FILE", DEFAULT_CHECKPOINT_FILE_NAME)
        )
        log_level = _parse_log_level(os.getenv("INBOUND_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            checkpoint_file_name=checkpoint_file_name,
            log_level=log_level,
        )


def _parse_checkpoint_file_name(raw_value: str) -> str:
    """Validate the checkpoint file name environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Bare file name.

    Raises:
        InboundConfigError: If value is empty or contains a directory part.
    """
    file_name = raw_value.strip()
    if not file_name or Path(file_name).name != file_name:
        raise InboundConfigError(
            "Invalid INBOUND_CHECKPOINT_FILE value: "
            f"expected a bare file name, got '{raw_value}'. "
            "Use INBOUND_DATA_ROOT to choose the directory."
        )
    return file_name


def _parse_log_level(raw_value: str) -> str:
    """Parse the log level environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Normalized lowercase level name.

    Raises:
        InboundConfigError: If value is not a supported level.
    """
    level = raw_value.strip().lower()
    if level not in LOG_LEVELS:
        raise InboundConfigError(
            "Invalid INBOUND_LOG_LEVEL value: "
            f"expected one of {sorted(LOG_LEVELS)}, got '{raw_value}'. "
            "Set INBOUND_LOG_LEVEL to a supported level."
        )
    return level
