"""Ingest checkpoint persistence.

This module stores committed source offsets as string key/value pairs.
The properties-file store keeps them durable across process restarts.
"""

from __future__ import annotations

import os
from pathlib import Path
import tempfile
import threading
from typing import Protocol

from core.constants import PROPERTIES_COMMENT_PREFIXES, PROPERTIES_HEADER
from core.errors import InboundCheckpointError


class CheckpointStore(Protocol):
    """Key/value contract required by ingestion sources."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...


class InMemoryCheckpointStore:
    """Process-local checkpoint store used when no durable store is supplied."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        """Return the stored value for key, if any."""
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        """Store value under key."""
        with self._lock:
            self._values[key] = value


class PropertiesCheckpointStore:
    """Filesystem-backed checkpoint store in ``key=value`` properties format."""

    def __init__(self, properties_path: Path) -> None:
        self._properties_path = properties_path
        self._lock = threading.Lock()
        try:
            self._properties_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise InboundCheckpointError(
                f"Failed to create checkpoint directory {self._properties_path.parent}: "
                f"{error}. Choose a writable INBOUND_DATA_ROOT and retry."
            ) from error

    @property
    def path(self) -> Path:
        """Return the backing properties file path."""
        return self._properties_path

    def get(self, key: str) -> str | None:
        """Return the stored value for key, if any.

        Raises:
            InboundCheckpointError: If the properties file cannot be read.
        """
        with self._lock:
            return self._read_properties().get(key)

    def put(self, key: str, value: str) -> None:
        """Store value under key and flush the file to disk.

        Args:
            key: Property key.
            value: Property value.

        Raises:
            InboundCheckpointError: If the properties file cannot be written.
        """
        with self._lock:
            properties = self._read_properties()
            properties[key] = value
            self._write_properties(properties)

    def _read_properties(self) -> dict[str, str]:
        """Read all properties from disk, empty when the file is absent."""
        if not self._properties_path.exists():
            return {}
        try:
            text = self._properties_path.read_text(encoding="utf-8")
        except OSError as error:
            raise InboundCheckpointError(
                f"Failed to read checkpoint file at {self._properties_path}: {error}. "
                "Check file permissions and retry."
            ) from error
        properties: dict[str, str] = {}
        for line_number, line in enumerate(text.splitlines(), 1):
            stripped = line.strip()
            if not stripped or stripped.startswith(PROPERTIES_COMMENT_PREFIXES):
                continue
            key, separator, value = stripped.partition("=")
            if not separator or not key.strip():
                raise InboundCheckpointError(
                    f"Failed to parse checkpoint file at {self._properties_path}:{line_number}: "
                    "expected 'key=value'. Fix or delete the checkpoint file and retry."
                )
            properties[key.strip()] = value.strip()
        return properties

    def _write_properties(self, properties: dict[str, str]) -> None:
        """Atomically replace the properties file with the given values."""
        lines = [PROPERTIES_HEADER]
        lines.extend(f"{key}={value}" for key, value in sorted(properties.items()))
        payload = "\n".join(lines) + "\n"
        try:
            file_descriptor, temp_name = tempfile.mkstemp(
                prefix=f".{self._properties_path.name}.",
                dir=self._properties_path.parent,
            )
        except OSError as error:
            raise InboundCheckpointError(
                f"Failed to create temporary checkpoint file in {self._properties_path.parent}: "
                f"{error}. Check disk space and permissions, then retry."
            ) from error
        try:
            with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self._properties_path)
        except OSError as error:
            _remove_temp_file(temp_name)
            raise InboundCheckpointError(
                f"Failed to write checkpoint file at {self._properties_path}: {error}. "
                "Check disk space and permissions, then retry."
            ) from error


def _remove_temp_file(temp_name: str) -> None:
    """Delete a leftover temporary checkpoint file."""
    try:
        os.unlink(temp_name)
    except FileNotFoundError:
        return
