"""Sequential line reader over a JSONL source file.

This module exposes physical-line reads with byte-position introspection.
Reads are strictly sequential; callers never seek by byte offset.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from core.constants import SOURCE_TEXT_ENCODING, UTF8_BYTE_ORDER_MARK
from core.errors import InboundIngestError


class LineSource:
    """Binary-mode line reader that decodes UTF-8 lines on demand."""

    def __init__(self, source_path: Path) -> None:
        self._source_path = source_path
        self._handle: BinaryIO | None = None
        self._line_number = 0

    @property
    def path(self) -> Path:
        """Return the source file path."""
        return self._source_path

    @property
    def line_number(self) -> int:
        """Return the count of physical lines read so far."""
        return self._line_number

    def open(self) -> "LineSource":
        """Open the source file for sequential reading.

        Returns:
            This line source.

        Raises:
            InboundIngestError: If the path is missing, a directory, or unreadable.
        """
        if not self._source_path.exists():
            raise InboundIngestError(
                f"Failed to read source at {self._source_path}: path does not exist. "
                "Provide an existing JSONL file."
            )
        if not self._source_path.is_file():
            raise InboundIngestError(
                f"Failed to read source at {self._source_path}: not a regular file. "
                "Provide a JSONL file rather than a directory."
            )
        try:
            self._handle = self._source_path.open("rb")
        except OSError as error:
            raise InboundIngestError(
                f"Failed to open source at {self._source_path}: {error}. "
                "Check file permissions and retry."
            ) from error
        self._line_number = 0
        return self

    def close(self) -> None:
        """Close the underlying file handle if open."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "LineSource":
        return self.open()

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def read_line(self) -> str | None:
        """Read the next physical line without its terminator.

        Returns:
            Decoded line text, or None at end of file.

        Raises:
            InboundIngestError: If the line is not valid UTF-8.
        """
        raw_line = self._require_handle().readline()
        if not raw_line:
            return None
        self._line_number += 1
        if raw_line.endswith(b"\r\n"):
            raw_line = raw_line[:-2]
        elif raw_line.endswith(b"\n"):
            raw_line = raw_line[:-1]
        if self._line_number == 1 and raw_line.startswith(UTF8_BYTE_ORDER_MARK):
            raw_line = raw_line[len(UTF8_BYTE_ORDER_MARK):]
        try:
            return raw_line.decode(SOURCE_TEXT_ENCODING)
        except UnicodeDecodeError as error:
            raise InboundIngestError(
                f"Failed to decode source line at {self._source_path}:{self._line_number}: "
                f"{error.reason}. Re-encode the file as UTF-8 and retry."
            ) from error

    def position(self) -> int:
        """Return the current byte position in the file."""
        return self._require_handle().tell()

    def length(self) -> int:
        """Return the current file size in bytes."""
        return self._source_path.stat().st_size

    def _require_handle(self) -> BinaryIO:
        if self._handle is None:
            raise InboundIngestError(
                f"Source at {self._source_path} is not open. Call open() before reading."
            )
        return self._handle
