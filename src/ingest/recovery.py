"""Startup recovery for checkpointed JSONL sources.

This module replays already-committed lines by sequential reads,
then decodes every remaining line into the staging buffer once.
"""

from __future__ import annotations

from core.errors import InboundDecodeError, InboundRecoveryError
from core.logging_config import get_logger
from core.types import Decoder, StagedRecord
from ingest.line_source import LineSource
from ingest.staging_buffer import StagingBuffer

_LOGGER = get_logger(__name__)


class RecoveryScanner:
    """One-shot catch-up scanner positioned by committed record count."""

    def __init__(self, line_source: LineSource, decoder: Decoder) -> None:
        self._line_source = line_source
        self._decoder = decoder

    def recover(self, committed_count: int, buffer: StagingBuffer) -> int:
        """Skip committed records and stage the rest of the file.

        Args:
            committed_count: Records already delivered and committed.
            buffer: Destination buffer for decoded records.

        Returns:
            Number of records staged.

        Raises:
            InboundRecoveryError: If the file holds fewer records than committed.
            InboundDecodeError: If a remaining line cannot be decoded.
        """
        self.skip(committed_count)
        return self.stream(buffer)

    def skip(self, committed_count: int) -> None:
        """Replay reads until ``committed_count`` non-blank lines are passed.

        Blank lines never produce records, so they do not count toward
        the committed offset.
        """
        if committed_count < 0:
            raise InboundRecoveryError(
                f"Cannot recover {self._line_source.path}: committed offset "
                f"{committed_count} is negative. Reset the checkpoint and retry."
            )
        skipped = 0
        while skipped < committed_count:
            line = self._line_source.read_line()
            if line is None:
                raise InboundRecoveryError(
                    f"Cannot recover {self._line_source.path}: committed offset "
                    f"{committed_count} exceeds the {skipped} records in the file. "
                    "The file was truncated or replaced; reset the checkpoint and retry."
                )
            if line.strip():
                skipped += 1
        if committed_count:
            _LOGGER.info(
                "recovery_skipped",
                path=str(self._line_source.path),
                skipped_records=committed_count,
                skipped_lines=self._line_source.line_number,
                position=self._line_source.position(),
                length=self._line_source.length(),
            )

    def stream(self, buffer: StagingBuffer) -> int:
        """Decode every remaining non-blank line into the buffer in file order."""
        staged_count = 0
        while True:
            line = self._line_source.read_line()
            if line is None:
                return staged_count
            if not line.strip():
                continue
            buffer.push(
                StagedRecord(
                    payload=self._decode(line),
                    line_number=self._line_source.line_number,
                )
            )
            staged_count += 1

    def _decode(self, line: str) -> object:
        try:
            return self._decoder(line)
        except ValueError as error:
            raise InboundDecodeError(
                f"Failed to parse JSONL record at {self._line_source.path}:"
                f"{self._line_source.line_number}: {error}. "
                "Fix the JSON syntax and restart the source."
            ) from error
