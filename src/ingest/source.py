"""Checkpointed JSONL ingestion source.

This module owns the source lifecycle, the committed offset counter,
and the commit-after-handoff protocol that gives at-least-once delivery.
"""

from __future__ import annotations

import json
from pathlib import Path
import threading
from typing import Any, Callable

from core.config import InboundConfig
from core.constants import COMPONENT_TYPE, OFFSET_CHECKPOINT_KEY
from core.errors import (
    InboundCheckpointError,
    InboundIngestError,
    InboundStateError,
)
from core.logging_config import get_logger
from core.types import Decoder, ReceivedRecord, SourceState, StagedRecord
from ingest.checkpoint_store import (
    CheckpointStore,
    InMemoryCheckpointStore,
    PropertiesCheckpointStore,
)
from ingest.line_source import LineSource
from ingest.recovery import RecoveryScanner
from ingest.staging_buffer import StagingBuffer

_LOGGER = get_logger(__name__)


class JsonlIngestionSource:
    """Pull-based JSONL source that resumes after its last committed record."""

    def __init__(
        self,
        source_path: Path,
        checkpoint_store: CheckpointStore | None = None,
        decoder: Decoder | None = None,
    ) -> None:
        self._source_path = source_path
        if checkpoint_store is None:
            checkpoint_store = InMemoryCheckpointStore()
        self._checkpoint_store = checkpoint_store
        self._decoder = json.loads if decoder is None else decoder
        self._buffer = StagingBuffer()
        self._offset = 0
        self._state = SourceState.UNINITIALIZED
        self._lock = threading.RLock()
        self._in_handler = False

    @property
    def path(self) -> Path:
        return self._source_path

    @property
    def state(self) -> SourceState:
        return self._state

    @property
    def offset(self) -> int:
        """Return the last offset committed by this instance."""
        return self._offset

    @property
    def pending(self) -> int:
        """Return the number of staged records not yet delivered."""
        return len(self._buffer)

    @property
    def component_type(self) -> str:
        return COMPONENT_TYPE

    def on_init(self) -> None:
        """Recover the committed offset and stage all unconsumed records.

        Raises:
            InboundStateError: If the source was already initialized.
            InboundIngestError: If recovery fails for any reason.
        """
        with self._lock:
            if self._state is not SourceState.UNINITIALIZED:
                raise InboundStateError(
                    f"Cannot initialize source at {self._source_path}: state is "
                    f"{self._state.value}. Create a new source instance instead."
                )
            self._state = SourceState.STARTED
            try:
                self._start()
            except Exception as error:
                self._state = SourceState.FAILED
                _LOGGER.error(
                    "source_init_failed",
                    path=str(self._source_path),
                    error=str(error),
                )
                if isinstance(error, InboundIngestError):
                    raise
                raise InboundIngestError(
                    f"Failed to initialize source at {self._source_path}: {error}"
                ) from error
            self._state = SourceState.READY

    def receive(self) -> ReceivedRecord[Any] | None:
        """Deliver the next staged record and commit its offset.

        Returns:
            The next record, or None when no record is available.

        Raises:
            InboundStateError: If the source is not ready.
            InboundCheckpointError: If the offset commit fails.
        """
        with self._lock:
            self._require_ready()
            staged = self._buffer.pop()
            if staged is None:
                return None
            received = self._to_received(staged)
            self._commit(staged)
            return received

    def drain(
        self,
        handler: Callable[[ReceivedRecord[Any]], object],
        limit: int | None = None,
    ) -> int:
        """Hand staged records to ``handler``, committing after each handoff.

        The handler must not call back into this source; doing so raises
        ``InboundStateError`` and leaves the current record uncommitted.

        Args:
            handler: Consumer invoked once per record.
            limit: Optional maximum number of records to deliver.

        Returns:
            Number of records delivered and committed.

        Raises:
            InboundStateError: If the source is not ready or is re-entered.
            InboundCheckpointError: If an offset commit fails.
        """
        delivered = 0
        with self._lock:
            self._require_ready()
            while limit is None or delivered < limit:
                staged = self._buffer.pop()
                if staged is None:
                    break
                self._in_handler = True
                try:
                    handler(self._to_received(staged))
                except Exception:
                    self._buffer.restore(staged)
                    raise
                finally:
                    self._in_handler = False
                self._commit(staged)
                delivered += 1
        return delivered

    def _start(self) -> None:
        committed_offset = read_committed_offset(self._checkpoint_store)
        with LineSource(self._source_path) as line_source:
            scanner = RecoveryScanner(line_source, self._decoder)
            staged_count = scanner.recover(committed_offset, self._buffer)
            position = line_source.position()
        self._offset = committed_offset
        _LOGGER.info(
            "source_initialized",
            path=str(self._source_path),
            offset=committed_offset,
            staged_count=staged_count,
            position=position,
        )

    def _commit(self, staged: StagedRecord[Any]) -> None:
        """Advance the offset and persist it, undoing both on failure."""
        self._offset += 1
        try:
            self._checkpoint_store.put(OFFSET_CHECKPOINT_KEY, str(self._offset))
        except Exception as error:
            self._offset -= 1
            self._buffer.restore(staged)
            _LOGGER.error(
                "checkpoint_commit_failed",
                path=str(self._source_path),
                offset=self._offset + 1,
                error=str(error),
            )
            if isinstance(error, InboundCheckpointError):
                raise
            raise InboundCheckpointError(
                f"Failed to commit offset {self._offset + 1} for {self._source_path}: "
                f"{error}. The record stays staged; retry receive()."
            ) from error
        _LOGGER.debug(
            "record_committed",
            path=str(self._source_path),
            offset=self._offset,
            line_number=staged.line_number,
        )

    def _to_received(self, staged: StagedRecord[Any]) -> ReceivedRecord[Any]:
        return ReceivedRecord(
            payload=staged.payload,
            offset=self._offset + 1,
            line_number=staged.line_number,
        )

    def _require_ready(self) -> None:
        if self._in_handler:
            raise InboundStateError(
                f"Source at {self._source_path} cannot be used from inside a drain handler. "
                "Return from the handler before receiving again."
            )
        if self._state is not SourceState.READY:
            raise InboundStateError(
                f"Source at {self._source_path} must be started before receiving: "
                f"state is {self._state.value}. Call on_init() first."
            )


def create_jsonl_source(
    source_path: Path,
    config: InboundConfig | None = None,
    checkpoint_store: CheckpointStore | None = None,
    decoder: Decoder | None = None,
) -> JsonlIngestionSource:
    """Build and initialize a JSONL ingestion source.

    Args:
        source_path: JSONL file to ingest.
        config: Optional runtime config selecting a properties checkpoint file.
        checkpoint_store: Explicit store, overriding ``config``.
        decoder: Optional line decoder, ``json.loads`` by default.

    Returns:
        A source in the ready state.

    Raises:
        InboundIngestError: If initialization fails.
    """
    if checkpoint_store is None and config is not None:
        checkpoint_store = PropertiesCheckpointStore(config.checkpoint_path)
    source = JsonlIngestionSource(source_path, checkpoint_store, decoder)
    source.on_init()
    return source


def read_committed_offset(checkpoint_store: CheckpointStore) -> int:
    """Return the committed offset from a store, zero when absent.

    Raises:
        InboundCheckpointError: If the stored value is not a non-negative integer.
    """
    raw_value = checkpoint_store.get(OFFSET_CHECKPOINT_KEY)
    if raw_value is None:
        return 0
    if not (raw_value.isascii() and raw_value.isdigit()):
        raise InboundCheckpointError(
            f"Invalid checkpoint value for '{OFFSET_CHECKPOINT_KEY}': "
            f"expected non-negative decimal integer, got '{raw_value}'. "
            "Reset the checkpoint and retry."
        )
    return int(raw_value)
