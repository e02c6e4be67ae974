"""In-memory FIFO of decoded records awaiting delivery."""

from __future__ import annotations

from collections import deque
import threading
from typing import Any

from core.types import StagedRecord


class StagingBuffer:
    """Unbounded thread-safe FIFO of staged records."""

    def __init__(self) -> None:
        self._records: deque[StagedRecord[Any]] = deque()
        self._lock = threading.Lock()

    def push(self, record: StagedRecord[Any]) -> None:
        """Append one record at the tail."""
        with self._lock:
            self._records.append(record)

    def pop(self) -> StagedRecord[Any] | None:
        """Remove and return the head record, or None when empty."""
        with self._lock:
            if not self._records:
                return None
            return self._records.popleft()

    def restore(self, record: StagedRecord[Any]) -> None:
        """Put an undelivered record back at the head."""
        with self._lock:
            self._records.appendleft(record)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
