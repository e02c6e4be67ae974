"""Shared typed models.

This module defines immutable data models used by the ingest layer,
the CLI, and SDK callers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Protocol, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

Decoder = Callable[[str], Any]


class SourceState(str, Enum):
    """Lifecycle state of an ingestion source."""

    UNINITIALIZED = "uninitialized"
    STARTED = "started"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class StagedRecord(Generic[T]):
    """Decoded record waiting in the staging buffer.

    Attributes:
        payload: Decoded JSON value.
        line_number: One-based physical line the record was read from.
    """

    payload: T
    line_number: int


@dataclass(frozen=True)
class ReceivedRecord(Generic[T]):
    """Record handed to a downstream consumer.

    Attributes:
        payload: Decoded JSON value, which may itself be ``None``.
        offset: Checkpoint offset committed for this delivery.
        line_number: One-based physical line the record was read from.
    """

    payload: T
    offset: int
    line_number: int


class MessageSource(Protocol[T_co]):
    """Pull contract for sources that deliver one message per call."""

    def receive(self) -> T_co | None: ...
