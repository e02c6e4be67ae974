"""Public SDK surface for the inbound source.

This module provides a stable import path for library users.
It re-exports the source, checkpoint stores, and typed models.
"""

from __future__ import annotations

from core.config import InboundConfig
from core.errors import (
    InboundCheckpointError,
    InboundDecodeError,
    InboundError,
    InboundIngestError,
    InboundRecoveryError,
    InboundStateError,
)
from core.types import MessageSource, ReceivedRecord, SourceState
from ingest.checkpoint_store import (
    CheckpointStore,
    InMemoryCheckpointStore,
    PropertiesCheckpointStore,
)
from ingest.source import JsonlIngestionSource, create_jsonl_source, read_committed_offset

__all__ = [
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "InboundCheckpointError",
    "InboundConfig",
    "InboundDecodeError",
    "InboundError",
    "InboundIngestError",
    "InboundRecoveryError",
    "InboundStateError",
    "JsonlIngestionSource",
    "MessageSource",
    "PropertiesCheckpointStore",
    "ReceivedRecord",
    "SourceState",
    "create_jsonl_source",
    "read_committed_offset",
]
