"""Inbound exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class InboundError(Exception):
    """Base exception for all inbound source failures."""


class InboundConfigError(InboundError):
    """Raised for invalid runtime configuration."""


class InboundIngestError(InboundError):
    """Raised when source initialization fails and the source is unusable."""


class InboundDecodeError(InboundIngestError):
    """Raised when a source line cannot be decoded during catch-up."""


class InboundRecoveryError(InboundIngestError):
    """Raised when the committed offset cannot be replayed against the file."""


class InboundCheckpointError(InboundError):
    """Raised for checkpoint store read and commit failures."""


class InboundStateError(InboundError):
    """Raised when a source operation is called in the wrong lifecycle state."""
