"""
Custom exceptions for talkmap.

The tracker itself has no recoverable errors: capacity exhaustion and
zero-direction samples are handled by policy. What remains is invalid
configuration (rejected when the tracker is built) and undecodable
ingestion payloads (dropped by the pipeline, 400 on the HTTP API).
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class TalkmapError(Exception):
    """Base exception for talkmap errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(TalkmapError):
    """Raised when tracker limits or settings are invalid."""
    pass


class PayloadError(TalkmapError):
    """Raised when an ODAS frame cannot be decoded into channel samples."""
    pass
