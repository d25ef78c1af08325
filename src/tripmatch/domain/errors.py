"""Error taxonomy for the correlation engine.

"No match" and "insufficient data" are ordinary results, never exceptions; only
contract violations raise.
"""

from __future__ import annotations


class CorrelationError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(CorrelationError, ValueError):
    """Malformed input rejected before anything is persisted."""


class InvalidStateError(CorrelationError):
    """A lifecycle transition is not allowed from the current state."""


class NotFoundError(CorrelationError, LookupError):
    """A referenced correlation or alias does not exist."""


class AuditWriteFailure(CorrelationError, RuntimeError):
    """The audit entry could not be written; the triggering mutation is void."""
