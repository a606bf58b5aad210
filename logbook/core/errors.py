"""Typed errors shared by the storage, service and web layers."""

from __future__ import annotations


class LogbookError(Exception):
    """Base class for every error raised by the logbook core."""


class ValidationError(LogbookError):
    """Input rejected before any persistence attempt (empty content, bad date)."""


class NotFoundError(LogbookError):
    """A task or weekly log id that does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class PersistenceError(LogbookError):
    """The backing store was unreachable or rejected a write."""

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        detail = f"{operation} failed"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)


class RenderError(LogbookError):
    """Report generation aborted; no partial document is returned."""


__all__ = [
    "LogbookError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "RenderError",
]
