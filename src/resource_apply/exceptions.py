"""Exceptions raised while applying resources."""

from __future__ import annotations

from typing import Any

# HTTP statuses a retrying caller may safely try again on
RETRIABLE_STATUSES = {409, 429, 500, 502, 503, 504}


class ResourceApplyError(Exception):
    """Base class for all resource apply errors."""


class ResourceNotFoundError(ResourceApplyError):
    """Raised by a resource client when the requested object does not exist."""

    def __init__(self, name: str, kind: str | None = None):
        self.name = name
        self.kind = kind
        target = f"{kind} {name!r}" if kind else repr(name)
        super().__init__(f"{target} not found")


class ConversionError(ResourceApplyError):
    """Raised when an object cannot be converted to or from its structured form."""


class WriteFailedError(ResourceApplyError):
    """Raised when a create or update was attempted and the API rejected it.

    A write was determined necessary, so ``changed`` is always True. The
    transport error is available as ``error`` and as ``__cause__``.
    """

    changed = True

    def __init__(self, operation: str, kind: str, name: str, error: Exception):
        self.operation = operation
        self.kind = kind
        self.name = name
        self.error = error
        super().__init__(f"Failed to {operation} {kind} {name!r}: {error}")

    @property
    def status(self) -> Any:
        """HTTP status of the underlying API error, if it carries one."""
        return getattr(self.error, "status", None)

    @property
    def retriable(self) -> bool:
        """Whether a retrying wrapper may try the apply again."""
        return self.status in RETRIABLE_STATUSES
