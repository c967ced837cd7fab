"""Error taxonomy shared by the order components and the UI."""

from __future__ import annotations


class OrderError(Exception):
    """Base class for errors surfaced to the operator."""


class ValidationError(OrderError):
    """User-correctable input problem. No store call is made."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class PersistenceError(OrderError):
    """The store was unreachable or rejected a read/write."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class NotFoundError(OrderError):
    """A referenced record no longer resolves (e.g. a deactivated menu item)."""
