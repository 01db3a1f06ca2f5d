"""Dashboard exception classes.

Every error raised by the core inherits from DashboardError. Store-facing
errors are caught at the controller boundary and turned into state, so the
views only ever see an error message, never one of these objects.

Usage:
    try:
        records = await store.list(owner)
    except StoreError as e:
        print(f"Could not load records: {e}")
"""

from __future__ import annotations

from typing import Iterable, Optional


class DashboardError(Exception):
    """Base exception for all dashboard errors."""
    pass


class ConfigurationError(DashboardError):
    """Raised when required settings are missing or malformed."""

    def __init__(self, setting: str, reason: str = "is not set"):
        self.setting = setting
        self.reason = reason
        super().__init__(f"{setting} {reason}")


class AuthError(DashboardError):
    """Raised on bad credentials or a rejected signup."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class StoreError(DashboardError):
    """Raised when the record store cannot be reached or rejects a request."""

    def __init__(self, message: str, collection: str = "", status: Optional[int] = None):
        self.collection = collection
        self.status = status
        msg = message
        if collection:
            msg = f"[{collection}] {msg}"
        if status is not None:
            msg += f" (HTTP {status})"
        super().__init__(msg)


class NotFound(StoreError):
    """Raised when an update or delete targets an id the owner no longer has."""

    def __init__(self, record_id: str, collection: str = ""):
        self.record_id = record_id
        super().__init__(f"Record {record_id} not found", collection=collection, status=None)


class ValidationError(DashboardError):
    """Raised when required fields are empty."""

    def __init__(self, fields: Iterable[str]):
        self.fields = tuple(fields)
        super().__init__(f"Required fields missing: {', '.join(self.fields)}")
