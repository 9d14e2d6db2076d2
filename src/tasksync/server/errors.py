"""Exceptions raised by the sync server."""

from __future__ import annotations


class SyncError(Exception):
    """Base class for sync errors."""


class InvalidMigrationError(SyncError, ValueError):
    """Raised when a pull carries a malformed migration descriptor."""


class StoreError(SyncError):
    """Raised when the record store rejects an operation."""


class RecordNotFoundError(StoreError):
    """Raised when updating a record that does not exist."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record not found: {record_id}")
        self.record_id = record_id


class PushError(SyncError):
    """Raised when a push could not be applied. Nothing was written."""


class PullError(SyncError):
    """Raised when a pull could not be served."""
