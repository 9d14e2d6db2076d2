"""Sync coordinator: transaction scoping for push and pull."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from tasksync.core.timestamps import now_ms
from tasksync.server.errors import PullError, PushError, StoreError
from tasksync.server.partitioner import (
    FULL_RESYNC_SCHEMA_VERSION,
    MigrationDescriptor,
    PullPartitioner,
    PullResult,
)
from tasksync.server.reconciler import PushReconciler, PushSummary

if TYPE_CHECKING:
    from tasksync.core.changes import ChangeSet
    from tasksync.server.database import Database

logger = logging.getLogger(__name__)


class SyncCoordinator:
    """Runs push and pull against the database.

    Stateless between calls; safe to share across request handlers.

    Args:
        db: Database holding the records.
        clock: Returns the current time in epoch milliseconds.
    """

    def __init__(self, db: Database, clock: Callable[[], int] = now_ms) -> None:
        self._db = db
        self._clock = clock

    def push(self, change_set: ChangeSet, last_pulled_at: int | None = None) -> PushSummary:
        """Apply a change set atomically.

        Args:
            change_set: Changes sent by the client.
            last_pulled_at: Client watermark at push time (informational).

        Returns:
            PushSummary of what was written.

        Raises:
            PushError: If any store operation failed. Nothing was written.
        """
        try:
            with self._db.transaction() as store:
                now = self._clock()
                summary = PushReconciler(store, now).reconcile(change_set)
        except (StoreError, SQLAlchemyError) as e:
            logger.exception("Push failed, transaction rolled back")
            raise PushError(f"Push could not be applied: {e}") from e

        logger.info(
            "Push applied at %d (last pulled at %s): %d created, %d updated",
            now,
            last_pulled_at,
            summary.created,
            summary.updated,
        )
        return summary

    def pull(
        self,
        last_pulled_at: int | None,
        schema_version: int,
        migration: str | None = None,
    ) -> PullResult:
        """Collect changes since last_pulled_at.

        Args:
            last_pulled_at: Client watermark, or None for a full sync.
            schema_version: Local schema version of the client.
            migration: Serialized migration descriptor, if the client migrated.

        Returns:
            PullResult with the changes and the next watermark.

        Raises:
            InvalidMigrationError: If migration is malformed and the client is
                on a schema version where it is read.
            PullError: If the store could not be read.
        """
        descriptor = None
        if schema_version >= FULL_RESYNC_SCHEMA_VERSION:
            descriptor = MigrationDescriptor.parse(migration)
        # A push stamped before this but committed after the reads is still missed
        timestamp = self._clock()
        try:
            with self._db.transaction() as store:
                result = PullPartitioner(store).pull(
                    last_pulled_at, schema_version, descriptor, timestamp
                )
        except (StoreError, SQLAlchemyError) as e:
            logger.exception("Pull failed")
            raise PullError(f"Pull could not be served: {e}") from e

        logger.info(
            "Pull since %s served at %d",
            last_pulled_at,
            timestamp,
        )
        return result
