"""Pull partitioning.

Splits the tasks changed since a watermark W into two disjoint sets:

- created: server_created_at > W
- updated: server_updated_at > W and server_created_at <= W

A client that crosses the schema version 2 boundary gets every stored task
in the updated set instead, so its local replica is rewritten in full.
Deleted ids are never reported: no tombstones are kept.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tasksync.core.changes import TASKS, ChangeSet, TableChanges, TaskRecord
from tasksync.core.timestamps import normalize_watermark
from tasksync.server.errors import InvalidMigrationError

if TYPE_CHECKING:
    from tasksync.server.database import TaskStore
    from tasksync.server.models import Task

logger = logging.getLogger(__name__)

# Schema version from which clients migrating from an older one need a full resync
FULL_RESYNC_SCHEMA_VERSION = 2


@dataclass(frozen=True)
class MigrationDescriptor:
    """Schema migration a client declares on pull.

    Attributes:
        from_version: Schema version the client migrated from.
        to_version: Schema version the client migrated to, if given.
    """

    from_version: int
    to_version: int | None = None

    @classmethod
    def parse(cls, raw: str | None) -> MigrationDescriptor | None:
        """Parse the serialized migration sent by the client.

        Args:
            raw: JSON object with an integer "from" field, or None.

        Returns:
            MigrationDescriptor, or None if raw is None or empty.

        Raises:
            InvalidMigrationError: If raw is not a JSON object with an integer "from".
        """
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidMigrationError(f"Migration is not valid JSON: {e.msg}") from e

        if not isinstance(data, dict):
            raise InvalidMigrationError("Migration must be a JSON object")

        from_version = data.get("from")
        to_version = data.get("to")
        if not _is_int(from_version):
            raise InvalidMigrationError("Migration 'from' must be an integer")
        if to_version is not None and not _is_int(to_version):
            raise InvalidMigrationError("Migration 'to' must be an integer")

        return cls(from_version=from_version, to_version=to_version)

    def requires_full_resync(self, schema_version: int) -> bool:
        """Whether a client on schema_version must re-receive every task."""
        return (
            schema_version >= FULL_RESYNC_SCHEMA_VERSION
            and self.from_version < FULL_RESYNC_SCHEMA_VERSION
        )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class PullResult:
    """Changes to send back and the watermark for the next pull."""

    changes: ChangeSet
    timestamp: int


def task_to_record(task: Task) -> TaskRecord:
    """Convert a stored task to a change set record."""
    return TaskRecord(
        id=task.id,
        name=task.name,
        icon=task.icon,
        is_done=task.is_done,
        is_urgent=task.is_urgent,
        comment=task.comment,
        client_created_at=task.client_created_at,
        client_updated_at=task.client_updated_at,
    )


class PullPartitioner:
    """Reads tasks changed since a watermark from a TaskStore."""

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    def pull(
        self,
        last_pulled_at: int | None,
        schema_version: int,
        migration: MigrationDescriptor | None,
        timestamp: int,
    ) -> PullResult:
        """Collect changes since last_pulled_at.

        Args:
            last_pulled_at: Client watermark, or None for a full sync.
            schema_version: Local schema version of the client.
            migration: Migration the client just went through, if any.
            timestamp: Watermark to hand back (time the pull started).

        Returns:
            PullResult with created and updated tasks. Deleted is always empty.
        """
        watermark = normalize_watermark(last_pulled_at)

        created = self._store.created_since(watermark)
        if migration is not None and migration.requires_full_resync(schema_version):
            logger.info(
                "Client migrated from schema %d to %d, sending every task as updated",
                migration.from_version,
                schema_version,
            )
            updated = self._store.all()
        else:
            updated = self._store.updated_since(watermark)

        changes = TableChanges(
            created=[task_to_record(task) for task in created],
            updated=[task_to_record(task) for task in updated],
            deleted=[],
        )
        return PullResult(changes=ChangeSet({TASKS: changes}), timestamp=timestamp)
