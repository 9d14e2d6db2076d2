"""Push reconciliation.

Applies an inbound change set to the store inside the caller's
transaction:

1. Creates whose id already exists are turned into updates, so a retried
   push never attempts a duplicate insert.
2. Genuine creates are inserted with server_created_at = server_updated_at = now.
3. Updates are applied as sparse patches with server_updated_at = now.

Conflicts are resolved last-write-wins at field level: whatever the latest
push supplies overwrites the stored value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tasksync.core.changes import TASKS

if TYPE_CHECKING:
    from tasksync.core.changes import ChangeSet, TaskRecord
    from tasksync.server.database import TaskStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushSummary:
    """What a push did to the store.

    Attributes:
        created: Number of tasks inserted.
        updated: Number of tasks patched (including reclassified creates).
        reclassified: Number of creates turned into updates.
        ignored_deletions: Number of deleted ids received but not applied.
    """

    created: int = 0
    updated: int = 0
    reclassified: int = 0
    ignored_deletions: int = 0


class PushReconciler:
    """Applies change sets to a TaskStore.

    Args:
        store: Store bound to an open transaction.
        now: Server timestamp shared by every record in the push (epoch ms).
    """

    def __init__(self, store: TaskStore, now: int) -> None:
        self._store = store
        self._now = now

    def reconcile(self, change_set: ChangeSet) -> PushSummary:
        """Apply all task changes.

        Raises:
            RecordNotFoundError: If an update targets an unknown id.
            SQLAlchemyError: If the store rejects a write.
        """
        changes = change_set.for_kind(TASKS)

        creates, reclassified = self._split_creates(changes.created)
        created = self._store.insert_many(record.insert_values(self._now) for record in creates)

        updates = reclassified + changes.updated
        for record in updates:
            self._store.update(record.id, record.patch_values(), server_updated_at=self._now)

        if changes.deleted:
            # Deletions are part of the wire format but are not propagated
            logger.info("Ignoring %d deleted task id(s) in push", len(changes.deleted))

        return PushSummary(
            created=created,
            updated=len(updates),
            reclassified=len(reclassified),
            ignored_deletions=len(changes.deleted),
        )

    def _split_creates(
        self, records: list[TaskRecord]
    ) -> tuple[list[TaskRecord], list[TaskRecord]]:
        """Separate genuine creates from creates of ids that already exist."""
        creates: list[TaskRecord] = []
        reclassified: list[TaskRecord] = []
        staged: set[str] = set()

        for record in records:
            if record.id in staged or self._store.get(record.id) is not None:
                logger.warning(
                    "Task %s already exists, applying its creation as an update",
                    record.id,
                )
                reclassified.append(record)
            else:
                staged.add(record.id)
                creates.append(record)

        return creates, reclassified
