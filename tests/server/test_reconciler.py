"""Tests for push reconciliation."""

from __future__ import annotations

import logging

import pytest

from tasksync.core.changes import TASKS, ChangeSet, TableChanges
from tasksync.server.database import Database
from tasksync.server.errors import RecordNotFoundError
from tasksync.server.reconciler import PushReconciler, PushSummary
from tests.server.fixtures import T0, make_record


def reconcile(db: Database, now: int, **changes) -> PushSummary:
    """Run the reconciler on a tasks-only change set."""
    change_set = ChangeSet({TASKS: TableChanges(**changes)})
    with db.transaction() as store:
        return PushReconciler(store, now).reconcile(change_set)


class TestCreates:
    """Tests for inbound created records."""

    def test_inserts_new_tasks_with_shared_timestamp(self, db: Database) -> None:
        """All creates in one push should share the same server timestamps."""
        summary = reconcile(db, T0, created=[make_record("a"), make_record("b")])

        assert summary == PushSummary(created=2)
        for task_id in ("a", "b"):
            task = db.get_task(task_id)
            assert task is not None
            assert task.server_created_at == T0
            assert task.server_updated_at == T0

    def test_keeps_client_fields(self, db: Database) -> None:
        """Domain fields and client timestamps should be stored as sent."""
        record = make_record(
            "a",
            name="Water plants",
            icon="leaf",
            is_done=True,
            is_urgent=True,
            comment="balcony",
            client_created_at=111,
            client_updated_at=222,
        )
        reconcile(db, T0, created=[record])

        task = db.get_task("a")
        assert task is not None
        assert (task.name, task.icon, task.is_done) == ("Water plants", "leaf", True)
        assert (task.is_urgent, task.comment) == (True, "balcony")
        assert (task.client_created_at, task.client_updated_at) == (111, 222)

    def test_repeated_create_becomes_update(self, db: Database) -> None:
        """Pushing the same create twice should store exactly one task."""
        reconcile(db, T0, created=[make_record("a", name="first")])
        summary = reconcile(db, T0 + 50, created=[make_record("a", name="second")])

        assert summary == PushSummary(created=0, updated=1, reclassified=1)
        assert db.count_tasks() == 1
        task = db.get_task("a")
        assert task is not None
        assert task.name == "second"
        assert task.server_created_at == T0
        assert task.server_updated_at == T0 + 50

    def test_repeated_create_logs_warning(
        self, db: Database, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A reclassified create should emit a warning."""
        reconcile(db, T0, created=[make_record("a")])
        with caplog.at_level(logging.WARNING, logger="tasksync.server.reconciler"):
            reconcile(db, T0 + 1, created=[make_record("a")])
        assert "already exists" in caplog.text
        assert "a" in caplog.text

    def test_reclassified_create_is_sparse(self, db: Database) -> None:
        """A retried create without optional fields keeps stored values."""
        reconcile(db, T0, created=[make_record("a", comment="note", is_urgent=True)])
        reconcile(db, T0 + 1, created=[make_record("a")])

        task = db.get_task("a")
        assert task is not None
        assert task.comment == "note"
        assert task.is_urgent is True

    def test_duplicate_id_within_one_push(self, db: Database) -> None:
        """The same id created twice in one push should be inserted once."""
        summary = reconcile(
            db,
            T0,
            created=[make_record("a", name="one"), make_record("a", name="two")],
        )
        assert summary.created == 1
        assert summary.reclassified == 1
        task = db.get_task("a")
        assert task is not None
        assert task.name == "two"


class TestUpdates:
    """Tests for inbound updated records."""

    def test_sparse_patch_preserves_absent_fields(self, db: Database) -> None:
        """Omitted comment should keep its stored value."""
        reconcile(db, T0, created=[make_record("a", comment="original", is_urgent=True)])
        reconcile(
            db,
            T0 + 10,
            updated=[make_record("a", name="new name", icon="bolt", is_done=True)],
        )

        task = db.get_task("a")
        assert task is not None
        assert (task.name, task.icon, task.is_done) == ("new name", "bolt", True)
        assert task.comment == "original"
        assert task.is_urgent is True

    def test_explicit_values_overwrite(self, db: Database) -> None:
        """Supplied optional fields should overwrite, even when falsy."""
        reconcile(db, T0, created=[make_record("a", comment="original", is_urgent=True)])
        reconcile(db, T0 + 10, updated=[make_record("a", comment="", is_urgent=False)])

        task = db.get_task("a")
        assert task is not None
        assert task.comment == ""
        assert task.is_urgent is False

    def test_update_stamps_server_updated_at_only(self, db: Database) -> None:
        """Updates should move server_updated_at but never server_created_at."""
        reconcile(db, T0, created=[make_record("a", client_created_at=5)])
        reconcile(db, T0 + 10, updated=[make_record("a", client_updated_at=99)])

        task = db.get_task("a")
        assert task is not None
        assert task.server_created_at == T0
        assert task.server_updated_at == T0 + 10
        assert task.client_created_at == 5
        assert task.client_updated_at == 99

    def test_last_write_wins(self, db: Database) -> None:
        """The later push overwrites the earlier one's fields."""
        reconcile(db, T0, created=[make_record("a")])
        reconcile(db, T0 + 1, updated=[make_record("a", name="from phone")])
        reconcile(db, T0 + 2, updated=[make_record("a", name="from laptop")])

        task = db.get_task("a")
        assert task is not None
        assert task.name == "from laptop"

    def test_create_and_update_in_same_push(self, db: Database) -> None:
        """An update may target a task created earlier in the same push."""
        summary = reconcile(
            db,
            T0,
            created=[make_record("a", name="draft")],
            updated=[make_record("a", name="final")],
        )
        assert summary == PushSummary(created=1, updated=1)
        task = db.get_task("a")
        assert task is not None
        assert task.name == "final"
        assert task.server_created_at == task.server_updated_at == T0

    def test_update_unknown_id_raises(self, db: Database) -> None:
        """Updating a task the server never saw should fail the push."""
        with pytest.raises(RecordNotFoundError):
            reconcile(db, T0, created=[make_record("a")], updated=[make_record("ghost")])
        # Rolled back with the transaction
        assert db.get_task("a") is None


class TestDeletes:
    """Tests for inbound deleted ids."""

    def test_deletions_are_not_applied(self, db: Database) -> None:
        """Deleted ids are accepted but the task stays in the store."""
        reconcile(db, T0, created=[make_record("a")])
        summary = reconcile(db, T0 + 1, deleted=["a"])

        assert summary == PushSummary(ignored_deletions=1)
        assert db.get_task("a") is not None

    def test_empty_change_set(self, db: Database) -> None:
        """A push with no tasks should do nothing."""
        with db.transaction() as store:
            summary = PushReconciler(store, T0).reconcile(ChangeSet())
        assert summary == PushSummary()
        assert db.count_tasks() == 0
