"""Server database using SQLAlchemy with SQLite.

This module provides:
- Transaction scoping for push and pull
- TaskStore: point lookup, batch insert, update, and watermark queries
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from tasksync.server.errors import RecordNotFoundError
from tasksync.server.models import Base, Task

if TYPE_CHECKING:
    from sqlalchemy import Engine, Select


class TaskStore:
    """Task operations bound to one open transaction.

    Instances are handed out by Database.transaction() and must not be used
    after the transaction block exits.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, task_id: str) -> Task | None:
        """Look up a task by id.

        Args:
            task_id: Task id.

        Returns:
            Task if found, None otherwise.
        """
        return self._session.get(Task, task_id)

    def insert_many(self, rows: Iterable[dict[str, Any]]) -> int:
        """Insert new tasks.

        Args:
            rows: Column values, one dict per task.

        Returns:
            Number of tasks inserted.

        Raises:
            IntegrityError: If an id already exists.
        """
        tasks = [Task(**row) for row in rows]
        if not tasks:
            return 0
        self._session.add_all(tasks)
        self._session.flush()
        return len(tasks)

    def update(self, task_id: str, values: dict[str, Any], server_updated_at: int) -> Task:
        """Apply a patch to an existing task.

        Args:
            task_id: Task id.
            values: Columns to overwrite. Columns not present are kept.
            server_updated_at: New server update timestamp (epoch ms).

        Returns:
            Updated Task.

        Raises:
            RecordNotFoundError: If the task does not exist.
        """
        task = self._session.get(Task, task_id)
        if task is None:
            raise RecordNotFoundError(task_id)

        for column, value in values.items():
            setattr(task, column, value)
        # server_updated_at >= server_created_at even if the clock went back
        task.server_updated_at = max(server_updated_at, task.server_created_at)
        self._session.flush()
        return task

    def created_since(self, watermark: int) -> list[Task]:
        """Tasks first persisted after the watermark."""
        stmt = select(Task).where(Task.server_created_at > watermark)
        return self._fetch(stmt.order_by(Task.server_created_at, Task.id))

    def updated_since(self, watermark: int) -> list[Task]:
        """Tasks created at or before the watermark but modified after it."""
        stmt = select(Task).where(
            Task.server_updated_at > watermark,
            Task.server_created_at <= watermark,
        )
        return self._fetch(stmt.order_by(Task.server_updated_at, Task.id))

    def all(self) -> list[Task]:
        """Every stored task."""
        return self._fetch(select(Task).order_by(Task.server_created_at, Task.id))

    def count(self) -> int:
        """Number of stored tasks."""
        return self._session.execute(select(func.count()).select_from(Task)).scalar_one()

    def _fetch(self, stmt: Select[tuple[Task]]) -> list[Task]:
        return list(self._session.execute(stmt).scalars().all())


class Database:
    """SQLAlchemy database for synchronized records.

    Uses SQLite with WAL mode for better concurrency with multiple readers.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the database.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        # Create engine with check_same_thread=False for multi-threaded access
        self._engine: Engine = create_engine(
            f"sqlite:///{self._db_path}",
            connect_args={"check_same_thread": False},
            echo=False,
        )

        # Enable WAL mode
        with self._engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL")

        # Create tables if they don't exist
        Base.metadata.create_all(self._engine)

    @property
    def path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Close the database connection."""
        self._engine.dispose()

    def _session(self) -> Session:
        """Create a new database session."""
        return Session(self._engine, expire_on_commit=False)

    @contextmanager
    def transaction(self) -> Iterator[TaskStore]:
        """Open a transaction on one session.

        Writes done through the yielded store are committed together when
        the block exits normally and rolled back if it raises. Reads are not
        one snapshot: pysqlite only issues BEGIN before the first write, so
        each SELECT of a read-only block sees the latest committed data.

        Yields:
            TaskStore bound to the transaction.
        """
        with self._session() as session, session.begin():
            yield TaskStore(session)

    # === Read helpers (detached results) ===

    def get_task(self, task_id: str) -> Task | None:
        """Get a task by id.

        Args:
            task_id: Task id.

        Returns:
            Task if found, None otherwise.
        """
        with self._session() as session:
            task = session.get(Task, task_id)
            if task:
                session.expunge(task)
            return task

    def list_tasks(self) -> list[Task]:
        """List all tasks, oldest first."""
        with self._session() as session:
            stmt = select(Task).order_by(Task.server_created_at, Task.id)
            tasks = list(session.execute(stmt).scalars().all())
            for task in tasks:
                session.expunge(task)
            return tasks

    def count_tasks(self) -> int:
        """Count stored tasks."""
        with self._session() as session:
            return session.execute(select(func.count()).select_from(Task)).scalar_one()
