"""Change set model exchanged by push and pull.

A change set maps an entity kind (only "tasks" today) to the records
created and updated on one side, plus the ids deleted there.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final

# Entity kinds
TASKS: Final = "tasks"


class _Unset:
    """Marker type for an optional field absent from the payload."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True)
class TaskRecord:
    """A task as sent by (or to) a client.

    Attributes:
        id: Client-generated identifier, immutable once created.
        name: Task name.
        icon: Task icon.
        is_done: Whether the task is done.
        client_created_at: Creation time on the client (epoch ms).
        client_updated_at: Last update time on the client (epoch ms).
        is_urgent: Urgency flag, or UNSET when not supplied.
        comment: Free-form comment, or UNSET when not supplied.
    """

    id: str
    name: str
    icon: str
    is_done: bool
    client_created_at: int
    client_updated_at: int
    is_urgent: bool | _Unset = UNSET
    comment: str | _Unset = UNSET

    def patch_values(self) -> dict[str, Any]:
        """Build the sparse patch applied to an existing task.

        Required fields always overwrite. Optional fields are only included
        when the client supplied them.
        """
        values: dict[str, Any] = {
            "name": self.name,
            "icon": self.icon,
            "is_done": self.is_done,
            "client_updated_at": self.client_updated_at,
        }
        if self.is_urgent is not UNSET:
            values["is_urgent"] = self.is_urgent
        if self.comment is not UNSET:
            values["comment"] = self.comment
        return values

    def insert_values(self, now: int) -> dict[str, Any]:
        """Build the column values for a brand new task.

        Args:
            now: Server timestamp shared by the whole push (epoch ms).
        """
        values = self.patch_values()
        values["id"] = self.id
        values["client_created_at"] = self.client_created_at
        values["server_created_at"] = now
        values["server_updated_at"] = now
        return values


@dataclass
class TableChanges:
    """Changes for a single entity kind."""

    created: list[TaskRecord] = field(default_factory=list)
    updated: list[TaskRecord] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.updated or self.deleted)


@dataclass
class ChangeSet:
    """Changes grouped by entity kind."""

    tables: dict[str, TableChanges] = field(default_factory=dict)

    def for_kind(self, kind: str) -> TableChanges:
        """Return the changes for an entity kind (empty if none were sent)."""
        return self.tables.get(kind, TableChanges())

    @property
    def is_empty(self) -> bool:
        return all(changes.is_empty for changes in self.tables.values())
