"""Pydantic schemas for API request/response models.

Record fields use the snake_case wire names existing clients send
(``is_done``, ``created_at``...). Envelope fields keep their camelCase
names (``lastPulledAt``, ``schemaVersion``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasksync.core.changes import TASKS, UNSET, ChangeSet, TableChanges, TaskRecord

# === Record schemas ===


class TaskPayload(BaseModel):
    """A task on the wire."""

    id: str
    name: str
    icon: str
    is_done: bool
    is_urgent: bool | None = None
    comment: str | None = None
    created_at: int
    updated_at: int

    @field_validator("is_urgent", "comment")
    @classmethod
    def _reject_null(cls, value: object) -> object:
        # Optional fields may be omitted, but an explicit null is rejected
        if value is None:
            raise ValueError("may be omitted but must not be null")
        return value


class TableChangesPayload(BaseModel):
    """Changes for one entity kind."""

    created: list[TaskPayload] = Field(default_factory=list)
    updated: list[TaskPayload] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)


class ChangesPayload(BaseModel):
    """Changes for every entity kind."""

    tasks: TableChangesPayload


# === Push/pull schemas ===


class PushRequest(BaseModel):
    """Request body for /api/sync/push."""

    model_config = ConfigDict(populate_by_name=True)

    changes: ChangesPayload
    last_pulled_at: int | None = Field(alias="lastPulledAt")


class PullRequest(BaseModel):
    """Request body for /api/sync/pull."""

    model_config = ConfigDict(populate_by_name=True)

    last_pulled_at: int | None = Field(default=None, alias="lastPulledAt")
    schema_version: int = Field(alias="schemaVersion")
    migration: str | None = None


class PullResponse(BaseModel):
    """Response for /api/sync/pull."""

    changes: ChangesPayload
    timestamp: int


# === Converters ===


def payload_to_record(payload: TaskPayload) -> TaskRecord:
    """Convert a wire task to a change set record.

    Optional fields the client did not send become UNSET.
    """
    sent = payload.model_fields_set
    return TaskRecord(
        id=payload.id,
        name=payload.name,
        icon=payload.icon,
        is_done=payload.is_done,
        is_urgent=payload.is_urgent if "is_urgent" in sent else UNSET,
        comment=payload.comment if "comment" in sent else UNSET,
        client_created_at=payload.created_at,
        client_updated_at=payload.updated_at,
    )


def record_to_payload(record: TaskRecord) -> TaskPayload:
    """Convert a change set record to a wire task."""
    data = {
        "id": record.id,
        "name": record.name,
        "icon": record.icon,
        "is_done": record.is_done,
        "created_at": record.client_created_at,
        "updated_at": record.client_updated_at,
    }
    if record.is_urgent is not UNSET:
        data["is_urgent"] = record.is_urgent
    if record.comment is not UNSET:
        data["comment"] = record.comment
    return TaskPayload(**data)


def changes_from_payload(payload: ChangesPayload) -> ChangeSet:
    """Convert wire changes to a ChangeSet."""
    tasks = payload.tasks
    return ChangeSet(
        {
            TASKS: TableChanges(
                created=[payload_to_record(t) for t in tasks.created],
                updated=[payload_to_record(t) for t in tasks.updated],
                deleted=list(tasks.deleted),
            )
        }
    )


def changes_to_payload(change_set: ChangeSet) -> ChangesPayload:
    """Convert a ChangeSet to wire changes."""
    tasks = change_set.for_kind(TASKS)
    return ChangesPayload(
        tasks=TableChangesPayload(
            created=[record_to_payload(r) for r in tasks.created],
            updated=[record_to_payload(r) for r in tasks.updated],
            deleted=list(tasks.deleted),
        )
    )


# === Health schema ===


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    tasks: int
